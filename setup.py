from __future__ import annotations

from setuptools import find_namespace_packages, setup

PACKAGES = [
    "commands",
    "core",
    "geometry",
    "modules",
    "parameters",
    "runtime",
    "runtime.steppers",
    "surface_descent",
    "visualization",
]

setup(
    name="surface-descent",
    version="0.1.0",
    description="Interactive gradient descent on two-variable surfaces",
    python_requires=">=3.9",
    packages=find_namespace_packages(include=PACKAGES),
    py_modules=["main"],
    install_requires=[
        "numpy",
        "PyYAML",
        "matplotlib",
        "sympy",
    ],
    extras_require={"dev": ["pytest"]},
    entry_points={
        "console_scripts": [
            "surface-descent=main:main",
            "surface-view=visualization.cli:main",
        ]
    },
)
