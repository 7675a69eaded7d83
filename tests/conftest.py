"""Shared pytest setup.

Every test gets one category marker (`unit`, `regression` or `e2e`) from
its file name, so `pytest -m unit` runs the fast subset.
"""

from __future__ import annotations

import pathlib
import sys

import pytest

CATEGORIES = ("unit", "regression", "e2e")
E2E_NAME_PARTS = ("e2e", "main_cli")


def pytest_configure(config: pytest.Config) -> None:
    for name in CATEGORIES:
        config.addinivalue_line("markers", f"{name}: auto-applied test category")


def _category(filename: str) -> str:
    name = filename.lower()
    if any(part in name for part in E2E_NAME_PARTS):
        return "e2e"
    if "regression" in name:
        return "regression"
    return "unit"


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    for item in items:
        category = _category(pathlib.Path(str(item.fspath)).name)
        item.add_marker(getattr(pytest.mark, category))


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    # only tests that plotted have imported pyplot
    plt = sys.modules.get("matplotlib.pyplot")
    if plt is not None:
        plt.close("all")
