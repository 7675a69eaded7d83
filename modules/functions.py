"""Built-in test surfaces with closed-form gradients."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

ScalarFn = Callable[[float, float], float]
GradientFn = Callable[[float, float], Tuple[float, float]]

CUSTOM_ID = "custom"
DEFAULT_RANGE = (-2.0, 2.0)


@dataclass(frozen=True)
class FunctionDef:
    """A scalar function of ``(x, y)`` sampled over a square domain.

    ``range`` is applied to both axes. ``grad`` is ``None`` when no analytic
    gradient is known, in which case callers fall back to finite differences.
    """

    id: str
    name: str
    f: ScalarFn
    range: Tuple[float, float] = DEFAULT_RANGE
    grad: Optional[GradientFn] = None
    expression: Optional[str] = None

    @property
    def domain_max(self) -> float:
        return float(self.range[1])

    def __call__(self, x: float, y: float) -> float:
        return self.f(x, y)


def _quadratic(x, y):
    return x * x + y * y


def _quadratic_grad(x, y):
    return 2.0 * x, 2.0 * y


def _rosenbrock(x, y):
    a = 1.0 - x
    b = y - x * x
    return a * a + 100.0 * b * b


def _rosenbrock_grad(x, y):
    return (
        -2.0 * (1.0 - x) - 400.0 * x * (y - x * x),
        200.0 * (y - x * x),
    )


def _saddle(x, y):
    return x * x - y * y


def _saddle_grad(x, y):
    return 2.0 * x, -2.0 * y


def _sinusoidal(x, y):
    return math.sin(x) * math.cos(y)


def _sinusoidal_grad(x, y):
    return math.cos(x) * math.cos(y), -math.sin(x) * math.sin(y)


def _himmelblau(x, y):
    a = x * x + y - 11.0
    b = x + y * y - 7.0
    return a * a + b * b


def _himmelblau_grad(x, y):
    a = x * x + y - 11.0
    b = x + y * y - 7.0
    return 4.0 * x * a + 2.0 * b, 2.0 * a + 4.0 * y * b


def _beale_terms(x, y):
    t1 = 1.5 - x + x * y
    t2 = 2.25 - x + x * y * y
    t3 = 2.625 - x + x * y * y * y
    return t1, t2, t3


def _beale(x, y):
    t1, t2, t3 = _beale_terms(x, y)
    return t1 * t1 + t2 * t2 + t3 * t3


def _beale_grad(x, y):
    t1, t2, t3 = _beale_terms(x, y)
    return (
        2.0 * t1 * (y - 1.0) + 2.0 * t2 * (y * y - 1.0) + 2.0 * t3 * (y * y * y - 1.0),
        2.0 * t1 * x + 4.0 * t2 * x * y + 6.0 * t3 * x * y * y,
    )


ACKLEY_A = 20.0
ACKLEY_B = 0.2
ACKLEY_C = 2.0 * math.pi


def _ackley(x, y):
    r = math.sqrt(0.5 * (x * x + y * y))
    cos_mean = 0.5 * (math.cos(ACKLEY_C * x) + math.cos(ACKLEY_C * y))
    return -ACKLEY_A * math.exp(-ACKLEY_B * r) - math.exp(cos_mean) + ACKLEY_A + math.e


def _ackley_grad(x, y):
    r = math.sqrt(0.5 * (x * x + y * y))
    cos_term = math.exp(0.5 * (math.cos(ACKLEY_C * x) + math.cos(ACKLEY_C * y)))
    # The radial term has a cusp at the origin; use the zero subgradient there.
    if r == 0.0:
        radial = 0.0
    else:
        radial = ACKLEY_A * ACKLEY_B * math.exp(-ACKLEY_B * r) / (2.0 * r)
    return (
        radial * x + 0.5 * ACKLEY_C * cos_term * math.sin(ACKLEY_C * x),
        radial * y + 0.5 * ACKLEY_C * cos_term * math.sin(ACKLEY_C * y),
    )


def _zero(x, y):
    return 0.0


BUILTIN_FUNCTIONS: Dict[str, FunctionDef] = {
    "quadratic": FunctionDef(
        "quadratic", "Quadratic Bowl", _quadratic, (-2.0, 2.0), _quadratic_grad
    ),
    "rosenbrock": FunctionDef(
        "rosenbrock", "Rosenbrock", _rosenbrock, (-2.0, 2.0), _rosenbrock_grad
    ),
    "saddle": FunctionDef("saddle", "Saddle Point", _saddle, (-2.0, 2.0), _saddle_grad),
    "sinusoidal": FunctionDef(
        "sinusoidal", "Sinusoidal", _sinusoidal, (-math.pi, math.pi), _sinusoidal_grad
    ),
    "himmelblau": FunctionDef(
        "himmelblau", "Himmelblau", _himmelblau, (-5.0, 5.0), _himmelblau_grad
    ),
    "beale": FunctionDef("beale", "Beale", _beale, (-4.5, 4.5), _beale_grad),
    "ackley": FunctionDef("ackley", "Ackley", _ackley, (-5.0, 5.0), _ackley_grad),
}

# Placeholder for the user slot until an expression compiles successfully.
DEFAULT_CUSTOM = FunctionDef(CUSTOM_ID, "Custom Function", _zero, DEFAULT_RANGE)


__all__ = [
    "FunctionDef",
    "BUILTIN_FUNCTIONS",
    "DEFAULT_CUSTOM",
    "CUSTOM_ID",
    "DEFAULT_RANGE",
]
