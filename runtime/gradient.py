"""Gradient evaluation for two-variable functions."""

from __future__ import annotations

import logging
from typing import Callable, Tuple

from modules.functions import FunctionDef

logger = logging.getLogger("surface_descent")

FD_STEP = 1e-5


def finite_difference_gradient(
    f: Callable[[float, float], float], x: float, y: float, h: float = FD_STEP
) -> Tuple[float, float]:
    """Centered finite-difference approximation of ``(df/dx, df/dy)``."""
    dfdx = (f(x + h, y) - f(x - h, y)) / (2.0 * h)
    dfdy = (f(x, y + h) - f(x, y - h)) / (2.0 * h)
    return float(dfdx), float(dfdy)


def gradient(fdef: FunctionDef, x: float, y: float) -> Tuple[float, float]:
    """Return the gradient of ``fdef`` at ``(x, y)``.

    Uses the analytic rule carried by the definition when there is one and
    falls back to :func:`finite_difference_gradient` otherwise. A point where
    the function cannot be evaluated (e.g. ``sin(inf)``) gives ``(0, 0)``.
    """
    try:
        if fdef.grad is not None:
            gx, gy = fdef.grad(x, y)
            return float(gx), float(gy)
        return finite_difference_gradient(fdef.f, x, y)
    except (ArithmeticError, ValueError) as exc:
        logger.debug("Gradient of %s failed at (%g, %g): %s", fdef.id, x, y, exc)
        return 0.0, 0.0


__all__ = ["gradient", "finite_difference_gradient", "FD_STEP"]
