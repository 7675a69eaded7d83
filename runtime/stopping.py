"""Stopping conditions applied once per simulation tick."""

from __future__ import annotations

import enum
import logging
from typing import Sequence

logger = logging.getLogger("surface_descent")


class StoppingReason(str, enum.Enum):
    NONE = "none"
    CONVERGED = "converged"
    DIVERGED = "diverged"
    BOUNDS = "bounds"

    def __str__(self) -> str:
        return self.value


class StoppingPolicy:
    """Decide whether a run should halt, and why.

    Checks are applied in order and the first match wins:

    1. converged: the gradient magnitude is below ``convergence_tol``;
    2. bounds: ``|x|`` or ``|y|`` exceeds ``bounds_factor * domain_max``;
    3. diverged: once ``window`` magnitudes are recorded, each of the last
       ``window`` is above ``dip_tolerance`` times its predecessor and the
       current magnitude exceeds ``growth`` times the oldest of them.
    """

    def __init__(
        self,
        convergence_tol: float = 1e-3,
        bounds_factor: float = 2.0,
        window: int = 5,
        dip_tolerance: float = 0.95,
        growth: float = 1.5,
    ) -> None:
        if window < 2:
            raise ValueError("divergence window must hold at least two samples")
        self.convergence_tol = float(convergence_tol)
        self.bounds_factor = float(bounds_factor)
        self.window = int(window)
        self.dip_tolerance = float(dip_tolerance)
        self.growth = float(growth)

    @classmethod
    def from_params(cls, global_params) -> "StoppingPolicy":
        return cls(
            convergence_tol=float(global_params.get("convergence_tol", 1e-3)),
            bounds_factor=float(global_params.get("bounds_factor", 2.0)),
            window=int(global_params.get("divergence_window", 5)),
            dip_tolerance=float(global_params.get("divergence_dip_tolerance", 0.95)),
            growth=float(global_params.get("divergence_growth", 1.5)),
        )

    def is_diverging(self, grad_mag: float, history: Sequence[float]) -> bool:
        if len(history) < self.window:
            return False
        recent = list(history)[-self.window :]
        increasing = all(
            recent[i] > recent[i - 1] * self.dip_tolerance
            for i in range(1, len(recent))
        )
        return increasing and grad_mag > recent[0] * self.growth

    def evaluate(
        self,
        x: float,
        y: float,
        grad_mag: float,
        history: Sequence[float],
        domain_max: float,
    ) -> StoppingReason:
        if grad_mag < self.convergence_tol:
            logger.debug("Converged: |grad|=%.3e below %.1e.", grad_mag, self.convergence_tol)
            return StoppingReason.CONVERGED

        limit = self.bounds_factor * domain_max
        if abs(x) > limit or abs(y) > limit:
            logger.debug("Out of bounds: (%.4g, %.4g) beyond %.4g.", x, y, limit)
            return StoppingReason.BOUNDS

        if self.is_diverging(grad_mag, history):
            logger.debug("Diverged: gradient history %s.", list(history)[-self.window :])
            return StoppingReason.DIVERGED

        return StoppingReason.NONE

    def __repr__(self) -> str:  # pragma: no cover - simple utility
        params = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{self.__class__.__name__}({params})"


__all__ = ["StoppingPolicy", "StoppingReason"]
