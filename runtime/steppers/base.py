# runtime/steppers/base.py
"""Abstract base class and shared state for optimization steppers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Sequence, Tuple

import numpy as np

GRADIENT_HISTORY_SIZE = 10


@dataclass
class OptimizerParams:
    """Tunables shared by the optimizer variants that use them.

    ``momentum`` doubles as Adam's first-moment decay (beta1).
    """

    momentum: float = 0.9
    beta2: float = 0.999
    epsilon: float = 1e-8


def _zeros() -> np.ndarray:
    return np.zeros(2, dtype=float)


@dataclass
class OptimizerRunState:
    """Mutable per-run record owned by the simulation loop."""

    velocity: np.ndarray = field(default_factory=_zeros)
    squared_grad: np.ndarray = field(default_factory=_zeros)
    m: np.ndarray = field(default_factory=_zeros)
    v: np.ndarray = field(default_factory=_zeros)
    t: int = 0
    gradient_history: Deque[float] = field(
        default_factory=lambda: deque(maxlen=GRADIENT_HISTORY_SIZE)
    )

    def reset(self) -> None:
        """Zero every accumulator and empty the gradient history in place."""
        self.velocity[:] = 0.0
        self.squared_grad[:] = 0.0
        self.m[:] = 0.0
        self.v[:] = 0.0
        self.t = 0
        self.gradient_history.clear()

    def record_gradient(self, magnitude: float) -> None:
        self.gradient_history.append(float(magnitude))

    def is_zero(self) -> bool:
        return (
            self.t == 0
            and not self.gradient_history
            and not np.any(self.velocity)
            and not np.any(self.squared_grad)
            and not np.any(self.m)
            and not np.any(self.v)
        )


class BaseStepper(ABC):
    """Base interface for per-axis update rules."""

    name: str = ""

    @abstractmethod
    def step(
        self,
        grad: Sequence[float] | np.ndarray,
        lr: float,
        params: OptimizerParams,
        state: OptimizerRunState,
    ) -> Tuple[float, float]:
        """Return the position delta ``(dx, dy)`` for gradient ``grad``.

        Parameters
        ----------
        grad : Sequence[float] | np.ndarray
            Gradient ``(gx, gy)`` at the current point.
        lr : float
            Learning rate.
        params : OptimizerParams
            Shared tunables (ignored by steppers that do not use them).
        state : OptimizerRunState
            Per-run accumulators, updated in place.

        Returns
        -------
        tuple[float, float]
            The delta to subtract from the current position.
        """

    def __repr__(self) -> str:  # pragma: no cover - simple utility
        return f"{self.__class__.__name__}()"


def as_vector(grad: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(grad, dtype=float).reshape(2)


def as_delta(delta: np.ndarray) -> Tuple[float, float]:
    return float(delta[0]), float(delta[1])
