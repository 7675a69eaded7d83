"""Optimizer update rules and their per-run state."""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from core.exceptions import UnknownOptimizerError

from .adam import Adam
from .base import (
    GRADIENT_HISTORY_SIZE,
    BaseStepper,
    OptimizerParams,
    OptimizerRunState,
)
from .momentum import Momentum
from .rmsprop import RMSProp
from .sgd import SGD

STEPPERS: Dict[str, BaseStepper] = {
    stepper.name: stepper for stepper in (SGD(), Momentum(), RMSProp(), Adam())
}

OPTIMIZER_KINDS = tuple(STEPPERS)


def normalize_kind(kind: str) -> str:
    """Return the canonical spelling of ``kind`` (case-insensitive)."""
    lookup = {name.lower(): name for name in STEPPERS}
    canonical = lookup.get(str(kind).strip().lower())
    if canonical is None:
        raise UnknownOptimizerError(str(kind))
    return canonical


def get_stepper(kind: str) -> BaseStepper:
    return STEPPERS[normalize_kind(kind)]


def step(
    kind: str,
    grad: Sequence[float],
    lr: float,
    params: OptimizerParams,
    state: OptimizerRunState,
) -> Tuple[float, float]:
    """Compute the position delta for optimizer ``kind`` and update ``state``."""
    return get_stepper(kind).step(grad, lr, params, state)


__all__ = [
    "Adam",
    "BaseStepper",
    "GRADIENT_HISTORY_SIZE",
    "Momentum",
    "OPTIMIZER_KINDS",
    "OptimizerParams",
    "OptimizerRunState",
    "RMSProp",
    "SGD",
    "STEPPERS",
    "get_stepper",
    "normalize_kind",
    "step",
]
