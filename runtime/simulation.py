# runtime/simulation.py
"""Tick-driven gradient descent over a two-variable surface."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from geometry.surface_mesh import MeshData, generate_mesh
from modules.functions import CUSTOM_ID, FunctionDef
from parameters.global_parameters import GlobalParameters
from runtime import steppers
from runtime.function_registry import FunctionRegistry
from runtime.gradient import gradient
from runtime.scheduler import ManualScheduler, Scheduler, TimerHandle
from runtime.steppers import OptimizerParams, OptimizerRunState
from runtime.stopping import StoppingPolicy, StoppingReason

logger = logging.getLogger("surface_descent")

LEARNING_RATE_LIMITS = (0.001, 0.5)
TICK_INTERVAL_LIMITS = (10, 500)


class SimulationStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Point3:
    x: float
    y: float
    z: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Metrics:
    value: float
    gradient_magnitude: float


@dataclass(frozen=True)
class SimulationSnapshot:
    """Everything the rendering side needs after a state change."""

    status: SimulationStatus
    point: Point3
    trajectory: Tuple[Point3, ...]
    metrics: Metrics
    stopping_reason: StoppingReason
    function_id: str
    function_version: int
    optimizer: str
    learning_rate: float
    tick: int


def trajectory_segment_lengths(trajectory: Sequence[Point3]) -> np.ndarray:
    """Euclidean length of each consecutive segment of ``trajectory``."""
    if len(trajectory) < 2:
        return np.zeros(0, dtype=float)
    pts = np.array([p.as_tuple() for p in trajectory], dtype=float)
    return np.linalg.norm(np.diff(pts, axis=0), axis=1)


def _clamp(value: float, limits: Tuple[float, float], label: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number, got {value}")
    lo, hi = limits
    clamped = min(max(value, lo), hi)
    if clamped != value:
        logger.warning("%s %g outside [%g, %g]; using %g.", label, value, lo, hi, clamped)
    return clamped


class SimulationLoop:
    """Own the simulation state and advance it one tick at a time.

    States are idle, running, paused and stopped. While running, the loop
    keeps exactly one timer armed on its scheduler and re-arms it after each
    tick returns.
    """

    def __init__(
        self,
        global_params: Optional[GlobalParameters] = None,
        *,
        registry: Optional[FunctionRegistry] = None,
        scheduler: Optional[Scheduler] = None,
        policy: Optional[StoppingPolicy] = None,
    ) -> None:
        params = global_params if global_params is not None else GlobalParameters()
        self.global_params = params
        self.registry = registry if registry is not None else FunctionRegistry()
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.policy = policy if policy is not None else StoppingPolicy.from_params(params)

        start = params.get("start_point", (1.5, 1.5))
        self.start_point = (float(start[0]), float(start[1]))

        expression = params.get("custom_expression")
        if expression:
            self.registry.compile_custom(expression)

        self.function_id = str(params.get("function", "quadratic"))
        self._function_version = self.registry.version(self.function_id)

        self.learning_rate = _clamp(
            params.get("learning_rate", 0.1), LEARNING_RATE_LIMITS, "Learning rate"
        )
        self.optimizer = steppers.normalize_kind(params.get("optimizer", "SGD"))
        self.optimizer_params = OptimizerParams(
            momentum=float(params.get("momentum", 0.9)),
            beta2=float(params.get("beta2", 0.999)),
            epsilon=float(params.get("epsilon", 1e-8)),
        )
        self.tick_interval_ms = _clamp(
            params.get("tick_interval_ms", 100), TICK_INTERVAL_LIMITS, "Tick interval"
        )

        self.run_state = OptimizerRunState()
        self.status = SimulationStatus.IDLE
        self.stopping_reason = StoppingReason.NONE
        self.tick_count = 0
        self._timer: Optional[TimerHandle] = None
        self._listeners: List[Callable[[SimulationSnapshot], None]] = []
        self._mesh_key: Optional[Tuple[str, int, int]] = None
        self._mesh: Optional[MeshData] = None

        self._place_point(*self.start_point)

    def __repr__(self):
        msg = f"""### SIMULATION ###
FUNCTION:\t {self.function_id} (v{self._function_version})
OPTIMIZER:\t {self.optimizer} {self.optimizer_params}
LEARNING RATE:\t {self.learning_rate}
STATUS:\t {self.status} ({self.stopping_reason})
POINT:\t {self.point}
############"""
        return msg

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------
    @property
    def function(self) -> FunctionDef:
        return self.registry.get(self.function_id)

    @property
    def function_version(self) -> int:
        return self._function_version

    @property
    def trajectory(self) -> Tuple[Point3, ...]:
        return tuple(self._trajectory)

    @property
    def is_running(self) -> bool:
        return self.status is SimulationStatus.RUNNING

    def snapshot(self) -> SimulationSnapshot:
        return SimulationSnapshot(
            status=self.status,
            point=self.point,
            trajectory=self.trajectory,
            metrics=self.metrics,
            stopping_reason=self.stopping_reason,
            function_id=self.function_id,
            function_version=self._function_version,
            optimizer=self.optimizer,
            learning_rate=self.learning_rate,
            tick=self.tick_count,
        )

    def subscribe(self, callback: Callable[[SimulationSnapshot], None]) -> Callable[[], None]:
        """Register ``callback`` for every published change; returns an unsubscribe."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for callback in list(self._listeners):
            callback(snap)

    def mesh(self, resolution: Optional[int] = None) -> MeshData:
        """Surface mesh of the selected function, regenerated on version change."""
        if resolution is None:
            resolution = int(self.global_params.get("mesh_resolution", 100))
        self._sync_function_version()
        key = (self.function_id, self._function_version, int(resolution))
        if self._mesh is None or self._mesh_key != key:
            fdef = self.function
            self._mesh = generate_mesh(fdef.f, fdef.range, int(resolution))
            self._mesh_key = key
        return self._mesh

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _make_point(self, x: float, y: float) -> Point3:
        x = float(x)
        y = float(y)
        try:
            z = float(self.function.f(x, y))
        except (ArithmeticError, ValueError) as exc:
            logger.debug("f(%g, %g) failed (%s); using 0.", x, y, exc)
            z = 0.0
        return Point3(x, y, z)

    def _place_point(self, x: float, y: float) -> None:
        """Set the point directly: trajectory restarts, gradient not yet known."""
        self.point = self._make_point(x, y)
        self._trajectory: List[Point3] = [self.point]
        self.metrics = Metrics(self.point.z, 0.0)

    def _arm(self) -> None:
        self.scheduler.cancel(self._timer)
        self._timer = self.scheduler.call_later(self.tick_interval_ms, self._on_timer)

    def _disarm(self) -> None:
        self.scheduler.cancel(self._timer)
        self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        self.tick()
        if self.status is SimulationStatus.RUNNING and self._timer is None:
            self._arm()

    def _go_idle(self) -> None:
        self._disarm()
        self.status = SimulationStatus.IDLE
        self.stopping_reason = StoppingReason.NONE

    def _sync_function_version(self) -> bool:
        """Pick up a recompiled definition; returns True when it changed."""
        version = self.registry.version(self.function_id)
        if version == self._function_version:
            return False
        self._function_version = version
        self.run_state.reset()
        self.point = self._make_point(self.point.x, self.point.y)
        self._trajectory = [self.point]
        self.metrics = Metrics(self.point.z, 0.0)
        logger.debug("Function '%s' now at version %d.", self.function_id, version)
        return True

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------
    def select_function(self, function_id: str) -> FunctionDef:
        fdef = self.registry.get(function_id)
        self._go_idle()
        self.function_id = function_id
        self._function_version = self.registry.version(function_id)
        self.run_state.reset()
        self._place_point(*self.start_point)
        logger.info("Selected function '%s' (%s).", function_id, fdef.name)
        self._publish()
        return fdef

    def set_custom_expression(self, expression: str) -> FunctionDef:
        """Recompile the custom slot; a parse failure keeps the old function."""
        fdef = self.registry.compile_custom(expression)
        if self.function_id == CUSTOM_ID and self.registry.version(CUSTOM_ID) != self._function_version:
            self._go_idle()
            self._sync_function_version()
            self._publish()
        return fdef

    def set_learning_rate(self, lr: float) -> None:
        self.learning_rate = _clamp(lr, LEARNING_RATE_LIMITS, "Learning rate")
        logger.debug("Learning rate set to %g.", self.learning_rate)

    def set_optimizer(self, kind: str) -> None:
        canonical = steppers.normalize_kind(kind)
        if canonical == self.optimizer:
            return
        self.optimizer = canonical
        self.run_state.reset()
        self._trajectory = [self.point]
        logger.info("Switched optimizer to %s.", canonical)
        self._publish()

    def set_optimizer_params(self, **params: float) -> None:
        for key, value in params.items():
            if not hasattr(self.optimizer_params, key):
                raise ValueError(f"Unknown optimizer parameter '{key}'.")
            setattr(self.optimizer_params, key, float(value))
        logger.debug("Optimizer parameters: %s", self.optimizer_params)

    def set_tick_interval(self, interval_ms: float) -> None:
        self.tick_interval_ms = _clamp(interval_ms, TICK_INTERVAL_LIMITS, "Tick interval")
        if self.is_running:
            self._arm()

    def start(self) -> None:
        if self.status is SimulationStatus.PAUSED:
            self.resume()
            return
        if self.status is SimulationStatus.RUNNING:
            logger.debug("start ignored: already running.")
            return
        self.stopping_reason = StoppingReason.NONE
        self.run_state.reset()
        self.status = SimulationStatus.RUNNING
        self._arm()
        logger.info("Run started with %s at (%.4g, %.4g).", self.optimizer, self.point.x, self.point.y)
        self._publish()

    def pause(self) -> None:
        if self.status is not SimulationStatus.RUNNING:
            logger.debug("pause ignored: status is %s.", self.status)
            return
        self._disarm()
        self.status = SimulationStatus.PAUSED
        self._publish()

    def resume(self) -> None:
        if self.status is not SimulationStatus.PAUSED:
            logger.debug("resume ignored: status is %s.", self.status)
            return
        self.status = SimulationStatus.RUNNING
        self._arm()
        self._publish()

    def reset(self) -> None:
        self._go_idle()
        self.run_state.reset()
        self._place_point(*self.start_point)
        logger.info("Simulation reset to (%.4g, %.4g).", *self.start_point)
        self._publish()

    def set_current_point(self, x: float, y: float) -> Point3:
        """Move the point directly (e.g. a surface click); stops any run."""
        self._go_idle()
        self.run_state.reset()
        self._place_point(x, y)
        self._publish()
        return self.point

    # ------------------------------------------------------------------
    # Tick body
    # ------------------------------------------------------------------
    def tick(self) -> Optional[StoppingReason]:
        """Advance one step while running.

        Returns the stopping reason when the run halted on this tick, ``None``
        otherwise (including when not running).
        """
        if self.status is not SimulationStatus.RUNNING:
            return None

        self._sync_function_version()
        fdef = self.function
        x, y = self.point.x, self.point.y

        gx, gy = gradient(fdef, x, y)
        grad_mag = math.hypot(gx, gy)
        self.metrics = Metrics(self.point.z, grad_mag)
        self.run_state.record_gradient(grad_mag)
        self.tick_count += 1

        reason = self.policy.evaluate(
            x, y, grad_mag, self.run_state.gradient_history, fdef.domain_max
        )
        if reason is not StoppingReason.NONE:
            self._disarm()
            self.status = SimulationStatus.STOPPED
            self.stopping_reason = reason
            logger.info(
                "Run stopped (%s) after %d steps at (%.4g, %.4g); f=%.6g, |grad|=%.3e.",
                reason,
                len(self._trajectory) - 1,
                x,
                y,
                self.metrics.value,
                grad_mag,
            )
            self._publish()
            return reason

        dx, dy = steppers.step(
            self.optimizer, (gx, gy), self.learning_rate, self.optimizer_params, self.run_state
        )
        self.point = self._make_point(x - dx, y - dy)
        self._trajectory.append(self.point)
        logger.debug(
            "Tick %d: (%.6g, %.6g) f=%.6g |grad|=%.3e",
            self.tick_count,
            self.point.x,
            self.point.y,
            self.point.z,
            grad_mag,
        )
        self._publish()
        return None


__all__ = [
    "LEARNING_RATE_LIMITS",
    "Metrics",
    "Point3",
    "SimulationLoop",
    "SimulationSnapshot",
    "SimulationStatus",
    "TICK_INTERVAL_LIMITS",
    "trajectory_segment_lengths",
]
