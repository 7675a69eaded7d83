"""Custom exception types for the surface descent engine."""

from __future__ import annotations


class SurfaceDescentError(Exception):
    """Base class for domain-specific errors."""


class ExpressionError(SurfaceDescentError, ValueError):
    """Raised when a function expression cannot be parsed or compiled."""

    def __init__(self, expression: str, message: str | None = None) -> None:
        if message is None:
            message = f"Cannot compile expression {expression!r}."
        super().__init__(message)
        self.expression = expression


class UnknownFunctionError(SurfaceDescentError, KeyError):
    """Raised when a function id is not present in the registry."""

    def __init__(self, function_id: str, message: str | None = None) -> None:
        if message is None:
            message = f"Unknown function id '{function_id}'."
        super().__init__(message)
        self.function_id = function_id

    def __str__(self) -> str:
        return str(self.args[0])


class UnknownOptimizerError(SurfaceDescentError, KeyError):
    """Raised when an optimizer kind has no registered stepper."""

    def __init__(self, kind: str, message: str | None = None) -> None:
        if message is None:
            message = f"Unknown optimizer '{kind}'. Expected one of SGD, Momentum, RMSProp, Adam."
        super().__init__(message)
        self.kind = kind

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "SurfaceDescentError",
    "ExpressionError",
    "UnknownFunctionError",
    "UnknownOptimizerError",
]
