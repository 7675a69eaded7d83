"""Versioned registry of the functions available to the simulation."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from core.exceptions import ExpressionError, UnknownFunctionError
from modules.functions import (
    BUILTIN_FUNCTIONS,
    CUSTOM_ID,
    DEFAULT_CUSTOM,
    FunctionDef,
)
from runtime.expression import compile_expression

logger = logging.getLogger("surface_descent")


class FunctionRegistry:
    """Hold built-in definitions plus the replaceable ``custom`` slot.

    Every successful :meth:`register` bumps a registry-wide monotonic counter
    and stamps the slot with it. Dependents (mesh caches, the simulation loop)
    compare :meth:`version` values instead of relying on object identity.
    """

    def __init__(
        self,
        builtins: Optional[Dict[str, FunctionDef]] = None,
        custom: FunctionDef = DEFAULT_CUSTOM,
    ) -> None:
        self._builtin_ids = frozenset((builtins or BUILTIN_FUNCTIONS).keys())
        self._functions: Dict[str, FunctionDef] = {}
        self._versions: Dict[str, int] = {}
        self._counter = 0
        for fid, fdef in (builtins or BUILTIN_FUNCTIONS).items():
            self._store(fid, fdef)
        self._store(CUSTOM_ID, custom)
        self.custom_expression: Optional[str] = custom.expression

    def _store(self, function_id: str, fdef: FunctionDef) -> int:
        self._counter += 1
        self._functions[function_id] = fdef
        self._versions[function_id] = self._counter
        return self._counter

    def register(self, function_id: str, fdef: FunctionDef) -> int:
        """Replace the definition stored under ``function_id``.

        Built-in ids are immutable; only the custom slot (or new ids) may be
        written. Returns the new version of the slot.
        """
        if function_id in self._builtin_ids:
            raise ValueError(f"Built-in function '{function_id}' cannot be replaced.")
        version = self._store(function_id, fdef)
        logger.debug("Registered function '%s' (version %d).", function_id, version)
        return version

    def compile_custom(self, expression: str) -> FunctionDef:
        """Compile ``expression`` into the custom slot.

        On a parse failure the previously registered custom definition is
        returned unchanged and the slot's version is not bumped.
        """
        previous = self._functions[CUSTOM_ID]
        try:
            fdef = compile_expression(expression, domain=previous.range)
        except ExpressionError as exc:
            logger.warning("Keeping previous custom function: %s", exc)
            return previous
        self.register(CUSTOM_ID, fdef)
        self.custom_expression = expression
        logger.info("Compiled custom function: %s", expression)
        return fdef

    def get(self, function_id: str) -> FunctionDef:
        try:
            return self._functions[function_id]
        except KeyError:
            raise UnknownFunctionError(function_id) from None

    def version(self, function_id: str) -> int:
        if function_id not in self._versions:
            raise UnknownFunctionError(function_id)
        return self._versions[function_id]

    def ids(self) -> List[str]:
        return list(self._functions)

    def is_builtin(self, function_id: str) -> bool:
        return function_id in self._builtin_ids

    def __contains__(self, function_id: str) -> bool:
        return function_id in self._functions

    def __iter__(self) -> Iterator[FunctionDef]:
        return iter(list(self._functions.values()))

    def __repr__(self) -> str:
        return f"FunctionRegistry(ids={self.ids()!r})"


__all__ = ["FunctionRegistry", "FunctionDef"]
