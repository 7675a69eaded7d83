"""Run command lines typed at the prompt or listed in a session file."""

from __future__ import annotations

import logging
from typing import Iterator

from commands.registry import get_command
from core.exceptions import SurfaceDescentError

logger = logging.getLogger("surface_descent")

MAX_MACRO_DEPTH = 20


def split_segments(text) -> Iterator[str]:
    """Yield the non-empty ``;``-separated segments of ``text``.

    ``text`` may also be a list of lines, as macros are stored in sessions.
    """
    if isinstance(text, str):
        text = text.split(";")
    for segment in text:
        segment = (segment or "").strip()
        if segment:
            yield segment


def execute_command_line(
    context,
    line: str,
    *,
    get_command_fn=get_command,
    macro_stack: tuple[str, ...] = (),
    max_macro_depth: int = MAX_MACRO_DEPTH,
) -> bool:
    """Execute ``line`` against ``context`` and report whether it succeeded.

    A line may hold several commands separated by ``;``. Names that are not
    commands are looked up in ``context.macros``; a macro body is run
    through this function again, so macros can use other macros.
    """
    ok = True
    for segment in split_segments(line or ""):
        ok = _execute_segment(
            context, segment, get_command_fn, macro_stack, max_macro_depth
        ) and ok
    return ok


def _execute_segment(context, segment, get_command_fn, macro_stack, max_macro_depth):
    name, *args = segment.split()

    command, bound_args = get_command_fn(name)
    if command is None:
        macros = getattr(context, "macros", None) or {}
        if name not in macros:
            logger.warning("Unknown instruction: %s", name)
            return False
        return _expand_macro(
            context, name, args, macros[name], get_command_fn, macro_stack, max_macro_depth
        )

    history = getattr(context, "history", None)
    if history is not None:
        history.append(segment)
    try:
        command.execute(context, bound_args + args)
    except (SurfaceDescentError, ValueError) as exc:
        logger.error(f"Error executing command '{name}': {exc}")
        return False
    return True


def _expand_macro(context, name, args, body, get_command_fn, macro_stack, max_macro_depth):
    chain = " -> ".join(macro_stack + (name,))
    if name in macro_stack:
        raise RuntimeError(f"Recursive macro call detected: {chain}")
    if len(macro_stack) >= max_macro_depth:
        raise RuntimeError(
            f"Macro expansion exceeded max depth ({max_macro_depth}): {chain}"
        )
    if args:
        logger.warning("Macro '%s' takes no arguments; ignoring %s", name, args)

    logger.debug("Expanding macro '%s'.", name)
    ok = True
    for line in split_segments(body):
        ok = execute_command_line(
            context,
            line,
            get_command_fn=get_command_fn,
            macro_stack=macro_stack + (name,),
            max_macro_depth=max_macro_depth,
        ) and ok
    return ok
