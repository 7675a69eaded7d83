"""Tab completion for the interactive prompt."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

FUNCTION_COMMANDS = ("f", "function")
OPTIMIZER_COMMANDS = ("opt", "optimizer")


def _active_segment(line_buffer: str) -> str:
    # `;` separates commands on one line; only the last one is being typed.
    return (line_buffer or "").split(";")[-1].lstrip()


def _matching(candidates: Iterable[str], prefix: str) -> list[str]:
    return sorted({str(c) for c in candidates if str(c).startswith(prefix)})


def command_name_completions(
    *,
    text: str,
    line_buffer: str,
    command_names: Iterable[str],
    macro_names: Iterable[str] = (),
) -> list[str]:
    """Complete the command (or macro) name of the active segment.

    Nothing is offered once the name is followed by a space.
    """
    segment = _active_segment(line_buffer)
    if " " in segment:
        return []
    prefix = (text or "").strip() or segment
    return _matching(list(command_names) + list(macro_names), prefix)


def command_line_completions(
    *,
    text: str,
    line_buffer: str,
    command_names: Iterable[str],
    macro_names: Iterable[str] = (),
    arguments: Mapping[str, Sequence[str]] | None = None,
) -> list[str]:
    """Return completion candidates for the current command line.

    ``arguments`` maps a command name to the values its first argument can
    take (function ids for ``f``, optimizer kinds for ``opt``).
    """
    segment = _active_segment(line_buffer)
    tokens = segment.split()
    if not tokens or (len(tokens) == 1 and not segment.endswith(" ")):
        return command_name_completions(
            text=text,
            line_buffer=line_buffer,
            command_names=command_names,
            macro_names=macro_names,
        )

    choices = (arguments or {}).get(tokens[0].lower())
    if not choices:
        return []

    want = (text or "").strip()
    if not want and not segment.endswith(" "):
        want = tokens[-1]
    return _matching(choices, want)


def argument_choices(function_ids: Iterable[str], optimizer_kinds: Iterable[str]) -> dict:
    """Build the ``arguments`` mapping for :func:`command_line_completions`."""
    ids = list(function_ids)
    kinds = list(optimizer_kinds)
    choices = {name: ids for name in FUNCTION_COMMANDS}
    choices.update({name: kinds for name in OPTIMIZER_COMMANDS})
    return choices
