# session_io.py
import json
import logging
import os

import yaml

from parameters.global_parameters import GlobalParameters

logger = logging.getLogger("surface_descent")

SESSION_EXTENSIONS = (".yaml", ".yml", ".json")


def resolve_session_path(path: str) -> str:
    """Return a valid session file path, allowing the extension to be omitted."""
    if os.path.isfile(path):
        return path
    for ext in SESSION_EXTENSIONS:
        alt = path + ext
        if os.path.isfile(alt):
            return alt
    raise FileNotFoundError(f"Cannot find session file '{path}'")


def load_data(filename):
    """Load a session from a YAML or JSON file.

    Expected format:
    {
        "global_parameters": {"function": "rosenbrock", "learning_rate": 0.01},
        "instructions": ["adam", "start", "step 200"]
    }"""
    filename_str = str(filename)
    with open(filename_str, "r") as f:
        if filename_str.endswith((".yaml", ".yml")):
            data = yaml.safe_load(f)
        elif filename_str.endswith(".json"):
            data = json.load(f)
        else:
            logger.error(f"Unsupported file format for: {filename_str}")
            raise ValueError(f"Unsupported file format for: {filename_str}")

    return data or {}


def parse_instructions(raw) -> list[str]:
    """Normalize an ``instructions`` entry to a list of command lines."""
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = raw.split(";")
    lines = []
    for item in raw:
        line = str(item).strip()
        if line:
            lines.append(line)
    return lines


def parse_session(data: dict) -> tuple[GlobalParameters, list[str]]:
    """Build :class:`GlobalParameters` and the instruction list from ``data``."""
    if not isinstance(data, dict):
        raise ValueError("Session data must be a mapping.")

    params = GlobalParameters()
    overrides = data.get("global_parameters") or {}
    if not isinstance(overrides, dict):
        raise ValueError("'global_parameters' must be a mapping.")
    unknown = sorted(k for k in overrides if k not in params)
    if unknown:
        logger.warning("Unknown global parameters in session: %s", unknown)
    params.update(overrides)

    start = params.get("start_point")
    if start is None or len(start) != 2:
        raise ValueError(f"start_point must have two coordinates, got {start!r}")
    params.set("start_point", [float(start[0]), float(start[1])])

    instructions = parse_instructions(data.get("instructions"))
    logger.debug(
        "Loaded session: %d parameter overrides, %d instructions.",
        len(overrides),
        len(instructions),
    )
    return params, instructions
