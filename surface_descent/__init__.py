"""Package utilities for surface-descent.

The engine lives in top-level packages like `runtime/`, `geometry/` and
`modules/`. This package only exposes the installed version.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("surface-descent")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"
