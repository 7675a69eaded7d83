"""Discretize a function ``z = f(x, y)`` into a renderable triangle mesh."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from geometry.triangle_ops import triangle_normals_and_areas, vertex_normals

logger = logging.getLogger("surface_descent")


@dataclass(frozen=True)
class MeshData:
    """Flat render buffers: 3 floats per vertex, 3 indices per triangle.

    World axes are ``(x, f(x, y), y)``: the function value is "up" and the
    two inputs span the ground plane.
    """

    positions: np.ndarray
    normals: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return self.positions.size // 3

    @property
    def triangle_count(self) -> int:
        return self.indices.size // 3

    def vertices(self) -> np.ndarray:
        """Positions reshaped to ``(N, 3)``."""
        return self.positions.reshape(-1, 3)

    def triangles(self) -> np.ndarray:
        """Indices reshaped to ``(M, 3)``."""
        return self.indices.reshape(-1, 3)

    def triangle_areas(self) -> np.ndarray:
        _, areas = triangle_normals_and_areas(
            self.vertices().astype(float), self.triangles()
        )
        return areas


def grid_indices(resolution: int) -> np.ndarray:
    """Triangle indices for a ``(resolution+1)**2`` row-major vertex grid.

    Each cell with corners ``a=(i,j)``, ``b=(i,j+1)``, ``c=(i+1,j)``,
    ``d=(i+1,j+1)`` yields ``(a, b, d)`` and ``(a, d, c)``.
    """
    stride = resolution + 1
    i, j = np.meshgrid(np.arange(resolution), np.arange(resolution), indexing="ij")
    a = (i * stride + j).ravel()
    b = a + 1
    c = a + stride
    d = c + 1
    tris = np.empty((a.size, 2, 3), dtype=np.uint32)
    tris[:, 0] = np.stack([a, b, d], axis=1)
    tris[:, 1] = np.stack([a, d, c], axis=1)
    return tris.reshape(-1)


def sample_grid(
    f: Callable[[float, float], float], domain: Tuple[float, float], resolution: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(xs, ys, zs)`` where ``zs[i, j] = f(xs[j], ys[i])``.

    Non-finite samples are stored as ``0`` so downstream normals stay finite.
    """
    lo, hi = float(domain[0]), float(domain[1])
    step = (hi - lo) / resolution
    coords = lo + step * np.arange(resolution + 1, dtype=float)
    zs = np.empty((resolution + 1, resolution + 1), dtype=float)
    bad = 0
    for i, yv in enumerate(coords):
        for j, xv in enumerate(coords):
            value = float(f(float(xv), float(yv)))
            if not math.isfinite(value):
                value = 0.0
                bad += 1
            zs[i, j] = value
    if bad:
        logger.debug("Replaced %d non-finite surface samples with 0.", bad)
    return coords, coords, zs


def generate_mesh(
    f: Callable[[float, float], float],
    domain: Tuple[float, float],
    resolution: int = 100,
) -> MeshData:
    """Sample ``f`` on a regular grid over ``domain**2`` and triangulate it.

    Vertex ``(i, j)`` sits at ``x = min + j*step``, ``y = min + i*step`` and
    has index ``i*(resolution+1) + j``. Identical inputs always give
    byte-identical buffers.
    """
    resolution = int(resolution)
    if resolution < 1:
        raise ValueError(f"resolution must be >= 1, got {resolution}")

    xs, ys, zs = sample_grid(f, domain, resolution)
    gx, gy = np.meshgrid(xs, ys, indexing="xy")
    positions = np.stack([gx.ravel(), zs.ravel(), gy.ravel()], axis=1)

    indices = grid_indices(resolution)
    normals = vertex_normals(positions, indices.reshape(-1, 3).astype(np.intp))

    mesh = MeshData(
        positions=positions.astype(np.float32).reshape(-1),
        normals=normals.astype(np.float32).reshape(-1),
        indices=indices,
    )
    logger.debug(
        "Generated surface mesh: %d vertices, %d triangles (resolution %d).",
        mesh.vertex_count,
        mesh.triangle_count,
        resolution,
    )
    return mesh


__all__ = ["MeshData", "generate_mesh", "grid_indices", "sample_grid"]
