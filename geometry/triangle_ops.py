"""Vectorized triangle geometry helpers used by ``geometry.surface_mesh``."""

from __future__ import annotations

import numpy as np


def _fast_cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compute cross products for arrays of 3D vectors."""
    x = a[..., 1] * b[..., 2] - a[..., 2] * b[..., 1]
    y = a[..., 2] * b[..., 0] - a[..., 0] * b[..., 2]
    z = a[..., 0] * b[..., 1] - a[..., 1] * b[..., 0]
    out = np.empty(x.shape + (3,), dtype=x.dtype)
    out[..., 0] = x
    out[..., 1] = y
    out[..., 2] = z
    return out


def triangle_normals_and_areas(
    positions: np.ndarray, triangles: np.ndarray
) -> tuple[np.ndarray, np.ndarray]:
    """Return unnormalized face normals ``(v1 - v0) x (v2 - v0)`` and areas.

    The length of each face normal is twice the triangle area, so summing
    them onto vertices weights every face by its area.
    """
    v0 = positions[triangles[:, 0]]
    v1 = positions[triangles[:, 1]]
    v2 = positions[triangles[:, 2]]
    normals = _fast_cross(v1 - v0, v2 - v0)
    areas = 0.5 * np.linalg.norm(normals, axis=1)
    return normals, areas


def vertex_normals(
    positions: np.ndarray, triangles: np.ndarray, eps: float = 1e-12
) -> np.ndarray:
    """Area-weighted unit vertex normals for an indexed triangle list.

    Vertices touched by no face (or only by degenerate faces) get a zero
    normal.
    """
    n_verts = positions.shape[0]
    normals = np.zeros((n_verts, 3), dtype=float)
    if triangles.size == 0:
        return normals
    face_normals, _ = triangle_normals_and_areas(positions, triangles)
    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face_normals)
    lens = np.linalg.norm(normals, axis=1)
    mask = lens >= eps
    normals[mask] /= lens[mask][:, None]
    return normals
