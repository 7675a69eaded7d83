import logging
import math
from typing import Any, Dict, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection

from geometry.surface_mesh import MeshData
from runtime.gradient import gradient
from runtime.simulation import Point3, trajectory_segment_lengths

logger = logging.getLogger("surface_descent")

SURFACE_COLOR = "#4f46e5"
MAX_SEGMENT_SPEED = 0.5
ARROW_LENGTH = 0.8


def segment_colors(lengths: Sequence[float], max_speed: float = MAX_SEGMENT_SPEED) -> np.ndarray:
    """Map segment lengths to RGB colors, blue (slow) to red (fast).

    Lengths at or above ``max_speed`` saturate at pure red.
    """
    t = np.clip(np.asarray(lengths, dtype=float) / max_speed, 0.0, 1.0)
    colors = np.zeros((t.size, 3), dtype=float)
    colors[:, 0] = t
    colors[:, 2] = 1.0 - t
    return colors


def descent_direction(fdef, x: float, y: float) -> tuple[float, float]:
    """Unit vector of steepest descent in the ``(x, y)`` plane.

    A near-zero gradient yields ``(1, 0)``.
    """
    gx, gy = gradient(fdef, x, y)
    dx, dy = -gx, -gy
    norm = math.hypot(dx, dy)
    if norm <= 1e-4:
        return (1.0, 0.0)
    return (dx / norm, dy / norm)


def _math_vertices(mesh_data: MeshData) -> np.ndarray:
    # Buffers are (x, z, y); matplotlib wants z up.
    return mesh_data.vertices()[:, [0, 2, 1]].astype(float)


def _trajectory_segments(trajectory: Sequence[Point3]) -> np.ndarray:
    pts = np.array([p.as_tuple() for p in trajectory], dtype=float)
    return np.stack([pts[:-1], pts[1:]], axis=1)


def plot_surface(
    mesh_data: MeshData,
    trajectory: Sequence[Point3] = (),
    *,
    fdef=None,
    ax=None,
    title: Optional[str] = None,
    show_wireframe: bool = False,
    show_trajectory: bool = True,
    show_gradient_arrow: bool = True,
    transparent: bool = False,
    no_axes: bool = False,
    show: bool = True,
):
    """
    Draw a function surface with the descent trajectory on top.

    Parameters
    ----------
    mesh_data :
        Mesh from :func:`geometry.surface_mesh.generate_mesh`.
    trajectory : sequence of Point3, optional
        Visited points; consecutive segments are colored by length.
    fdef : FunctionDef, optional
        When given together with a non-empty trajectory, a yellow arrow shows
        the descent direction at the last point.
    ax : mpl_toolkits.mplot3d.Axes3D, optional
        Axis to draw on; a new figure is created when omitted.
    show_wireframe : bool, optional
        Draw triangle edges instead of filled faces.
    transparent : bool, optional
        Draw faces semi-transparent.
    show : bool, optional
        Call :func:`matplotlib.pyplot.show` after drawing.

    Returns
    -------
    dict
        The created artists under ``"surface"``, ``"path"``, ``"point"`` and
        ``"arrow"`` (missing ones are ``None``).
    """
    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")

    verts = _math_vertices(mesh_data)
    tris = verts[mesh_data.triangles().astype(np.intp)]
    alpha = 0.4 if transparent else 0.9
    if show_wireframe:
        surface = Poly3DCollection(
            tris, facecolors="none", edgecolors=SURFACE_COLOR, linewidths=0.3
        )
    else:
        surface = Poly3DCollection(tris, alpha=alpha, linewidths=0.0)
        surface.set_facecolor(SURFACE_COLOR)
    ax.add_collection3d(surface)

    artists: Dict[str, Any] = {"surface": surface, "path": None, "point": None, "arrow": None}

    if show_trajectory and len(trajectory) >= 2:
        segments = _trajectory_segments(trajectory)
        colors = segment_colors(trajectory_segment_lengths(trajectory))
        path = Line3DCollection(list(segments), colors=colors, linewidths=2.0)
        ax.add_collection3d(path)
        artists["path"] = path

    if trajectory:
        last = trajectory[-1]
        artists["point"] = ax.scatter([last.x], [last.y], [last.z], color="r", s=30)
        if show_gradient_arrow and fdef is not None:
            dx, dy = descent_direction(fdef, last.x, last.y)
            artists["arrow"] = ax.quiver(
                last.x,
                last.y,
                last.z,
                dx,
                dy,
                0.0,
                length=ARROW_LENGTH,
                color="y",
            )

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("f(X, Y)")
    if title:
        ax.set_title(title)

    ax.set_xlim(verts[:, 0].min(), verts[:, 0].max())
    ax.set_ylim(verts[:, 1].min(), verts[:, 1].max())
    z_lo, z_hi = verts[:, 2].min(), verts[:, 2].max()
    if z_hi > z_lo:
        ax.set_zlim(z_lo, z_hi)

    if no_axes:
        ax.set_axis_off()

    if show:
        plt.show()
    return artists


def plot_simulation(loop, **kwargs):
    """Plot the selected function of ``loop`` with its current trajectory."""
    fdef = loop.function
    kwargs.setdefault("title", f"{fdef.name} - {loop.optimizer}")
    return plot_surface(loop.mesh(), loop.trajectory, fdef=fdef, **kwargs)


def update_live_vis(
    loop,
    *,
    state: Optional[Dict[str, Any]] = None,
    title: Optional[str] = None,
) -> Dict[str, Any]:
    """Update or create a live window for a running simulation.

    The surface is redrawn only when the selected function or its version
    changes; otherwise just the trajectory and point artists are replaced.
    """
    if state is None:
        plt.ion()
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")
        state = {"fig": fig, "ax": ax, "surface_key": None}
    else:
        fig = state["fig"]
        ax = state["ax"]

    key = (loop.function_id, loop.function_version)
    if state.get("surface_key") != key:
        ax.cla()
        artists = plot_simulation(loop, ax=ax, title=title, show=False)
        state.update(artists)
        state["surface_key"] = key
    else:
        for name in ("path", "point", "arrow"):
            artist = state.get(name)
            if artist is not None:
                artist.remove()
            state[name] = None
        trajectory = loop.trajectory
        if len(trajectory) >= 2:
            path = Line3DCollection(
                list(_trajectory_segments(trajectory)),
                colors=segment_colors(trajectory_segment_lengths(trajectory)),
                linewidths=2.0,
            )
            ax.add_collection3d(path)
            state["path"] = path
        last = trajectory[-1]
        state["point"] = ax.scatter([last.x], [last.y], [last.z], color="r", s=30)
        if title:
            ax.set_title(title)

    fig.canvas.draw_idle()
    plt.pause(0.001)
    return state
