"""
sim/network.py
==============
Route polylines for a four-arm crossroads.

Routes are laid out in local metres (east, north) around a geographic
centre and resampled to one waypoint per simulation step at the nominal
speed, the shape a route has when it is recorded from a simulator
running at a fixed step.  :func:`default_routes` builds the standard set.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from predictor.geo import offset
from predictor.types import Coordinate

# Default crossroads centre (Berlin).
DEFAULT_CENTRE = Coordinate(52.5, 13.2)

_L: float = 1.75        # lane centre offset from the road axis (m)
_ARC_RIGHT_R: float = 6.0
_ARC_N: int = 12        # sample points per turn arc


@dataclass(frozen=True)
class RouteDefinition:
    """A named route polyline.

    Parameters
    ----------
    route_id : str
        Slot id, ``"0"`` … ``"19"``.
    name : str
        Human-readable label, e.g. ``"W-E"``.
    waypoints : tuple of Coordinate
        One waypoint per simulation step at nominal speed.
    """

    route_id: str
    name: str
    waypoints: Tuple[Coordinate, ...]


def _arc(cx: float, cy: float, r: float,
         t0: float, t1: float, n: int) -> List[Tuple[float, float]]:
    """Return *n* evenly-spaced points on a circular arc."""
    return [(cx + r * math.cos(t0 + (t1 - t0) * i / (n - 1)),
             cy + r * math.sin(t0 + (t1 - t0) * i / (n - 1)))
            for i in range(n)]


def resample(path_en: Sequence[Tuple[float, float]], spacing_m: float) -> np.ndarray:
    """Resample an (east, north) polyline at a fixed arc-length spacing.

    Returns an ``(n, 2)`` array that starts at the first vertex and never
    overshoots the last one.
    """
    if spacing_m <= 0.0:
        raise ValueError("spacing_m must be > 0")
    pts = np.asarray(path_en, dtype=float)
    seg = np.hypot(np.diff(pts[:, 0]), np.diff(pts[:, 1]))
    cum = np.concatenate(([0.0], np.cumsum(seg)))
    stations = np.arange(0.0, cum[-1] + 1e-9, spacing_m)
    east = np.interp(stations, cum, pts[:, 0])
    north = np.interp(stations, cum, pts[:, 1])
    return np.column_stack((east, north))


def to_coordinates(path_en: np.ndarray, centre: Coordinate) -> Tuple[Coordinate, ...]:
    return tuple(offset(centre, float(n), float(e)) for e, n in path_en)


def _crossroads_paths(arm_m: float) -> Dict[str, List[Tuple[float, float]]]:
    """Right-hand traffic: straight routes first, then right turns."""
    a, r = arm_m, _ARC_RIGHT_R
    return {
        # ── straight through ──────────────────────────────────────────
        "W-E": [(-a, -_L), (a, -_L)],
        "S-N": [(_L, -a), (_L, a)],
        "E-W": [(a, _L), (-a, _L)],
        "N-S": [(-_L, a), (-_L, -a)],
        # ── right turns (90° arcs hugging the near corner) ────────────
        "W-S": [(-a, -_L)]
               + _arc(-_L - r, -_L - r, r, math.pi / 2, 0.0, _ARC_N)
               + [(-_L, -a)],
        "S-E": [(_L, -a)]
               + _arc(_L + r, -_L - r, r, math.pi, math.pi / 2, _ARC_N)
               + [(a, -_L)],
        "E-N": [(a, _L)]
               + _arc(_L + r, _L + r, r, -math.pi / 2, -math.pi, _ARC_N)
               + [(_L, a)],
        "N-W": [(-_L, a)]
               + _arc(-_L - r, _L + r, r, 0.0, -math.pi / 2, _ARC_N)
               + [(-a, _L)],
    }


def default_routes(
    nominal_speed_m_s: float = 50.0 / 3.6,
    step_s: float = 0.01,
    arm_m: float = 60.0,
    centre: Coordinate = DEFAULT_CENTRE,
) -> List[RouteDefinition]:
    """Crossroads routes ``"0"`` … ``"7"`` sampled one step apart.

    Parameters
    ----------
    nominal_speed_m_s : float
        Speed the routes are "recorded" at.
    step_s : float
        Simulation step; waypoint spacing is ``nominal_speed_m_s * step_s``.
    arm_m : float
        Distance from the centre to the start / end of every arm.
    centre : Coordinate
        Geographic centre of the crossroads.
    """
    spacing = nominal_speed_m_s * step_s
    definitions: List[RouteDefinition] = []
    for i, (name, path) in enumerate(_crossroads_paths(arm_m).items()):
        definitions.append(RouteDefinition(
            route_id=str(i),
            name=name,
            waypoints=to_coordinates(resample(path, spacing), centre),
        ))
    return definitions
