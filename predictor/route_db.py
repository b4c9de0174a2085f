"""
predictor/route_db.py
=====================
Route polyline files.

Each route lives in ``Route<id>.json``::

    {"routeId": "3", "x": [lat0, lat1, ...], "y": [lon0, lon1, ...]}

:func:`load_route_directory` fills a :class:`RoutePolylineStore` at
startup.  A missing or broken file leaves its slot empty; it never
raises.  :class:`RouteRecorder` writes the same format from a vehicle's
own positions, one waypoint per simulation step.
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional

from predictor.routes import RoutePolylineStore
from predictor.types import Coordinate

log = logging.getLogger(__name__)


def route_file_name(route_id: str) -> str:
    return f"Route{route_id}.json"


def read_route_file(path: str) -> Optional[List[Coordinate]]:
    """Parse one route file; returns None if it is missing or malformed."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        lats = data["x"]
        lons = data["y"]
        if len(lats) != len(lons):
            raise ValueError(f"x/y length mismatch {len(lats)} != {len(lons)}")
        return [Coordinate(float(lat), float(lon)) for lat, lon in zip(lats, lons)]
    except FileNotFoundError:
        log.debug("route_file_missing path=%s", path)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        log.warning("route_file_invalid path=%s error=%s", path, exc)
    return None


def load_route_directory(store: RoutePolylineStore, directory: str,
                         slots: Optional[int] = None) -> List[str]:
    """Load ``Route0.json`` … ``Route<slots-1>.json`` from *directory*.

    Returns the route ids that were loaded.
    """
    count = store.slots if slots is None else min(slots, store.slots)
    loaded: List[str] = []
    for i in range(count):
        route_id = str(i)
        points = read_route_file(os.path.join(directory, route_file_name(route_id)))
        if points and store.load(route_id, points):
            loaded.append(route_id)
    log.info("route_directory_loaded dir=%s routes=%d", directory, len(loaded))
    return loaded


class RouteRecorder:
    """Collects a vehicle's positions so its route can be written out."""

    def __init__(self, route_id: str) -> None:
        self.route_id = route_id
        self._points: List[Coordinate] = []

    def add(self, point: Coordinate) -> None:
        self._points.append(point)

    def __len__(self) -> int:
        return len(self._points)

    def write(self, directory: str) -> str:
        """Write ``Route<route_id>.json`` into *directory* and return its path."""
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, route_file_name(self.route_id))
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(
                {
                    "routeId": self.route_id,
                    "x": [p.latitude for p in self._points],
                    "y": [p.longitude for p in self._points],
                },
                fh,
            )
        log.info("route_written id=%s waypoints=%d path=%s",
                 self.route_id, len(self._points), path)
        return path
