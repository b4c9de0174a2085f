"""
predictor/routes.py
===================
Route polylines and the vehicle → route assignment registry.

Both are append-only: a polyline slot is populated once, a vehicle's
route is assigned once.  Later writes are ignored, never errors.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from predictor.types import Coordinate

log = logging.getLogger(__name__)


class RoutePolylineStore:
    """Fixed pool of named route polylines.

    Slots are addressed by route id strings ``"0"`` … ``str(slots - 1)``
    (the form vehicles broadcast in their CAMs).  Any other id refers to
    an unloaded slot.  After startup loading the store is read-only and
    safe to share between vehicles.
    """

    def __init__(self, slots: int = 20) -> None:
        self.slots = slots
        self._routes: List[Tuple[Coordinate, ...]] = [() for _ in range(slots)]
        self._slot_ids: Dict[str, int] = {str(i): i for i in range(slots)}

    def _slot(self, route_id: object) -> Optional[int]:
        # only the canonical form: "1", never "01", " 1" or "+1"
        return self._slot_ids.get(route_id) if isinstance(route_id, str) else None

    def load(self, route_id: str, waypoints: Iterable[Coordinate]) -> bool:
        """Populate a slot once.

        Returns
        -------
        bool
            True if the slot took the data, False if it was already
            populated, the id names no slot, or *waypoints* is empty.
        """
        slot = self._slot(route_id)
        if slot is None:
            log.warning("route_load_rejected id=%s reason=unknown_slot", route_id)
            return False
        if self._routes[slot]:
            log.debug("route_load_ignored id=%s reason=already_loaded", route_id)
            return False
        points = tuple(waypoints)
        if not points:
            log.debug("route_load_ignored id=%s reason=empty", route_id)
            return False
        self._routes[slot] = points
        log.info("route_loaded id=%s waypoints=%d", route_id, len(points))
        return True

    def waypoint(self, route_id: str, index: int) -> Optional[Coordinate]:
        """Waypoint at *index*, or None if unloaded or out of range."""
        slot = self._slot(route_id)
        if slot is None:
            return None
        points = self._routes[slot]
        if 0 <= index < len(points):
            return points[index]
        return None

    def length(self, route_id: str) -> int:
        """Number of waypoints (0 if unloaded)."""
        slot = self._slot(route_id)
        return 0 if slot is None else len(self._routes[slot])

    def waypoints(self, route_id: str) -> Tuple[Coordinate, ...]:
        slot = self._slot(route_id)
        return () if slot is None else self._routes[slot]

    def is_loaded(self, route_id: str) -> bool:
        return self.length(route_id) > 0

    def loaded_ids(self) -> List[str]:
        return [str(i) for i, points in enumerate(self._routes) if points]


class RouteAssignmentRegistry:
    """First-write-wins mapping of vehicle id → route id."""

    def __init__(self) -> None:
        self._routes: Dict[str, str] = {}

    def assign(self, vehicle_id: str, route_id: str) -> bool:
        """Set the route of *vehicle_id* if it has none yet.

        Returns True when the assignment took effect.
        """
        if vehicle_id in self._routes:
            return False
        self._routes[vehicle_id] = route_id
        log.debug("route_assigned vehicle=%s route=%s", vehicle_id, route_id)
        return True

    def route_of(self, vehicle_id: str) -> Optional[str]:
        return self._routes.get(vehicle_id)

    def assignments(self) -> Iterator[Tuple[str, str]]:
        """(vehicle_id, route_id) pairs in assignment order."""
        return iter(list(self._routes.items()))

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)
