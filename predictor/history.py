"""
predictor/history.py
====================
Local dynamic map: a bounded FIFO of :class:`KinematicSnapshot` per
vehicle id.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Tuple

from predictor.errors import NotTracked
from predictor.types import KinematicSnapshot

log = logging.getLogger(__name__)


class VehicleHistoryStore:
    """Rolling kinematic history for every observed vehicle.

    Parameters
    ----------
    capacity : int
        Snapshots kept per vehicle.  When full, recording evicts the
        oldest snapshot before appending the newest.
    """

    def __init__(self, capacity: int = 3) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._entries: Dict[str, Deque[KinematicSnapshot]] = {}

    def record(self, vehicle_id: str, snapshot: KinematicSnapshot) -> None:
        """Append *snapshot* to the history of *vehicle_id*."""
        entries = self._entries.get(vehicle_id)
        if entries is None:
            entries = deque(maxlen=self.capacity)
            self._entries[vehicle_id] = entries
            log.debug("ldm_new_vehicle id=%s", vehicle_id)
        entries.append(snapshot)

    def latest(self, vehicle_id: str) -> KinematicSnapshot:
        """Most recently recorded snapshot.

        Raises
        ------
        NotTracked
            If *vehicle_id* was never recorded.
        """
        entries = self._entries.get(vehicle_id)
        if not entries:
            raise NotTracked(vehicle_id, "no kinematic history")
        return entries[-1]

    def history(self, vehicle_id: str) -> Tuple[KinematicSnapshot, ...]:
        """Retained snapshots, oldest first (empty for unknown vehicles)."""
        return tuple(self._entries.get(vehicle_id, ()))

    def vehicles(self) -> List[str]:
        """Tracked vehicle ids in first-seen order."""
        return list(self._entries)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
