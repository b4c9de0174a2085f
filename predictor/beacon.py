"""
predictor/beacon.py
===================
Cooperative awareness message (CAM) payloads.

A CAM travels as a plain dict on the ``v2v.cam`` bus topic.  The route
id rides along as the tagged value so receivers can assign it.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional, Tuple

from predictor.types import KinematicSnapshot

CAM_TOPIC = "v2v.cam"

_NUMERIC_FIELDS = (
    "latitude",
    "longitude",
    "heading_deg",
    "speed_m_s",
    "acceleration_m_s2",
    "length_m",
)


class MalformedBeacon(ValueError):
    """Payload is missing fields, carries non-numeric values, or was corrupted."""


def encode_cam(snapshot: KinematicSnapshot, route_id: Optional[str]) -> Dict[str, Any]:
    """CAM payload for *snapshot*."""
    return {
        "vehicle_id": snapshot.vehicle_id,
        "latitude": snapshot.latitude,
        "longitude": snapshot.longitude,
        "heading_deg": snapshot.heading_deg,
        "speed_m_s": snapshot.speed_m_s,
        "acceleration_m_s2": snapshot.acceleration_m_s2,
        "length_m": snapshot.length_m,
        "route_id": route_id,
    }


def decode_cam(payload: Mapping[str, Any],
               sender: Optional[str] = None) -> Tuple[KinematicSnapshot, Optional[str]]:
    """Parse a CAM payload into ``(snapshot, route_id)``.

    *sender* is used when the payload carries no ``vehicle_id``.

    Raises
    ------
    MalformedBeacon
        On a corrupted flag, a missing id, or a missing / non-finite
        numeric field.
    """
    if not isinstance(payload, Mapping):
        raise MalformedBeacon(f"payload is {type(payload).__name__}, not a mapping")
    if payload.get("_corrupted"):
        raise MalformedBeacon("payload flagged as corrupted")

    vehicle_id = str(payload.get("vehicle_id") or sender or "").strip()
    if not vehicle_id:
        raise MalformedBeacon("no vehicle id")

    values: Dict[str, float] = {}
    for key in _NUMERIC_FIELDS:
        if key not in payload:
            raise MalformedBeacon(f"{vehicle_id}: missing {key}")
        try:
            value = float(payload[key])
        except (TypeError, ValueError):
            raise MalformedBeacon(f"{vehicle_id}: {key}={payload[key]!r} is not a number")
        if not math.isfinite(value):
            raise MalformedBeacon(f"{vehicle_id}: {key} is not finite")
        values[key] = value

    route_id = payload.get("route_id")
    snapshot = KinematicSnapshot(vehicle_id=vehicle_id, **values)
    return snapshot, (None if route_id is None else str(route_id))
