"""
predictor/types.py
==================
Immutable value types shared by every predictor module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in decimal degrees."""

    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True)
class KinematicSnapshot:
    """One observation of a vehicle, taken from a CAM or the vehicle itself.

    Attributes
    ----------
    vehicle_id : str
        Sender / owner of the observation.
    latitude, longitude : float
        Position in decimal degrees.
    heading_deg : float
        Compass heading, 0 = north, 90 = east.
    speed_m_s : float
        Current speed in metres per second.
    acceleration_m_s2 : float
        Longitudinal acceleration in m/s².
    length_m : float
        Vehicle length in metres.
    """

    vehicle_id: str
    latitude: float
    longitude: float
    heading_deg: float
    speed_m_s: float
    acceleration_m_s2: float = 0.0
    length_m: float = 4.0

    @property
    def position(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class SafeZone:
    """Axis-aligned lat/lon rectangle from *south_west* to *north_east*.

    The zone is always anchored at its south-west corner and extends
    north and east, whatever the vehicle's heading.
    """

    south_west: Coordinate
    north_east: Coordinate

    @property
    def delta_lat(self) -> float:
        return self.north_east.latitude - self.south_west.latitude

    @property
    def delta_lon(self) -> float:
        return self.north_east.longitude - self.south_west.longitude

    def corners(self) -> Tuple[Coordinate, Coordinate, Coordinate, Coordinate]:
        """Anchor, north of anchor, far corner, east of anchor."""
        sw, ne = self.south_west, self.north_east
        return (
            sw,
            Coordinate(ne.latitude, sw.longitude),
            ne,
            Coordinate(sw.latitude, ne.longitude),
        )

    def contains(self, point: Coordinate) -> bool:
        """Inclusive point-in-rectangle test."""
        return (
            self.south_west.latitude <= point.latitude <= self.north_east.latitude
            and self.south_west.longitude <= point.longitude <= self.north_east.longitude
        )
