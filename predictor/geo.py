#!/usr/bin/env python3
"""
predictor/geo.py
================
Flat-plane and spherical helpers used by :mod:`predictor.forecast` and
:mod:`predictor.collision`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math

from predictor.types import Coordinate

# Mean earth radius used by the great-circle distance, in kilometres.
EARTH_RADIUS_KM: float = 6378.388

# Metres per degree of latitude (one nautical mile per arc minute).
METERS_PER_DEGREE: float = 111120.0


def great_circle_distance_m(a: Coordinate, b: Coordinate,
                            radius_km: float = EARTH_RADIUS_KM) -> float:
    """Haversine distance between two points in metres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    # clamp: rounding can push h a hair above 1 for antipodal points
    return 1000.0 * radius_km * 2.0 * math.asin(math.sqrt(min(1.0, h)))


def meters_to_lat(distance_m: float) -> float:
    """Convert a north/south distance to degrees of latitude."""
    return distance_m / METERS_PER_DEGREE


def meters_to_lon(distance_m: float, latitude: float) -> float:
    """Convert an east/west distance at *latitude* to degrees of longitude."""
    return distance_m / METERS_PER_DEGREE / math.cos(math.radians(latitude))


def lat_to_meters(distance_lat: float) -> float:
    return distance_lat * METERS_PER_DEGREE


def lon_to_meters(distance_lon: float, latitude: float) -> float:
    return distance_lon * METERS_PER_DEGREE * math.cos(math.radians(latitude))


def offset(origin: Coordinate, north_m: float, east_m: float) -> Coordinate:
    """Point *north_m* / *east_m* metres away from *origin* on the flat plane."""
    return Coordinate(
        origin.latitude + meters_to_lat(north_m),
        origin.longitude + meters_to_lon(east_m, origin.latitude),
    )


def bearing_deg(a: Coordinate, b: Coordinate) -> float:
    """Flat-plane compass bearing from *a* to *b* in ``[0, 360)``.

    0 = north, 90 = east.  Returns 0.0 for coincident points.
    """
    north = lat_to_meters(b.latitude - a.latitude)
    east = lon_to_meters(b.longitude - a.longitude, a.latitude)
    if north == 0.0 and east == 0.0:
        return 0.0
    return math.degrees(math.atan2(east, north)) % 360.0


def time_to_collision_s(distance_m: float, speed_m_s: float) -> float:
    """Raw time to collision: remaining distance over current speed.

    Returns ``inf`` for a stationary (or reversing) vehicle.
    """
    if speed_m_s <= 0.0:
        return math.inf
    return distance_m / speed_m_s
