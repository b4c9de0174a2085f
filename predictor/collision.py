#!/usr/bin/env python3
"""
predictor/collision.py
======================
Safe-zone construction and the pairwise collision prediction.

A safe zone is the forecasted position inflated by the vehicle length.
Two zones overlap when any corner of one lies inside the other.  A
cross-shaped intersection with no contained corner is not flagged.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from predictor.errors import PredictorError
from predictor.forecast import PositionForecaster
from predictor.geo import meters_to_lat, meters_to_lon
from predictor.history import VehicleHistoryStore
from predictor.routes import RouteAssignmentRegistry
from predictor.types import Coordinate, SafeZone

log = logging.getLogger(__name__)


def safe_zone(length_m: float, point: Coordinate, factor: float = 0.7) -> SafeZone:
    """Rectangle from *point* to ``2 * length_m * factor`` metres north and east."""
    distance_m = 2.0 * length_m * factor
    return SafeZone(
        south_west=point,
        north_east=Coordinate(
            point.latitude + meters_to_lat(distance_m),
            point.longitude + meters_to_lon(distance_m, point.latitude),
        ),
    )


def zones_overlap(a: SafeZone, b: SafeZone) -> bool:
    """8-point corner containment test."""
    return (
        any(b.contains(corner) for corner in a.corners())
        or any(a.contains(corner) for corner in b.corners())
    )


class CollisionPredictor:
    """Predict which vehicles' safe zones will overlap the ego's.

    Parameters
    ----------
    history : VehicleHistoryStore
        Local dynamic map, source of vehicle lengths.
    assignments : RouteAssignmentRegistry
        Every assigned vehicle other than the ego is a candidate.
    forecaster : PositionForecaster
        Produces the forecasted zone anchors.
    safe_zone_factor : float
        Footprint inflation factor.
    """

    def __init__(
        self,
        history: VehicleHistoryStore,
        assignments: RouteAssignmentRegistry,
        forecaster: PositionForecaster,
        safe_zone_factor: float = 0.7,
    ) -> None:
        self.history = history
        self.assignments = assignments
        self.forecaster = forecaster
        self.safe_zone_factor = safe_zone_factor

    def zone_for(self, vehicle_id: str, horizon_s: float) -> SafeZone:
        """Forecasted safe zone; raises any :class:`PredictorError`."""
        point = self.forecaster.forecast(vehicle_id, horizon_s)
        length_m = self.history.latest(vehicle_id).length_m
        return safe_zone(length_m, point, self.safe_zone_factor)

    def predict(
        self,
        ego_id: str,
        horizon_s: float,
        observed_route_id: Optional[str] = None,
    ) -> Set[str]:
        """Vehicle ids whose forecasted zone overlaps the ego's.

        An ego without a route assignment is assigned *observed_route_id*
        (when given) and yields no prediction this tick.
        """
        if ego_id not in self.assignments:
            if observed_route_id is not None:
                self.assignments.assign(ego_id, observed_route_id)
            return set()

        try:
            ego_zone = self.zone_for(ego_id, horizon_s)
        except PredictorError as exc:
            log.debug("ego_forecast_failed id=%s reason=%s %s",
                      ego_id, type(exc).__name__, exc.detail)
            return set()

        colliding: Set[str] = set()
        for vehicle_id, _route_id in self.assignments.assignments():
            if vehicle_id == ego_id:
                continue
            try:
                zone = self.zone_for(vehicle_id, horizon_s)
            except PredictorError as exc:
                log.debug("skip id=%s reason=%s %s",
                          vehicle_id, type(exc).__name__, exc.detail)
                continue
            if zones_overlap(ego_zone, zone):
                colliding.add(vehicle_id)
        return colliding
