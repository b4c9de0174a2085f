#!/usr/bin/env python3
"""
predictor/forecast.py
=====================
Route-index localization and braking-adjusted position forecasting.

Routes are recorded at one waypoint per host simulation step, so the
distance between two consecutive waypoints tells the speed the route was
driven at.  A vehicle currently driving slower (braking) than that
nominal speed advances proportionally fewer waypoints over the forecast
horizon.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from predictor.errors import ForecastOutOfRange, RouteExhausted, RouteUnresolved
from predictor.geo import great_circle_distance_m
from predictor.history import VehicleHistoryStore
from predictor.routes import RouteAssignmentRegistry, RoutePolylineStore
from predictor.types import Coordinate, KinematicSnapshot

log = logging.getLogger(__name__)


def _bracket(prev: float, value: float, cur: float, ascending: bool) -> bool:
    """Half-open bracket of *value* between *prev* and *cur* on one axis.

    A segment that does not move along the axis brackets only values
    equal to its coordinate.
    """
    if prev == cur:
        return value == prev
    if ascending:
        return prev <= value < cur
    return prev >= value > cur


# heading quadrant → (latitude ascending, longitude ascending)
_QUADRANT_DIRECTIONS = (
    (True, True),     # [0, 90)    north-east
    (False, True),    # [90, 180)  south-east
    (False, False),   # [180, 270) south-west
    (True, False),    # [270, 360) north-west
)


def segment_brackets(prev: Coordinate, cur: Coordinate,
                     snapshot: KinematicSnapshot) -> bool:
    """True if *snapshot* lies between *prev* and *cur* in its direction of travel."""
    heading = snapshot.heading_deg % 360.0
    if heading != heading:  # NaN
        return False
    lat_up, lon_up = _QUADRANT_DIRECTIONS[min(3, int(heading // 90.0))]
    return (
        _bracket(prev.latitude, snapshot.latitude, cur.latitude, lat_up)
        and _bracket(prev.longitude, snapshot.longitude, cur.longitude, lon_up)
    )


class PositionForecaster:
    """Forecast where a vehicle will be on its route after a given horizon.

    Parameters
    ----------
    history : VehicleHistoryStore
        Source of each vehicle's latest heading, position and speed.
    assignments : RouteAssignmentRegistry
        Vehicle → route mapping.
    routes : RoutePolylineStore
        Shared, read-only route polylines.
    update_interval_ms : int
        Host step between two recorded waypoints.
    """

    def __init__(
        self,
        history: VehicleHistoryStore,
        assignments: RouteAssignmentRegistry,
        routes: RoutePolylineStore,
        update_interval_ms: int = 10,
    ) -> None:
        self.history = history
        self.assignments = assignments
        self.routes = routes
        self.update_interval_ms = update_interval_ms

    def _route_for(self, vehicle_id: str) -> str:
        route_id = self.assignments.route_of(vehicle_id)
        if route_id is None:
            raise RouteUnresolved(vehicle_id, "no route assigned")
        if not self.routes.is_loaded(route_id):
            raise RouteUnresolved(vehicle_id, f"route {route_id} not loaded")
        return route_id

    def locate_route_index(self, vehicle_id: str) -> Optional[int]:
        """Index ``i`` of the first segment ``(wp[i-1], wp[i])`` bracketing the vehicle.

        Returns None when no segment matches.  Raises :class:`NotTracked`
        or :class:`RouteUnresolved` when there is nothing to search.
        """
        snapshot = self.history.latest(vehicle_id)
        route_id = self._route_for(vehicle_id)
        points = self.routes.waypoints(route_id)
        for i in range(1, len(points)):
            if segment_brackets(points[i - 1], points[i], snapshot):
                return i
        return None

    def braking_factor(self, vehicle_id: str, index: int) -> float:
        """Ratio of current speed to the route's nominal speed at *index*.

        Raises :class:`RouteExhausted` when *index* has no successor.
        """
        route_id = self._route_for(vehicle_id)
        current = self.routes.waypoint(route_id, index)
        following = self.routes.waypoint(route_id, index + 1)
        if current is None or following is None:
            raise RouteExhausted(vehicle_id, f"no waypoint after index {index}")
        distance = great_circle_distance_m(current, following)
        nominal_speed = distance / (self.update_interval_ms / 1000.0)
        if nominal_speed <= 0.0:
            return 1.0
        return self.history.latest(vehicle_id).speed_m_s / nominal_speed

    def forecast(self, vehicle_id: str, horizon_s: float) -> Coordinate:
        """Forecasted route waypoint after *horizon_s* seconds.

        Raises
        ------
        NotTracked
            The vehicle has no kinematic history.
        RouteUnresolved
            No route, or the vehicle cannot be located on it.  No
            fallback index is assumed.
        RouteExhausted
            The located segment is the last one of the route.
        ForecastOutOfRange
            The forecast runs past either end of the route, or the
            observed speed gives no finite step count.
        """
        index = self.locate_route_index(vehicle_id)
        if index is None:
            raise RouteUnresolved(vehicle_id, "position not on any route segment")
        factor = self.braking_factor(vehicle_id, index)
        if not math.isfinite(factor):
            raise ForecastOutOfRange(vehicle_id, f"braking factor {factor} is not finite")
        steps_ahead = int(round(factor * horizon_s * 1000.0 / self.update_interval_ms))
        forecast_index = index + steps_ahead
        route_id = self._route_for(vehicle_id)
        point = self.routes.waypoint(route_id, forecast_index)
        if point is None:
            raise ForecastOutOfRange(
                vehicle_id,
                f"index {forecast_index} outside route {route_id} "
                f"(len={self.routes.length(route_id)})",
            )
        log.debug("forecast id=%s idx=%d factor=%.3f steps=%d",
                  vehicle_id, index, factor, steps_ahead)
        return point
