"""
predictor/errors.py
===================
Failure taxonomy for the prediction core.

None of these are fatal: callers treat them as "skip this vehicle for
this tick".
"""

from __future__ import annotations


class PredictorError(Exception):
    """Base class for every recoverable prediction failure."""

    def __init__(self, vehicle_id: str, detail: str = "") -> None:
        self.vehicle_id = vehicle_id
        self.detail = detail
        message = vehicle_id if not detail else f"{vehicle_id}: {detail}"
        super().__init__(message)


class NotTracked(PredictorError):
    """The vehicle has never been recorded in the history store."""


class RouteUnresolved(PredictorError):
    """No route, an empty route, or no route segment brackets the vehicle."""


class RouteExhausted(PredictorError):
    """The located segment has no successor waypoint."""


class ForecastOutOfRange(PredictorError):
    """The forecasted waypoint index falls outside the route."""
