"""
predictor — Collision-risk prediction core
==========================================

Per-vehicle local dynamic map, route polylines, braking-adjusted
position forecasting and safe-zone collision prediction.

Modules
-------
types
    :class:`KinematicSnapshot`, :class:`Coordinate`, :class:`SafeZone`.
history
    :class:`VehicleHistoryStore` bounded per-vehicle history.
routes
    :class:`RoutePolylineStore` and :class:`RouteAssignmentRegistry`.
forecast
    :class:`PositionForecaster` route localization and extrapolation.
collision
    :class:`CollisionPredictor` safe zones and pairwise overlap.
reaction
    :class:`ReactionController` delayed braking state machine.
service
    :class:`CollisionWarningService` per-vehicle facade used by hosts.
beacon
    CAM payload encoding and validation.
route_db
    ``Route<i>.json`` loading and recording.
timers
    :class:`DeferredTask` and the wall-clock scheduler.
geo, policy, errors
    Geodesy helpers, tunable constants, failure types.
api
    Optional FastAPI server (not imported here).
"""

from .types import Coordinate, KinematicSnapshot, SafeZone
from .errors import (
    ForecastOutOfRange,
    NotTracked,
    PredictorError,
    RouteExhausted,
    RouteUnresolved,
)
from .policy import WarningPolicy
from .history import VehicleHistoryStore
from .routes import RouteAssignmentRegistry, RoutePolylineStore
from .forecast import PositionForecaster
from .collision import CollisionPredictor
from .reaction import ReactionController, ReactionState
from .service import CollisionWarningService

__all__ = [
    "Coordinate",
    "KinematicSnapshot",
    "SafeZone",
    "PredictorError",
    "NotTracked",
    "RouteUnresolved",
    "RouteExhausted",
    "ForecastOutOfRange",
    "WarningPolicy",
    "VehicleHistoryStore",
    "RoutePolylineStore",
    "RouteAssignmentRegistry",
    "PositionForecaster",
    "CollisionPredictor",
    "ReactionController",
    "ReactionState",
    "CollisionWarningService",
]
