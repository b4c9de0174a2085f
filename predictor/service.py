#!/usr/bin/env python3
"""
predictor/service.py
====================
Per-vehicle collision warning application.

One :class:`CollisionWarningService` runs for every equipped vehicle.  It
owns that vehicle's local dynamic map, route assignments, predictor and
reaction controller; only the :class:`RoutePolylineStore` is shared.

Host entry points
-----------------
* ``record_kinematics(snapshot)``
* ``assign_route(vehicle_id, route_id)``
* ``on_beacon(message)``: received CAM
* ``on_vehicle_updated(snapshot, route_id)``: own tick
* ``predict()``
* timer callbacks arrive through the scheduler passed in.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional, Set

from predictor.beacon import MalformedBeacon, decode_cam
from predictor.collision import CollisionPredictor
from predictor.errors import NotTracked
from predictor.forecast import PositionForecaster
from predictor.geo import great_circle_distance_m, time_to_collision_s
from predictor.history import VehicleHistoryStore
from predictor.policy import WarningPolicy
from predictor.reaction import ReactionController, ReactionState, VehicleActuator
from predictor.routes import RouteAssignmentRegistry, RoutePolylineStore
from predictor.timers import Scheduler
from predictor.types import KinematicSnapshot

log = logging.getLogger(__name__)


class CollisionWarningService:
    """Collision warning for one ego vehicle.

    Parameters
    ----------
    ego_id : str
        The vehicle this service runs on.
    routes : RoutePolylineStore
        Shared route polylines, loaded before the first tick.
    scheduler : Scheduler
        Clock for the reaction delay.
    actuator : VehicleActuator
        Receives slow-down / resume commands for the ego.
    policy : WarningPolicy or None
        Tunable constants.
    """

    def __init__(
        self,
        ego_id: str,
        routes: RoutePolylineStore,
        scheduler: Scheduler,
        actuator: VehicleActuator,
        policy: Optional[WarningPolicy] = None,
    ) -> None:
        self.ego_id = ego_id
        self.policy = policy or WarningPolicy()
        self.routes = routes
        self.history = VehicleHistoryStore(self.policy.history_capacity)
        self.assignments = RouteAssignmentRegistry()
        self.forecaster = PositionForecaster(
            self.history, self.assignments, routes,
            update_interval_ms=self.policy.update_interval_ms,
        )
        self.predictor = CollisionPredictor(
            self.history, self.assignments, self.forecaster,
            safe_zone_factor=self.policy.safe_zone_factor,
        )
        self.reaction = ReactionController(
            ego_id,
            actuator,
            scheduler,
            reaction_delay_s=self.policy.reaction_delay_s,
            target_speed_m_s=self.policy.slow_down_speed_m_s,
            brake_interval_s=self.policy.slow_down_interval_s,
        )
        self.min_ttc_s: float = math.inf
        self.warnings_issued = 0
        self.beacons_rejected = 0
        self._last_prediction: Set[str] = set()

    # ── Feeds ─────────────────────────────────────────────────────────────────

    def record_kinematics(self, snapshot: KinematicSnapshot) -> None:
        self.history.record(snapshot.vehicle_id, snapshot)

    def assign_route(self, vehicle_id: str, route_id: str) -> bool:
        return self.assignments.assign(vehicle_id, route_id)

    def on_beacon(self, message: Any) -> bool:
        """Handle a received CAM; returns False if it was rejected.

        *message* is a :class:`bus.message.V2XMessage` or anything with
        ``payload`` and ``sender`` attributes.
        """
        try:
            snapshot, route_id = decode_cam(message.payload, getattr(message, "sender", None))
        except MalformedBeacon as exc:
            self.beacons_rejected += 1
            log.warning("%s cam_rejected sender=%s error=%s",
                        self.ego_id, getattr(message, "sender", "?"), exc)
            return False
        if snapshot.vehicle_id == self.ego_id:
            return False
        if route_id is not None:
            self.assign_route(snapshot.vehicle_id, route_id)
        self.record_kinematics(snapshot)
        return True

    # ── Tick ──────────────────────────────────────────────────────────────────

    def predict(self, observed_route_id: Optional[str] = None) -> Set[str]:
        return self.predictor.predict(
            self.ego_id, self.policy.forecast_horizon_s, observed_route_id,
        )

    def on_vehicle_updated(self, snapshot: KinematicSnapshot,
                           route_id: Optional[str] = None) -> Set[str]:
        """Own kinematic update: record, predict, react.

        Returns the set of vehicles predicted to collide with the ego.
        """
        self.record_kinematics(snapshot)
        colliding = self.predict(route_id)
        for other_id in sorted(colliding):
            ttc = self._ttc_to(other_id)
            self.min_ttc_s = min(self.min_ttc_s, ttc)
            if other_id not in self._last_prediction:
                self.warnings_issued += 1
            log.info("%s collides with %s ttc=%.2fs", self.ego_id, other_id, ttc)
        self._last_prediction = colliding
        self.reaction.on_prediction(colliding)
        return colliding

    def _ttc_to(self, other_id: str) -> float:
        try:
            ego = self.history.latest(self.ego_id)
            other = self.history.latest(other_id)
        except NotTracked:
            return math.inf
        distance = great_circle_distance_m(ego.position, other.position)
        return time_to_collision_s(distance, ego.speed_m_s)

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def reaction_state(self) -> ReactionState:
        return self.reaction.state

    @property
    def last_prediction(self) -> Set[str]:
        return set(self._last_prediction)

    def shutdown(self) -> None:
        """Cancel the pending reaction timer and log the run summary."""
        if self.reaction.timer_pending:
            self.reaction.on_prediction(())
        log.info("%s shutdown min_ttc=%s warnings=%d tracked=%d",
                 self.ego_id,
                 "inf" if math.isinf(self.min_ttc_s) else f"{self.min_ttc_s:.2f}s",
                 self.warnings_issued, len(self.history))
