"""
predictor/api.py
================
Optional FastAPI server that exposes collision prediction as REST
endpoints, for hosts that cannot embed :mod:`predictor` directly.

Start the server::

    python -m predictor.api          # → http://localhost:8000/docs

One :class:`~predictor.service.CollisionWarningService` is kept per ego
vehicle; all of them share one route store.  Posting the ego's own
kinematics runs its tick: predict, then advance the reaction controller,
whose delay runs on a wall-clock timer.  Actuator commands are only
logged; callers read ``reaction_state``.

.. note::

   This server is **not** required to run the simulation.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from predictor.policy import WarningPolicy
from predictor.routes import RoutePolylineStore
from predictor.service import CollisionWarningService
from predictor.timers import ThreadingScheduler
from predictor.types import Coordinate, KinematicSnapshot

log = logging.getLogger(__name__)

# ── Pydantic request schemas ─────────────────────────────────────────────────


class WaypointModel(BaseModel):
    latitude: float = Field(..., allow_inf_nan=False)
    longitude: float = Field(..., allow_inf_nan=False)


class RouteModel(BaseModel):
    """Route polyline submitted to ``/routes/{route_id}``."""
    waypoints: List[WaypointModel]


class KinematicsModel(BaseModel):
    """One observation, recorded into the LDM of ``ego_id``.

    When ``vehicle_id == ego_id`` it is the ego's own tick: the service
    predicts and drives its reaction controller.
    """
    ego_id: str
    vehicle_id: str
    latitude: float = Field(..., allow_inf_nan=False)
    longitude: float = Field(..., allow_inf_nan=False)
    heading_deg: float = Field(..., allow_inf_nan=False)
    speed_m_s: float = Field(..., allow_inf_nan=False)
    acceleration_m_s2: float = Field(0.0, allow_inf_nan=False)
    length_m: float = Field(4.0, gt=0.0, allow_inf_nan=False)
    route_id: Optional[str] = None


class AssignmentModel(BaseModel):
    ego_id: str
    vehicle_id: str
    route_id: str


class _LoggingActuator:
    """Commands are only logged; HTTP callers read ``reaction_state``."""

    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id

    def slow_down(self, target_speed_m_s: float, interval_s: float) -> None:
        log.info("api_slow_down id=%s target=%.2f", self.vehicle_id, target_speed_m_s)

    def resume_speed(self) -> None:
        log.info("api_resume_speed id=%s", self.vehicle_id)


def create_app(policy: Optional[WarningPolicy] = None) -> FastAPI:
    """Build a fresh application with its own route store and services."""
    policy = policy or WarningPolicy()
    routes = RoutePolylineStore(policy.route_slots)
    scheduler = ThreadingScheduler()
    services: Dict[str, CollisionWarningService] = {}
    # sync endpoints run on the server's worker threads
    lock = threading.Lock()

    def service_for(ego_id: str) -> CollisionWarningService:
        service = services.get(ego_id)
        if service is None:
            service = CollisionWarningService(
                ego_id, routes, scheduler, _LoggingActuator(ego_id), policy,
            )
            services[ego_id] = service
        return service

    app = FastAPI(
        title="Collision Warning API",
        description="Forecasts safe-zone overlaps between connected vehicles.",
        version="1.0",
    )

    @app.post("/routes/{route_id}")
    def load_route(route_id: str, route: RouteModel):
        """Populate a route slot once; a second load is a conflict."""
        points = [Coordinate(w.latitude, w.longitude) for w in route.waypoints]
        with lock:
            if routes.is_loaded(route_id):
                raise HTTPException(status_code=409, detail=f"route {route_id} already loaded")
            loaded = routes.load(route_id, points)
        if not loaded:
            raise HTTPException(status_code=400, detail=f"route {route_id} rejected")
        return {"route_id": route_id, "waypoints": len(points)}

    @app.post("/kinematics")
    def record_kinematics(body: KinematicsModel):
        snapshot = KinematicSnapshot(
            vehicle_id=body.vehicle_id,
            latitude=body.latitude,
            longitude=body.longitude,
            heading_deg=body.heading_deg,
            speed_m_s=body.speed_m_s,
            acceleration_m_s2=body.acceleration_m_s2,
            length_m=body.length_m,
        )
        with lock:
            service = service_for(body.ego_id)
            if body.route_id is not None:
                service.assign_route(body.vehicle_id, body.route_id)
            if body.vehicle_id != body.ego_id:
                service.record_kinematics(snapshot)
                return {"recorded": body.vehicle_id}
            colliding = service.on_vehicle_updated(snapshot, body.route_id)
            return {
                "recorded": body.vehicle_id,
                "colliding": sorted(colliding),
                "reaction_state": service.reaction_state.value,
            }

    @app.post("/assignments")
    def assign_route(body: AssignmentModel):
        with lock:
            applied = service_for(body.ego_id).assign_route(body.vehicle_id, body.route_id)
        return {"vehicle_id": body.vehicle_id, "assigned": applied}

    @app.get("/predict/{ego_id}")
    def predict(ego_id: str):
        with lock:
            service = services.get(ego_id)
            if service is None:
                raise HTTPException(status_code=404, detail=f"unknown ego {ego_id}")
            colliding = service.predict()
            state = service.reaction_state
        return {
            "ego_id": ego_id,
            "colliding": sorted(colliding),
            "reaction_state": state.value,
        }

    return app


app = create_app()


# ── Standalone entry point ───────────────────────────────────────────────────

if __name__ == "__main__":
    print("Starting collision warning server on http://0.0.0.0:8000 …")
    uvicorn.run(app, host="0.0.0.0", port=8000)
