#!/usr/bin/env python3
"""
sim/world.py
============
Vehicles driving along route polylines.

The world stands in for the traffic simulator: every step each active
vehicle advances along its route by ``speed / nominal_speed`` waypoints
(routes hold one waypoint per step at nominal speed), its speed ramps
toward the commanded target, and physical contacts between vehicles are
counted.  :class:`VehicleActuator` is the command interface handed to the
collision warning core.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from predictor.geo import bearing_deg, great_circle_distance_m
from predictor.routes import RoutePolylineStore
from predictor.types import Coordinate, KinematicSnapshot
from sim.physics import ramp_speed

log = logging.getLogger("world")


@dataclass
class Vehicle:
    """A vehicle entity following one route.

    Attributes
    ----------
    id : str
        Unique identifier (e.g. ``veh_0``).
    route_id : str
        Slot id of the route polyline it follows.
    nominal_speed : float
        Speed the route was recorded at (m/s); normal cruising speed.
    spawn_step : int
        Step at which the vehicle enters the world.
    progress : float
        Fractional waypoint index along the route.
    speed, target_speed : float
        Current and commanded speed (m/s).
    speed_rate : float
        Magnitude of the current speed ramp (m/s²).
    """

    id: str
    route_id: str
    nominal_speed: float
    length_m: float = 4.0
    spawn_step: int = 0
    progress: float = 0.0
    speed: float = 0.0
    target_speed: float = 0.0
    speed_rate: float = 0.0
    acceleration: float = 0.0
    heading: float = 0.0
    position: Coordinate = Coordinate(0.0, 0.0)
    active: bool = field(default=False, repr=False)
    finished: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if self.speed <= 0.0:
            self.speed = self.nominal_speed
        if self.target_speed <= 0.0:
            self.target_speed = self.speed

    def snapshot(self) -> KinematicSnapshot:
        return KinematicSnapshot(
            vehicle_id=self.id,
            latitude=self.position.latitude,
            longitude=self.position.longitude,
            heading_deg=self.heading,
            speed_m_s=self.speed,
            acceleration_m_s2=self.acceleration,
            length_m=self.length_m,
        )


class VehicleActuator:
    """Speed commands for one vehicle of a :class:`World`."""

    def __init__(self, world: "World", vehicle_id: str) -> None:
        self._world = world
        self.vehicle_id = vehicle_id
        self.commands: List[Tuple[str, float]] = []

    def slow_down(self, target_speed_m_s: float, interval_s: float) -> None:
        """Reach *target_speed_m_s* linearly within *interval_s*."""
        car = self._world.vehicle(self.vehicle_id)
        car.target_speed = max(0.0, target_speed_m_s)
        car.speed_rate = abs(car.speed - car.target_speed) / max(interval_s, 1e-3)
        self.commands.append(("slow_down", target_speed_m_s))
        log.info("%s slow_down %.2f -> %.2f m/s over %.1fs",
                 self.vehicle_id, car.speed, car.target_speed, interval_s)

    def resume_speed(self) -> None:
        """Return to the nominal speed within ``World.resume_interval_s``."""
        car = self._world.vehicle(self.vehicle_id)
        car.target_speed = car.nominal_speed
        car.speed_rate = (abs(car.speed - car.target_speed)
                          / max(self._world.resume_interval_s, 1e-3))
        self.commands.append(("resume_speed", car.nominal_speed))
        log.info("%s resume_speed -> %.2f m/s", self.vehicle_id, car.nominal_speed)


class World:
    """Vehicles on route polylines, advanced in fixed steps.

    Parameters
    ----------
    routes : RoutePolylineStore
        Polylines the vehicles follow (shared with the predictors).
    vehicles : sequence of Vehicle
        Every vehicle of the scenario, active or not yet spawned.
    step_s : float
        Simulation step in seconds; must match the route sampling.
    resume_interval_s : float
        Time the actuator takes to return to nominal speed.
    """

    def __init__(
        self,
        routes: RoutePolylineStore,
        vehicles: Sequence[Vehicle],
        step_s: float = 0.01,
        resume_interval_s: float = 1.0,
    ) -> None:
        self.routes = routes
        self.step_s = step_s
        self.resume_interval_s = resume_interval_s
        self._vehicles: Dict[str, Vehicle] = {v.id: v for v in vehicles}
        self.step_count = 0
        self.collisions = 0
        self._contacts: Set[Tuple[str, str]] = set()
        for car in self._vehicles.values():
            if not self.routes.is_loaded(car.route_id):
                raise ValueError(f"{car.id}: route {car.route_id} is not loaded")

    # ── queries ───────────────────────────────────────────────────────────

    def vehicle(self, vehicle_id: str) -> Vehicle:
        return self._vehicles[vehicle_id]

    def all_vehicles(self) -> List[Vehicle]:
        return list(self._vehicles.values())

    def active_vehicles(self) -> List[Vehicle]:
        return [v for v in self._vehicles.values() if v.active]

    def is_finished(self) -> bool:
        return all(v.finished for v in self._vehicles.values())

    def actuator(self, vehicle_id: str) -> VehicleActuator:
        return VehicleActuator(self, vehicle_id)

    # ── stepping ──────────────────────────────────────────────────────────

    def step(self) -> List[Vehicle]:
        """Advance one step; returns vehicles that finished this step."""
        finished: List[Vehicle] = []
        for car in self._vehicles.values():
            if car.finished:
                continue
            if not car.active:
                if self.step_count >= car.spawn_step:
                    car.active = True
                    self._place(car)
                    log.debug("%s spawned on route %s", car.id, car.route_id)
                continue
            if self._advance(car):
                finished.append(car)
        self.step_count += 1
        self._count_contacts()
        return finished

    def _advance(self, car: Vehicle) -> bool:
        previous = car.speed
        car.speed = ramp_speed(car.speed, car.target_speed, car.speed_rate, self.step_s)
        car.acceleration = (car.speed - previous) / self.step_s
        car.progress += car.speed / car.nominal_speed
        if car.progress >= self.routes.length(car.route_id) - 1:
            car.active = False
            car.finished = True
            log.debug("%s finished route %s", car.id, car.route_id)
            return True
        self._place(car)
        return False

    def _place(self, car: Vehicle) -> None:
        """Interpolate position and segment heading from ``car.progress``."""
        index = int(math.floor(car.progress))
        frac = car.progress - index
        a = self.routes.waypoint(car.route_id, index)
        b = self.routes.waypoint(car.route_id, index + 1)
        if a is None or b is None:
            return
        car.position = Coordinate(
            a.latitude + (b.latitude - a.latitude) * frac,
            a.longitude + (b.longitude - a.longitude) * frac,
        )
        car.heading = bearing_deg(a, b)

    def _count_contacts(self) -> None:
        active = self.active_vehicles()
        current: Set[Tuple[str, str]] = set()
        for i, a in enumerate(active):
            for b in active[i + 1:]:
                gap = great_circle_distance_m(a.position, b.position)
                if gap < (a.length_m + b.length_m) / 2.0:
                    current.add((a.id, b.id))
        for pair in current - self._contacts:
            self.collisions += 1
            log.warning("collision %s <-> %s at step %d", pair[0], pair[1], self.step_count)
        self._contacts = current


def default_vehicles(
    nominal_speed_m_s: float,
    seed: Optional[int] = None,
) -> List[Vehicle]:
    """Crossroads scenario: two crossing vehicles on a conflict course,
    plus oncoming and turning traffic with jittered spawn steps."""
    rng = random.Random(seed)
    return [
        Vehicle(id="veh_0", route_id="0", nominal_speed=nominal_speed_m_s, spawn_step=0),
        Vehicle(id="veh_1", route_id="1", nominal_speed=nominal_speed_m_s, spawn_step=0),
        Vehicle(id="veh_2", route_id="2", nominal_speed=nominal_speed_m_s,
                spawn_step=150 + rng.randint(0, 50)),
        Vehicle(id="veh_3", route_id="5", nominal_speed=nominal_speed_m_s,
                spawn_step=300 + rng.randint(0, 50)),
    ]
