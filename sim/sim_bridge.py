"""
sim/sim_bridge.py
=================
Orchestrator tying :mod:`sim.world`, the V2X bus and one
:class:`~predictor.service.CollisionWarningService` per vehicle together.

Each step (``step_s``, 10 ms by default):

1. due scheduler events run (reaction-delay timers);
2. the world advances every vehicle;
3. every CAM interval each active vehicle publishes a CAM;
4. the bus is polled once and every CAM is handed to each other active
   vehicle within radio range;
5. every active vehicle runs its own collision warning tick.

:meth:`run` drives the loop synchronously for tests and batch runs;
:meth:`start` / :meth:`stop` run it on a background thread, paced to
wall-clock time, for interactive hosts.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Any, Dict, List, Optional, Sequence

from bus.v2x_bus import V2XBus
from predictor.beacon import CAM_TOPIC, encode_cam
from predictor.geo import great_circle_distance_m
from predictor.policy import WarningPolicy
from predictor.route_db import RouteRecorder
from predictor.routes import RoutePolylineStore
from predictor.service import CollisionWarningService
from sim.scheduler import EventScheduler
from sim.world import Vehicle, VehicleActuator, World

log = logging.getLogger("sim_bridge")


class SimBridge:
    """Step-driven host for per-vehicle collision warning.

    Parameters
    ----------
    routes : RoutePolylineStore
        Loaded route polylines, shared by the world and every service.
    vehicles : sequence of Vehicle
        Scenario vehicles.
    policy : WarningPolicy or None
        Tunable constants; ``update_interval_ms`` sets the step.
    cam_frequency_hz : float
        CAM broadcast rate per vehicle.
    radio_range_m : float
        Maximum sender → receiver distance for CAM delivery.
    drop_rate, corruption_rate : float
        Bus fault injection probabilities (0.0–1.0).
    seed : int or None
        Seed for bus fault injection.
    """

    def __init__(
        self,
        routes: RoutePolylineStore,
        vehicles: Sequence[Vehicle],
        policy: Optional[WarningPolicy] = None,
        cam_frequency_hz: float = 10.0,
        radio_range_m: float = 500.0,
        drop_rate: float = 0.0,
        corruption_rate: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        self.policy = policy or WarningPolicy()
        self.step_s = self.policy.update_interval_ms / 1000.0
        self.routes = routes
        self.radio_range_m = radio_range_m
        self._cam_every = max(1, int(round(1.0 / (cam_frequency_hz * self.step_s))))

        self.world = World(routes, vehicles, step_s=self.step_s,
                           resume_interval_s=self.policy.slow_down_interval_s)
        self.scheduler = EventScheduler()
        self.bus = V2XBus(drop_rate=drop_rate, corruption_rate=corruption_rate, seed=seed)

        self.actuators: Dict[str, VehicleActuator] = {}
        self.services: Dict[str, CollisionWarningService] = {}
        for car in self.world.all_vehicles():
            actuator = self.world.actuator(car.id)
            self.actuators[car.id] = actuator
            self.services[car.id] = CollisionWarningService(
                car.id, routes, self.scheduler, actuator, self.policy,
            )
        self._recorders: Dict[str, RouteRecorder] = {}

        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._predictions: Dict[str, List[str]] = {}

    @property
    def now(self) -> float:
        return self.scheduler.now

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Spawn the background simulation thread."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(
            target=self._loop, daemon=True, name="SimBridge"
        )
        self._thread.start()
        log.info("SimBridge started, step %.0f ms", self.step_s * 1000)

    def stop(self) -> None:
        """Signal the thread to stop and wait for it to join."""
        self._running = False
        if self._thread:
            self._thread.join(timeout=2.0)
        log.info("SimBridge stopped")

    def _loop(self) -> None:
        while self._running and not self.world.is_finished():
            t0 = time.perf_counter()
            try:
                self.step()
            except Exception:
                log.exception("SimBridge tick error")
            time.sleep(max(0.0, self.step_s - (time.perf_counter() - t0)))
        self._running = False

    def run(self, max_steps: int) -> int:
        """Run up to *max_steps* steps synchronously; returns steps run."""
        steps = 0
        while steps < max_steps and not self.world.is_finished():
            self.step()
            steps += 1
        return steps

    # ── Route recording ───────────────────────────────────────────────────────

    def record_route_of(self, vehicle_id: str) -> RouteRecorder:
        """Record *vehicle_id*'s positions every step (see :meth:`write_routes`)."""
        car = self.world.vehicle(vehicle_id)
        recorder = self._recorders.setdefault(vehicle_id, RouteRecorder(car.route_id))
        return recorder

    def write_routes(self, directory: str) -> List[str]:
        return [recorder.write(directory) for recorder in self._recorders.values()]

    # ── tick ──────────────────────────────────────────────────────────────────

    def step(self) -> None:
        step_index = self.world.step_count
        self.scheduler.run_until(step_index * self.step_s)

        for car in self.world.step():
            self.services[car.id].shutdown()

        active = self.world.active_vehicles()
        if step_index % self._cam_every == 0:
            for car in active:
                self.bus.publish(
                    topic=CAM_TOPIC,
                    sender=car.id,
                    payload=encode_cam(car.snapshot(), car.route_id),
                    ts=self.now,
                )
        self._deliver_cams(active)

        predictions: Dict[str, List[str]] = {}
        for car in active:
            recorder = self._recorders.get(car.id)
            if recorder is not None:
                recorder.add(car.position)
            colliding = self.services[car.id].on_vehicle_updated(car.snapshot(), car.route_id)
            if colliding:
                predictions[car.id] = sorted(colliding)

        with self._lock:
            self._predictions = predictions

    def _deliver_cams(self, receivers: Sequence[Vehicle]) -> None:
        for msg in self.bus.poll(CAM_TOPIC):
            try:
                sender = self.world.vehicle(msg.sender)
            except KeyError:
                log.warning("cam_from_unknown_sender sender=%s", msg.sender)
                continue
            delivered = 0
            for car in receivers:
                if car.id == msg.sender:
                    continue
                if great_circle_distance_m(sender.position, car.position) > self.radio_range_m:
                    continue
                self.services[car.id].on_beacon(msg)
                delivered += 1
            self.bus.record_delivery(delivered)

    # ── Reporting ─────────────────────────────────────────────────────────────

    def get_predictions(self) -> Dict[str, List[str]]:
        """Latest non-empty predictions keyed by ego id."""
        with self._lock:
            return {vid: list(ids) for vid, ids in self._predictions.items()}

    def metrics(self) -> Dict[str, Any]:
        min_ttc = min((s.min_ttc_s for s in self.services.values()), default=math.inf)
        return {
            "steps": self.world.step_count,
            "sim_time_s": round(self.world.step_count * self.step_s, 3),
            "collisions": self.world.collisions,
            "warnings": sum(s.warnings_issued for s in self.services.values()),
            "brake_commands": sum(
                1 for a in self.actuators.values() for cmd, _ in a.commands if cmd == "slow_down"
            ),
            "beacons_rejected": sum(s.beacons_rejected for s in self.services.values()),
            "min_ttc_s": None if math.isinf(min_ttc) else round(min_ttc, 3),
            "bus": self.bus.metrics.report(),
        }
