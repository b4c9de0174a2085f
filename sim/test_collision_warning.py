#!/usr/bin/env python3
"""
Tests for the simulation host: event scheduling, vehicle movement and the
end-to-end crossroads scenario.
"""

from __future__ import annotations

import time
import unittest

from predictor.policy import WarningPolicy
from predictor.routes import RoutePolylineStore
from sim.network import default_routes, resample
from sim.physics import kmh_to_mps, ramp_speed
from sim.scheduler import EventScheduler
from sim.sim_bridge import SimBridge
from sim.world import Vehicle, World

NOMINAL_SPEED = kmh_to_mps(50.0)


def _route_store(arm_m: float = 40.0) -> RoutePolylineStore:
    store = RoutePolylineStore()
    for route in default_routes(NOMINAL_SPEED, 0.01, arm_m):
        store.load(route.route_id, route.waypoints)
    return store


class EventSchedulerTests(unittest.TestCase):
    def test_runs_due_callbacks_in_order(self) -> None:
        scheduler = EventScheduler()
        order = []
        scheduler.schedule(0.3, lambda: order.append("late"))
        scheduler.schedule(0.1, lambda: order.append("early"))
        scheduler.schedule(0.1, lambda: order.append("early-2"))

        self.assertEqual(scheduler.run_until(0.2), 2)
        self.assertEqual(order, ["early", "early-2"])
        self.assertEqual(scheduler.run_until(0.3), 1)
        self.assertEqual(order[-1], "late")
        self.assertEqual(scheduler.now, 0.3)

    def test_cancelled_event_never_runs(self) -> None:
        scheduler = EventScheduler()
        fired = []
        handle = scheduler.schedule(0.1, lambda: fired.append(1))
        handle.cancel()

        self.assertEqual(scheduler.pending(), 0)
        self.assertEqual(scheduler.run_until(1.0), 0)
        self.assertEqual(fired, [])

    def test_delay_counts_from_current_time(self) -> None:
        scheduler = EventScheduler()
        scheduler.run_until(1.0)
        fired = []
        scheduler.schedule(0.5, lambda: fired.append(scheduler.now))
        scheduler.run_until(1.4)
        self.assertEqual(fired, [])
        scheduler.run_until(2.0)
        self.assertEqual(fired, [1.5])


class NetworkTests(unittest.TestCase):
    def test_resample_spacing(self) -> None:
        path = resample([(0.0, 0.0), (10.0, 0.0)], 2.5)
        self.assertEqual(path.shape, (5, 2))
        self.assertAlmostEqual(float(path[-1, 0]), 10.0)

    def test_default_routes_are_sampled_one_step_apart(self) -> None:
        routes = default_routes(NOMINAL_SPEED, 0.01, arm_m=40.0)
        self.assertEqual([r.route_id for r in routes], [str(i) for i in range(8)])
        self.assertEqual(routes[0].name, "W-E")
        # 80 m straight at 50 km/h and 10 ms
        self.assertEqual(len(routes[0].waypoints), 577)

    def test_ramp_speed_clamps_at_target(self) -> None:
        self.assertEqual(ramp_speed(10.0, 5.0, 100.0, 0.01), 9.0)
        self.assertEqual(ramp_speed(5.5, 5.0, 100.0, 0.01), 5.0)
        self.assertEqual(ramp_speed(5.0, 10.0, 100.0, 0.01), 6.0)


class WorldTests(unittest.TestCase):
    def test_vehicle_advances_one_waypoint_per_step_at_nominal_speed(self) -> None:
        routes = _route_store()
        world = World(routes, [Vehicle("veh_0", "0", NOMINAL_SPEED)])

        world.step()
        self.assertEqual(world.vehicle("veh_0").position, routes.waypoint("0", 0))
        world.step()
        car = world.vehicle("veh_0")
        self.assertEqual(car.position, routes.waypoint("0", 1))
        self.assertAlmostEqual(car.heading, 90.0)

    def test_vehicle_finishes_at_route_end(self) -> None:
        routes = _route_store()
        world = World(routes, [Vehicle("veh_0", "1", NOMINAL_SPEED)])
        steps = 0
        while not world.is_finished() and steps < 1000:
            world.step()
            steps += 1
        self.assertTrue(world.is_finished())
        self.assertEqual(steps, routes.length("1"))

    def test_late_spawn(self) -> None:
        world = World(_route_store(), [Vehicle("veh_0", "0", NOMINAL_SPEED, spawn_step=5)])
        for _ in range(5):
            world.step()
        self.assertEqual(world.active_vehicles(), [])
        world.step()
        self.assertEqual(len(world.active_vehicles()), 1)

    def test_slow_down_ramps_speed(self) -> None:
        world = World(_route_store(), [Vehicle("veh_0", "0", NOMINAL_SPEED)])
        actuator = world.actuator("veh_0")
        world.step()
        actuator.slow_down(NOMINAL_SPEED / 2.0, 0.1)
        for _ in range(12):
            world.step()

        car = world.vehicle("veh_0")
        self.assertAlmostEqual(car.speed, NOMINAL_SPEED / 2.0)
        self.assertEqual(actuator.commands, [("slow_down", NOMINAL_SPEED / 2.0)])

        actuator.resume_speed()
        for _ in range(110):
            world.step()
        self.assertAlmostEqual(car.speed, NOMINAL_SPEED)

    def test_contact_is_counted_once(self) -> None:
        world = World(_route_store(), [
            Vehicle("veh_0", "0", NOMINAL_SPEED),
            Vehicle("veh_1", "0", NOMINAL_SPEED),
        ])
        for _ in range(10):
            world.step()
        self.assertEqual(world.collisions, 1)

    def test_unloaded_route_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            World(_route_store(), [Vehicle("veh_0", "12", NOMINAL_SPEED)])


class CrossroadsScenarioTests(unittest.TestCase):
    def _bridge(self, **kwargs) -> SimBridge:
        vehicles = [
            Vehicle("veh_0", "0", NOMINAL_SPEED),
            Vehicle("veh_1", "1", NOMINAL_SPEED),
        ]
        return SimBridge(
            _route_store(), vehicles, policy=WarningPolicy(reaction_delay_s=0.1),
            seed=3, **kwargs,
        )

    def test_crossing_vehicles_are_warned_and_brake(self) -> None:
        bridge = self._bridge()
        bridge.run(3000)

        metrics = bridge.metrics()
        self.assertTrue(bridge.world.is_finished())
        self.assertGreater(metrics["warnings"], 0)
        self.assertGreater(metrics["bus"]["published"], 0)
        self.assertGreater(metrics["bus"]["delivered"], 0)
        self.assertIsNotNone(metrics["min_ttc_s"])
        self.assertGreater(metrics["brake_commands"], 0)
        for service in bridge.services.values():
            self.assertFalse(service.reaction.timer_pending)

    def test_background_thread_publishes_predictions(self) -> None:
        bridge = self._bridge()
        bridge.start()
        seen = {}
        try:
            deadline = time.monotonic() + 15.0
            while not seen and time.monotonic() < deadline:
                seen = bridge.get_predictions()
                time.sleep(0.01)
        finally:
            bridge.stop()

        self.assertFalse(bridge._thread.is_alive())
        self.assertGreater(bridge.world.step_count, 0)
        self.assertTrue(
            seen.get("veh_0") == ["veh_1"] or seen.get("veh_1") == ["veh_0"], seen,
        )
        self.assertGreater(bridge.metrics()["warnings"], 0)

    def test_cam_rate(self) -> None:
        bridge = self._bridge()
        bridge.run(100)
        # both vehicles, every 10th step
        self.assertEqual(bridge.bus.metrics.published, 20)

    def test_corrupted_cams_are_rejected(self) -> None:
        bridge = self._bridge(corruption_rate=1.0)
        bridge.run(50)

        metrics = bridge.metrics()
        self.assertEqual(metrics["warnings"], 0)
        self.assertGreater(metrics["beacons_rejected"], 0)
        self.assertEqual(bridge.services["veh_0"].assignments.route_of("veh_1"), None)

    def test_out_of_range_cams_are_not_delivered(self) -> None:
        bridge = self._bridge(radio_range_m=1.0)
        bridge.run(50)
        self.assertEqual(bridge.bus.metrics.delivered, 0)
        self.assertGreater(bridge.bus.metrics.published, 0)


if __name__ == "__main__":
    unittest.main()
