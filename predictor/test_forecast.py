#!/usr/bin/env python3
"""
Tests for route-index localization and braking-adjusted forecasting.
"""

from __future__ import annotations

import unittest
from typing import Sequence, Tuple

from predictor.errors import ForecastOutOfRange, NotTracked, RouteExhausted, RouteUnresolved
from predictor.forecast import PositionForecaster
from predictor.geo import offset
from predictor.history import VehicleHistoryStore
from predictor.routes import RouteAssignmentRegistry, RoutePolylineStore
from predictor.types import Coordinate, KinematicSnapshot

ORIGIN = Coordinate(52.5, 13.2)
SPACING_M = 50.0 / 3.6 * 0.01   # one 10 ms step at 50 km/h
NOMINAL_SPEED = SPACING_M / 0.01


class ForecastTestBase(unittest.TestCase):
    def setUp(self) -> None:
        self.history = VehicleHistoryStore()
        self.assignments = RouteAssignmentRegistry()
        self.routes = RoutePolylineStore()
        self.forecaster = PositionForecaster(
            self.history, self.assignments, self.routes, update_interval_ms=10,
        )

    def load(self, route_id: str, points: Sequence[Tuple[float, float]]) -> None:
        self.routes.load(route_id, [Coordinate(lat, lon) for lat, lon in points])

    def place(self, vehicle_id: str, route_id: str, lat: float, lon: float,
              heading: float, speed: float = 10.0) -> None:
        self.assignments.assign(vehicle_id, route_id)
        self.history.record(vehicle_id, KinematicSnapshot(vehicle_id, lat, lon, heading, speed))


class LocateRouteIndexTests(ForecastTestBase):
    def test_bracket_between_first_two_waypoints(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.0, 0.5, heading=45.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 1)

    def test_second_segment(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.0, 1.5, heading=45.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 2)

    def test_south_west_quadrant(self) -> None:
        self.load("0", [(1.0, 1.0), (0.5, 0.5), (0.0, 0.0)])
        self.place("veh", "0", 0.7, 0.7, heading=225.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 1)

    def test_south_east_quadrant(self) -> None:
        self.load("0", [(1.0, 0.0), (0.5, 0.5), (0.0, 1.0)])
        self.place("veh", "0", 0.4, 0.6, heading=135.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 2)

    def test_north_west_quadrant(self) -> None:
        self.load("0", [(0.0, 1.0), (0.5, 0.5), (1.0, 0.0)])
        self.place("veh", "0", 0.2, 0.8, heading=300.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 1)

    def test_heading_against_route_direction_finds_nothing(self) -> None:
        self.load("0", [(1.0, 1.0), (0.5, 0.5), (0.0, 0.0)])
        self.place("veh", "0", 0.7, 0.7, heading=45.0)
        self.assertIsNone(self.forecaster.locate_route_index("veh"))

    def test_heading_is_normalised(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.0, 0.5, heading=405.0)
        self.assertEqual(self.forecaster.locate_route_index("veh"), 1)

    def test_off_route_position_finds_nothing(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.1, 0.5, heading=45.0)
        self.assertIsNone(self.forecaster.locate_route_index("veh"))

    def test_untracked_vehicle_raises(self) -> None:
        self.load("0", [(0, 0), (0, 1)])
        self.assignments.assign("veh", "0")
        with self.assertRaises(NotTracked):
            self.forecaster.locate_route_index("veh")

    def test_unloaded_route_raises(self) -> None:
        self.place("veh", "4", 0.0, 0.5, heading=45.0)
        with self.assertRaises(RouteUnresolved):
            self.forecaster.locate_route_index("veh")


class ForecastTests(ForecastTestBase):
    def _load_eastbound(self, count: int = 200) -> None:
        self.routes.load("0", [offset(ORIGIN, 0.0, i * SPACING_M) for i in range(count)])

    def _place_between(self, index: float, speed: float) -> None:
        position = offset(ORIGIN, 0.0, index * SPACING_M)
        self.place("veh", "0", position.latitude, position.longitude, 90.0, speed)

    def test_nominal_speed_advances_horizon_in_steps(self) -> None:
        self._load_eastbound()
        self._place_between(10.5, NOMINAL_SPEED)

        point = self.forecaster.forecast("veh", 0.3)

        # located at segment 11, 0.3 s = 30 steps of 10 ms
        self.assertEqual(point, self.routes.waypoint("0", 41))

    def test_braking_vehicle_advances_fewer_steps(self) -> None:
        self._load_eastbound()
        self._place_between(10.5, NOMINAL_SPEED / 2.0)

        point = self.forecaster.forecast("veh", 0.3)

        self.assertEqual(point, self.routes.waypoint("0", 26))

    def test_zero_segment_length_uses_factor_one(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 1), (0, 1), (0, 1)])
        self.place("veh", "0", 0.0, 0.5, heading=45.0, speed=30.0)

        self.assertEqual(self.forecaster.braking_factor("veh", 1), 1.0)
        # 0.02 s horizon = 2 steps from index 1
        self.assertEqual(self.forecaster.forecast("veh", 0.02), Coordinate(0.0, 1.0))

    def test_unlocatable_vehicle_fails_with_route_unresolved(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.5, 0.5, heading=45.0)
        with self.assertRaises(RouteUnresolved):
            self.forecaster.forecast("veh", 0.3)

    def test_last_segment_fails_with_route_exhausted(self) -> None:
        self.load("0", [(0, 0), (0, 1), (0, 2)])
        self.place("veh", "0", 0.0, 1.5, heading=45.0)
        with self.assertRaises(RouteExhausted):
            self.forecaster.forecast("veh", 0.3)

    def test_forecast_past_route_end_fails_with_out_of_range(self) -> None:
        self._load_eastbound(count=30)
        self._place_between(10.5, NOMINAL_SPEED)
        with self.assertRaises(ForecastOutOfRange):
            self.forecaster.forecast("veh", 0.3)

    def test_non_finite_speed_fails_with_out_of_range(self) -> None:
        self._load_eastbound()
        for speed in (float("inf"), float("nan")):
            with self.subTest(speed=speed):
                self._place_between(10.5, speed)
                with self.assertRaises(ForecastOutOfRange):
                    self.forecaster.forecast("veh", 0.3)

    def test_unassigned_vehicle_fails_with_route_unresolved(self) -> None:
        self._load_eastbound()
        self.history.record("veh", KinematicSnapshot("veh", ORIGIN.latitude, ORIGIN.longitude, 90.0, 5.0))
        with self.assertRaises(RouteUnresolved):
            self.forecaster.forecast("veh", 0.3)


if __name__ == "__main__":
    unittest.main()
