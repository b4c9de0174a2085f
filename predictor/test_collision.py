#!/usr/bin/env python3
"""
Tests for safe zones and the pairwise collision prediction.
"""

from __future__ import annotations

import math
import unittest

from predictor.collision import CollisionPredictor, safe_zone, zones_overlap
from predictor.forecast import PositionForecaster
from predictor.geo import offset
from predictor.history import VehicleHistoryStore
from predictor.routes import RouteAssignmentRegistry, RoutePolylineStore
from predictor.types import Coordinate, KinematicSnapshot, SafeZone

ORIGIN = Coordinate(52.5, 13.2)
SPACING_M = 50.0 / 3.6 * 0.01
NOMINAL_SPEED = SPACING_M / 0.01


class SafeZoneTests(unittest.TestCase):
    def test_extents_for_four_metre_vehicle(self) -> None:
        zone = safe_zone(4.0, Coordinate(52.5, 13.2))

        expected_lon = 2 * 4 * 0.7 / 111120 / math.cos(math.radians(52.5))
        expected_lat = 2 * 4 * 0.7 / 111120
        self.assertAlmostEqual(zone.delta_lon, expected_lon, places=12)
        self.assertAlmostEqual(zone.delta_lat, expected_lat, places=12)
        self.assertEqual(zone.south_west, Coordinate(52.5, 13.2))

    def test_zone_extends_north_east_only(self) -> None:
        zone = safe_zone(4.0, ORIGIN)
        self.assertGreater(zone.north_east.latitude, ORIGIN.latitude)
        self.assertGreater(zone.north_east.longitude, ORIGIN.longitude)


class ZonesOverlapTests(unittest.TestCase):
    def _zone(self, lat: float, lon: float, size: float = 1.0) -> SafeZone:
        return SafeZone(Coordinate(lat, lon), Coordinate(lat + size, lon + size))

    def test_identical_zones_overlap(self) -> None:
        self.assertTrue(zones_overlap(self._zone(0, 0), self._zone(0, 0)))

    def test_partial_overlap(self) -> None:
        self.assertTrue(zones_overlap(self._zone(0, 0), self._zone(0.5, 0.5)))

    def test_contained_zone_overlaps_both_ways(self) -> None:
        outer, inner = self._zone(0, 0, 3.0), self._zone(1, 1, 0.5)
        self.assertTrue(zones_overlap(outer, inner))
        self.assertTrue(zones_overlap(inner, outer))

    def test_touching_edges_count(self) -> None:
        self.assertTrue(zones_overlap(self._zone(0, 0), self._zone(1.0, 0.0)))

    def test_disjoint_zones(self) -> None:
        self.assertFalse(zones_overlap(self._zone(0, 0), self._zone(2.0, 2.0)))

    def test_cross_shaped_overlap_without_contained_corner_is_missed(self) -> None:
        # the corner test is coarser than a full intersection test
        wide = SafeZone(Coordinate(1.0, 0.0), Coordinate(2.0, 3.0))
        tall = SafeZone(Coordinate(0.0, 1.0), Coordinate(3.0, 2.0))
        self.assertFalse(zones_overlap(wide, tall))


class CollisionPredictorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.history = VehicleHistoryStore()
        self.assignments = RouteAssignmentRegistry()
        self.routes = RoutePolylineStore()
        self.routes.load("0", [offset(ORIGIN, 0.0, i * SPACING_M) for i in range(200)])
        far = offset(ORIGIN, 10_000.0, 0.0)
        self.routes.load("1", [offset(far, 0.0, i * SPACING_M) for i in range(200)])
        forecaster = PositionForecaster(self.history, self.assignments, self.routes)
        self.predictor = CollisionPredictor(self.history, self.assignments, forecaster)

    def _place(self, vehicle_id: str, route_id: str, base: Coordinate, index: float) -> None:
        position = offset(base, 0.0, index * SPACING_M)
        self.assignments.assign(vehicle_id, route_id)
        self.history.record(vehicle_id, KinematicSnapshot(
            vehicle_id, position.latitude, position.longitude, 90.0, NOMINAL_SPEED, 0.0, 4.0,
        ))

    def test_identical_zones_collide_both_ways(self) -> None:
        self._place("a", "0", ORIGIN, 10.5)
        self._place("b", "0", ORIGIN, 10.5)

        self.assertEqual(self.predictor.predict("a", 0.3), {"b"})
        self.assertEqual(self.predictor.predict("b", 0.3), {"a"})

    def test_vehicles_far_apart_never_collide(self) -> None:
        self._place("a", "0", ORIGIN, 10.5)
        self._place("b", "1", offset(ORIGIN, 10_000.0, 0.0), 10.5)

        self.assertEqual(self.predictor.predict("a", 0.3), set())
        self.assertEqual(self.predictor.predict("b", 0.3), set())

    def test_same_route_far_behind_does_not_collide(self) -> None:
        self._place("a", "0", ORIGIN, 10.5)
        self._place("b", "0", ORIGIN, 150.5)
        self.assertEqual(self.predictor.predict("a", 0.1), set())

    def test_unassigned_ego_is_assigned_and_predicts_nothing(self) -> None:
        self._place("b", "0", ORIGIN, 10.5)
        position = offset(ORIGIN, 0.0, 10.5 * SPACING_M)
        self.history.record("a", KinematicSnapshot(
            "a", position.latitude, position.longitude, 90.0, NOMINAL_SPEED,
        ))

        self.assertEqual(self.predictor.predict("a", 0.3, observed_route_id="0"), set())
        self.assertEqual(self.assignments.route_of("a"), "0")
        self.assertEqual(self.predictor.predict("a", 0.3), {"b"})

    def test_ego_forecast_failure_yields_empty_result(self) -> None:
        self._place("b", "0", ORIGIN, 10.5)
        self.assignments.assign("a", "0")  # assigned but never observed
        self.assertEqual(self.predictor.predict("a", 0.3), set())

    def test_unresolvable_other_vehicle_is_skipped(self) -> None:
        self._place("a", "0", ORIGIN, 10.5)
        self._place("b", "0", ORIGIN, 10.5)
        self.assignments.assign("c", "9")   # route never loaded
        self.assignments.assign("d", "0")   # never observed

        self.assertEqual(self.predictor.predict("a", 0.3), {"b"})

    def test_vehicle_with_infinite_speed_is_skipped(self) -> None:
        self._place("a", "0", ORIGIN, 10.5)
        self._place("b", "0", ORIGIN, 10.5)
        position = offset(ORIGIN, 0.0, 10.5 * SPACING_M)
        self.assignments.assign("c", "0")
        self.history.record("c", KinematicSnapshot(
            "c", position.latitude, position.longitude, 90.0, math.inf,
        ))

        self.assertEqual(self.predictor.predict("a", 0.3), {"b"})
        self.assertEqual(self.predictor.predict("c", 0.3), set())


if __name__ == "__main__":
    unittest.main()
