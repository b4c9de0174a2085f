#!/usr/bin/env python3
"""
main.py
=======
Runs the crossroads scenario with collision warning on every vehicle
and logs the run metrics.

Environment overrides::

    CWA_STEPS        maximum simulation steps          (default 2000)
    CWA_ROUTE_DIR    directory with Route<i>.json files (default: generated)
    CWA_RECORD_DIR   write every vehicle's driven route here after the run
    CWA_DROP_RATE    CAM drop probability              (default 0.0)
    CWA_SEED         scenario / bus seed               (default 7)
    CWA_LOG_LEVEL    DEBUG | INFO | WARNING            (default INFO)
"""

import os
import logging

import config
from logging_setup import setup_logging
from predictor.policy import WarningPolicy
from predictor.route_db import load_route_directory
from predictor.routes import RoutePolylineStore
from sim.network import default_routes
from sim.physics import kmh_to_mps
from sim.sim_bridge import SimBridge
from sim.world import default_vehicles


def build_route_store(route_dir: str, nominal_speed: float, step_s: float) -> RoutePolylineStore:
    """Load routes from *route_dir*, or generate the crossroads set."""
    log = logging.getLogger("main")
    store = RoutePolylineStore(config.ROUTE_SLOTS)
    if route_dir and load_route_directory(store, route_dir):
        return store
    if route_dir:
        log.warning("No routes loaded from %s, using generated crossroads", route_dir)
    for route in default_routes(nominal_speed, step_s, config.DEFAULT_ARM_LENGTH_M):
        store.load(route.route_id, route.waypoints)
    return store


def main():
    level_name = os.environ.get("CWA_LOG_LEVEL", "INFO").upper()
    setup_logging(getattr(logging, level_name, logging.INFO))
    log = logging.getLogger("main")

    max_steps = int(os.environ.get("CWA_STEPS", config.DEFAULT_MAX_STEPS))
    route_dir = os.environ.get("CWA_ROUTE_DIR", config.ROUTE_DIR)
    record_dir = os.environ.get("CWA_RECORD_DIR", "")
    drop_rate = float(os.environ.get("CWA_DROP_RATE", config.DEFAULT_DROP_RATE))
    seed = int(os.environ.get("CWA_SEED", config.DEFAULT_SEED))

    policy = WarningPolicy(
        forecast_horizon_s=config.DEFAULT_FORECAST_HORIZON_S,
        update_interval_ms=config.DEFAULT_STEP_MS,
        reaction_delay_s=config.DEFAULT_REACTION_DELAY_S,
        slow_down_speed_m_s=kmh_to_mps(config.DEFAULT_SLOW_DOWN_SPEED_KMH),
        route_slots=config.ROUTE_SLOTS,
    )
    nominal_speed = kmh_to_mps(config.DEFAULT_NOMINAL_SPEED_KMH)
    step_s = policy.update_interval_ms / 1000.0

    routes = build_route_store(route_dir, nominal_speed, step_s)
    log.info("Routes loaded: %s", ", ".join(routes.loaded_ids()))

    bridge = SimBridge(
        routes,
        default_vehicles(nominal_speed, seed=seed),
        policy=policy,
        cam_frequency_hz=config.DEFAULT_CAM_FREQUENCY_HZ,
        radio_range_m=config.DEFAULT_RADIO_RANGE_M,
        drop_rate=drop_rate,
        corruption_rate=config.DEFAULT_CORRUPTION_RATE,
        seed=seed,
    )
    if record_dir:
        for car in bridge.world.all_vehicles():
            bridge.record_route_of(car.id)

    log.info("Starting simulation (max %d steps)...", max_steps)
    try:
        bridge.run(max_steps)
    except KeyboardInterrupt:
        log.info("Shutting down...")

    if record_dir:
        bridge.write_routes(record_dir)
    log.info("Run metrics: %s", bridge.metrics())


if __name__ == "__main__":
    main()
