#!/usr/bin/env python3
"""
predictor/policy.py
===================
Tunable parameters for collision warning.  Every constant lives in the
frozen :class:`WarningPolicy` dataclass so that experiments can swap
policies without touching code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WarningPolicy:
    """Immutable bag of every tunable prediction parameter.

    Groups: local dynamic map, routes, forecasting, safe zone,
    reaction.
    """

    # ── Local dynamic map ─────────────────────────────────────────────────
    history_capacity: int = 3
    """Snapshots retained per vehicle; older ones are evicted first."""

    # ── Routes ────────────────────────────────────────────────────────────
    route_slots: int = 20
    """Number of route polyline slots available from startup."""

    # ── Forecasting ───────────────────────────────────────────────────────
    forecast_horizon_s: float = 0.3
    """Look-ahead time for the position forecast."""

    update_interval_ms: int = 10
    """Host simulation step; consecutive route waypoints are one step apart."""

    # ── Safe zone ─────────────────────────────────────────────────────────
    safe_zone_factor: float = 0.7
    """Footprint inflation: the zone edge is ``2 * length * factor`` metres."""

    # ── Reaction ──────────────────────────────────────────────────────────
    reaction_delay_s: float = 0.5
    """Driver reaction time between warning and braking."""

    slow_down_speed_m_s: float = 25.0 / 3.6
    """Target speed that prevents the forecasted collision."""

    slow_down_interval_s: float = 1.0
    """Time over which the actuator reaches the slow-down speed."""

    def __post_init__(self) -> None:
        if self.history_capacity < 1:
            raise ValueError("history_capacity must be >= 1")
        if self.update_interval_ms <= 0:
            raise ValueError("update_interval_ms must be > 0")
        if self.route_slots < 1:
            raise ValueError("route_slots must be >= 1")
