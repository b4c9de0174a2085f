#!/usr/bin/env python3
"""
sim/physics.py
==============
Low-level physics helpers used by :mod:`sim.world` and :mod:`main`.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations


def kmh_to_mps(speed_kmh: float) -> float:
    """Convert km/h to m/s, clamping negatives to zero."""
    return max(0.0, float(speed_kmh)) / 3.6


def ramp_speed(speed_mps: float, target_mps: float, rate_mps2: float, dt: float) -> float:
    """Move *speed_mps* toward *target_mps* by at most ``rate_mps2 * dt``."""
    step = max(0.0, rate_mps2) * dt
    if speed_mps < target_mps:
        return min(target_mps, speed_mps + step)
    return max(target_mps, speed_mps - step)
