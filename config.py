#!/usr/bin/env python3
"""
config.py
=========
Application-wide configuration constants.

Values can be overridden via environment variables (see :mod:`main`).
This module is a thin, import-safe leaf — it never imports from
other project packages.
"""

# ── Simulation defaults ──────────────────────────────────────────────────────
DEFAULT_STEP_MS: int = 10
DEFAULT_MAX_STEPS: int = 2000
DEFAULT_NOMINAL_SPEED_KMH: float = 50.0
DEFAULT_ARM_LENGTH_M: float = 60.0
DEFAULT_SEED: int = 7

# ── Collision warning defaults ───────────────────────────────────────────────
DEFAULT_FORECAST_HORIZON_S: float = 0.3
DEFAULT_REACTION_DELAY_S: float = 0.5
DEFAULT_SLOW_DOWN_SPEED_KMH: float = 25.0

# ── V2X bus defaults ─────────────────────────────────────────────────────────
DEFAULT_CAM_FREQUENCY_HZ: float = 10.0
DEFAULT_RADIO_RANGE_M: float = 500.0
DEFAULT_DROP_RATE: float = 0.0
DEFAULT_CORRUPTION_RATE: float = 0.0

# ── Route database (directory with Route<i>.json files, empty = generated) ──
ROUTE_DIR: str = ""
ROUTE_SLOTS: int = 20

# ── Logging ──────────────────────────────────────────────────────────────────
LOG_FILE: str = "collision_warning.log"
DEBUG_LOG_FILE: str = "predictor_debug.log"
