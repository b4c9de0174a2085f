#!/usr/bin/env python3
"""
predictor/reaction.py
=====================
Braking state machine driven by collision predictions.

::

    IDLE ──risk──▶ REACTION_PENDING ──timer──▶ BRAKING
      ▲                   │                      │
      └──────clear────────┴───────clear──────────┘

The reaction delay models the driver's reaction time.  Exactly one
deferred task exists per vehicle; clearing cancels it.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Collection, Protocol

from predictor.timers import DeferredTask, Scheduler

log = logging.getLogger(__name__)


class ReactionState(Enum):
    IDLE = "idle"
    REACTION_PENDING = "reaction_pending"
    BRAKING = "braking"


class VehicleActuator(Protocol):
    """Fire-and-forget speed commands understood by the host."""

    def slow_down(self, target_speed_m_s: float, interval_s: float) -> None: ...

    def resume_speed(self) -> None: ...


class ReactionController:
    """Per-vehicle reaction to collision predictions.

    Parameters
    ----------
    vehicle_id : str
        Ego vehicle, used in log lines.
    actuator : VehicleActuator
        Receives the slow-down and resume commands.
    scheduler : Scheduler
        Clock for the reaction delay.
    reaction_delay_s : float
        Time between the first risk prediction and braking.
    target_speed_m_s, brake_interval_s : float
        Parameters of the slow-down command.
    """

    def __init__(
        self,
        vehicle_id: str,
        actuator: VehicleActuator,
        scheduler: Scheduler,
        reaction_delay_s: float = 0.5,
        target_speed_m_s: float = 25.0 / 3.6,
        brake_interval_s: float = 1.0,
    ) -> None:
        self.vehicle_id = vehicle_id
        self.actuator = actuator
        self.reaction_delay_s = reaction_delay_s
        self.target_speed_m_s = target_speed_m_s
        self.brake_interval_s = brake_interval_s
        self.state = ReactionState.IDLE
        # on_timer_fired may run on a timer thread
        self._lock = threading.RLock()
        self._timer = DeferredTask(scheduler, self.on_timer_fired,
                                   name=f"reaction[{vehicle_id}]")

    @property
    def timer_pending(self) -> bool:
        return self._timer.pending

    def on_prediction(self, colliding: Collection[str]) -> ReactionState:
        """Advance the state machine with this tick's prediction result."""
        with self._lock:
            if colliding:
                if self.state is ReactionState.IDLE:
                    self.state = ReactionState.REACTION_PENDING
                    self._timer.start(self.reaction_delay_s)
                    log.info("%s reaction_pending risk=%s",
                             self.vehicle_id, ",".join(sorted(colliding)))
            elif self.state is not ReactionState.IDLE:
                self._timer.cancel()
                self.actuator.resume_speed()
                self.state = ReactionState.IDLE
                log.info("%s risk_cleared resume_speed", self.vehicle_id)
            return self.state

    def on_timer_fired(self) -> None:
        """Reaction delay elapsed: brake if the risk is still pending."""
        with self._lock:
            if self.state is not ReactionState.REACTION_PENDING:
                return
            self.actuator.slow_down(self.target_speed_m_s, self.brake_interval_s)
            self.state = ReactionState.BRAKING
        log.info("%s braking target=%.2fm/s over %.1fs",
                 self.vehicle_id, self.target_speed_m_s, self.brake_interval_s)
