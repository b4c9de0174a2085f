"""
Utility functions for V2XBus:
    - ID generation
    - fault injection (packet drop, payload corruption)
"""

import uuid
import random
import logging
from typing import Optional

log = logging.getLogger(__name__)

# ---------- ID Helpers ----------
def new_msg_id() -> str:
    """
    Generate a globally unique message ID.

    Returns:
        str: UUID string for a new message.
    """
    return str(uuid.uuid4())

# ---------- Fault / Packet Helpers ----------
def maybe_drop(drop_rate: float, rng: Optional[random.Random] = None) -> bool:
    """
    Decide whether to randomly drop a packet based on the drop rate.

    Args:
        drop_rate (float): Probability (0.0–1.0) that the packet will be dropped.
        rng (random.Random): Optional seeded generator for reproducible runs.

    Returns:
        bool: True if the packet should be dropped, False otherwise.
    """
    if drop_rate <= 0.0:
        return False
    result = (rng or random).random() < drop_rate
    if result:
        log.debug("Packet dropped by utils.maybe_drop")
    return result

def maybe_corrupt(payload: dict, corruption_rate: float = 0.0,
                  rng: Optional[random.Random] = None) -> dict:
    """
    Randomly corrupt a payload to exercise receiver-side validation.

    Args:
        payload (dict): Original message payload.
        corruption_rate (float): Probability (0.0–1.0) to corrupt the payload.
        rng (random.Random): Optional seeded generator for reproducible runs.

    Returns:
        dict: Original or modified payload with '_corrupted' flag if corrupted.
    """
    if corruption_rate > 0.0 and (rng or random).random() < corruption_rate:
        payload = payload.copy()
        payload["_corrupted"] = True
        log.debug("Payload corrupted by utils.maybe_corrupt")
    return payload
