"""
V2XBus: In-memory pub/sub system for V2V communication.

Supports:
    - Topic-based messaging
    - Packet drop and payload corruption simulation
    - Delivery / drop metrics
    - Logging of events

Intended usage:
    - Vehicles publish CAMs to 'v2v.cam' once per CAM interval
    - The host polls 'v2v.cam' once per step and hands every message to
      each receiver in radio range
"""

import random
import logging
from typing import Dict, List, Optional
from .message import V2XMessage
from .metrics import BusMetrics
from .utils import new_msg_id, maybe_drop, maybe_corrupt

log = logging.getLogger(__name__)


class V2XBus:
    """
    Transport layer for vehicle-to-everything (V2X) messages.

    Attributes:
        drop_rate (float): Probability of randomly dropping a packet.
        corruption_rate (float): Probability of corrupting a published payload.
        metrics (BusMetrics): Running counters.
    """

    def __init__(
        self,
        drop_rate: float = 0.0,
        corruption_rate: float = 0.0,
        seed: Optional[int] = None,
    ):
        """
        Initialize a V2XBus instance.

        Args:
            drop_rate (float): Chance of randomly dropping a message (0.0 to 1.0).
            corruption_rate (float): Chance of flagging a payload as corrupted (0.0 to 1.0).
            seed (int): Optional seed for the fault-injection generator.
        """
        self._topics: Dict[str, List[V2XMessage]] = {}
        self._rng = random.Random(seed)
        self.drop_rate = drop_rate
        self.corruption_rate = corruption_rate
        self.metrics = BusMetrics()

    def publish(
        self,
        topic: str,
        sender: str,
        payload: dict,
        ts: float = 0.0,
    ) -> Optional[str]:
        """
        Publish a message to a specific topic.

        Args:
            topic (str): The topic name (e.g., 'v2v.cam').
            sender (str): ID of the sender (e.g., 'veh_0').
            payload (dict): Arbitrary data dictionary representing the message contents.
            ts (float): Simulation time of sending, in seconds.

        Returns:
            Optional[str]: The unique message ID if successfully published, or None if dropped.
        """
        if maybe_drop(self.drop_rate, self._rng):
            self.metrics.dropped += 1
            log.debug("packet_dropped topic=%s sender=%s", topic, sender)
            return None

        sent_payload = maybe_corrupt(payload, self.corruption_rate, self._rng)
        if sent_payload is not payload:
            self.metrics.corrupted += 1

        msg = V2XMessage(
            id=new_msg_id(),
            topic=topic,
            sender=sender,
            payload=sent_payload,
            ts=ts,
        )
        self._topics.setdefault(topic, []).append(msg)
        self.metrics.published += 1

        log.debug("publish topic=%s sender=%s id=%s", topic, sender, msg.id)
        return msg.id

    def poll(self, topic: str) -> List[V2XMessage]:
        """
        Retrieve and clear all messages from a given topic.

        Args:
            topic (str): The topic name to poll messages from.

        Returns:
            List[V2XMessage]: List of messages published to the topic since the last poll.
        """
        msgs = self._topics.get(topic, [])
        self._topics[topic] = []
        return msgs

    def record_delivery(self, count: int = 1):
        """
        Count deliveries made by the host after polling.

        Args:
            count (int): Number of receivers a message was handed to.
        """
        self.metrics.delivered += count
