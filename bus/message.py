"""
V2XMessage: Data structure representing a message transmitted over the V2XBus.
"""

from dataclasses import dataclass

@dataclass
class V2XMessage:
    """
    Represents a single message sent via the V2XBus.

    Attributes:
        id (str): Unique identifier for the message.
        topic (str): The topic of the message (e.g., 'v2v.cam').
        sender (str): ID of the sending vehicle (e.g., 'veh_0').
        payload (dict): Message contents; for CAMs see :mod:`predictor.beacon`.
        ts (float): Simulation time (in seconds) when the message was sent.
    """
    id: str
    topic: str
    sender: str
    payload: dict
    ts: float
