"""
bus — In-memory V2X messaging infrastructure
============================================

Provides a lightweight pub/sub transport for cooperative awareness
messages (CAMs), with optional packet-loss and payload-corruption
simulation, so the collision warning core can be exercised without a
real network stack.

Modules
-------
message
    :class:`V2XMessage` dataclass.
v2x_bus
    :class:`V2XBus` publish / poll transport.
metrics
    :class:`BusMetrics` counter snapshot.
utils
    ID generation, fault injection.
"""

from .message import V2XMessage
from .v2x_bus import V2XBus
from .metrics import BusMetrics
from .utils   import new_msg_id, maybe_drop, maybe_corrupt

__all__ = [
    "V2XMessage",
    "V2XBus",
    "BusMetrics",
    "new_msg_id",
    "maybe_drop",
    "maybe_corrupt",
]
