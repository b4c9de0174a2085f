"""
BusMetrics: Tracks simple statistics for V2XBus message flow.
"""

class BusMetrics:
    """
    Tracks metrics for published, dropped, corrupted and delivered messages.

    Attributes:
        published (int): Total number of messages successfully published.
        dropped (int): Number of messages dropped due to simulated faults.
        corrupted (int): Number of published messages with a corrupted payload.
        delivered (int): Number of message deliveries to receivers.
    """

    def __init__(self):
        """Initialize all counters to zero."""
        self.published = 0
        self.dropped = 0
        self.corrupted = 0
        self.delivered = 0

    def report(self) -> dict:
        """
        Return a snapshot of current metrics.

        Returns:
            dict: Dictionary containing 'published', 'dropped', 'corrupted' and 'delivered' counters.
        """
        return {
            "published": self.published,
            "dropped": self.dropped,
            "corrupted": self.corrupted,
            "delivered": self.delivered,
        }
