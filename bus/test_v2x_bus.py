#!/usr/bin/env python3
"""
Tests for the in-memory V2X bus and its fault injection.
"""

import unittest

from bus.v2x_bus import V2XBus


class V2XBusTests(unittest.TestCase):
    def test_publish_then_poll(self):
        bus = V2XBus()
        msg_id = bus.publish("v2v.cam", "veh_0", {"speed_m_s": 10.0}, ts=0.1)

        msgs = bus.poll("v2v.cam")
        self.assertEqual(len(msgs), 1)
        self.assertEqual(msgs[0].id, msg_id)
        self.assertEqual(msgs[0].sender, "veh_0")
        self.assertEqual(msgs[0].ts, 0.1)
        self.assertEqual(bus.metrics.published, 1)

    def test_poll_clears_topic(self):
        bus = V2XBus()
        bus.publish("v2v.cam", "veh_0", {})
        bus.poll("v2v.cam")
        self.assertEqual(bus.poll("v2v.cam"), [])
        self.assertEqual(bus.poll("other"), [])

    def test_drop_rate_one_drops_everything(self):
        bus = V2XBus(drop_rate=1.0, seed=1)
        self.assertIsNone(bus.publish("v2v.cam", "veh_0", {}))
        self.assertEqual(bus.metrics.dropped, 1)
        self.assertEqual(bus.metrics.published, 0)
        self.assertEqual(bus.poll("v2v.cam"), [])

    def test_corruption_flags_sent_copy_only(self):
        bus = V2XBus(corruption_rate=1.0, seed=1)
        payload = {"speed_m_s": 10.0}
        bus.publish("v2v.cam", "veh_0", payload)

        sent = bus.poll("v2v.cam")[0].payload
        self.assertTrue(sent["_corrupted"])
        self.assertNotIn("_corrupted", payload)
        self.assertEqual(bus.metrics.corrupted, 1)

    def test_delivery_counter(self):
        bus = V2XBus()
        bus.record_delivery(3)
        bus.record_delivery()
        self.assertEqual(bus.metrics.report()["delivered"], 4)


if __name__ == "__main__":
    unittest.main()
