from __future__ import annotations

import unittest

from pointdash_plot.live import LiveUpdate, LiveUpdateThrottle


class LiveUpdateThrottleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sent: list[LiveUpdate] = []
        self.throttle = LiveUpdateThrottle(self.sent.append, interval_s=0.016)

    def test_first_update_is_immediate(self) -> None:
        self.assertTrue(self.throttle.submit(LiveUpdate("a", 1.0, 1.0), 0.0))
        self.assertEqual(self.sent, [LiveUpdate("a", 1.0, 1.0)])
        self.assertIsNone(self.throttle.pending)

    def test_burst_coalesces_to_latest(self) -> None:
        self.throttle.submit(LiveUpdate("a", 1.0, 1.0), 0.000)
        self.assertFalse(self.throttle.submit(LiveUpdate("a", 2.0, 2.0), 0.004))
        self.assertFalse(self.throttle.submit(LiveUpdate("a", 3.0, 3.0), 0.008))
        self.assertFalse(self.throttle.poll(0.010))
        self.assertTrue(self.throttle.poll(0.016))
        self.assertEqual([u.x for u in self.sent], [1.0, 3.0])
        self.assertEqual(self.throttle.dropped, 1)
        self.assertEqual(self.throttle.emitted, 2)

    def test_cancel_drops_pending(self) -> None:
        self.throttle.submit(LiveUpdate("a", 1.0, 1.0), 0.0)
        self.throttle.submit(LiveUpdate("a", 2.0, 2.0), 0.005)
        self.throttle.cancel()
        self.assertFalse(self.throttle.poll(1.0))
        self.assertEqual(len(self.sent), 1)

    def test_point_change_cancels_pending_for_previous_point(self) -> None:
        self.throttle.submit(LiveUpdate("a", 1.0, 1.0), 0.0)
        self.throttle.submit(LiveUpdate("a", 2.0, 2.0), 0.005)
        self.throttle.submit(LiveUpdate("b", 9.0, 9.0), 0.006)
        self.throttle.poll(0.020)
        self.assertEqual([u.point_id for u in self.sent], ["a", "b"])
        self.assertEqual(self.sent[-1].x, 9.0)

    def test_reset_reopens_gate(self) -> None:
        self.throttle.submit(LiveUpdate("a", 1.0, 1.0), 0.0)
        self.throttle.reset()
        self.assertTrue(self.throttle.submit(LiveUpdate("a", 2.0, 2.0), 0.001))


if __name__ == "__main__":
    unittest.main()
