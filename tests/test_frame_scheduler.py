from __future__ import annotations

import unittest

from pointdash_core.core import EmitCadence, FrameScheduler, InputEvent


class FrameSchedulerTests(unittest.TestCase):
    def test_callbacks_run_in_request_order_with_frame_timestamp(self) -> None:
        sched = FrameScheduler(clock=lambda: 0.0)
        seen: list[tuple[str, float]] = []
        sched.request_frame(lambda ts: seen.append(("a", ts)))
        sched.request_frame(lambda ts: seen.append(("b", ts)))
        self.assertEqual(sched.pending_count(), 2)
        self.assertEqual(sched.run_frame(1.5), 2)
        self.assertEqual(seen, [("a", 1.5), ("b", 1.5)])
        self.assertEqual(sched.last_frame_at, 1.5)
        self.assertEqual(sched.pending_count(), 0)

    def test_requests_made_during_a_frame_run_next_frame(self) -> None:
        sched = FrameScheduler()
        seen: list[float] = []

        def again(ts: float) -> None:
            seen.append(ts)
            if len(seen) < 3:
                sched.request_frame(again)

        sched.request_frame(again)
        sched.run_frame(1.0)
        self.assertEqual(seen, [1.0])
        sched.run_frame(2.0)
        sched.run_frame(3.0)
        sched.run_frame(4.0)
        self.assertEqual(seen, [1.0, 2.0, 3.0])

    def test_cancel_before_and_during_frame(self) -> None:
        sched = FrameScheduler()
        seen: list[str] = []
        handles: dict[str, int] = {}
        handles["first"] = sched.request_frame(lambda ts: sched.cancel_frame(handles["third"]))
        handles["second"] = sched.request_frame(lambda ts: seen.append("second"))
        handles["third"] = sched.request_frame(lambda ts: seen.append("third"))
        dropped = sched.request_frame(lambda ts: seen.append("dropped"))
        sched.cancel_frame(dropped)
        sched.cancel_frame(None)
        self.assertEqual(sched.run_frame(0.0), 2)
        self.assertEqual(seen, ["second"])

    def test_run_frame_defaults_to_clock(self) -> None:
        sched = FrameScheduler(clock=lambda: 42.0)
        sched.run_frame()
        self.assertEqual(sched.last_frame_at, 42.0)
        self.assertEqual(sched.now(), 42.0)

    def test_clear_drops_pending(self) -> None:
        sched = FrameScheduler()
        sched.request_frame(lambda ts: None)
        sched.clear()
        self.assertEqual(sched.run_frame(0.0), 0)


class EmitCadenceTests(unittest.TestCase):
    def test_gate(self) -> None:
        cadence = EmitCadence(interval_s=0.016)
        self.assertTrue(cadence.ready(0.0))
        cadence.mark(0.0)
        self.assertFalse(cadence.ready(0.010))
        self.assertTrue(cadence.ready(0.016))
        self.assertTrue(cadence.ready(-1.0))
        cadence.reset()
        self.assertIsNone(cadence.last_emit_at)

    def test_negative_interval_rejected(self) -> None:
        with self.assertRaises(ValueError):
            EmitCadence(interval_s=-1.0)


class InputEventTests(unittest.TestCase):
    def test_validation_and_helpers(self) -> None:
        with self.assertRaises(ValueError):
            InputEvent(event_type="click", timestamp=0.0)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            InputEvent(event_type="pointer_down", timestamp=0.0, pointer_type="stylus")  # type: ignore[arg-type]
        ev = InputEvent(event_type="wheel", timestamp=1.0, x=10.0, y=20.0, delta_y=-3.0, modifiers={"ctrl": True})
        self.assertTrue(ev.ctrl)
        moved = ev.with_position(1.0, 2.0)
        self.assertEqual((moved.x, moved.y, moved.delta_y, moved.timestamp), (1.0, 2.0, -3.0, 1.0))


if __name__ == "__main__":
    unittest.main()
