import threading
import unittest
from datetime import timedelta
from pathlib import Path

from clipmix.context import RunContext
from clipmix.exceptions import Cancelled
from clipmix.formatting import classify, format_remaining
from clipmix.observer import ConsoleObserver, ProgressSnapshot, ReviewGate


class TestProgressSnapshot(unittest.TestCase):
    def test_describe(self):
        snapshot = ProgressSnapshot(5, 2, 15, 6, timedelta(seconds=95))
        self.assertEqual(
            snapshot.describe(),
            "Input videos: 2/5 | Output files: 6/15 | Est. remaining: ~1m 35s"
        )

    def test_describe_unknown_total(self):
        self.assertEqual(ProgressSnapshot(1, 0, 0, 0).describe(), "Input videos: 0/1")
        self.assertIn("Output files: 4 generated", ProgressSnapshot(1, 1, 0, 4).describe())

    def test_format_remaining(self):
        self.assertEqual(format_remaining(None), "unknown")
        self.assertEqual(format_remaining(timedelta(seconds=5)), "~0m 05s")


class TestReviewGate(unittest.TestCase):
    def setUp(self):
        self.gate = ReviewGate()
        self.context = RunContext(poll_interval=0.01)

    def test_resume_releases_waiter(self):
        worker = threading.Thread(target=self.gate.wait, args=(Path("/tmp/seg"), self.context), daemon=True)
        worker.start()
        self.assertTrue(self.gate.wait_until_waiting(timeout=5))
        self.assertEqual(self.gate.folder, Path("/tmp/seg"))
        self.gate.resume()
        worker.join(5)
        self.assertFalse(worker.is_alive())
        self.assertFalse(self.gate.is_waiting())

    def test_cancel_releases_waiter(self):
        threading.Timer(0.05, self.context.cancel).start()
        with self.assertRaises(Cancelled):
            self.gate.wait(Path("/tmp/seg"), self.context)



class TestConsoleObserver(unittest.TestCase):
    def setUp(self):
        self.context = RunContext(poll_interval=0.01)

    def test_enter_resumes_review(self):
        prompts = []
        observer = ConsoleObserver(prompt=lambda: prompts.append("enter"))
        observer.manual_pause(Path("/tmp/seg"), self.context)
        self.assertEqual(prompts, ["enter"])
        self.assertFalse(observer.gate.is_waiting())

    def test_cancel_ends_review_without_input(self):
        """The review wait returns on cancellation even though Enter is never pressed"""
        never_pressed = threading.Event()
        observer = ConsoleObserver(prompt=never_pressed.wait)
        threading.Timer(0.05, self.context.cancel).start()
        try:
            with self.assertRaises(Cancelled):
                observer.manual_pause(Path("/tmp/seg"), self.context)
        finally:
            never_pressed.set()


class TestMessageKinds(unittest.TestCase):
    def test_classify(self):
        self.assertEqual(classify("Error processing a.mp4: boom"), "error")
        self.assertEqual(classify("Delete similar segment: scene_2.mp4"), "warning")
        self.assertEqual(classify("Concat copy failed, re-encoding: x"), "warning")
        self.assertEqual(classify("Done: a.mp4"), "done")
        self.assertEqual(classify("Processing a.mp4..."), "plain")


if __name__ == "__main__":
    unittest.main()
