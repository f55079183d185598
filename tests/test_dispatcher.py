"""Unit tests for parallel segment dispatch"""

import threading
import unittest
from pathlib import Path
from unittest.mock import patch

from smoothframes.config import PipelineConfig
from smoothframes.dispatcher import run_all
from smoothframes.exceptions import TranscodeError
from smoothframes.models import SegmentResult
from smoothframes.planner import plan

class ReverseOrderJob:
    """Finishes only after the job for the next segment has finished"""
    done = {}
    completion_order = []
    lock = threading.Lock()

    def __init__(self, source, segment, config, on_progress=None):
        self.segment = segment
        self.total = config.segment_count

    def run(self):
        following = self.segment.index + 1
        if following < self.total:
            self.done[following].wait(timeout=5)
        with self.lock:
            self.completion_order.append(self.segment.index)
        self.done[self.segment.index].set()
        return SegmentResult(self.segment.index, Path(f"/tmp/{self.segment.index}.mp4"))

    def cancel(self):
        pass

class OneFailureJob:
    """Segment 2 fails at once; every other job waits to be cancelled"""
    instances = []

    def __init__(self, source, segment, config, on_progress=None):
        self.segment = segment
        self.cancel_called = threading.Event()
        self.instances.append(self)

    def run(self):
        if self.segment.index == 2:
            raise TranscodeError(2, cause=RuntimeError("ffmpeg exited 1"))
        if self.cancel_called.wait(timeout=5):
            raise TranscodeError(self.segment.index, reason="cancelled")
        return SegmentResult(self.segment.index, Path(f"/tmp/{self.segment.index}.mp4"))

    def cancel(self):
        self.cancel_called.set()

class TestDispatcher(unittest.TestCase):
    def setUp(self):
        self.config = PipelineConfig(work_dir=Path("/tmp/smoothframes-test"), run_id="test")
        self.segments = plan(100.0, 5)

    def test_results_in_segment_order_despite_reverse_completion(self):
        ReverseOrderJob.done = {i: threading.Event() for i in range(5)}
        ReverseOrderJob.completion_order = []
        with patch("smoothframes.dispatcher.TranscodeJob", ReverseOrderJob):
            results = run_all(Path("/tmp/clip.mp4"), self.segments, self.config)

        self.assertEqual(ReverseOrderJob.completion_order, [4, 3, 2, 1, 0])
        self.assertNotIn(None, results)
        self.assertEqual([r.index for r in results], [0, 1, 2, 3, 4])
        self.assertEqual(len(results), len(self.segments))

    def test_single_failure_fails_run_and_cancels_siblings(self):
        OneFailureJob.instances = []
        with patch("smoothframes.dispatcher.TranscodeJob", OneFailureJob):
            with self.assertRaises(TranscodeError) as ctx:
                run_all(Path("/tmp/clip.mp4"), self.segments, self.config)

        self.assertEqual(ctx.exception.segment_index, 2)
        self.assertEqual(ctx.exception.reason, "failed")
        self.assertEqual(len(OneFailureJob.instances), 5)
        for job in OneFailureJob.instances:
            self.assertTrue(job.cancel_called.is_set())

    def test_progress_callback_passed_to_jobs(self):
        seen = []

        class RecordingJob(ReverseOrderJob):
            def __init__(self, source, segment, config, on_progress=None):
                super().__init__(source, segment, config, on_progress)
                seen.append(on_progress)

        ReverseOrderJob.done = {i: threading.Event() for i in range(5)}
        ReverseOrderJob.completion_order = []
        callback = lambda event: None
        with patch("smoothframes.dispatcher.TranscodeJob", RecordingJob):
            run_all(Path("/tmp/clip.mp4"), self.segments, self.config, on_progress=callback)
        self.assertEqual(seen, [callback] * 5)

    def test_empty_segment_list(self):
        self.assertEqual(run_all(Path("/tmp/clip.mp4"), [], self.config), [])

if __name__ == "__main__":
    unittest.main()
