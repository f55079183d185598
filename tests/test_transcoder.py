"""Unit tests for single segment interpolation"""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from smoothframes.config import PipelineConfig
from smoothframes.exceptions import (
    CommandCancelledError, CommandExecutionError, CommandTimeoutError, TranscodeError
)
from smoothframes.models import ProgressEvent, Segment
from smoothframes.planner import plan
from smoothframes.transcoder import TranscodeJob, segment_output_path, transcode

class TestSegmentOutputPath(unittest.TestCase):
    def test_name_from_boundaries_and_basename(self):
        path = segment_output_path(
            Path("/videos/clip.mp4"), Segment(2, 40.0, 60.0), Path("/tmp/run-abc")
        )
        self.assertEqual(path, Path("/tmp/run-abc/40.0-60.0-clip.mp4"))

    def test_segments_and_runs_never_collide(self):
        source = Path("/videos/clip.mp4")
        segments = [Segment(i, i * 1.5, (i + 1) * 1.5) for i in range(10)]
        first = PipelineConfig(work_dir=Path("/tmp/sf"), run_id="aaaa")
        second = PipelineConfig(work_dir=Path("/tmp/sf"), run_id="bbbb")
        paths = {segment_output_path(source, s, c.run_dir) for s in segments for c in (first, second)}
        self.assertEqual(len(paths), 20)

    def test_sub_millisecond_segments_never_collide(self):
        source = Path("/videos/clip.mp4")
        segments = plan(0.01, 20)
        run_dir = Path("/tmp/sf/run-short")
        paths = {segment_output_path(source, s, run_dir) for s in segments}
        self.assertEqual(len(paths), 20)

class TestTranscodeJob(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.source = Path(self.tmp.name) / "clip.mp4"
        self.source.write_bytes(b"source")
        self.config = PipelineConfig(work_dir=Path(self.tmp.name), run_id="test", job_timeout=30)
        self.segment = Segment(index=3, start=60.0, end=80.0)

    def tearDown(self):
        self.tmp.cleanup()

    def test_job_configuration(self):
        job = TranscodeJob(self.source, self.segment, self.config)
        self.assertEqual(job.total_duration, 20.0)
        self.assertEqual(job.timeout, 30)
        self.assertIn("minterpolate='fps=60'", job.cmd)
        self.assertEqual(job.output_path.parent, self.config.run_dir)

    def test_run_success(self):
        def fake_execute(job):
            job.output_path.write_bytes(b"interpolated")

        with patch.object(TranscodeJob, "execute", autospec=True, side_effect=fake_execute):
            result = TranscodeJob(self.source, self.segment, self.config).run()
        self.assertEqual(result.index, 3)
        self.assertTrue(result.path.exists())
        self.assertEqual(result.path.name, "60.0-80.0-clip.mp4")

    def test_transcode_returns_path(self):
        def fake_execute(job):
            job.output_path.write_bytes(b"interpolated")

        with patch.object(TranscodeJob, "execute", autospec=True, side_effect=fake_execute):
            path = transcode(self.source, self.segment, self.config)
        self.assertEqual(path, segment_output_path(self.source, self.segment, self.config.run_dir))

    def _run_failing(self, error):
        def fake_execute(job):
            job.output_path.write_bytes(b"partial")
            raise error

        with patch.object(TranscodeJob, "execute", autospec=True, side_effect=fake_execute):
            job = TranscodeJob(self.source, self.segment, self.config)
            with self.assertRaises(TranscodeError) as ctx:
                job.run()
        self.assertFalse(job.output_path.exists(), "partial output must be discarded")
        self.assertEqual(ctx.exception.segment_index, 3)
        self.assertIs(ctx.exception.cause, error)
        return ctx.exception

    def test_failure_discards_partial_output(self):
        err = self._run_failing(CommandExecutionError("exit 1", returncode=1))
        self.assertEqual(err.reason, "failed")

    def test_timeout_reason(self):
        err = self._run_failing(CommandTimeoutError("timed out"))
        self.assertEqual(err.reason, "timeout")

    def test_cancelled_reason(self):
        err = self._run_failing(CommandCancelledError("cancelled"))
        self.assertEqual(err.reason, "cancelled")

    def test_empty_output_is_failure(self):
        with patch.object(TranscodeJob, "execute", autospec=True):
            job = TranscodeJob(self.source, self.segment, self.config)
            with self.assertRaises(TranscodeError):
                job.run()

    def test_progress_events_tagged_with_segment(self):
        events = []
        job = TranscodeJob(self.source, self.segment, self.config, on_progress=events.append)
        job._report(59.9, 42.0)
        self.assertEqual(events, [ProgressEvent(segment_index=3, current_fps=59.9, percent=42.0)])

if __name__ == "__main__":
    unittest.main()
