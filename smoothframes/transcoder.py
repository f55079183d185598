"""Motion interpolation of a single segment

Responsibilities:
- Derive a unique scratch path for each segment's output
- Run ffmpeg's minterpolate filter on one time window of the source
- Forward progress samples tagged with the segment index
- Discard partial output when a job fails, times out or is cancelled
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from .command_builders import build_interpolate_command
from .command_jobs import ProgressCommandJob
from .config import PipelineConfig
from .exceptions import (
    CommandCancelledError, CommandExecutionError, CommandTimeoutError,
    TranscodeError
)
from .models import ProgressEvent, Segment, SegmentResult
from .utils import remove_file

logger = logging.getLogger(__name__)

SegmentProgressCallback = Callable[[ProgressEvent], None]

def segment_output_path(source: Path, segment: Segment, run_dir: Path) -> Path:
    """Scratch path for a segment: ``<run_dir>/<start>-<end>-<source name>``

    Boundaries are written at full precision; planned boundaries strictly
    increase, so no two segments of a run share a path.
    """
    return run_dir / f"{float(segment.start)!r}-{float(segment.end)!r}-{source.name}"

def _failure_reason(error: CommandExecutionError) -> str:
    if isinstance(error, CommandTimeoutError):
        return "timeout"
    if isinstance(error, CommandCancelledError):
        return "cancelled"
    return "failed"

class TranscodeJob(ProgressCommandJob):
    """Job interpolating one segment of the source to the target frame rate."""
    def __init__(
        self,
        source: Path,
        segment: Segment,
        config: PipelineConfig,
        on_progress: Optional[SegmentProgressCallback] = None
    ):
        self.source = source
        self.segment = segment
        self.output_path = segment_output_path(source, segment, config.run_dir)
        self._segment_progress = on_progress
        cmd = build_interpolate_command(
            source, self.output_path, segment,
            config.target_fps, config.threads_per_job
        )
        super().__init__(
            cmd,
            total_duration=segment.duration,
            on_progress=self._report,
            timeout=config.job_timeout,
            name=f"Segment {segment.index} ({segment.label})"
        )

    def _report(self, current_fps: Optional[float], percent: float) -> None:
        if self._segment_progress is not None:
            self._segment_progress(ProgressEvent(self.segment.index, current_fps, percent))

    def _discard(self) -> None:
        if self.output_path.exists():
            logger.debug("Discarding partial output %s", self.output_path)
            remove_file(self.output_path)

    def run(self) -> SegmentResult:
        """
        Interpolate the segment.

        Returns:
            SegmentResult pointing at the finished scratch file

        Raises:
            TranscodeError: If ffmpeg fails, times out, is cancelled or writes nothing
        """
        index = self.segment.index
        logger.info("Processing segment %d of time %s", index, self.segment.label)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self.execute()
        except CommandExecutionError as e:
            self._discard()
            reason = _failure_reason(e)
            if reason == "cancelled":
                logger.info("Segment %d cancelled", index)
            else:
                logger.error("Segment %d %s: %s", index, reason, e.message)
            raise TranscodeError(index, cause=e, reason=reason) from e
        except BaseException:
            self._discard()
            raise

        if not self.output_path.exists() or self.output_path.stat().st_size == 0:
            self._discard()
            raise TranscodeError(
                index,
                cause=CommandExecutionError("ffmpeg produced no output", module="transcoder")
            )

        logger.info("Finished segment %d of time %s", index, self.segment.label)
        return SegmentResult(index=index, path=self.output_path)

def transcode(
    source: Path,
    segment: Segment,
    config: PipelineConfig,
    on_progress: Optional[SegmentProgressCallback] = None
) -> Path:
    """Interpolate a single segment and return its scratch file path"""
    return TranscodeJob(source, segment, config, on_progress).run().path
