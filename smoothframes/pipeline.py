"""High-level pipeline orchestration

Responsibilities:
  - Resolve the source path independently of the working directory.
  - Sequence probing, planning, parallel interpolation and concatenation.
  - Track the run's state and stop at the first failing stage.
  - Optionally clear this run's segment files when interpolation fails.
"""

import enum
import logging
from pathlib import Path
from typing import Optional, Union

from .concatenation import concatenate_segments
from .config import PipelineConfig
from .dispatcher import run_all
from .exceptions import TranscodeError
from .models import PipelineOutput
from .planner import plan
from .probe import probe
from .transcoder import SegmentProgressCallback, segment_output_path
from .utils import remove_dir_if_empty, remove_file

logger = logging.getLogger(__name__)

class PipelineState(enum.Enum):
    IDLE = "idle"
    PROBING = "probing"
    PLANNING = "planning"
    TRANSCODING = "transcoding"
    CONCATENATING = "concatenating"
    DONE = "done"
    FAILED = "failed"

class Pipeline:
    """
    One run of the interpolation pipeline over a single source file.

    States only move forward: Idle -> Probing -> Planning -> Transcoding
    -> Concatenating -> Done, with any stage able to end in Failed.
    A pipeline runs once.
    """
    def __init__(
        self,
        source_file: Union[str, Path],
        config: Optional[PipelineConfig] = None,
        on_progress: Optional[SegmentProgressCallback] = None
    ):
        self.source = Path(source_file).resolve()
        self.config = config or PipelineConfig()
        self.on_progress = on_progress
        self.state = PipelineState.IDLE
        self.segments = []

    def _enter(self, state: PipelineState) -> None:
        logger.info("Pipeline state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _cleanup_segments(self) -> None:
        """Remove any segment output this run left behind"""
        for segment in self.segments:
            remove_file(segment_output_path(self.source, segment, self.config.run_dir))
        remove_dir_if_empty(self.config.run_dir)

    def run(self) -> PipelineOutput:
        """
        Run every stage in order.

        Returns:
            PipelineOutput holding the merged file path

        Raises:
            ProbeError, PlanError, TranscodeError, ConcatError: from the failing stage
            RuntimeError: If the pipeline has already been run
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value})")

        try:
            self._enter(PipelineState.PROBING)
            media = probe(self.source)

            self._enter(PipelineState.PLANNING)
            self.segments = plan(media.duration, self.config.segment_count)

            self._enter(PipelineState.TRANSCODING)
            try:
                results = run_all(self.source, self.segments, self.config, self.on_progress)
            except TranscodeError:
                if self.config.cleanup_on_failure:
                    logger.info("Removing segment files of failed run %s", self.config.run_id)
                    self._cleanup_segments()
                raise

            self._enter(PipelineState.CONCATENATING)
            final_output = concatenate_segments(self.source, results, self.config)
        except BaseException:
            self._enter(PipelineState.FAILED)
            raise

        self._enter(PipelineState.DONE)
        return PipelineOutput(path=final_output)

def run_pipeline(
    source_file: Union[str, Path],
    config: Optional[PipelineConfig] = None,
    on_progress: Optional[SegmentProgressCallback] = None
) -> Path:
    """
    Motion interpolate a video file.

    Args:
        source_file: Source video, absolute or relative to the current directory
        config: Pipeline settings (defaults from config.py)
        on_progress: Optional per-segment progress callback

    Returns:
        Path of the merged output file
    """
    return Pipeline(source_file, config, on_progress).run().path
