"""Parallel segment dispatch

Runs one TranscodeJob per segment on a thread pool. Each thread only
supervises an ffmpeg process, so every segment runs at once by default.
The first failure cancels every sibling job and is re-raised once the pool
has wound down; results always come back in segment index order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

import psutil

from .config import PipelineConfig
from .exceptions import TranscodeError
from .models import Segment, SegmentResult
from .transcoder import SegmentProgressCallback, TranscodeJob

logger = logging.getLogger(__name__)

def _warn_oversubscription(segment_count: int, threads_per_job: int) -> None:
    cpu_count = psutil.cpu_count() or 1
    requested = segment_count * threads_per_job
    if requested > cpu_count:
        logger.warning(
            "%d segments x %d threads requests %d threads on %d CPUs",
            segment_count, threads_per_job, requested, cpu_count
        )

def run_all(
    source: Path,
    segments: List[Segment],
    config: PipelineConfig,
    on_progress: Optional[SegmentProgressCallback] = None
) -> List[SegmentResult]:
    """
    Interpolate all segments concurrently.

    Args:
        source: Absolute path of the source file
        segments: Planned segments, indexed 0..n-1
        config: Pipeline settings
        on_progress: Optional callback receiving ProgressEvent samples

    Returns:
        One SegmentResult per segment, ordered by segment index

    Raises:
        TranscodeError: The first segment failure observed
    """
    if not segments:
        return []

    _warn_oversubscription(len(segments), config.threads_per_job)
    jobs = [TranscodeJob(source, segment, config, on_progress) for segment in segments]
    results: List[Optional[SegmentResult]] = [None] * len(segments)
    position = {segment.index: slot for slot, segment in enumerate(segments)}

    logger.info("Dispatching %d segment jobs", len(jobs))
    with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="segment") as executor:
        futures = {executor.submit(job.run): job for job in jobs}
        try:
            for future in as_completed(futures):
                result = future.result()
                results[position[result.index]] = result
                logger.info(
                    "Completed %d/%d segments",
                    sum(r is not None for r in results), len(results)
                )
        except BaseException as e:
            if isinstance(e, TranscodeError):
                logger.error("Segment %d failed, cancelling remaining jobs", e.segment_index)
            else:
                logger.warning("Dispatch interrupted, cancelling remaining jobs")
            for pending, job in futures.items():
                pending.cancel()
                job.cancel()
            raise

    return results
