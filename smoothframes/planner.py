"""Fixed-count segment planning"""

import logging
from typing import List

from .exceptions import PlanError
from .models import Segment

logger = logging.getLogger(__name__)

def plan(duration: float, segment_count: int) -> List[Segment]:
    """
    Split ``[0, duration)`` into ``segment_count`` equal, contiguous segments.

    Neighbouring segments share their boundary value exactly and the last
    segment ends at ``duration`` itself, so float rounding can never open a
    gap or an overlap.

    Raises:
        PlanError: If duration or segment_count is not positive
    """
    if segment_count is None or segment_count <= 0:
        raise PlanError(f"Segment count must be positive, got {segment_count}")
    if duration is None or not duration > 0:
        raise PlanError(f"Duration must be positive, got {duration}")

    segment_length = duration / segment_count
    boundaries = [index * segment_length for index in range(segment_count)]
    boundaries.append(float(duration))

    segments = [
        Segment(index=index, start=boundaries[index], end=boundaries[index + 1])
        for index in range(segment_count)
    ]
    if any(segment.end <= segment.start for segment in segments):
        raise PlanError(
            f"Duration {duration}s is too short for {segment_count} segments"
        )

    logger.info("Planned %d segments of %.3fs", segment_count, segment_length)
    for segment in segments:
        logger.debug("Segment %d: %s", segment.index, segment.label)
    return segments
