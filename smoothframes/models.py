"""Data types passed between pipeline stages"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourceMedia:
    """A probed source file. Immutable once created."""
    path: Path
    duration: float
    format_name: Optional[str] = None
    has_audio: bool = False


@dataclass(frozen=True)
class Segment:
    """A half-open time range ``[start, end)`` of the source, in seconds."""
    index: int
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def label(self) -> str:
        return f"{self.start:.3f}-{self.end:.3f}"


@dataclass(frozen=True)
class SegmentResult:
    index: int
    path: Path


@dataclass(frozen=True)
class ProgressEvent:
    """A progress sample reported by a running segment job."""
    segment_index: int
    current_fps: Optional[float]
    percent: float


@dataclass(frozen=True)
class PipelineOutput:
    path: Path
