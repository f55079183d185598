"""Source media probing

Responsibilities:
- Query ffprobe (through ffmpeg-python) for container and stream metadata
- Derive the total duration with a stream-level fallback
- Translate every failure into ProbeError
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import ffmpeg

from .exceptions import ProbeError
from .models import SourceMedia

logger = logging.getLogger(__name__)

def _parse_duration(value: Any) -> Optional[float]:
    """Convert an ffprobe duration field, ignoring N/A and junk"""
    if value is None:
        return None
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return None
    if duration != duration or duration <= 0:  # NaN or non-positive
        return None
    return duration

def get_duration(info: Dict[str, Any]) -> float:
    """
    Extract the total duration from parsed ffprobe output.

    The container duration is preferred; when it is missing the longest
    stream duration is used instead.

    Raises:
        ProbeError: If no usable duration is present
    """
    duration = _parse_duration(info.get("format", {}).get("duration"))
    if duration is not None:
        return duration

    stream_durations = [
        d for d in (_parse_duration(s.get("duration")) for s in info.get("streams", []))
        if d is not None
    ]
    if stream_durations:
        logger.warning("Container duration missing, using longest stream duration")
        return max(stream_durations)
    raise ProbeError("No valid duration found")

def probe(path: Union[str, Path]) -> SourceMedia:
    """
    Probe a source file for its duration and container metadata.

    Args:
        path: Path to the media file

    Returns:
        SourceMedia describing the file

    Raises:
        ProbeError: If the file is missing or its metadata cannot be parsed
    """
    path = Path(path).resolve()
    if not path.is_file():
        raise ProbeError(f"Source file not found: {path}")

    logger.info("Probing %s", path)
    try:
        info = ffmpeg.probe(str(path))
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
        raise ProbeError(f"ffprobe could not read {path.name}: {stderr or e}") from e
    except (OSError, ValueError) as e:
        # ffprobe missing from PATH, or unparsable JSON on stdout
        raise ProbeError(f"ffprobe failed for {path.name}: {e}") from e

    streams = info.get("streams", [])
    codec_types = {s.get("codec_type") for s in streams}
    if "video" not in codec_types:
        raise ProbeError(f"No video stream in {path.name}")

    media = SourceMedia(
        path=path,
        duration=get_duration(info),
        format_name=info.get("format", {}).get("format_name"),
        has_audio="audio" in codec_types,
    )
    logger.info(
        "Source duration: %.3fs (format: %s, audio: %s)",
        media.duration, media.format_name, "yes" if media.has_audio else "no"
    )
    return media
