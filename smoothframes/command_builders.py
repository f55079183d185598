"""Helper functions for building ffmpeg commands"""

import logging
from pathlib import Path
from typing import List

from .models import Segment

log = logging.getLogger(__name__)

def build_interpolate_command(
    input_file: Path,
    output_file: Path,
    segment: Segment,
    target_fps: int,
    threads: int
) -> List[str]:
    """Build ffmpeg command for motion interpolating one time window"""
    return [
        "ffmpeg", "-hide_banner", "-loglevel", "error", "-nostats",
        "-threads", str(threads),
        "-ss", f"{segment.start:.6f}",
        "-t", f"{segment.duration:.6f}",
        "-i", str(input_file),
        "-vf", f"minterpolate='fps={target_fps}'",
        "-threads", str(threads),
        "-y", str(output_file)
    ]

def build_concat_command(
    concat_file: Path,
    output_file: Path
) -> List[str]:
    """Build ffmpeg command for joining segments with stream copy"""
    return [
        "ffmpeg", "-hide_banner", "-loglevel", "error",
        "-f", "concat",
        "-safe", "0",
        "-i", str(concat_file),
        "-c:v", "copy",
        "-c:a", "copy",
        "-y", str(output_file)
    ]
