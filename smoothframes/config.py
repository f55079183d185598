"""Configuration settings for the smoothframes pipeline

This module centralizes all configuration settings including:
- Working directory and log locations
- Segmentation and interpolation parameters
- Per-job resource hints and limits

Module-level constants can be overridden via environment variables;
PipelineConfig carries the settings of a single run.
"""

import os
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError

# Working root directory in the system temp dir
WORKING_ROOT = Path(os.environ.get(
    "SMOOTHFRAMES_WORKDIR", str(Path(tempfile.gettempdir()) / "smoothframes")
))

# LOG_DIR: user definable with default of "$HOME/smoothframes_logs"
LOG_DIR = Path(os.environ.get(
    "SMOOTHFRAMES_LOG_DIR", str(Path.home() / "smoothframes_logs")
))

# Segmentation settings
SEGMENT_COUNT = 5

# Interpolation settings
TARGET_FPS = 60
THREADS_PER_JOB = 2  # ffmpeg -threads hint; every segment runs at once

# Per-job time limit in seconds (unset means wait forever)
_timeout = os.environ.get("SMOOTHFRAMES_JOB_TIMEOUT")
JOB_TIMEOUT = float(_timeout) if _timeout else None

# Minimum percentage step between progress log lines
PROGRESS_LOG_INTERVAL = 10.0

# Logging configuration
LOG_LEVEL = "INFO"  # valid values: DEBUG, INFO, WARNING, ERROR, CRITICAL


def new_run_id() -> str:
    """Short identifier separating the scratch files of concurrent runs"""
    return uuid.uuid4().hex[:8]


@dataclass
class PipelineConfig:
    """Settings for one pipeline run."""
    segment_count: int = SEGMENT_COUNT
    target_fps: int = TARGET_FPS
    threads_per_job: int = THREADS_PER_JOB
    work_dir: Path = WORKING_ROOT
    output_dir: Optional[Path] = None
    job_timeout: Optional[float] = JOB_TIMEOUT
    cleanup_on_failure: bool = False
    run_id: str = field(default_factory=new_run_id)

    def __post_init__(self) -> None:
        """Normalize paths and reject unusable values."""
        if isinstance(self.work_dir, str):
            self.work_dir = Path(self.work_dir)
        self.work_dir = self.work_dir.expanduser().resolve()

        # Output lands next to the scratch files unless told otherwise
        if self.output_dir is None:
            self.output_dir = self.work_dir
        elif isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        self.output_dir = self.output_dir.expanduser().resolve()

        if self.target_fps < 1:
            raise ConfigurationError(f"Target fps must be positive, got {self.target_fps}", module="config")
        if self.threads_per_job < 1:
            raise ConfigurationError(f"Threads per job must be positive, got {self.threads_per_job}", module="config")
        if self.job_timeout is not None and self.job_timeout <= 0:
            raise ConfigurationError(f"Job timeout must be positive, got {self.job_timeout}", module="config")

    @property
    def run_dir(self) -> Path:
        """Scratch directory holding this run's segment files and manifest"""
        return self.work_dir / f"run-{self.run_id}"
