"""Utility functions for the smoothframes pipeline"""

import logging
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Union

from .exceptions import DependencyError

logger = logging.getLogger(__name__)

REQUIRED_BINARIES = ("ffmpeg", "ffprobe")

def run_cmd(cmd: List[str], capture_output: bool = True,
            check: bool = True) -> subprocess.CompletedProcess:
    """Run a command and handle errors"""
    logger.info("Running command: %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            capture_output=capture_output,
            check=check,
            text=True
        )
        if result.stdout:
            logger.debug("Command stdout: %s", result.stdout)
        if result.stderr:
            logger.debug("Command stderr: %s", result.stderr)
        return result
    except subprocess.CalledProcessError as e:
        logger.error("Command failed: %s", " ".join(cmd))
        logger.error("Error output: %s", e.stderr)
        raise

def get_file_size(path: Union[str, Path]) -> int:
    """Get file size in bytes"""
    return Path(path).stat().st_size

def get_timestamp() -> str:
    """Get current timestamp in YYYYMMDD_HHMMSS format"""
    return datetime.now().strftime("%Y%m%d_%H%M%S")

def format_size(size: int) -> str:
    """Format file size for display"""
    for unit in ['B', 'KiB', 'MiB', 'GiB', 'TiB']:
        if size < 1024:
            return f"{size:.1f}{unit}"
        size /= 1024
    return f"{size:.1f}TiB"

def format_elapsed(seconds: float) -> str:
    """Format a duration as 00h 00m 00s"""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f"{hours:02d}h {minutes:02d}m {secs:02d}s"

def check_dependencies() -> None:
    """Check for required binaries on PATH

    Raises:
        DependencyError: If any binary is missing
    """
    for cmd in REQUIRED_BINARIES:
        if shutil.which(cmd) is None:
            logger.error("Required dependency not found: %s", cmd)
            raise DependencyError(f"Required dependency not found: {cmd}", module="utils")

def remove_file(path: Path) -> bool:
    """Best-effort file removal. Failures are logged, never raised."""
    try:
        path.unlink()
        logger.debug("Removed %s", path)
        return True
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.warning("Failed to remove %s: %s", path, e)
        return False

def remove_dir_if_empty(path: Path) -> None:
    """Remove a scratch directory once nothing is left in it."""
    try:
        path.rmdir()
        logger.debug("Removed scratch directory %s", path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug("Kept scratch directory %s: %s", path, e)
