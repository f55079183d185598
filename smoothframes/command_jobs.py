"""
command_jobs.py

Defines a base class for command jobs and specialized implementations for
the pipeline steps that run ffmpeg (segment interpolation, concatenation).
"""

import logging
import subprocess
import threading
from collections import deque
from typing import Callable, Deque, IO, List, Optional

import psutil

from .config import PROGRESS_LOG_INTERVAL
from .exceptions import (
    CommandExecutionError, CommandCancelledError, CommandTimeoutError,
    ConcatError
)
from .utils import run_cmd

logger = logging.getLogger(__name__)

# Number of stderr lines kept for error reports
STDERR_TAIL_LINES = 20

ProgressCallback = Callable[[Optional[float], float], None]

def terminate_process_tree(process: subprocess.Popen, grace: float = 5.0) -> None:
    """Terminate a process and its children, killing whatever survives the grace period.

    The parent is waited on through Popen so its exit status stays with the
    Popen object; psutil only handles the descendants.
    """
    if process.poll() is not None:
        return
    try:
        children = psutil.Process(process.pid).children(recursive=True)
    except psutil.NoSuchProcess:
        children = []
    for child in children:
        try:
            child.terminate()
        except psutil.NoSuchProcess:
            pass
    process.terminate()

    try:
        process.wait(timeout=grace)
    except subprocess.TimeoutExpired:
        logger.warning("Process %d ignored terminate, killing", process.pid)
        process.kill()

    _, alive = psutil.wait_procs(children, timeout=grace)
    for child in alive:
        logger.warning("Process %d ignored terminate, killing", child.pid)
        try:
            child.kill()
        except psutil.NoSuchProcess:
            pass

def _drain_stream(stream: IO[str], sink: Deque[str]) -> None:
    """Read a stream to EOF, keeping the most recent lines."""
    try:
        for line in iter(stream.readline, ''):
            line = line.rstrip()
            if line:
                sink.append(line)
    except (OSError, ValueError) as e:
        sink.append(f"Error reading stream: {e}")
    finally:
        stream.close()

def parse_out_time(value: str) -> Optional[float]:
    """Parse ffmpeg's HH:MM:SS.micro out_time value into seconds."""
    parts = value.split(":")
    if len(parts) != 3:
        return None
    try:
        hours, minutes, seconds = parts
        return int(hours) * 3600 + int(minutes) * 60 + float(seconds)
    except ValueError:
        return None

class CommandJob:
    """
    Base class representing a command job.

    Attributes:
        cmd (List[str]): The command to run
    """
    def __init__(self, cmd: List[str]):
        self.cmd = cmd

    def execute(self) -> None:
        """
        Execute the stored command.

        Raises:
            CommandExecutionError: If command fails
        """
        logger.debug("Executing command: %s", " ".join(self.cmd))
        try:
            run_cmd(self.cmd)
        except subprocess.CalledProcessError as e:
            raise CommandExecutionError(
                f"Command failed with exit code {e.returncode}",
                module="command_jobs",
                returncode=e.returncode,
                stderr=e.stderr or ""
            ) from e
        except OSError as e:
            raise CommandExecutionError(
                f"Command could not be started: {e}",
                module="command_jobs"
            ) from e

class ProgressCommandJob(CommandJob):
    """
    Job for ffmpeg commands that report progress.

    The command is run with ``-progress pipe:1``; fps and position are
    parsed from stdout and forwarded to ``on_progress(fps, percent)``.
    Stderr is drained on a separate thread. The job can be cancelled from
    another thread and may carry a time limit; both terminate the process
    tree. Exactly one of success or a CommandExecutionError results.
    """
    def __init__(
        self,
        cmd: List[str],
        total_duration: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
        log_interval: float = PROGRESS_LOG_INTERVAL,
        name: str = "ffmpeg"
    ):
        super().__init__(cmd)
        self.total_duration = total_duration
        self.on_progress = on_progress
        self.timeout = timeout
        self.log_interval = log_interval
        self.name = name
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None
        self._cancelled = False
        self._timed_out = False
        self._current_fps: Optional[float] = None
        self._last_logged_percent = 0.0
        # out_time_us is preferred; out_time only serves older ffmpeg builds
        self._has_out_time_us = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop the job. Safe to call from any thread, at any time."""
        with self._lock:
            self._cancelled = True
            process = self._process
        if process is not None:
            terminate_process_tree(process)

    def _expire(self) -> None:
        with self._lock:
            self._timed_out = True
            process = self._process
        if process is not None:
            logger.warning("%s exceeded %.1fs, terminating", self.name, self.timeout)
            terminate_process_tree(process)

    def _emit(self, percent: float) -> None:
        """Forward a progress sample. Callback errors never reach the job."""
        percent = max(0.0, min(100.0, percent))
        if percent - self._last_logged_percent >= self.log_interval or (
            percent >= 100.0 and self._last_logged_percent < 100.0
        ):
            fps = f"{self._current_fps:.1f}" if self._current_fps is not None else "N/A"
            logger.info("%s progress: %.2f%%, fps: %s", self.name, percent, fps)
            self._last_logged_percent = percent
        if self.on_progress is None:
            return
        try:
            self.on_progress(self._current_fps, percent)
        except Exception as e:
            logger.debug("Progress callback for %s failed: %s", self.name, e)

    def _handle_progress_line(self, line: str) -> None:
        key, sep, value = line.partition("=")
        if not sep:
            return
        if key == "fps":
            try:
                self._current_fps = float(value)
            except ValueError:
                logger.debug("Error parsing fps: %s", value)
        elif key == "out_time_us" and self.total_duration:
            try:
                current_time = int(value) / 1_000_000
            except ValueError:
                logger.debug("Unexpected out_time_us value: %s", value)
                return
            self._has_out_time_us = True
            self._emit(current_time / self.total_duration * 100)
        elif key == "out_time" and self.total_duration and not self._has_out_time_us:
            current_time = parse_out_time(value)
            if current_time is None:
                logger.debug("Unexpected out_time format: %s", value)
                return
            self._emit(current_time / self.total_duration * 100)
        elif key == "progress" and value == "end":
            self._emit(100.0)

    def execute(self) -> None:
        """
        Run the command to completion.

        Raises:
            CommandCancelledError: If cancel() was called before it finished
            CommandTimeoutError: If the time limit expired
            CommandExecutionError: If the command could not start or exited non-zero
        """
        cmd = self.cmd + ["-progress", "pipe:1"]
        logger.info("Running ffmpeg command with progress:\n%s", " \\\n    ".join(cmd))

        with self._lock:
            if self._cancelled:
                raise CommandCancelledError(f"{self.name} cancelled before start", module="command_jobs")
            try:
                process = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    bufsize=1
                )
            except OSError as e:
                raise CommandExecutionError(
                    f"Command could not be started: {e}", module="command_jobs"
                ) from e
            self._process = process

        stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        reader = threading.Thread(
            target=_drain_stream, args=(process.stderr, stderr_tail), daemon=True
        )
        reader.start()
        timer = None
        if self.timeout is not None:
            timer = threading.Timer(self.timeout, self._expire)
            timer.daemon = True
            timer.start()

        try:
            for line in process.stdout:
                self._handle_progress_line(line.strip())
            process.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if process.poll() is None:
                terminate_process_tree(process)
                process.wait()
            process.stdout.close()
            reader.join(timeout=1.0)

        if process.returncode == 0:
            return
        stderr = "\n".join(stderr_tail)
        if self._timed_out:
            raise CommandTimeoutError(
                f"{self.name} timed out after {self.timeout:g}s",
                module="command_jobs", returncode=process.returncode, stderr=stderr
            )
        if self._cancelled:
            raise CommandCancelledError(
                f"{self.name} cancelled", module="command_jobs",
                returncode=process.returncode, stderr=stderr
            )
        logger.error("%s failed with exit code %d", self.name, process.returncode)
        if stderr:
            logger.error("Error output: %s", stderr)
        raise CommandExecutionError(
            f"{self.name} failed with exit code {process.returncode}"
            + (f": {stderr_tail[-1]}" if stderr_tail else ""),
            module="command_jobs", returncode=process.returncode, stderr=stderr
        )

class ConcatJob(CommandJob):
    """Job for joining processed segments."""
    def execute(self) -> None:
        try:
            super().execute()
        except CommandExecutionError as e:
            raise ConcatError(
                f"ffmpeg concat failed: {e.message}",
                module="concatenation"
            ) from e
