"""Custom exceptions for the smoothframes pipeline"""

from typing import Optional


class SmoothFramesError(Exception):
    """Base exception for all smoothframes errors"""
    def __init__(self, message: str, module: str = None):
        self.message = message
        self.module = module or "unknown"
        super().__init__(f"[{self.module}] {self.message}")

class ProbeError(SmoothFramesError):
    """Source metadata could not be read"""
    def __init__(self, message: str, module: str = "probe"):
        super().__init__(f"Probe error: {message}", module)

class PlanError(SmoothFramesError):
    """Invalid duration or segment count"""
    def __init__(self, message: str, module: str = "planner"):
        super().__init__(f"Plan error: {message}", module)

class TranscodeError(SmoothFramesError):
    """A single segment's ffmpeg invocation failed

    Attributes:
        segment_index: Index of the failing segment
        cause: Underlying exception, if any
        reason: One of "failed", "timeout" or "cancelled"
    """
    def __init__(self, segment_index: int, cause: Optional[BaseException] = None,
                 reason: str = "failed", module: str = "transcoder"):
        self.segment_index = segment_index
        self.cause = cause
        self.reason = reason
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Transcode error: segment {segment_index} {reason}{detail}", module
        )

class ConcatError(SmoothFramesError):
    """Joining the processed segments failed"""
    def __init__(self, message: str, module: str = "concatenation"):
        super().__init__(f"Concatenation error: {message}", module)

class ConfigurationError(SmoothFramesError):
    """Error in configuration/setup"""

class DependencyError(SmoothFramesError):
    """Missing required dependencies"""

class CommandExecutionError(SmoothFramesError):
    """External command exited unsuccessfully"""
    def __init__(self, message: str, module: str = None,
                 returncode: Optional[int] = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, module)

class CommandTimeoutError(CommandExecutionError):
    """External command exceeded its time limit"""

class CommandCancelledError(CommandExecutionError):
    """External command was terminated on request"""
