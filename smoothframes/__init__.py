"""
smoothframes - A motion interpolation pipeline for a single video file

This package provides a batch pipeline that:
- Probes the source container for its total duration
- Splits the timeline into a fixed number of equal segments
- Interpolates every segment to a higher frame rate in parallel via ffmpeg
- Joins the processed segments back together with stream copy

The heavy lifting happens inside ffmpeg's own processes; the pipeline
only schedules, monitors and stitches their output.
"""

__version__ = "0.1.0"
