"""Handles concatenation of processed segments into the final output."""

import logging
from pathlib import Path
from typing import List

from .command_builders import build_concat_command
from .command_jobs import ConcatJob
from .config import PipelineConfig
from .exceptions import ConcatError
from .models import SegmentResult
from .utils import remove_dir_if_empty, remove_file

logger = logging.getLogger(__name__)

def manifest_path(source: Path, run_dir: Path) -> Path:
    return run_dir / f"concat-{source.name}.txt"

def output_path(source: Path, output_dir: Path) -> Path:
    return output_dir / f"processed-{source.name}"

def _quote(path: Path) -> str:
    """Quote a path for the concat demuxer's ``file`` directive"""
    return "'" + str(path.absolute()).replace("'", "'\\''") + "'"

def write_manifest(manifest: Path, results: List[SegmentResult]) -> Path:
    """
    Write the concat demuxer list, one ``file`` line per result, in order.

    Raises:
        ConcatError: If the results are not in segment index order
    """
    indices = [result.index for result in results]
    if indices != list(range(len(results))):
        raise ConcatError(f"Segment results out of order: {indices}")

    manifest.parent.mkdir(parents=True, exist_ok=True)
    with open(manifest, 'w') as f:
        for result in results:
            f.write(f"file {_quote(result.path)}\n")
    logger.debug("Wrote concat manifest %s with %d entries", manifest, len(results))
    return manifest

def concatenate_segments(source: Path, results: List[SegmentResult], config: PipelineConfig) -> Path:
    """
    Join processed segments with stream copy and clean up scratch files.

    Segment files and the manifest are removed only after a successful
    join; on failure they are left in place for inspection.

    Args:
        source: Absolute path of the source file
        results: Segment results in segment index order
        config: Pipeline settings

    Returns:
        Path of the merged output file

    Raises:
        ConcatError: If concatenation fails
    """
    if not results:
        raise ConcatError("No segments to concatenate")

    manifest = write_manifest(manifest_path(source, config.run_dir), results)
    final_output = output_path(source, config.output_dir)
    final_output.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Concatenating %d segments into %s", len(results), final_output)
    try:
        ConcatJob(build_concat_command(manifest, final_output)).execute()
        if not final_output.exists() or final_output.stat().st_size == 0:
            raise ConcatError("Concatenated output is missing or empty")
    except ConcatError:
        logger.error("Concatenation failed, segment files kept in %s", config.run_dir)
        remove_file(final_output)
        raise

    for result in results:
        remove_file(result.path)
    remove_file(manifest)
    remove_dir_if_empty(config.run_dir)

    logger.info("Successfully concatenated output: %s", final_output)
    return final_output
