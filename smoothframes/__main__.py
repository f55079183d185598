"""
Command-line interface for the smoothframes interpolation pipeline
"""
import argparse
import contextlib
import logging
import sys
import time
from pathlib import Path

from . import __version__
from .config import JOB_TIMEOUT, SEGMENT_COUNT, TARGET_FPS, THREADS_PER_JOB, PipelineConfig
from .exceptions import SmoothFramesError
from .formatting import (
    SegmentProgressDisplay, print_check, print_error, print_header,
    print_info, print_separator, print_success
)
from .logging import configure_logging
from .pipeline import run_pipeline
from .utils import check_dependencies, format_elapsed, format_size, get_file_size

def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="smoothframes",
        description="Motion interpolate a video by processing segments in parallel"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default from config)"
    )
    parser.add_argument(
        "--segments",
        type=int,
        default=SEGMENT_COUNT,
        help="Number of segments processed in parallel (default: %(default)s)"
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=TARGET_FPS,
        help="Target interpolation frame rate (default: %(default)s)"
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=THREADS_PER_JOB,
        help="ffmpeg thread hint per segment job (default: %(default)s)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=JOB_TIMEOUT,
        help="Fail a segment job after this many seconds (default: no limit)"
    )
    parser.add_argument(
        "--outdir",
        type=Path,
        default=None,
        help="Base directory for scratch and output files (default: system temp dir)"
    )
    parser.add_argument(
        "--cleanup-on-failure",
        dest="cleanup_on_failure",
        action="store_true",
        help="Remove this run's segment files when a segment job fails"
    )
    parser.add_argument(
        "--no-progress",
        dest="no_progress",
        action="store_true",
        help="Disable live progress bars"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Source video file"
    )
    return parser.parse_args(argv)

def build_config(args) -> PipelineConfig:
    """Translate parsed arguments into a PipelineConfig"""
    kwargs = dict(
        segment_count=args.segments,
        target_fps=args.fps,
        threads_per_job=args.threads,
        job_timeout=args.timeout,
        cleanup_on_failure=args.cleanup_on_failure,
    )
    if args.outdir is not None:
        kwargs["work_dir"] = args.outdir
    return PipelineConfig(**kwargs)

def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    configure_logging(args.log_level)

    log = logging.getLogger("smoothframes")
    print_header(f"Starting smoothframes v{__version__}")

    try:
        check_dependencies()
        config = build_config(args)
        input_file = args.input.resolve()
        print_check(f"Input path:  {input_file}")
        print_check(f"Segments: {config.segment_count}, target fps: {config.target_fps}")
        print_separator()

        start_time = time.time()
        display = None
        if not args.no_progress and config.segment_count > 0:
            display = SegmentProgressDisplay(config.segment_count)
        with display or contextlib.nullcontext():
            output_file = run_pipeline(
                input_file, config, display.update if display else None
            )
    except KeyboardInterrupt:
        log.warning("Interpolation interrupted by user")
        return 130
    except SmoothFramesError as e:
        log.debug("Pipeline failure", exc_info=True)
        print_error(str(e))
        return 1

    print_header("Summary")
    print_success(f"Input size:  {format_size(get_file_size(input_file))}")
    print_success(f"Output size: {format_size(get_file_size(output_file))}")
    print_check(f"Processing time: {format_elapsed(time.time() - start_time)}")
    print_info(f"Output written to {output_file}")
    # Bare path on stdout for scripting
    print(output_file)
    return 0

if __name__ == "__main__":
    sys.exit(main())
