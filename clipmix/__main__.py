"""
Command-line interface for the clipmix pipeline
"""
import argparse
import logging
import random
import sys
import threading
from pathlib import Path

from . import __version__
from .context import RunContext
from .exceptions import Cancelled, ClipmixError
from .formatting import print_banner, print_message
from .logging import configure_logging
from .observer import ConsoleObserver
from .options import MixOptions, PathConfig, ProcessingMode
from .pipeline import Pipeline
from .utils import check_dependencies

MODES = {mode.value: mode for mode in ProcessingMode}


def parse_args(argv=None):
    """Parse command line arguments"""
    defaults = MixOptions()
    parser = argparse.ArgumentParser(
        prog="clipmix",
        description="Split videos into random segments and build mixed videos from them"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default from CLIPMIX_LOG_LEVEL or INFO)"
    )
    parser.add_argument("input", type=Path, help="Folder with source videos")
    parser.add_argument("output", type=Path, help="Folder for segments and mixes")
    parser.add_argument("processed", type=Path, help="Folder receiving finished sources")
    parser.add_argument("--min", dest="min_seconds", type=int, default=defaults.min_segment_seconds,
                        help="Minimum segment length in seconds (default: %(default)s)")
    parser.add_argument("--max", dest="max_seconds", type=int, default=defaults.max_segment_seconds,
                        help="Maximum segment length in seconds (default: %(default)s)")
    parser.add_argument("--mode", choices=sorted(MODES), default=defaults.mode.value,
                        help="split: segments only; review: split, filter and mix; "
                             "direct: mix without a full split (default: %(default)s)")
    parser.add_argument("--segments-per-output", type=int, default=defaults.segments_per_output,
                        help="Segments in every mix (default: %(default)s)")
    parser.add_argument("--outputs-per-input", type=int, default=defaults.outputs_per_input,
                        help="Mixes per source video (default: %(default)s)")
    parser.add_argument("--no-dedup", dest="dedup", action="store_false",
                        help="Keep visually similar segments")
    parser.add_argument("--similarity", type=float, default=defaults.similarity_threshold,
                        help="Similarity threshold for dedup (default: %(default)s)")
    parser.add_argument("--no-manual-pause", dest="manual_pause", action="store_false",
                        help="Do not pause for manual segment review")
    parser.add_argument("--precise-split", dest="fast_split", action="store_false",
                        help="Re-encode cuts instead of stream copying")
    parser.add_argument("--crossfade", action="store_true", help="Join mixes with crossfades")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    return parser.parse_args(argv)


def build_options(args) -> MixOptions:
    return MixOptions(
        min_segment_seconds=args.min_seconds,
        max_segment_seconds=args.max_seconds,
        mode=MODES[args.mode],
        segments_per_output=args.segments_per_output,
        outputs_per_input=args.outputs_per_input,
        auto_detect_similar=args.dedup,
        similarity_threshold=args.similarity,
        pause_for_manual_delete=args.manual_pause,
        fast_split=args.fast_split,
        crossfade=args.crossfade,
    )


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    log_file = configure_logging(args.log_level)

    log = logging.getLogger("clipmix")
    print_banner(__version__)
    if log_file:
        log.info("Log file: %s", log_file)

    if not check_dependencies():
        print_message("ffmpeg/ffprobe are missing", "error")
        return 1

    context = RunContext()
    try:
        pipeline = Pipeline(
            PathConfig(args.input, args.output, args.processed),
            build_options(args),
            observer=ConsoleObserver(),
            context=context,
            rng=random.Random(args.seed),
        )
    except ClipmixError as e:
        print_message(str(e), "error")
        return 1

    outcome = {}

    def work():
        try:
            outcome["summary"] = pipeline.run()
        except Exception as e:
            outcome["error"] = e

    worker = threading.Thread(target=work, name="clipmix-worker", daemon=True)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.5)
    except KeyboardInterrupt:
        print_message("Cancelling...")
        context.cancel()
        worker.join(10)
        return 130

    error = outcome.get("error")
    if isinstance(error, Cancelled):
        print_message("Stopped by user.", "progress")
        return 130
    if error is not None:
        log.error("Run failed: %s", error, exc_info=None if isinstance(error, ClipmixError) else error)
        return 1
    return 1 if outcome["summary"].failed else 0


if __name__ == "__main__":
    sys.exit(main())
