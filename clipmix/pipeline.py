"""High-level pipeline orchestration

Responsibilities:
  - Discover input videos and prepare the output/processed folders.
  - Run the per-mode sub-pipeline on every file, one at a time.
  - Move finished sources to the processed folder; leave failed ones in place.
  - Track progress and ETA, and report a final summary.

Per-file errors never abort the batch. Cancellation does.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Set

from .config import NORMALIZED_SUBDIR
from .context import RunContext
from .exceptions import Cancelled, ClipmixError, DiscoveryError
from .ffprobe import ProbeSession, get_duration
from .observer import PipelineObserver, ProgressSnapshot
from .options import MixOptions, PathConfig, ProcessingMode
from .processing import FileJob, FileProcessor
from .runner import ToolRunner
from .utils import (
    base_name, discover_videos, get_timestamp, move_processed,
    resolve_tools, unique_name
)
from .video.dimensions import ensure_even_dimensions

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Outcome of a run."""
    total_inputs: int = 0
    processed: List[Path] = field(default_factory=list)
    failed: List[Path] = field(default_factory=list)
    generated_outputs: int = 0
    stopped_early: bool = False
    cancelled: bool = False


def estimate_remaining(elapsed: float, attempted: int, total: int) -> Optional[timedelta]:
    """Average time per attempted file times the files left, floored at zero."""
    if attempted <= 0:
        return None
    remaining = (elapsed / attempted) * (total - attempted)
    return timedelta(seconds=max(0.0, remaining))


class Pipeline:
    """
    Batch processor for a folder of source videos.

    Attributes:
        paths (PathConfig): Input, output and processed folders
        options (MixOptions): Run options
        observer (PipelineObserver): Collaborator for messages, progress and gating
        context (RunContext): Pause gate and cancel signal
    """
    def __init__(
        self,
        paths: PathConfig,
        options: MixOptions,
        observer: Optional[PipelineObserver] = None,
        context: Optional[RunContext] = None,
        rng: Optional[random.Random] = None,
        runner: Optional[ToolRunner] = None
    ):
        options.validate()
        self.paths = paths
        self.options = options
        self.observer = observer or PipelineObserver()
        self.context = context or RunContext()
        self.runner = runner or ToolRunner(self.context, tools=resolve_tools())
        self.session = ProbeSession(self.runner)
        self.processor = FileProcessor(
            self.runner, self.session, options, rng or random.Random(), self.observer
        )
        self._names: Set[str] = set()

    def log_line(self, message: str) -> None:
        self.observer.log_line(message)

    def _prepare_folders(self) -> None:
        if not self.paths.input_dir.is_dir():
            raise DiscoveryError(f"Input folder does not exist: {self.paths.input_dir}", module="pipeline")
        self.paths.output_dir.mkdir(parents=True, exist_ok=True)
        self.paths.processed_dir.mkdir(parents=True, exist_ok=True)

    def process_file(self, video: Path) -> int:
        """
        Run one source through probing, normalization and its mode sub-pipeline.

        Returns:
            Number of output files written
        """
        name = unique_name(base_name(video), self._names)
        timestamp = get_timestamp()
        duration = get_duration(self.session, video)
        logger.info("%s: duration %.2fs", video.name, duration)

        with self.processor.work_dir(self.paths.output_dir / NORMALIZED_SUBDIR / name) as work_dir:
            source = ensure_even_dimensions(self.runner, self.session, video, work_dir, self.log_line)
            job = FileJob(source, name, duration, self.paths.output_dir, timestamp)
            return self.processor.process(job)

    def run(self) -> BatchSummary:
        """
        Process every supported video in the input folder.

        Returns:
            BatchSummary of the run

        Raises:
            DiscoveryError: If the input folder does not exist
            Cancelled: If the run is cancelled; finished files stay moved
        """
        self._prepare_folders()
        summary = BatchSummary()
        self._names.clear()

        videos = discover_videos(self.paths.input_dir)
        if not videos:
            if not any(self.paths.input_dir.iterdir()):
                self.log_line("Input folder is empty. Please add some video files and try again.")
            else:
                self.log_line("No supported video files found in input folder. "
                              "Supported types: .mp4, .mov, .mkv, .avi.")
            return summary

        summary.total_inputs = len(videos)
        self.log_line(f"Found {len(videos)} video file(s) to process.")

        if self.options.mode == ProcessingMode.SPLIT_ONLY:
            total_outputs = 0  # unknown until segments are cut
        else:
            total_outputs = self.options.outputs_per_input * len(videos)

        started = time.monotonic()
        attempted = 0
        self.observer.update_progress(ProgressSnapshot(len(videos), 0, total_outputs, 0))

        try:
            for video in videos:
                if not self.observer.can_process(video):
                    self.log_line("Processing limit reached. Skipping remaining files.")
                    summary.stopped_early = True
                    break

                self.context.wait_until_runnable()
                self.log_line(f"Processing {video.name}...")
                try:
                    written = self.process_file(video)
                    self.observer.register_processed(video)
                    move_processed(video, self.paths.processed_dir)
                except Cancelled:
                    raise
                except Exception as e:
                    logger.debug("Failure details for %s", video.name, exc_info=True)
                    message = e.message if isinstance(e, ClipmixError) else str(e)
                    self.log_line(f"Error processing {video.name}: {message}")
                    summary.failed.append(video)
                else:
                    self.log_line(f"Done: {video.name}")
                    summary.processed.append(video)
                    summary.generated_outputs += written

                attempted += 1
                eta = estimate_remaining(time.monotonic() - started, attempted, len(videos))
                if eta is not None and attempted < len(videos):
                    self.log_line(
                        f"Estimated remaining time: ~{int(eta.total_seconds()) // 60}m "
                        f"{int(eta.total_seconds()) % 60:02d}s for {len(videos) - attempted} more video(s)."
                    )
                self.observer.update_progress(ProgressSnapshot(
                    len(videos), len(summary.processed), total_outputs,
                    summary.generated_outputs, eta
                ))
        except Cancelled:
            summary.cancelled = True
            self.log_line("Stopped by user.")
            raise
        finally:
            if self.options.mode == ProcessingMode.SPLIT_ONLY:
                total_outputs = summary.generated_outputs
            self.observer.update_progress(ProgressSnapshot(
                len(videos), len(summary.processed), total_outputs,
                summary.generated_outputs, timedelta(0)
            ))
            headline = "Run cancelled." if summary.cancelled else "All done!"
            self.log_line(
                f"{headline} Processed {len(summary.processed)}/{len(videos)} file(s), "
                f"{len(summary.failed)} failed, {summary.generated_outputs} output file(s)."
            )

        return summary
