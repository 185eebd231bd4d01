"""Per-file sub-pipelines

Responsibilities:
- Split-only: cut a source into segments written next to the outputs
- Split+review: cut into a temporary folder, optionally deduplicate and
  pause for manual deletion, then build mixes from the survivors
- Direct mix: cut one clip per time bucket per output and join them,
  never materializing the full segment set
"""

import logging
import math
import random
import re
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Generator, List

from .config import DIRECT_SUBDIR, SEGMENTS_SUBDIR
from .exceptions import InsufficientDurationError, InsufficientSegmentsError
from .ffprobe import ProbeSession
from .observer import PipelineObserver
from .options import MixOptions, ProcessingMode
from .runner import ToolRunner
from .utils import scoped_directory
from .video.command_builders import build_cut_command
from .video.concatenation import concatenate_segments
from .video.sampling import DiverseSampler, build_time_buckets
from .video.segmentation import Segment, next_segment_length, split_video
from .video.similarity import filter_similar_segments

logger = logging.getLogger(__name__)

_SCENE_NUMBER = re.compile(r"^scene_(\d+)_")


@dataclass(frozen=True)
class FileJob:
    """One input file ready for its mode sub-pipeline.

    Attributes:
        source: Media to cut (the even-dimension copy when one was made)
        name: Base name used for every output of this file
        duration: Source duration in seconds
        output_dir: Folder receiving segments and mixes
        timestamp: Timestamp embedded in file names
    """
    source: Path
    name: str
    duration: float
    output_dir: Path
    timestamp: str

    def mix_path(self, index: int) -> Path:
        return self.output_dir / f"{self.name}_mix_{index}_{self.timestamp}.mp4"


def _scene_number(path: Path) -> int:
    match = _SCENE_NUMBER.match(path.name)
    return int(match.group(1)) if match else 0


def rescan_segments(segments_dir: Path, known: List[Segment]) -> List[Segment]:
    """
    Re-read the segment folder after manual review.

    Files are ordered by their scene number; files removed by the user
    are dropped and metadata of surviving segments is kept.
    """
    by_name: Dict[str, Segment] = {segment.path.name: segment for segment in known}
    files = sorted(segments_dir.glob("scene_*.mp4"), key=lambda p: (_scene_number(p), p.name))
    return [
        by_name.get(path.name) or Segment(path, 0.0, 0.0, _scene_number(path) - 1)
        for path in files
    ]


class FileProcessor:
    """
    Applies the run's processing mode to one input file at a time.

    Attributes:
        runner (ToolRunner): Supervised ffmpeg runner
        session (ProbeSession): Probe cache of the run
        options (MixOptions): Run options
        rng (random.Random): Random source for lengths, offsets and picks
        observer (PipelineObserver): Collaborator for messages and manual review
    """
    def __init__(
        self,
        runner: ToolRunner,
        session: ProbeSession,
        options: MixOptions,
        rng: random.Random,
        observer: PipelineObserver
    ):
        self.runner = runner
        self.session = session
        self.options = options
        self.rng = rng
        self.observer = observer
        self.sampler = DiverseSampler(rng)

    @property
    def context(self):
        return self.runner.context

    def log_line(self, message: str) -> None:
        self.observer.log_line(message)

    @contextmanager
    def work_dir(self, path: Path) -> Generator[Path, None, None]:
        """Temporary directory whose probe results are forgotten along with its files"""
        try:
            with scoped_directory(path) as directory:
                yield directory
        finally:
            self.session.forget_under(path)

    def process(self, job: FileJob) -> int:
        """Run the configured mode; returns the number of output files written."""
        mode = self.options.mode
        if mode == ProcessingMode.SPLIT_REVIEW:
            return self.split_review(job)
        if mode == ProcessingMode.DIRECT_MIX:
            return self.direct_mix(job)
        return self.split_only(job)

    def _require_segments(self, segments: List[Segment], message: str) -> None:
        if len(segments) < self.options.segments_per_output:
            raise InsufficientSegmentsError(
                f"{message} ({len(segments)} < {self.options.segments_per_output})",
                module="processing"
            )

    def split_only(self, job: FileJob) -> int:
        opts = self.options
        segments = split_video(
            self.runner, job.source, job.duration,
            opts.min_segment_seconds, opts.max_segment_seconds,
            job.output_dir, job.timestamp, self.rng,
            prefix=f"{job.name}_",
            fast_split=opts.fast_split,
            log_line=self.log_line
        )
        if not segments:
            logger.warning("%s is shorter than %ds; no segments written",
                           job.source.name, opts.min_segment_seconds)
        return len(segments)

    def split_review(self, job: FileJob) -> int:
        """
        Split into a temporary folder, filter, review, then mix.

        Raises:
            InsufficientSegmentsError: If too few segments survive any stage
        """
        opts = self.options
        segments_dir = job.output_dir / SEGMENTS_SUBDIR / job.name

        with self.work_dir(segments_dir):
            segments = split_video(
                self.runner, job.source, job.duration,
                opts.min_segment_seconds, opts.max_segment_seconds,
                segments_dir, job.timestamp, self.rng,
                fast_split=opts.fast_split,
                log_line=self.log_line
            )
            self._require_segments(segments, "Not enough segments for mixing")

            if opts.auto_detect_similar:
                self.log_line("Detecting similar segments...")
                segments = filter_similar_segments(
                    segments, opts.similarity_threshold, self.runner, log_line=self.log_line
                )
                self._require_segments(segments, "Not enough segments after filtering")

            if opts.pause_for_manual_delete:
                self.observer.manual_pause(segments_dir, self.context)
                segments = rescan_segments(segments_dir, segments)
                self._require_segments(segments, "Not enough segments after manual delete")

            previous = None
            for i in range(opts.outputs_per_input):
                self.context.wait_until_runnable()
                indices = self.sampler.pick(len(segments), opts.segments_per_output, previous)
                previous = indices

                self.log_line(f"Mix {i}: {','.join(str(idx) for idx in indices)}")
                concatenate_segments(
                    self.runner, self.session,
                    [segments[idx].path for idx in indices],
                    job.mix_path(i),
                    crossfade=opts.crossfade,
                    log_line=self.log_line
                )
        return opts.outputs_per_input

    def direct_mix(self, job: FileJob) -> int:
        """
        Cut one clip per time bucket for each output and join them.

        Raises:
            InsufficientDurationError: If a bucket cannot hold a minimum-length clip
        """
        opts = self.options
        min_time = opts.min_segment_seconds
        buckets = build_time_buckets(job.duration, opts.segments_per_output)
        if any(length < min_time for _, length in buckets):
            raise InsufficientDurationError(
                "Video is too short for the selected min seconds", module="processing"
            )

        with self.work_dir(job.output_dir / DIRECT_SUBDIR / job.name) as temp_dir:
            for out_idx in range(opts.outputs_per_input):
                self.context.wait_until_runnable()
                self.log_line(f"Creating video {out_idx + 1}/{opts.outputs_per_input}...")

                clips = []
                for i, (start, length) in enumerate(buckets):
                    seg_len = next_segment_length(self.rng, min_time, opts.max_segment_seconds)
                    if seg_len > length:
                        seg_len = float(math.floor(length))
                    if seg_len < min_time:
                        raise InsufficientDurationError(
                            "Video is too short for the selected min seconds", module="processing"
                        )

                    max_start = start + (length - seg_len)
                    seg_start = start if max_start <= start else start + self.rng.random() * (max_start - start)
                    clip = temp_dir / f"scene_{i + 1}_{out_idx}_{job.timestamp}.mp4"
                    self.runner.run(build_cut_command(job.source, seg_start, seg_len, clip, opts.fast_split))
                    clips.append(clip)

                output_file = job.mix_path(out_idx)
                self.log_line(f"Mixing segments for video {out_idx + 1}/{opts.outputs_per_input}...")
                concatenate_segments(
                    self.runner, self.session, clips, output_file,
                    crossfade=opts.crossfade, log_line=self.log_line
                )
                self.log_line(f"Completed video {out_idx + 1}/{opts.outputs_per_input}: {output_file.name}")

                for clip in clips:
                    clip.unlink(missing_ok=True)
        return opts.outputs_per_input
