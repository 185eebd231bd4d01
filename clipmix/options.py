"""Per-run options for the clipmix pipeline."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .exceptions import ConfigurationError


class ProcessingMode(Enum):
    """Sub-pipeline applied to every input file of a run."""
    SPLIT_ONLY = "split"
    SPLIT_REVIEW = "review"
    DIRECT_MIX = "direct"


@dataclass
class PathConfig:
    """Folders used by a run."""
    input_dir: Path
    output_dir: Path
    processed_dir: Path

    def __post_init__(self) -> None:
        """Convert string paths to Path objects."""
        self.input_dir = Path(self.input_dir)
        self.output_dir = Path(self.output_dir)
        self.processed_dir = Path(self.processed_dir)


@dataclass(frozen=True)
class MixOptions:
    """Parameters accepted from the caller.

    Attributes:
        min_segment_seconds: Shortest segment to cut
        max_segment_seconds: Longest segment to cut
        mode: Which sub-pipeline runs per input file
        segments_per_output: Segments in every mix
        outputs_per_input: Mixes produced per input file
        auto_detect_similar: Drop near-duplicate segments before mixing
        similarity_threshold: Fraction of equal fingerprint bits treated as a duplicate
        pause_for_manual_delete: Block for manual review after splitting
        fast_split: Cut with stream copy instead of re-encoding
        crossfade: Join mixes with crossfades instead of hard cuts
    """
    min_segment_seconds: int = 15
    max_segment_seconds: int = 20
    mode: ProcessingMode = ProcessingMode.SPLIT_ONLY
    segments_per_output: int = 3
    outputs_per_input: int = 3
    auto_detect_similar: bool = True
    similarity_threshold: float = 0.92
    pause_for_manual_delete: bool = True
    fast_split: bool = True
    crossfade: bool = False

    def validate(self) -> None:
        """Validate the options.

        Raises:
            ConfigurationError: If any value is out of range
        """
        if self.min_segment_seconds < 1 or self.max_segment_seconds < 1:
            raise ConfigurationError("Segment lengths must be at least 1 second", module="options")
        if self.min_segment_seconds > self.max_segment_seconds:
            raise ConfigurationError(
                f"Time range is invalid: min {self.min_segment_seconds}s > max {self.max_segment_seconds}s",
                module="options"
            )
        if self.mode != ProcessingMode.SPLIT_ONLY:
            if self.segments_per_output < 1 or self.outputs_per_input < 1:
                raise ConfigurationError("Mix values are invalid", module="options")
        if not 0.0 < self.similarity_threshold < 1.0:
            raise ConfigurationError(
                f"Similarity threshold must be between 0 and 1: {self.similarity_threshold}",
                module="options"
            )
