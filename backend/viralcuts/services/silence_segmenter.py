"""
Silence Segmenter for ViralCuts.

Turns ffmpeg `silencedetect` detections into the complementary "sound"
segments and the trim/concat filter graph that stitches them back together.
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Sequence

from viralcuts.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_MERGE_GAP_SECONDS = 0.1

SILENCE_START_PATTERN = re.compile(r"silence_start: (-?[\d.]+)")
SILENCE_END_PATTERN = re.compile(r"silence_end: (-?[\d.]+)")


@dataclass(frozen=True)
class SilenceInterval:
    """A detected span of near-silence."""
    start: float
    end: float


@dataclass(frozen=True)
class SoundSegment:
    """A span of audible content to keep."""
    start: float
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


def _validate_silences(silences: Sequence[SilenceInterval]) -> None:
    previous_start = None
    for index, silence in enumerate(silences):
        if silence.start >= silence.end:
            raise InvalidInputError(
                f"Silence #{index} has start >= end ({silence.start} >= {silence.end})"
            )
        if previous_start is not None and silence.start < previous_start:
            raise InvalidInputError(
                f"Silences must be sorted by start (#{index} starts at {silence.start})"
            )
        previous_start = silence.start


def compute_sound_segments(
    silences: Sequence[SilenceInterval],
    total_duration: float,
    padding: float,
    merge_gap_threshold: float = DEFAULT_MERGE_GAP_SECONDS
) -> List[SoundSegment]:
    """
    Compute the padded sound segments between silences.

    Algorithm:
    1. Walk silences in order, tracking the end of the previous silence
    2. Emit the gap before each silence if it is wider than the threshold
    3. Emit the tail after the last silence

    Adjacent or overlapping silences merge implicitly because only the
    previous end is tracked. The tail segment's start is not clamped to 0.

    Args:
        silences: Silence intervals sorted by start
        total_duration: Media duration in seconds
        padding: Seconds kept on each side of a sound segment
        merge_gap_threshold: Minimum gap between silences worth keeping

    Returns:
        Sound segments in chronological order

    Raises:
        InvalidInputError: On unsorted or inverted silences, negative padding
            or non-positive duration
    """
    if total_duration <= 0:
        raise InvalidInputError(f"Total duration must be positive, got {total_duration}")
    if padding < 0:
        raise InvalidInputError(f"Padding must not be negative, got {padding}")

    if not silences:
        return [SoundSegment(start=0.0, end=total_duration)]

    _validate_silences(silences)

    sounds = []
    last_end = 0.0

    for silence in silences:
        if silence.start - last_end > merge_gap_threshold:
            sounds.append(SoundSegment(
                start=max(0.0, last_end - padding),
                end=min(total_duration, silence.start + padding)
            ))
        last_end = silence.end

    if last_end < total_duration:
        # TODO: confirm with product whether this start should clamp to 0 like the others
        sounds.append(SoundSegment(start=last_end - padding, end=total_duration))

    return sounds


def parse_silencedetect_output(output: str) -> List[SilenceInterval]:
    """
    Parse ffmpeg `silencedetect` log output into silence intervals.

    The i-th `silence_end` is paired with the i-th `silence_start`. Ends
    without a start are ignored; a start without an end (silence running to
    the end of the file) is dropped.
    """
    starts = [float(value) for value in SILENCE_START_PATTERN.findall(output)]
    ends = [float(value) for value in SILENCE_END_PATTERN.findall(output)]

    intervals = []
    for index, end in enumerate(ends):
        if index < len(starts):
            intervals.append(SilenceInterval(start=starts[index], end=end))

    return intervals


def build_trim_concat_filter(segments: Sequence[SoundSegment]) -> str:
    """
    Build an ffmpeg filter_complex graph that keeps only the given segments.

    Video segment i is paired with audio segment i and all pairs are
    concatenated in order into [outv][outa].
    """
    if not segments:
        raise InvalidInputError("Cannot build a filter graph without segments")

    video_filter = ""
    audio_filter = ""
    concat_parts = ""

    for i, seg in enumerate(segments):
        video_filter += (
            f"[0:v]trim=start={seg.start:.4f}:end={seg.end:.4f},"
            f"setpts=PTS-STARTPTS[v{i}];"
        )
        audio_filter += (
            f"[0:a]atrim=start={seg.start:.4f}:end={seg.end:.4f},"
            f"asetpts=PTS-STARTPTS[a{i}];"
        )
        concat_parts += f"[v{i}][a{i}]"

    return f"{video_filter}{audio_filter}{concat_parts}concat=n={len(segments)}:v=1:a=1[outv][outa]"
