"""
Transcript Processor for ViralCuts.

Provides three key features:
1. Timestamp parsing - SRT "HH:MM:SS,mmm" strings to seconds
2. Subtitle parsing - raw SRT text into ordered entries
3. Chunking - group entries into time-bounded windows for the moment model
"""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from viralcuts.core.errors import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass
class TranscriptConfig:
    """Configuration constants for transcript processing."""

    # Chunking parameters
    CHUNK_MINUTES: float = 12.0

    # Minimum number of non-empty lines in an SRT block (id, time line, text)
    MIN_BLOCK_LINES: int = 3


# Global config instance
CONFIG = TranscriptConfig()

TIMESTAMP_PATTERN = re.compile(r"^(\d+):(\d{2}):(\d{2}),(\d{3})$")
START_TIMESTAMP_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2},\d{3}) -->")


@dataclass(frozen=True)
class SubtitleEntry:
    """One parsed SRT block."""
    id: str
    start_seconds: float
    text: str
    raw_block: str
    time_line: str = ""


# ============================================================================
# TIMESTAMPS
# ============================================================================

def parse_timestamp(text: Optional[str]) -> float:
    """
    Convert an SRT timestamp ("00:01:05,250") to seconds (65.25).

    Empty, missing or unparseable input yields 0.0. A genuine "00:00:00,000"
    and a parse failure are therefore indistinguishable to callers.
    """
    if not text:
        return 0.0

    match = TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        logger.debug(f"Unparseable timestamp {text!r}, defaulting to 0")
        return 0.0

    hours, minutes, seconds, millis = (int(part) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds + millis / 1000


def format_timestamp(seconds: float) -> str:
    """Format seconds as an SRT timestamp (used for prompts and logs)."""
    total_millis = int(round(max(0.0, seconds) * 1000))
    hours, rest = divmod(total_millis, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


# ============================================================================
# SUBTITLE PARSING
# ============================================================================

def parse_subtitles(
    raw_text: Optional[str],
    config: TranscriptConfig = None
) -> List[SubtitleEntry]:
    """
    Parse a raw SRT document into ordered subtitle entries.

    Algorithm:
    1. Normalize line endings and split on blank lines
    2. Drop whitespace-only lines inside each block
    3. Keep blocks with id, time line and at least one text line

    Blocks with fewer lines are silently dropped. An input without any
    well-formed block returns an empty list, never raises.

    Args:
        raw_text: SRT formatted transcript
        config: Optional custom configuration

    Returns:
        List of SubtitleEntry in source order
    """
    if not raw_text:
        return []

    if config is None:
        config = CONFIG

    normalized = raw_text.replace("\r\n", "\n")
    entries = []

    for block in normalized.split("\n\n"):
        lines = [line for line in block.split("\n") if line.strip()]
        if len(lines) < config.MIN_BLOCK_LINES:
            continue

        entry_id = lines[0]
        time_line = lines[1]
        text = " ".join(lines[2:])

        match = START_TIMESTAMP_PATTERN.search(time_line)
        start_seconds = parse_timestamp(match.group(1)) if match else 0.0

        entries.append(SubtitleEntry(
            id=entry_id,
            start_seconds=start_seconds,
            text=text,
            raw_block=block,
            time_line=time_line
        ))

    return entries


# ============================================================================
# CHUNKING
# ============================================================================

def chunk_entries(
    entries: Sequence[SubtitleEntry],
    window_seconds: float
) -> List[List[SubtitleEntry]]:
    """
    Group entries into contiguous chunks whose span stays within a window.

    A new chunk starts when an entry begins more than `window_seconds` after
    the first entry of the open chunk. Entries are never split and the chunks
    partition the input exactly, in order.

    Raises:
        InvalidInputError: If window_seconds is not positive
    """
    if window_seconds <= 0:
        raise InvalidInputError(f"Chunk window must be positive, got {window_seconds}")

    chunks = []
    current_chunk: List[SubtitleEntry] = []
    chunk_start_time = None

    for entry in entries:
        if chunk_start_time is None:
            chunk_start_time = entry.start_seconds

        if entry.start_seconds - chunk_start_time > window_seconds and current_chunk:
            chunks.append(current_chunk)
            current_chunk = []
            chunk_start_time = entry.start_seconds

        current_chunk.append(entry)

    if current_chunk:
        chunks.append(current_chunk)

    return chunks


def chunk_by_duration(
    entries: Sequence[SubtitleEntry],
    minutes: float = None,
    config: TranscriptConfig = None
) -> List[List[SubtitleEntry]]:
    """Chunk entries into windows of `minutes` (default: 12 min)."""
    if config is None:
        config = CONFIG
    if minutes is None:
        minutes = config.CHUNK_MINUTES

    return chunk_entries(entries, minutes * 60)


def render_chunk_text(chunk: Sequence[SubtitleEntry]) -> str:
    """Rebuild the SRT excerpt for a chunk from its original blocks."""
    return "\n\n".join(entry.raw_block for entry in chunk)


# ============================================================================
# TRANSCRIPT PROCESSOR CLASS
# ============================================================================

class TranscriptProcessor:
    """
    Main class for processing transcripts.

    Combines subtitle parsing and chunking.
    """

    def __init__(self, config: TranscriptConfig = None):
        self.config = config or TranscriptConfig()

    def parse(self, raw_text: str) -> List[SubtitleEntry]:
        """Parse SRT text into entries."""
        return parse_subtitles(raw_text, self.config)

    def chunk(self, entries: Sequence[SubtitleEntry]) -> List[List[SubtitleEntry]]:
        """Chunk entries into time windows."""
        return chunk_by_duration(entries, config=self.config)

    def process(self, raw_text: str) -> dict:
        """
        Full processing pipeline.

        1. Parse SRT into entries
        2. Chunk entries into time windows

        Returns dict with entries, chunks and counts
        """
        entries = self.parse(raw_text)
        chunks = self.chunk(entries)

        return {
            "entries": entries,
            "chunks": chunks,
            "entry_count": len(entries),
            "chunk_count": len(chunks)
        }
