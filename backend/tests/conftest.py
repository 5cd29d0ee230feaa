"""
Pytest configuration and fixtures for testing.
"""
from typing import Iterable, Tuple

import pytest

from viralcuts.services.transcript_processor import format_timestamp


def build_srt(blocks: Iterable[Tuple[float, float, str]]) -> str:
    """Build an SRT document from (start, end, text) tuples."""
    parts = []
    for index, (start, end, text) in enumerate(blocks, start=1):
        parts.append(f"{index}\n{format_timestamp(start)} --> {format_timestamp(end)}\n{text}")
    return "\n\n".join(parts) + "\n"


@pytest.fixture
def sample_srt():
    """Short SRT transcript with three entries."""
    return (
        "1\n"
        "00:00:01,000 --> 00:00:04,000\n"
        "Welcome back to the channel.\n"
        "\n"
        "2\n"
        "00:00:05,500 --> 00:00:09,000\n"
        "Today we talk about\n"
        "compound interest.\n"
        "\n"
        "3\n"
        "00:01:05,250 --> 00:01:10,000\n"
        "Here is the crazy part.\n"
    )


@pytest.fixture
def long_srt():
    """SRT transcript spanning 30 minutes, one entry per minute."""
    return build_srt((minute * 60.0, minute * 60.0 + 5, f"Line {minute}") for minute in range(30))


@pytest.fixture
def sample_proposals():
    """Raw moment proposals as returned by the model for one chunk."""
    return {
        "clip1": {"start": 10, "end": 60, "title": "The hook", "score": 90},
        "clip2": {"start": 40, "end": 100, "title": "Overlaps the hook", "score": 80},
        "clip3": {"start": 200, "end": 260, "titulo": "Legacy title", "score": 70},
    }
