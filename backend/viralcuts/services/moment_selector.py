"""
Moment Selector for ViralCuts.

Greedy overlap resolution over proposed clips: higher score wins, longer
clip breaks ties, and a small tolerance lets clips that merely touch coexist.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from viralcuts.core.constants import ClipConstraints
from viralcuts.core.errors import InvalidInputError

logger = logging.getLogger(__name__)

OVERLAP_TOLERANCE = ClipConstraints.OVERLAP_TOLERANCE_SECONDS


@dataclass(frozen=True)
class Candidate:
    """A proposed clip with a time range, title and virality score."""
    key: str
    start: float
    end: float
    title: str = ClipConstraints.DEFAULT_TITLE
    score: float = 0

    @property
    def duration(self) -> float:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "title": self.title,
            "score": self.score
        }


@dataclass
class SelectionReport:
    """Outcome of overlap resolution, with the rejected clips for reporting."""
    kept: Dict[str, Candidate] = field(default_factory=dict)
    rejected: List[Candidate] = field(default_factory=list)


def _to_float(value: Any, name: str, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"Candidate {key!r} has invalid {name}: {value!r}")
    if not math.isfinite(number):
        raise InvalidInputError(f"Candidate {key!r} has non-finite {name}: {value!r}")
    return number


def candidate_from_proposal(key: str, payload: Mapping[str, Any]) -> Candidate:
    """
    Build a Candidate from a raw proposal dict.

    This is the only place where proposal fields get defaults: the title
    (also accepted as "titulo") falls back to a placeholder and a missing,
    non-numeric or non-finite score becomes 0.

    Raises:
        InvalidInputError: If start/end are missing, non-numeric, non-finite or inverted
    """
    if not isinstance(payload, Mapping):
        raise InvalidInputError(f"Candidate {key!r} is not an object")

    if payload.get("start") is None or payload.get("end") is None:
        raise InvalidInputError(f"Candidate {key!r} is missing start or end")

    start = _to_float(payload["start"], "start", key)
    end = _to_float(payload["end"], "end", key)
    if end <= start:
        raise InvalidInputError(f"Candidate {key!r} ends before it starts ({start} -> {end})")

    title = payload.get("title") or payload.get("titulo") or ClipConstraints.DEFAULT_TITLE

    try:
        score = float(payload.get("score") or 0)
    except (TypeError, ValueError):
        score = 0.0
    if not math.isfinite(score):
        score = 0.0

    return Candidate(key=key, start=start, end=end, title=str(title), score=score)


def overlaps(a: Candidate, b: Candidate, tolerance: float = OVERLAP_TOLERANCE) -> bool:
    """True when two clips overlap by more than the tolerance."""
    return a.start < b.end - tolerance and b.start < a.end - tolerance


def priority_order(candidates: Mapping[str, Candidate]) -> List[Tuple[str, Candidate]]:
    """Sort by score (high to low), then by duration (long to short)."""
    return sorted(
        candidates.items(),
        key=lambda item: (item[1].score or 0, item[1].duration),
        reverse=True
    )


def select_moments(
    candidates: Mapping[str, Candidate],
    tolerance: float = OVERLAP_TOLERANCE
) -> SelectionReport:
    """
    Greedily keep the highest-priority clips that do not overlap.

    This is interval scheduling by priority, not an optimal independent set:
    it only guarantees that the result is pairwise non-overlapping and that
    higher-priority clips are preferred.
    """
    report = SelectionReport()

    for key, clip in priority_order(candidates):
        if any(overlaps(clip, kept, tolerance) for kept in report.kept.values()):
            report.rejected.append(clip)
        else:
            report.kept[key] = clip

    return report


def resolve_overlaps(candidates: Mapping[str, Candidate]) -> Dict[str, Candidate]:
    """Return the non-overlapping subset of candidates, keyed as in the input."""
    report = select_moments(candidates)
    logger.info(
        f"Overlap removal: kept {len(report.kept)} clips, "
        f"removed {len(report.rejected)} overlapping"
    )
    return report.kept
