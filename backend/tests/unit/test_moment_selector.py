"""
Unit tests for the Moment Selector.
"""
import pytest

from viralcuts.core.constants import ClipConstraints
from viralcuts.core.errors import InvalidInputError
from viralcuts.services.moment_selector import (
    Candidate,
    candidate_from_proposal,
    overlaps,
    priority_order,
    resolve_overlaps,
    select_moments,
)


def make_candidates(raw):
    return {key: candidate_from_proposal(key, payload) for key, payload in raw.items()}


class TestCandidateFromProposal:
    """Tests for building candidates from raw proposals."""

    def test_full_payload(self):
        candidate = candidate_from_proposal("k", {"start": "12.5", "end": 60, "title": "Hook", "score": "88"})

        assert candidate == Candidate(key="k", start=12.5, end=60.0, title="Hook", score=88.0)

    def test_titulo_accepted(self):
        candidate = candidate_from_proposal("k", {"start": 0, "end": 45, "titulo": "Gancho"})

        assert candidate.title == "Gancho"

    def test_missing_title_and_score_defaulted(self):
        candidate = candidate_from_proposal("k", {"start": 0, "end": 45})

        assert candidate.title == ClipConstraints.DEFAULT_TITLE
        assert candidate.score == 0

    def test_non_numeric_score_defaulted(self):
        candidate = candidate_from_proposal("k", {"start": 0, "end": 45, "score": "high"})

        assert candidate.score == 0

    @pytest.mark.parametrize("score", [float("nan"), "inf", "-Infinity"])
    def test_non_finite_score_defaulted(self, score):
        candidate = candidate_from_proposal("k", {"start": 0, "end": 45, "score": score})

        assert candidate.score == 0

    @pytest.mark.parametrize("payload", [
        {"end": 45},
        {"start": 0},
        {"start": "zero", "end": 45},
        {"start": 50, "end": 45},
        {"start": 45, "end": 45},
        {"start": "nan", "end": 45},
        {"start": 0, "end": float("nan")},
        {"start": "-Infinity", "end": 45},
        {"start": 0, "end": float("inf")},
        ["not", "a", "dict"],
    ])
    def test_invalid_payload_raises(self, payload):
        with pytest.raises(InvalidInputError):
            candidate_from_proposal("k", payload)

    def test_to_dict(self):
        candidate = Candidate(key="k", start=1, end=2, title="T", score=3)

        assert candidate.to_dict() == {"start": 1, "end": 2, "title": "T", "score": 3}


class TestOverlaps:
    """Tests for the tolerance-aware overlap predicate."""

    def test_clear_overlap(self):
        assert overlaps(Candidate("a", 0, 50), Candidate("b", 40, 90))

    def test_touching_ranges_do_not_overlap(self):
        assert not overlaps(Candidate("a", 0, 50), Candidate("b", 50, 100))

    def test_overlap_below_tolerance_ignored(self):
        assert not overlaps(Candidate("a", 0, 50), Candidate("b", 49.7, 100))

    def test_overlap_above_tolerance(self):
        assert overlaps(Candidate("a", 0, 50), Candidate("b", 49.0, 100))

    def test_containment(self):
        assert overlaps(Candidate("a", 0, 100), Candidate("b", 20, 30))


class TestResolveOverlaps:
    """Tests for greedy overlap resolution."""

    def test_reference_example(self):
        candidates = make_candidates({
            "a": {"start": 0, "end": 50, "score": 90},
            "b": {"start": 40, "end": 90, "score": 80},
            "c": {"start": 100, "end": 150, "score": 70},
        })

        result = resolve_overlaps(candidates)

        assert set(result) == {"a", "c"}

    def test_touching_candidates_both_kept(self):
        candidates = make_candidates({
            "a": {"start": 0, "end": 50.3, "score": 90},
            "b": {"start": 50, "end": 100, "score": 80},
        })

        assert set(resolve_overlaps(candidates)) == {"a", "b"}

    def test_tie_break_prefers_longer(self):
        candidates = make_candidates({
            "short": {"start": 0, "end": 45, "score": 80},
            "long": {"start": 10, "end": 90, "score": 80},
        })

        assert set(resolve_overlaps(candidates)) == {"long"}

    def test_missing_score_ranks_last(self):
        candidates = make_candidates({
            "unscored": {"start": 0, "end": 90},
            "scored": {"start": 30, "end": 80, "score": 10},
        })

        assert set(resolve_overlaps(candidates)) == {"scored"}

    def test_idempotent(self, sample_proposals):
        candidates = make_candidates(sample_proposals)

        once = resolve_overlaps(candidates)
        twice = resolve_overlaps(once)

        assert once == twice

    def test_result_is_pairwise_non_overlapping(self):
        raw = {
            f"c{i}": {"start": i * 17, "end": i * 17 + 45, "score": (i * 37) % 100}
            for i in range(20)
        }

        result = list(resolve_overlaps(make_candidates(raw)).values())

        for i, a in enumerate(result):
            for b in result[i + 1:]:
                assert not overlaps(a, b)

    def test_fields_preserved(self, sample_proposals):
        candidates = make_candidates(sample_proposals)

        result = resolve_overlaps(candidates)

        assert result["clip3"].title == "Legacy title"
        assert result["clip1"] is candidates["clip1"]

    def test_empty(self):
        assert resolve_overlaps({}) == {}

    def test_report_counts_rejected(self, sample_proposals):
        report = select_moments(make_candidates(sample_proposals))

        assert set(report.kept) == {"clip1", "clip3"}
        assert [c.key for c in report.rejected] == ["clip2"]

    def test_priority_order(self):
        candidates = make_candidates({
            "low": {"start": 0, "end": 50, "score": 10},
            "high_short": {"start": 0, "end": 45, "score": 90},
            "high_long": {"start": 0, "end": 80, "score": 90},
        })

        assert [key for key, _ in priority_order(candidates)] == ["high_long", "high_short", "low"]
