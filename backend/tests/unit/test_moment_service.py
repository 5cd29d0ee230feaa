"""
Unit tests for the Moment Service.

The AI provider is always a mock; no test reaches the network.
"""
import json
from unittest.mock import MagicMock

import pytest

from viralcuts.core.errors import AIProviderError, MomentServiceError
from viralcuts.services.moment_service import MomentService


@pytest.fixture
def mock_provider():
    return MagicMock()


class TestPropose:
    """Tests for a single chunk proposal."""

    def test_returns_model_object(self, mock_provider, sample_proposals):
        mock_provider.generate_json.return_value = sample_proposals
        service = MomentService(provider=mock_provider)

        result = service.propose("1\n00:00:01,000 --> 00:00:02,000\nHi", 0, 3, time_range=(1.0, 700.0))

        assert result == sample_proposals

    def test_prompt_mentions_chunk_and_range(self, mock_provider):
        mock_provider.generate_json.return_value = {}
        service = MomentService(provider=mock_provider, model="test-model")

        service.propose("TRANSCRIPT BODY", 1, 3, time_range=(720.0, 1440.0))

        kwargs = mock_provider.generate_json.call_args.kwargs
        user_prompt = kwargs["messages"][1]["content"]
        assert "PART 2 of 3" in user_prompt
        assert "00:12:00,000 to 00:24:00,000" in user_prompt
        assert "TRANSCRIPT BODY" in user_prompt
        assert kwargs["model"] == "test-model"

    def test_unwraps_single_wrapper_key(self, mock_provider, sample_proposals):
        mock_provider.generate_json.return_value = {"moments": sample_proposals}
        service = MomentService(provider=mock_provider)

        assert service.propose("text", 0, 1) == sample_proposals

    def test_single_cut_not_unwrapped(self, mock_provider):
        single = {"c1": {"start": 10, "end": 60, "title": "Only one", "score": 50}}
        mock_provider.generate_json.return_value = single
        service = MomentService(provider=mock_provider)

        assert service.propose("text", 0, 1) == single

    def test_provider_error_wrapped(self, mock_provider):
        mock_provider.generate_json.side_effect = AIProviderError("rate limited")
        service = MomentService(provider=mock_provider)

        with pytest.raises(MomentServiceError, match="rate limited"):
            service.propose("text", 0, 1)

    def test_invalid_json_wrapped(self, mock_provider):
        mock_provider.generate_json.side_effect = json.JSONDecodeError("Expecting value", "oops", 0)
        service = MomentService(provider=mock_provider)

        with pytest.raises(MomentServiceError):
            service.propose("text", 0, 1)

    def test_non_object_rejected(self, mock_provider):
        mock_provider.generate_json.return_value = [{"start": 1, "end": 50}]
        service = MomentService(provider=mock_provider)

        with pytest.raises(MomentServiceError):
            service.propose("text", 0, 1)


class TestAnalyzeTranscription:
    """Tests for the full chunked analysis."""

    def test_merges_chunks_with_namespaced_keys(self, mock_provider, long_srt):
        mock_provider.generate_json.side_effect = [
            {"c1": {"start": 10, "end": 60, "title": "First", "score": 90}},
            {"c1": {"start": 800, "end": 850, "title": "Second", "score": 80}},
            {"c1": {"start": 1600, "end": 1650, "title": "Third", "score": 70}},
        ]
        service = MomentService(provider=mock_provider)

        result = service.analyze_transcription(long_srt)

        assert set(result) == {"chunk0_c1", "chunk1_c1", "chunk2_c1"}
        assert result["chunk1_c1"].title == "Second"
        assert mock_provider.generate_json.call_count == 3

    def test_failed_chunk_yields_nothing(self, mock_provider, long_srt):
        mock_provider.generate_json.side_effect = [
            {"c1": {"start": 10, "end": 60, "score": 90}},
            AIProviderError("All providers failed"),
            {"c1": {"start": 1600, "end": 1650, "score": 70}},
        ]
        service = MomentService(provider=mock_provider)

        result = service.analyze_transcription(long_srt)

        assert set(result) == {"chunk0_c1", "chunk2_c1"}

    def test_failed_chunk_reported(self, mock_provider, long_srt):
        mock_provider.generate_json.side_effect = [
            {"c1": {"start": 10, "end": 60, "score": 90}},
            AIProviderError("All providers failed"),
            {"c1": {"start": 1600, "end": 1650, "score": 70}},
        ]
        service = MomentService(provider=mock_provider)

        report = service.analyze(long_srt)

        assert set(report.moments) == {"chunk0_c1", "chunk2_c1"}
        assert list(report.failed_chunks) == [1]
        assert "All providers failed" in report.failed_chunks[1]

    def test_clean_run_reports_no_failures(self, mock_provider, sample_srt):
        mock_provider.generate_json.return_value = {"c1": {"start": 1, "end": 50}}
        service = MomentService(provider=mock_provider)

        report = service.analyze(sample_srt)

        assert list(report.moments) == ["chunk0_c1"]
        assert report.failed_chunks == {}

    def test_invalid_proposals_skipped(self, mock_provider, sample_srt):
        mock_provider.generate_json.return_value = {
            "good": {"start": 1, "end": 50},
            "inverted": {"start": 50, "end": 1},
            "missing": {"title": "No times"},
        }
        service = MomentService(provider=mock_provider)

        result = service.analyze_transcription(sample_srt)

        assert list(result) == ["chunk0_good"]
        assert result["chunk0_good"].score == 0

    def test_overlaps_resolved_across_chunks(self, mock_provider, long_srt):
        mock_provider.generate_json.side_effect = [
            {"a": {"start": 700, "end": 760, "score": 60}},
            {"b": {"start": 720, "end": 800, "score": 95}},
            {},
        ]
        service = MomentService(provider=mock_provider)

        result = service.analyze_transcription(long_srt)

        assert set(result) == {"chunk1_b"}

    def test_unparseable_transcript_returns_empty(self, mock_provider):
        service = MomentService(provider=mock_provider)

        assert service.analyze_transcription("no subtitles here") == {}
        mock_provider.generate_json.assert_not_called()
