"""
Moment Service for finding viral clips in a transcript.

Map-reduce over time-bounded SRT chunks:
1. Parse the SRT transcript and split it into 12-minute chunks
2. Ask the LLM for candidate cuts in each chunk (a failed chunk yields nothing
   and is reported)
3. Merge candidates under chunk-namespaced keys
4. Resolve overlaps greedily by score and duration
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from viralcuts.core.config import settings
from viralcuts.core.constants import AIModels, ClipConstraints
from viralcuts.core.errors import AIProviderError, InvalidInputError, MomentServiceError
from viralcuts.prompts import MOMENTS_SYSTEM_PROMPT, MOMENTS_USER_PROMPT_TEMPLATE
from viralcuts.services.ai_provider import AIProvider
from viralcuts.services.moment_selector import Candidate, candidate_from_proposal, resolve_overlaps
from viralcuts.services.transcript_processor import (
    TranscriptConfig,
    TranscriptProcessor,
    format_timestamp,
    render_chunk_text,
)

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Selected moments plus the chunks whose proposal request failed."""
    moments: Dict[str, Candidate] = field(default_factory=dict)
    failed_chunks: Dict[int, str] = field(default_factory=dict)


class MomentService:
    """Service for proposing and selecting viral moments from SRT transcripts."""

    def __init__(
        self,
        provider: Optional[AIProvider] = None,
        processor: Optional[TranscriptProcessor] = None,
        model: str = AIModels.MOMENTS_MODEL
    ):
        self._provider = provider
        self.processor = processor or TranscriptProcessor(
            TranscriptConfig(CHUNK_MINUTES=settings.CHUNK_MINUTES)
        )
        self.model = model

    @property
    def provider(self) -> AIProvider:
        """Lazily create the default provider when none was injected."""
        if self._provider is None:
            self._provider = AIProvider()
        return self._provider

    def propose(
        self,
        chunk_text: str,
        chunk_index: int,
        total_chunks: int,
        time_range: Optional[Tuple[float, float]] = None
    ) -> Dict[str, Any]:
        """
        Ask the LLM for candidate cuts inside one chunk.

        Args:
            chunk_text: SRT excerpt for the chunk
            chunk_index: Zero-based chunk index
            total_chunks: Number of chunks in the transcript
            time_range: Optional (first, last) entry start in seconds

        Returns:
            Raw proposals keyed by the model's own short keys

        Raises:
            MomentServiceError: If the provider fails or the body is not a JSON object
        """
        start_time, end_time = time_range or (0.0, 0.0)
        user_prompt = MOMENTS_USER_PROMPT_TEMPLATE.format(
            chunk_number=chunk_index + 1,
            total_chunks=total_chunks,
            start_time=format_timestamp(start_time),
            end_time=format_timestamp(end_time),
            min_duration=ClipConstraints.MIN_DURATION_SECONDS,
            max_duration=ClipConstraints.MAX_DURATION_SECONDS,
            transcript=chunk_text
        )

        messages = [
            {"role": "system", "content": MOMENTS_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt}
        ]

        try:
            parsed = self.provider.generate_json(messages=messages, model=self.model, temperature=0.3)
        except AIProviderError as e:
            raise MomentServiceError(f"Chunk {chunk_index + 1} request failed: {e}")
        except json.JSONDecodeError as e:
            raise MomentServiceError(f"Chunk {chunk_index + 1} returned invalid JSON: {e}")

        if not isinstance(parsed, dict):
            raise MomentServiceError(
                f"Chunk {chunk_index + 1} returned {type(parsed).__name__}, expected an object"
            )

        # Some models wrap the cuts: {"moments": {...}}
        if len(parsed) == 1:
            inner = next(iter(parsed.values()))
            if isinstance(inner, dict) and inner and all(isinstance(v, dict) for v in inner.values()):
                parsed = inner

        return parsed

    def analyze(self, transcription_text: str) -> AnalysisReport:
        """
        Find non-overlapping viral moments in an SRT transcript.

        A chunk whose proposal request fails contributes no candidates and is
        listed in `failed_chunks`, so callers can tell a degraded result from
        a transcript that simply has no strong moments.

        Returns:
            AnalysisReport with candidates keyed as "chunk{i}_{key}"
        """
        report = AnalysisReport()

        entries = self.processor.parse(transcription_text)
        if not entries:
            logger.warning("Could not parse SRT or empty transcript, nothing to analyze")
            return report

        chunks = self.processor.chunk(entries)
        logger.info(f"Analysis: split transcript into {len(chunks)} time-based chunks")

        all_moments: Dict[str, Candidate] = {}

        for i, chunk in enumerate(chunks):
            logger.info(f"Analyzing chunk {i + 1}/{len(chunks)}... ({len(chunk)} lines)")
            time_range = (chunk[0].start_seconds, chunk[-1].start_seconds)

            try:
                proposals = self.propose(render_chunk_text(chunk), i, len(chunks), time_range=time_range)
            except MomentServiceError as e:
                logger.warning(f"Error analyzing chunk {i}: {e}")
                report.failed_chunks[i] = str(e)
                continue

            for key, payload in proposals.items():
                merged_key = f"chunk{i}_{key}"
                try:
                    all_moments[merged_key] = candidate_from_proposal(merged_key, payload)
                except InvalidInputError as e:
                    logger.warning(f"Skipping proposal {merged_key}: {e}")

        logger.info(f"Detecting and removing overlapping clips among {len(all_moments)} candidates...")
        report.moments = resolve_overlaps(all_moments)
        return report

    def analyze_transcription(self, transcription_text: str) -> Dict[str, Candidate]:
        """Selected candidates only; failed chunks are logged and dropped."""
        return self.analyze(transcription_text).moments
