"""
Clip Pipeline - turns a long video into rendered viral clips.

Steps:
1. Remove silence (checkpoint: <name>_clean.mp4)
2. Extract audio from the clean video
3. Transcribe to SRT (checkpoint: <name>_transcription.json)
4. Analyze for viral moments (checkpoint: <name>_analysis.json, saved only when
   every chunk was analyzed)
5. Render one clip per selected moment (checkpoint: existing clip files)

Collaborators are injected so tests can run the whole flow without ffmpeg
or network access.
"""
import asyncio
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from viralcuts.core.config import settings
from viralcuts.core.constants import PipelineStep
from viralcuts.core.errors import (
    InvalidInputError,
    PipelineError,
    RenderError,
    TranscriptionServiceError,
)
from viralcuts.services.interfaces import MediaRenderer, Transcriber
from viralcuts.services.moment_selector import Candidate, candidate_from_proposal
from viralcuts.services.moment_service import MomentService

logger = logging.getLogger(__name__)

TOTAL_STEPS = 5


def _discard(path: Path) -> None:
    """Remove a possibly partial output so it is never mistaken for a checkpoint."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not delete partial output {path}: {e}")


@dataclass
class ClipResult:
    """A rendered clip."""
    name: str
    path: str
    start: float
    end: float
    title: str
    score: float


@dataclass
class FailedStep:
    """A step that failed without aborting the run."""
    step: str
    target: str
    error: str


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    source_path: str
    working_path: str
    clips: List[ClipResult] = field(default_factory=list)
    failed_steps: List[FailedStep] = field(default_factory=list)
    compilation_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CheckpointStore:
    """JSON checkpoints stored next to the source video, keyed by its name."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, base_name: str, kind: str) -> Path:
        return self.directory / f"{base_name}_{kind}.json"

    def load(self, base_name: str, kind: str) -> Optional[Any]:
        path = self.path_for(base_name, kind)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt checkpoint {path}: {e}")
            return None

    def save(self, base_name: str, kind: str, payload: Any) -> Path:
        path = self.path_for(base_name, kind)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)
        return path


class ClipPipeline:
    """Sequences silence removal, transcription, analysis and rendering."""

    def __init__(
        self,
        renderer: MediaRenderer,
        transcriber: Transcriber,
        moment_service: MomentService,
        output_dir: Optional[str] = None
    ):
        self.renderer = renderer
        self.transcriber = transcriber
        self.moment_service = moment_service
        self.output_dir = Path(output_dir or settings.OUTPUT_DIR)

    async def run(self, video_path: str, build_compilation: bool = False) -> PipelineResult:
        """
        Process a video end to end.

        Args:
            video_path: Path of the source video
            build_compilation: Also concatenate the rendered clips into one file

        Returns:
            PipelineResult with the clips that rendered and any failed steps

        Raises:
            PipelineError: If silence removal or transcription fails
        """
        source = Path(video_path)
        if not source.exists():
            raise PipelineError("input", f"File not found: {video_path}")

        base_name = source.stem
        checkpoints = CheckpointStore(source.parent)
        logger.info(f"[STEP 1/{TOTAL_STEPS}] Processing started for: {source}")

        working_path = await self._remove_silence(source)
        result = PipelineResult(source_path=str(source), working_path=str(working_path))

        transcription = await self._transcribe(working_path, base_name, checkpoints)
        moments = await self._analyze(transcription, base_name, checkpoints, result)

        logger.info(f"[STEP 5/{TOTAL_STEPS}] Processing {len(moments)} video clips...")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        await self._render_clips(working_path, base_name, moments, result)

        if build_compilation and result.clips:
            compilation = self.output_dir / f"{base_name}_compilation.mp4"
            try:
                await self.renderer.concatenate([clip.path for clip in result.clips], str(compilation))
                result.compilation_path = str(compilation)
            except (RenderError, InvalidInputError) as e:
                logger.error(f"Compilation failed: {e}")
                _discard(compilation)
                result.failed_steps.append(FailedStep(PipelineStep.RENDER, str(compilation), str(e)))

        logger.info(
            f"Pipeline complete: {len(result.clips)} clips, {len(result.failed_steps)} failed steps"
        )
        return result

    async def _remove_silence(self, source: Path) -> Path:
        clean_path = source.with_name(f"{source.stem}_clean.mp4")
        if clean_path.exists():
            logger.info(f"[STEP 1/{TOTAL_STEPS}] Found pre-processed video, skipping silence removal.")
            return clean_path

        logger.info(f"[STEP 1/{TOTAL_STEPS}] Removing silence from video (Preprocessing)...")
        try:
            await self.renderer.remove_silence(str(source), str(clean_path))
        except (RenderError, InvalidInputError) as e:
            _discard(clean_path)
            raise PipelineError(PipelineStep.SILENCE_REMOVAL, str(e))
        return clean_path

    async def _transcribe(self, working_path: Path, base_name: str, checkpoints: CheckpointStore) -> str:
        cached = checkpoints.load(base_name, "transcription")
        if isinstance(cached, dict) and isinstance(cached.get("srt"), str):
            logger.info(f"[STEP 3/{TOTAL_STEPS}] Found existing transcription, loading from cache...")
            return cached["srt"]

        audio_path = working_path.with_suffix(".mp3")
        logger.info(f"[STEP 2/{TOTAL_STEPS}] Extracting audio from clean video...")
        try:
            await self.renderer.extract_audio(str(working_path), str(audio_path))
        except RenderError as e:
            raise PipelineError(PipelineStep.AUDIO_EXTRACTION, str(e))

        try:
            logger.info(f"[STEP 3/{TOTAL_STEPS}] Starting transcription...")
            transcription = await asyncio.to_thread(self.transcriber.transcribe, str(audio_path))
        except TranscriptionServiceError as e:
            raise PipelineError(PipelineStep.TRANSCRIPTION, str(e))
        finally:
            try:
                audio_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete temp audio file: {e}")

        checkpoints.save(base_name, "transcription", {"srt": transcription})
        return transcription

    async def _analyze(
        self,
        transcription: str,
        base_name: str,
        checkpoints: CheckpointStore,
        result: PipelineResult
    ) -> Dict[str, Candidate]:
        cached = checkpoints.load(base_name, "analysis")
        if isinstance(cached, dict):
            path = checkpoints.path_for(base_name, "analysis")
            logger.info(f"[STEP 4/{TOTAL_STEPS}] Found existing analysis, loading from cache...")
            logger.info(f"NOTE: delete {path} to re-analyze with updated prompts")
            moments = {}
            for key, payload in cached.items():
                try:
                    moments[key] = candidate_from_proposal(key, payload)
                except InvalidInputError as e:
                    logger.warning(f"Skipping cached moment {key}: {e}")
            return moments

        logger.info(f"[STEP 4/{TOTAL_STEPS}] Analyzing for viral moments...")
        report = await asyncio.to_thread(self.moment_service.analyze, transcription)
        moments = report.moments
        logger.info(f"Analysis complete. Moments found: {len(moments)}")

        for index, error in sorted(report.failed_chunks.items()):
            result.failed_steps.append(FailedStep(PipelineStep.ANALYSIS, f"chunk{index}", error))

        # A partial analysis is not cached, so the next run retries every chunk
        if report.failed_chunks:
            logger.warning(
                f"{len(report.failed_chunks)} chunk(s) failed analysis, not saving analysis checkpoint"
            )
        else:
            checkpoints.save(base_name, "analysis", {key: c.to_dict() for key, c in moments.items()})
        return moments

    async def _render_clips(
        self,
        working_path: Path,
        base_name: str,
        moments: Dict[str, Candidate],
        result: PipelineResult
    ) -> None:
        ordered = sorted(moments.items(), key=lambda item: item[1].start)

        for i, (key, moment) in enumerate(ordered):
            output_path = self.output_dir / f"{base_name}_{key}.mp4"
            clip = ClipResult(
                name=key,
                path=str(output_path),
                start=moment.start,
                end=moment.end,
                title=moment.title,
                score=moment.score
            )

            if output_path.exists():
                logger.info(f"Clip already exists: {output_path}, skipping...")
                result.clips.append(clip)
                continue

            logger.info(f"Processing clip {i + 1}/{len(ordered)}: {key}")
            try:
                await self.renderer.render_clip(str(working_path), str(output_path), moment.start, moment.end)
            except (RenderError, InvalidInputError) as e:
                logger.error(f"Clip {key} failed: {e}")
                _discard(output_path)
                result.failed_steps.append(FailedStep(PipelineStep.RENDER, key, str(e)))
                continue

            result.clips.append(clip)


def build_default_pipeline(output_dir: Optional[str] = None) -> ClipPipeline:
    """Wire the pipeline with the ffmpeg renderer and OpenAI/Groq services."""
    from viralcuts.services.media_renderer import FFmpegRenderer
    from viralcuts.services.transcription_service import OpenAITranscriber

    return ClipPipeline(
        renderer=FFmpegRenderer(),
        transcriber=OpenAITranscriber(),
        moment_service=MomentService(),
        output_dir=output_dir
    )
