"""
FFmpeg-backed media renderer.

Every ffmpeg/ffprobe call is an awaited subprocess that either returns the
output path or raises RenderError with the exit code and captured stderr.
Filter graphs and concat lists go through temporary script files, which are
removed on every exit path.
"""
import asyncio
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from viralcuts.core.config import settings
from viralcuts.core.constants import RenderDefaults
from viralcuts.core.errors import InvalidInputError, RenderError
from viralcuts.services.silence_segmenter import (
    SilenceInterval,
    build_trim_concat_filter,
    compute_sound_segments,
    parse_silencedetect_output,
)

logger = logging.getLogger(__name__)

STDERR_TAIL_CHARS = 2000


def letterbox_filter(width: int = RenderDefaults.FRAME_WIDTH, height: int = RenderDefaults.FRAME_HEIGHT) -> str:
    """Scale to fit the frame, then pad with black bars to exactly width x height."""
    return (
        f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
        f"pad={width}:{height}:-1:-1:color=black"
    )


def concat_list_content(paths: Sequence[str]) -> str:
    """Build an ffmpeg concat demuxer list."""
    lines = []
    for path in paths:
        normalized = str(path).replace("\\", "/").replace("'", "'\\''")
        lines.append(f"file '{normalized}'")
    return "\n".join(lines)


@contextmanager
def temporary_script(content: str, directory: Optional[str] = None, prefix: str = "script_") -> Iterator[str]:
    """Write content to a temp file and remove it when the block exits."""
    handle = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        prefix=prefix,
        suffix=".txt",
        dir=directory,
        delete=False
    )
    try:
        with handle:
            handle.write(content)
        yield handle.name
    finally:
        try:
            os.unlink(handle.name)
        except FileNotFoundError:
            pass


@contextmanager
def staged_output(output_path: str) -> Iterator[str]:
    """
    Yield a sibling path to write to; move it onto output_path on success.

    A failed or interrupted write never leaves a file at output_path, so an
    existing output can be trusted as complete.
    """
    final = Path(output_path)
    partial = final.with_name(f"{final.stem}.partial{final.suffix}")
    try:
        yield str(partial)
        partial.replace(final)
    finally:
        partial.unlink(missing_ok=True)


class FFmpegRenderer:
    """Cut, trim, extract and concatenate media with ffmpeg."""

    def __init__(
        self,
        ffmpeg_bin: Optional[str] = None,
        ffprobe_bin: Optional[str] = None,
        silence_threshold_db: Optional[float] = None,
        min_silence_duration: Optional[float] = None,
        padding: Optional[float] = None,
        merge_gap: Optional[float] = None
    ):
        self.ffmpeg_bin = ffmpeg_bin or settings.FFMPEG_BIN
        self.ffprobe_bin = ffprobe_bin or settings.FFPROBE_BIN
        self.silence_threshold_db = (
            settings.SILENCE_THRESHOLD_DB if silence_threshold_db is None else silence_threshold_db
        )
        self.min_silence_duration = (
            settings.MIN_SILENCE_DURATION if min_silence_duration is None else min_silence_duration
        )
        self.padding = settings.SILENCE_PADDING if padding is None else padding
        self.merge_gap = settings.SILENCE_MERGE_GAP if merge_gap is None else merge_gap

    async def _run(self, args: List[str], description: str) -> Tuple[str, str]:
        """Run a subprocess and return (stdout, stderr); raise RenderError on failure."""
        logger.debug(f"Running: {' '.join(args)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise RenderError(f"{description} could not start: {e}")

        stdout, stderr = await process.communicate()
        stdout_text = stdout.decode("utf-8", errors="replace")
        stderr_text = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            raise RenderError(
                f"{description} failed with code {process.returncode}",
                exit_code=process.returncode,
                stderr=stderr_text[-STDERR_TAIL_CHARS:]
            )
        return stdout_text, stderr_text

    async def probe_duration(self, path: str) -> float:
        """Media duration in seconds via ffprobe."""
        stdout, _ = await self._run(
            [
                self.ffprobe_bin,
                "-v", "error",
                "-show_entries", "format=duration",
                "-of", "json",
                str(path),
            ],
            "ffprobe duration"
        )
        try:
            duration = float(json.loads(stdout).get("format", {}).get("duration", 0) or 0)
        except (ValueError, AttributeError):
            duration = 0.0
        if duration <= 0:
            raise RenderError(f"Failed to get duration of {path}")
        return duration

    async def detect_silences(self, path: str) -> List[SilenceInterval]:
        """Run ffmpeg silencedetect and parse the detected intervals."""
        _, stderr = await self._run(
            [
                self.ffmpeg_bin,
                "-i", str(path),
                "-af", f"silencedetect=n={self.silence_threshold_db:g}dB:d={self.min_silence_duration:g}",
                "-f", "null", "-",
            ],
            "FFmpeg silence detection"
        )
        return parse_silencedetect_output(stderr)

    async def remove_silence(self, input_path: str, output_path: str) -> str:
        """
        Write a copy of the input with silent stretches cut out.

        Falls back to a plain copy when nothing is silent or when every
        stretch of sound is too short to keep.
        """
        logger.info(f"Removing silence from: {input_path}...")
        total_duration = await self.probe_duration(input_path)
        silences = await self.detect_silences(input_path)

        segments = []
        if silences:
            segments = compute_sound_segments(silences, total_duration, self.padding, self.merge_gap)
            if not segments:
                logger.warning("Video seems to be entirely silent, copying original file")
        else:
            logger.info("No silence detected. Copying original file.")

        if not segments:
            with staged_output(output_path) as partial_path:
                await asyncio.to_thread(shutil.copyfile, input_path, partial_path)
            return output_path

        filter_graph = build_trim_concat_filter(segments)
        logger.info(f"Generating cut: {len(segments)} segments using filter file...")

        directory = str(Path(output_path).parent)
        with staged_output(output_path) as partial_path, \
                temporary_script(filter_graph, directory=directory, prefix="filter_") as filter_path:
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-i", str(input_path),
                    "-filter_complex_script", filter_path,
                    "-map", "[outv]", "-map", "[outa]",
                    "-c:v", RenderDefaults.VIDEO_CODEC,
                    "-preset", RenderDefaults.PRESET,
                    "-crf", str(RenderDefaults.CRF),
                    "-y", partial_path,
                ],
                "FFmpeg trim"
            )

        logger.info(f"Silence removal complete: {output_path}")
        return output_path

    async def extract_audio(self, input_path: str, output_path: str) -> str:
        """Extract the audio track as mp3."""
        logger.info(f"Extracting audio from: {input_path} to {output_path}")
        await self._run(
            [
                self.ffmpeg_bin,
                "-y",
                "-i", str(input_path),
                "-vn",
                "-acodec", RenderDefaults.AUDIO_CODEC,
                str(output_path),
            ],
            "FFmpeg audio extraction"
        )
        return output_path

    async def render_clip(self, input_path: str, output_path: str, start: float, end: float) -> str:
        """Cut [start, end) and letterbox it into the canonical frame."""
        if end <= start:
            raise InvalidInputError(f"Clip end must be after start ({start} -> {end})")

        logger.info(f"Processing video: {input_path} from {start} to {end}")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        directory = str(Path(output_path).parent)
        with staged_output(output_path) as partial_path, \
                temporary_script(letterbox_filter(), directory=directory, prefix="vfilter_") as filter_path:
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-y",
                    "-ss", f"{start:.3f}",
                    "-i", str(input_path),
                    "-t", f"{end - start:.3f}",
                    "-filter_script:v", filter_path,
                    partial_path,
                ],
                "FFmpeg clip render"
            )

        logger.info(f"Video processed successfully: {output_path}")
        return output_path

    async def concatenate(self, paths: Sequence[str], output_path: str) -> str:
        """Join clips rendered with identical settings using the concat demuxer."""
        if not paths:
            raise InvalidInputError("No videos to concatenate")

        logger.info(f"Concatenating {len(paths)} videos to {output_path}...")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with staged_output(output_path) as partial_path, temporary_script(
            concat_list_content(paths),
            directory=str(Path(output_path).parent),
            prefix="concat_list_"
        ) as list_path:
            await self._run(
                [
                    self.ffmpeg_bin,
                    "-f", "concat",
                    "-safe", "0",
                    "-i", list_path,
                    "-c", "copy",
                    "-y", partial_path,
                ],
                "FFmpeg concat"
            )

        logger.info(f"Concatenation complete: {output_path}")
        return output_path
