"""
Transcription Service backed by OpenAI speech-to-text.

Returns SRT text so the transcript keeps its own timestamps.
"""
import logging
from pathlib import Path
from typing import Optional

from openai import OpenAI

from viralcuts.core.config import settings
from viralcuts.core.constants import AIModels
from viralcuts.core.errors import TranscriptionServiceError

logger = logging.getLogger(__name__)


class OpenAITranscriber:
    """Transcribe audio files to SRT with OpenAI Whisper."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = AIModels.TRANSCRIPTION_MODEL,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key or settings.OPENAI_API_KEY
        self.model = model
        self.timeout = timeout or settings.OPENAI_REQUEST_TIMEOUT_SEC
        self._client = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise TranscriptionServiceError("OPENAI_API_KEY is not configured")
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self._client

    def transcribe(self, audio_path: str) -> str:
        """
        Transcribe an audio file.

        Args:
            audio_path: Path to an audio file (mp3, wav, ...)

        Returns:
            SRT formatted transcript

        Raises:
            TranscriptionServiceError: If the file is missing or the API call fails
        """
        path = Path(audio_path)
        if not path.exists():
            raise TranscriptionServiceError(f"File not found: {audio_path}")

        logger.info(f"Transcribing {path.name} with {self.model}...")

        try:
            with path.open("rb") as audio_file:
                transcription = self.client.audio.transcriptions.create(
                    model=self.model,
                    file=audio_file,
                    response_format="srt",
                )
        except TranscriptionServiceError:
            raise
        except Exception as e:
            logger.error(f"Transcription error detail: {e}")
            raise TranscriptionServiceError(f"Transcription failed: {e}")

        # SRT responses come back as a plain string
        text = transcription if isinstance(transcription, str) else getattr(transcription, "text", "")
        logger.info(f"Transcription complete ({len(text)} chars)")
        return text
