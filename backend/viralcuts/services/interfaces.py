"""
Collaborator contracts used by the clip pipeline.

Only the calls the pipeline makes are part of the contract; concrete
implementations live next to this module and tests pass fakes.
"""
from typing import Protocol, Sequence


class Transcriber(Protocol):
    def transcribe(self, audio_path: str) -> str:
        """Return the SRT transcript of an audio file."""
        ...


class MediaRenderer(Protocol):
    async def remove_silence(self, input_path: str, output_path: str) -> str:
        ...

    async def extract_audio(self, input_path: str, output_path: str) -> str:
        ...

    async def render_clip(self, input_path: str, output_path: str, start: float, end: float) -> str:
        ...

    async def concatenate(self, paths: Sequence[str], output_path: str) -> str:
        ...
