"""
Centralized constants for the application.
"""


class PipelineStep:
    """Pipeline stage names, used in logs and failure reports."""
    SILENCE_REMOVAL = "silence_removal"
    AUDIO_EXTRACTION = "audio_extraction"
    TRANSCRIPTION = "transcription"
    ANALYSIS = "analysis"
    RENDER = "render"


# AI Model defaults
class AIModels:
    """Default AI model configurations."""
    MOMENTS_MODEL = "gpt-4o-mini"
    TRANSCRIPTION_MODEL = "whisper-1"


class ClipConstraints:
    """Constraints for proposed clips."""
    MIN_DURATION_SECONDS = 40
    MAX_DURATION_SECONDS = 90
    OVERLAP_TOLERANCE_SECONDS = 0.5
    DEFAULT_TITLE = "Untitled clip"


class RenderDefaults:
    """Output settings for rendered clips."""
    FRAME_WIDTH = 1920
    FRAME_HEIGHT = 1080
    VIDEO_CODEC = "libx264"
    PRESET = "ultrafast"
    CRF = 28
    AUDIO_CODEC = "libmp3lame"


# Library folder filter
VIDEO_EXTENSIONS = (".mp4", ".mov", ".avi", ".mkv")
