from viralcuts.schemas.clip import (
    ProcessServerFileRequest,
    ClipSchema,
    FailedStepSchema,
    ProcessVideoResponse,
    VideoLibraryResponse
)

__all__ = [
    "ProcessServerFileRequest",
    "ClipSchema",
    "FailedStepSchema",
    "ProcessVideoResponse",
    "VideoLibraryResponse",
]
