"""
Video API routes for turning library files and uploads into clips.
"""
import asyncio
import logging
import shutil
import time
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from viralcuts.core.config import settings
from viralcuts.core.constants import VIDEO_EXTENSIONS
from viralcuts.core.errors import PipelineError
from viralcuts.schemas.clip import (
    ClipSchema,
    FailedStepSchema,
    ProcessServerFileRequest,
    ProcessVideoResponse,
    VideoLibraryResponse
)
from viralcuts.workers.clip_pipeline import ClipPipeline, PipelineResult, build_default_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])


def get_pipeline() -> ClipPipeline:
    """Pipeline dependency; tests override it with fakes."""
    return build_default_pipeline()


def _build_response(result: PipelineResult) -> ProcessVideoResponse:
    return ProcessVideoResponse(
        message="Processing completed successfully",
        source_path=result.source_path,
        working_path=result.working_path,
        clips=[ClipSchema.model_validate(c) for c in result.clips],
        failed_steps=[FailedStepSchema.model_validate(f) for f in result.failed_steps],
        compilation_path=result.compilation_path
    )


async def _run_pipeline(pipeline: ClipPipeline, video_path: Path) -> ProcessVideoResponse:
    try:
        result = await pipeline.run(str(video_path))
    except PipelineError as e:
        logger.error(f"Error processing {video_path}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    return _build_response(result)


@router.get("/library", response_model=VideoLibraryResponse)
async def list_library_videos() -> VideoLibraryResponse:
    """
    List the videos available in the server-side library folder.

    The folder is created when it does not exist yet.
    """
    library = Path(settings.VIDEOS_DIR)
    library.mkdir(parents=True, exist_ok=True)

    videos = sorted(
        p.name for p in library.iterdir()
        if p.is_file() and p.suffix.lower() in VIDEO_EXTENSIONS
    )
    return VideoLibraryResponse(videos=videos)


@router.post("/process-server-file", response_model=ProcessVideoResponse)
async def process_server_file(
    request: ProcessServerFileRequest,
    pipeline: ClipPipeline = Depends(get_pipeline)
) -> ProcessVideoResponse:
    """
    Process a file that already sits in the library folder.

    - Rejects blank names and names containing a path separator
    - Returns 404 when the file does not exist
    """
    filename = request.filename.strip()
    if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid filename"
        )

    video_path = Path(settings.VIDEOS_DIR) / filename
    if not video_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="File not found on server"
        )

    logger.info(f"Processing server file: {video_path}")
    return await _run_pipeline(pipeline, video_path)


@router.post("/process-video", response_model=ProcessVideoResponse)
async def process_uploaded_video(
    video: UploadFile = File(...),
    pipeline: ClipPipeline = Depends(get_pipeline)
) -> ProcessVideoResponse:
    """
    Save an uploaded video under the uploads folder and process it.
    """
    original_name = Path(video.filename or "").name
    if not original_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No video file uploaded"
        )

    uploads = Path(settings.UPLOADS_DIR)
    uploads.mkdir(parents=True, exist_ok=True)
    video_path = uploads / f"{int(time.time() * 1000)}-{original_name}"

    def _save() -> None:
        with video_path.open("wb") as out:
            shutil.copyfileobj(video.file, out)

    await asyncio.to_thread(_save)
    logger.info(f"Saved upload to {video_path}")

    return await _run_pipeline(pipeline, video_path)
