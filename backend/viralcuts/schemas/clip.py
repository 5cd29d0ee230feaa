"""
Pydantic schemas for clip-processing API endpoints.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


# Request schemas
class ProcessServerFileRequest(BaseModel):
    """Request body for processing a file already in the video library."""
    filename: str = Field(..., description="Name of a file inside the library folder")


# Response schemas
class ClipSchema(BaseModel):
    """A rendered clip."""
    name: str
    path: str
    start: float
    end: float
    title: str
    score: float

    model_config = {"from_attributes": True}


class FailedStepSchema(BaseModel):
    """A step that failed without aborting the run."""
    step: str
    target: str
    error: str

    model_config = {"from_attributes": True}


class ProcessVideoResponse(BaseModel):
    """Response for both processing endpoints."""
    message: str
    source_path: str
    working_path: str
    clips: List[ClipSchema]
    failed_steps: List[FailedStepSchema] = []
    compilation_path: Optional[str] = None


class VideoLibraryResponse(BaseModel):
    """Response for the library listing."""
    videos: List[str]
