# origaspect/services/schemas/aspect.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from origaspect.domain.enums.item_kind import ItemKind
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.video_type import VideoType


# ---------- Ratio parsing ----------
class RatioParseRequest(BaseModel):
    text: str = Field(..., examples=["16:9", "2.39"])


class RatioParseResponse(BaseModel):
    text: str
    valid: bool
    value: Optional[float] = None


class CandidateRead(BaseModel):
    text: str = Field(..., examples=["1.85"])
    value: float


# ---------- Detection ----------
class DetectRequest(BaseModel):
    path: str = Field(..., description="File to analyze", examples=["/media/movies/film.mkv"])
    duration_sec: float = Field(..., gt=0)
    checks_per_video: Optional[int] = Field(None, ge=3)


class DetectResponse(BaseModel):
    path: str
    detected: bool
    ratio: Optional[float] = None


# ---------- Reconciliation ----------
class VideoStreamIn(BaseModel):
    aspect_ratio: Optional[str] = Field(None, examples=["16:9"])
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)
    codec: Optional[str] = None


class VideoItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    path: str = Field(..., min_length=1)
    kind: ItemKind = ItemKind.movie
    video_type: VideoType = VideoType.video_file
    protocol: MediaProtocol = MediaProtocol.file
    aspect_ratio: Optional[str] = None
    duration_sec: Optional[float] = Field(None, ge=0)
    default_video_stream: Optional[VideoStreamIn] = None
    is_shortcut: bool = False
    shortcut_path: Optional[str] = None


class ReconcileOptions(BaseModel):
    """Per-request overrides; anything left unset comes from settings."""
    accepted_aspect_ratios: Optional[List[str]] = None
    checks_per_video: Optional[int] = Field(None, ge=3)
    always_write_original_aspect_ratio: Optional[bool] = None
    override_existing_aspect_ratio: Optional[bool] = None


class ReconcileRequest(BaseModel):
    item: VideoItemIn
    options: ReconcileOptions = Field(default_factory=ReconcileOptions)


class ReconcileResponse(BaseModel):
    action: Literal["write", "skip"]
    update_type: str
    reason: Optional[str] = None
    detail: Optional[str] = None
    aspect_ratio: Optional[str] = Field(None, description="Text written to the item on write")
    detected: Optional[float] = None
