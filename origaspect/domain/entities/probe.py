# origaspect/domain/entities/probe.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.video_type import VideoType


@dataclass(frozen=True)
class MediaSourceRequest:
    """What the media inspector is asked to look at."""
    path: str
    protocol: MediaProtocol = MediaProtocol.file
    video_type: VideoType = VideoType.video_file


@dataclass(frozen=True)
class MediaInfo:
    """
    Normalized, framework-free result of a media inspection (e.g., ffprobe).
    Container-level facts only; the aspect ratio is the default video
    stream's reported display aspect ratio, as text.
    """
    path: str
    duration_sec: Optional[float] = None
    video_type: VideoType = VideoType.video_file
    container: Optional[str] = None
    aspect_ratio: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    codec_video: Optional[str] = None
