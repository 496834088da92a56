# origaspect/domain/entities/video_item.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from origaspect.domain.enums.item_kind import ItemKind, ASPECT_RATIO_KINDS
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.video_type import VideoType


@dataclass(frozen=True)
class VideoStream:
    """The item's default video stream as the host last recorded it."""
    aspect_ratio: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    codec: Optional[str] = None


@dataclass
class VideoItem:
    """
    A library video as handed over by the host. `aspect_ratio` is the only
    field reconciliation ever writes; everything else is read-only input.

    Invariants that we keep here:
      - name and path are non-empty
      - duration is non-negative when provided
    """
    name: str
    path: str
    kind: ItemKind = ItemKind.movie
    video_type: VideoType = VideoType.video_file
    protocol: MediaProtocol = MediaProtocol.file

    aspect_ratio: Optional[str] = None
    duration_sec: Optional[float] = None
    default_video_stream: Optional[VideoStream] = None

    is_shortcut: bool = False
    shortcut_path: Optional[str] = None

    def __post_init__(self):
        if not (self.name or "").strip():
            raise ValueError("VideoItem requires a name")
        if not (self.path or "").strip():
            raise ValueError("VideoItem requires a path")
        if self.duration_sec is not None and self.duration_sec < 0:
            raise ValueError("duration_sec must be >= 0")
        if self.is_shortcut and not (self.shortcut_path or "").strip():
            raise ValueError("shortcut items require shortcut_path")

    @property
    def supports_aspect_ratio(self) -> bool:
        return self.kind in ASPECT_RATIO_KINDS

    @property
    def has_aspect_ratio(self) -> bool:
        return bool((self.aspect_ratio or "").strip())

    @property
    def stream_aspect_ratio(self) -> Optional[str]:
        return self.default_video_stream.aspect_ratio if self.default_video_stream else None
