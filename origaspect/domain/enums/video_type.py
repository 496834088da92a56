from __future__ import annotations
from enum import StrEnum

class VideoType(StrEnum):
    video_file = "video_file"
    dvd = "dvd"
    bluray = "bluray"
    iso = "iso"
