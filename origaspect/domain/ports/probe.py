from __future__ import annotations
from typing import Optional, Protocol
from origaspect.domain.entities.probe import MediaInfo, MediaSourceRequest

class MediaInspectorPort(Protocol):
    # None when the source could not be inspected
    def inspect(self, request: MediaSourceRequest) -> Optional[MediaInfo]: ...
