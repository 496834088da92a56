from __future__ import annotations
from enum import StrEnum

class MediaProtocol(StrEnum):
    file = "file"
    http = "http"
    rtmp = "rtmp"
    rtsp = "rtsp"
    udp = "udp"
    rtp = "rtp"
    ftp = "ftp"

    @classmethod
    def from_path(cls, path: str | None) -> "MediaProtocol":
        """Infer the protocol from a path/URL scheme; anything without a known scheme is a file."""
        s = (path or "").strip().lower()
        if "://" not in s:
            return cls.file
        scheme = s.split("://", 1)[0]
        if scheme in ("http", "https"):
            return cls.http
        try:
            return cls(scheme)
        except ValueError:
            return cls.file
