# origaspect/services/probe/ffprobe_adapter.py
from __future__ import annotations

import json
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from origaspect.common.logging import get_logger
from origaspect.common.probe.ffprobe_helpers import build_ffprobe_cmd, parse_ffprobe
from origaspect.common.settings import get_settings
from origaspect.domain.entities.probe import MediaInfo, MediaSourceRequest
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.ports.probe import MediaInspectorPort

logger = get_logger(__name__)


@dataclass(frozen=True)
class FFprobeError(RuntimeError):
    """Adapter-level error for probe failures."""
    message: str
    stderr: Optional[str] = None
    rc: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class FFprobeInspector(MediaInspectorPort):
    """
    Infrastructure adapter implementing MediaInspectorPort using `ffprobe`.
    Safe for use from worker threads (I/O-bound).
    """

    def __init__(self, ffprobe_bin: Optional[str] = None, timeout_sec: Optional[int] = None):
        cfg = get_settings()
        candidate = ffprobe_bin or cfg.effective_ffprobe_bin
        if not candidate or candidate == "ffprobe":
            # try to resolve absolute path for nicer errors
            resolved = shutil.which(candidate or "ffprobe")
            if not resolved:
                raise FFprobeError("ffprobe not found on PATH; set FFPROBE_BIN or install ffmpeg.")
            candidate = resolved

        self.ffprobe_bin = candidate
        self.timeout_sec = int(timeout_sec or cfg.ffprobe.timeout_sec or 15)
        self.log_level = cfg.ffprobe.log_level

    # ---- Port API -------------------------------------------------------------
    def inspect(self, request: MediaSourceRequest) -> Optional[MediaInfo]:
        try:
            return self.probe(request)
        except FFprobeError as e:
            logger.warning("ffprobe failed for %s: %s (rc=%s)", request.path, e, e.rc)
            return None

    def probe(self, request: MediaSourceRequest) -> MediaInfo:
        if not request.path:
            raise FFprobeError("No path provided to probe().")
        if request.protocol == MediaProtocol.file and not Path(request.path).is_file():
            raise FFprobeError(f"File not found: {request.path}")

        cmd = build_ffprobe_cmd(request.path, ffprobe_bin=self.ffprobe_bin, log_level=self.log_level)

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                check=False,  # we handle rc manually to attach stderr
            )
        except subprocess.TimeoutExpired as e:
            raise FFprobeError(f"ffprobe timed out after {self.timeout_sec}s", stderr=str(e)) from e
        except OSError as e:
            raise FFprobeError("Failed to execute ffprobe (OS error).", stderr=str(e)) from e

        if proc.returncode != 0:
            raise FFprobeError("ffprobe returned non-zero exit code", stderr=proc.stderr, rc=proc.returncode)

        try:
            data = json.loads(proc.stdout or "{}")
        except json.JSONDecodeError as e:
            raise FFprobeError("ffprobe produced invalid JSON", stderr=proc.stdout) from e

        return self.to_media_info(request, data)

    # ---- Parsing helpers ------------------------------------------------------
    @staticmethod
    def to_media_info(request: MediaSourceRequest, data: dict) -> MediaInfo:
        parsed = parse_ffprobe(data)
        return MediaInfo(
            path=request.path,
            duration_sec=parsed["duration_sec"],
            video_type=request.video_type,
            container=parsed["container"],
            aspect_ratio=parsed["aspect_ratio"],
            width=parsed["width"],
            height=parsed["height"],
            codec_video=parsed["codec_video"],
        )
