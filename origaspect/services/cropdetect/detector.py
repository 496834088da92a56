# origaspect/services/cropdetect/detector.py
from __future__ import annotations

import threading
from decimal import Decimal
from typing import Optional

from origaspect.common.logging import get_logger
from origaspect.common.probe.cropdetect_helpers import (
    build_cropdetect_cmd,
    format_cmd,
    is_cropdetect_line,
    parse_crop_dimensions,
)
from origaspect.domain.policies.sample_plan import build_sample_plan
from origaspect.domain.ports.cropdetect import AspectRatioDetectorPort
from origaspect.domain.ports.process import ProcessRunnerPort
from origaspect.services.process.subprocess_runner import ProcessLaunchError, SubprocessRunner

logger = get_logger(__name__)

DETECT_TIMEOUT_SEC = 30 * 60
DEFAULT_CHECKS_PER_VIDEO = 10


class CropdetectDetector(AspectRatioDetectorPort):
    """
    Finds the visible picture size of a video with ffmpeg's cropdetect and
    returns width / height.

    A single ffmpeg process reads a 1-second window at each sample point;
    the last cropdetect line it prints wins, since crop bounds tighten as
    more frames are seen.
    """

    def __init__(
        self,
        ffmpeg_bin: str = "ffmpeg",
        runner: Optional[ProcessRunnerPort] = None,
        *,
        checks_per_video: int = DEFAULT_CHECKS_PER_VIDEO,
        timeout_sec: float = DETECT_TIMEOUT_SEC,
    ):
        self.ffmpeg_bin = ffmpeg_bin
        self.runner = runner or SubprocessRunner()
        self.checks_per_video = checks_per_video
        self.timeout_sec = timeout_sec

    def detect(
        self,
        file_path: str,
        duration_sec: Optional[float],
        cancel_event: Optional[threading.Event] = None,
        *,
        checks_per_video: Optional[int] = None,
    ) -> Optional[Decimal]:
        plan = build_sample_plan(duration_sec, checks_per_video or self.checks_per_video)
        if plan is None:
            logger.info("No usable duration for %s; skipping cropdetect.", file_path)
            return None

        cmd = build_cropdetect_cmd(self.ffmpeg_bin, file_path, plan)
        logger.info(
            "Performing ffmpeg cropdetect on %s (%d samples every %d ms).",
            file_path, plan.sample_count, plan.interval_ms,
        )
        logger.debug("%s", format_cmd(cmd))

        last_match: list[str] = []

        def _on_line(line: str) -> None:
            if is_cropdetect_line(line):
                if last_match:
                    last_match[0] = line
                else:
                    last_match.append(line)

        try:
            result = self.runner.run(
                cmd,
                _on_line,
                cancel_event=cancel_event,
                timeout_sec=self.timeout_sec,
            )
        except ProcessLaunchError as e:
            logger.warning("Failed to detect original aspect ratio for %s: %s", file_path, e)
            return None

        if result.cancelled or result.timed_out:
            logger.warning(
                "Cropdetect for %s was %s; discarding output.",
                file_path, "cancelled" if result.cancelled else "timed out",
            )
            return None

        if result.returncode != 0:
            logger.warning(
                "Failed to detect original aspect ratio for %s. Process exited with code %s.",
                file_path, result.returncode,
            )
            return None

        dims = parse_crop_dimensions(last_match[0] if last_match else None)
        if dims is None:
            logger.warning("Failed to parse height/width from ffmpeg output for %s.", file_path)
            return None

        width, height = dims
        logger.info("Cropdetect found width of %d and height of %d for %s.", width, height, file_path)
        return Decimal(width) / Decimal(height)
