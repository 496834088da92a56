# origaspect/domain/policies/sample_plan.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class SamplePlan:
    """
    Where to look inside a video. One 1-second window is read at each offset.

    sample_count = min(checks_per_video, whole seconds of duration), at least 1
    interval_ms  = duration_ms // sample_count
    """
    duration_ms: int
    sample_count: int
    interval_ms: int

    @property
    def offsets_ms(self) -> List[int]:
        return [i * self.interval_ms for i in range(self.sample_count)]

    @property
    def timestamps(self) -> List[str]:
        return [format_timestamp(ms) for ms in self.offsets_ms]


def format_timestamp(ms: int) -> str:
    """Milliseconds -> HH:MM:SS (sub-second part truncated)."""
    total = max(0, int(ms)) // 1000
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def build_sample_plan(duration_sec: Optional[float], checks_per_video: int) -> Optional[SamplePlan]:
    """None when the duration is unknown or not positive; detection is skipped then."""
    if duration_sec is None or duration_sec <= 0:
        return None
    if checks_per_video < 1:
        raise ValueError("checks_per_video must be >= 1")

    duration_ms = int(round(duration_sec * 1000))
    count = max(1, min(int(checks_per_video), int(duration_sec)))
    interval = duration_ms // count
    return SamplePlan(duration_ms=duration_ms, sample_count=count, interval_ms=interval)
