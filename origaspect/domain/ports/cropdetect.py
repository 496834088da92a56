from __future__ import annotations

import threading
from decimal import Decimal
from typing import Optional, Protocol


class AspectRatioDetectorPort(Protocol):
    def detect(
        self,
        file_path: str,
        duration_sec: Optional[float],
        cancel_event: Optional[threading.Event] = None,
        *,
        checks_per_video: Optional[int] = None,
    ) -> Optional[Decimal]: ...
