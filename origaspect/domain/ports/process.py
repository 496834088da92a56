from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol, Sequence
from origaspect.domain.dataclasses.process import ProcessResult


class ProcessRunnerPort(Protocol):
    def run(
        self,
        cmd: Sequence[str],
        on_stderr_line: Callable[[str], None],
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout_sec: Optional[float] = None,
    ) -> ProcessResult: ...
