# origaspect/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (item name, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Reconcile (batch) report
# ---------------------------------------------------------------------------
@dataclass
class ReconcileReport(BaseReport):
    planned: int = 0
    written: int = 0
    skipped: int = 0
    cancelled: int = 0
    errors: int = 0

    # per SkipReason tallies, e.g. {"already_set": 3}
    skip_reasons: Dict[str, int] = field(default_factory=dict)
    # item name -> written aspect ratio text
    writes: Dict[str, str] = field(default_factory=dict)

    def bump_skip(self, reason: str) -> None:
        self.skipped += 1
        self.skip_reasons[reason] = int(self.skip_reasons.get(reason, 0)) + 1
