# origaspect/domain/dataclasses/reconcile.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple, Union

from origaspect.domain.enums.skip_reason import SkipReason
from origaspect.domain.enums.update_type import ItemUpdateType


@dataclass(frozen=True)
class ReconcileConfig:
    """
    Read-only snapshot of the aspect options, taken once per reconcile call.
    Defaults mirror AspectConfig so tests can build one without settings.
    """
    accepted_aspect_ratios: Tuple[str, ...] = (
        "1.33", "1.78", "1.85", "2.00", "2.20", "2.35", "2.37", "2.39", "2.40",
    )
    checks_per_video: int = 10
    always_write_original_aspect_ratio: bool = False
    override_existing_aspect_ratio: bool = False


@dataclass(frozen=True)
class AspectRatioCandidate:
    text: str       # configured form, written back verbatim
    value: Decimal


@dataclass(frozen=True)
class Skip:
    reason: SkipReason
    detail: Optional[str] = None

    @property
    def update_type(self) -> ItemUpdateType:
        return ItemUpdateType.none


@dataclass(frozen=True)
class Write:
    aspect_ratio: str
    value: Decimal
    detected: Decimal
    update_type: ItemUpdateType = ItemUpdateType.metadata_import


ReconciliationDecision = Union[Skip, Write]
