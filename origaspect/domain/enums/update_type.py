from __future__ import annotations
from enum import StrEnum

class ItemUpdateType(StrEnum):
    none = "none"
    metadata_import = "metadata_import"
