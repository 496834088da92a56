# origaspect/domain/entities/disc.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class BlurayDiscInfo:
    """
    Structural summary of a BDMV folder. `files` lists every stream file on
    the disc; `playlist_name` names the playlist treated as primary, if one
    was found.
    """
    files: List[str] = field(default_factory=list)
    playlist_name: Optional[str] = None
    total_size_bytes: int = 0
