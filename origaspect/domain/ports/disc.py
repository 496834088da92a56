from __future__ import annotations

from typing import List, Optional, Protocol
from origaspect.domain.entities.disc import BlurayDiscInfo


class DiscResolverPort(Protocol):
    def primary_dvd_vob_files(self, path: str) -> List[str]: ...

    def bluray_disc_info(self, path: str) -> Optional[BlurayDiscInfo]: ...

    def primary_bluray_m2ts_files(self, path: str) -> List[str]: ...
