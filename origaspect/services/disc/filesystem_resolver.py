# origaspect/services/disc/filesystem_resolver.py
from __future__ import annotations

import re
import struct
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from origaspect.common.logging import get_logger
from origaspect.domain.entities.disc import BlurayDiscInfo
from origaspect.domain.ports.disc import DiscResolverPort

logger = get_logger(__name__)

# VTS_<title set>_<part>.VOB ; part 0 is the menu
_VOB_RE = re.compile(r"^VTS_(\d{2})_(\d)\.VOB$", re.IGNORECASE)


def _find_child_dir(root: Path, name: str) -> Optional[Path]:
    """Case-insensitive lookup of a direct child directory."""
    if root.name.upper() == name:
        return root
    if not root.is_dir():
        return None
    for child in root.iterdir():
        if child.is_dir() and child.name.upper() == name:
            return child
    return None


def _size(p: Path) -> int:
    try:
        return p.stat().st_size
    except OSError:
        return 0


def read_mpls_clips(mpls: Path) -> List[str]:
    """
    Clip ids (e.g. "00001") referenced by a Blu-ray .mpls playlist, in play
    order. Only the PlayItem clip names are read:

        0x00  "MPLS" + 4-byte version
        0x08  uint32 PlayList start
        PlayList: uint32 length, 2 reserved, uint16 item count, uint16 subpath count,
                  then per item: uint16 length, 5-char clip id, 4-char codec id, ...
    """
    data = mpls.read_bytes()
    if len(data) < 12 or data[:4] != b"MPLS":
        raise ValueError(f"not an MPLS file: {mpls}")
    (pl_start,) = struct.unpack_from(">I", data, 8)
    (n_items,) = struct.unpack_from(">H", data, pl_start + 6)

    clips: List[str] = []
    pos = pl_start + 10
    for _ in range(n_items):
        (item_len,) = struct.unpack_from(">H", data, pos)
        clip_id = data[pos + 2:pos + 7].decode("ascii", "replace")
        if clip_id not in clips:
            clips.append(clip_id)
        pos += 2 + item_len
    return clips


class FilesystemDiscResolver(DiscResolverPort):
    """
    Resolves DVD (VIDEO_TS) and Blu-ray (BDMV) folder structures to the
    stream files worth analyzing. `path` may be the disc root or the
    VIDEO_TS / BDMV folder itself.
    """

    # ---- DVD ---------------------------------------------------------------
    def primary_dvd_vob_files(self, path: str) -> List[str]:
        """
        VOBs of the largest title set (by total size), in part order.
        Menu VOBs (_0) are never included.
        """
        video_ts = _find_child_dir(Path(path), "VIDEO_TS")
        if video_ts is None:
            logger.debug("No VIDEO_TS folder under %s", path)
            return []

        title_sets: Dict[str, List[tuple[int, Path]]] = defaultdict(list)
        for f in video_ts.iterdir():
            m = _VOB_RE.match(f.name)
            if not m or not f.is_file():
                continue
            vts, part = m.group(1), int(m.group(2))
            if part == 0:
                continue
            title_sets[vts].append((part, f))

        if not title_sets:
            return []

        best = max(title_sets.values(), key=lambda parts: sum(_size(p) for _, p in parts))
        return [str(p) for _, p in sorted(best)]

    # ---- Blu-ray -----------------------------------------------------------
    def _bdmv(self, path: str) -> Optional[Path]:
        return _find_child_dir(Path(path), "BDMV")

    def _stream_files(self, bdmv: Path) -> Dict[str, Path]:
        stream_dir = _find_child_dir(bdmv, "STREAM")
        if stream_dir is None:
            return {}
        return {
            f.stem.upper(): f
            for f in stream_dir.iterdir()
            if f.is_file() and f.suffix.lower() == ".m2ts"
        }

    def _primary_playlist(self, bdmv: Path, streams: Dict[str, Path]) -> tuple[Optional[str], List[Path]]:
        """Playlist whose referenced clips add up to the most bytes."""
        playlist_dir = _find_child_dir(bdmv, "PLAYLIST")
        best_name: Optional[str] = None
        best_files: List[Path] = []
        best_size = -1
        if playlist_dir is not None:
            for mpls in sorted(playlist_dir.iterdir()):
                if mpls.suffix.lower() != ".mpls" or not mpls.is_file():
                    continue
                try:
                    clips = read_mpls_clips(mpls)
                except (ValueError, struct.error, OSError) as e:
                    logger.debug("Skipping unreadable playlist %s: %s", mpls, e)
                    continue
                files = [streams[c.upper()] for c in clips if c.upper() in streams]
                size = sum(_size(f) for f in files)
                if files and size > best_size:
                    best_name, best_files, best_size = mpls.name, files, size
        return best_name, best_files

    def bluray_disc_info(self, path: str) -> Optional[BlurayDiscInfo]:
        bdmv = self._bdmv(path)
        if bdmv is None:
            logger.debug("No BDMV folder under %s", path)
            return None
        streams = self._stream_files(bdmv)
        playlist_name, _ = self._primary_playlist(bdmv, streams)
        files = sorted(streams.values())
        return BlurayDiscInfo(
            files=[str(f) for f in files],
            playlist_name=playlist_name,
            total_size_bytes=sum(_size(f) for f in files),
        )

    def primary_bluray_m2ts_files(self, path: str) -> List[str]:
        """
        Stream files of the primary playlist, in play order. Without any
        readable playlist, the single largest .m2ts stands in.
        """
        bdmv = self._bdmv(path)
        if bdmv is None:
            return []
        streams = self._stream_files(bdmv)
        if not streams:
            return []
        _, files = self._primary_playlist(bdmv, streams)
        if not files:
            files = [max(streams.values(), key=_size)]
        return [str(f) for f in files]
