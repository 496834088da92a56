# origaspect/common/probe/cropdetect_helpers.py
from __future__ import annotations

import shlex
from pathlib import Path
from typing import List, Optional, Tuple

from origaspect.domain.policies.sample_plan import SamplePlan

CROPDETECT_TAG = "parsed_cropdetect"
SAMPLE_WINDOW_SEC = 1


def build_cropdetect_cmd(ffmpeg_bin: str, input_path: str | Path, plan: SamplePlan) -> List[str]:
    """
    One ffmpeg run over every sample point:

        ffmpeg -nostats -hide_banner
               -ss 00:00:00 -t 1 -i file:<path>   (once per sample)
               ...
               -filter_complex "[0:v][1:v]...concat=n=N:v=1:a=0[v];[v]cropdetect"
               -f null -

    The same file is opened once per sample; the concat filter joins the
    1-second windows so cropdetect sees them as one stream. Output goes to
    the null muxer; only stderr matters.
    """
    if isinstance(input_path, Path):
        input_path = str(input_path)

    cmd: List[str] = [ffmpeg_bin, "-nostats", "-hide_banner"]
    for ts in plan.timestamps:
        cmd += ["-ss", ts, "-t", str(SAMPLE_WINDOW_SEC), "-i", f"file:{input_path}"]

    n = plan.sample_count
    labels = "".join(f"[{i}:v]" for i in range(n))
    graph = f"{labels}concat=n={n}:v=1:a=0[v];[v]cropdetect"
    cmd += ["-filter_complex", graph, "-f", "null", "-"]
    return cmd


def format_cmd(cmd: List[str]) -> str:
    return " ".join(shlex.quote(p) for p in cmd)


def is_cropdetect_line(line: Optional[str]) -> bool:
    return bool(line) and CROPDETECT_TAG in line.lower()


def _first_int_token(tokens: List[str], prefix: str) -> Optional[int]:
    for tok in tokens:
        if tok.lower().startswith(prefix):
            try:
                return int(tok[len(prefix):])
            except ValueError:
                return None
    return None


def parse_crop_dimensions(line: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Pull (w, h) out of a cropdetect line such as

        [Parsed_cropdetect_1 @ 0x55d] x1:0 x2:1919 y1:138 y2:941 w:1920 h:800 x:0 y:140 ... crop=1920:800:0:140

    Only the first `w:` and `h:` tokens count. Returns None when either is
    missing, not an integer, or not positive.
    """
    if not line:
        return None
    tokens = line.split()
    w = _first_int_token(tokens, "w:")
    h = _first_int_token(tokens, "h:")
    if w is None or h is None or w <= 0 or h <= 0:
        return None
    return w, h
