# origaspect/common/probe/ffprobe_helpers.py
from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional


# ffprobe reports these when the container carries no usable DAR
_UNSET_RATIOS = {"", "0:1", "n/a", "N/A"}


def build_ffprobe_cmd(
    input_path: str | Path,
    extra_args: Iterable[str] | None = None,
    *,
    ffprobe_bin: str = "ffprobe",
    log_level: str = "error",
) -> List[str]:
    """
    Build a robust ffprobe command that emits JSON we can parse consistently.
    """
    if isinstance(input_path, Path):
        input_path = str(input_path)
    base = [
        ffprobe_bin,
        "-v", log_level,
        "-show_streams",
        "-show_format",
        "-print_format", "json",
        "--",  # Stop option parsing in case of weird filenames
        input_path,
    ]
    if extra_args:
        base = base[:-2] + list(extra_args) + base[-2:]
    return base


def _maybe_int(x) -> Optional[int]:
    try:
        return int(float(x))
    except (TypeError, ValueError):
        return None


def _maybe_float(x) -> Optional[float]:
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def pick_default_video_stream(streams: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Default-disposition video stream first, else the first video stream."""
    vstreams = [s for s in streams if s.get("codec_type") == "video"]
    for s in vstreams:
        if (s.get("disposition") or {}).get("default") == 1:
            return s
    return vstreams[0] if vstreams else None


def stream_aspect_ratio(v_stream: Optional[Dict[str, Any]]) -> Optional[str]:
    """display_aspect_ratio when set, else W:H from the coded size."""
    if not v_stream:
        return None
    dar = str(v_stream.get("display_aspect_ratio") or "").strip()
    if dar not in _UNSET_RATIOS:
        return dar
    w = _maybe_int(v_stream.get("width"))
    h = _maybe_int(v_stream.get("height"))
    if w and h:
        return f"{w}:{h}"
    return None


def parse_ffprobe(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the fields we care about (duration, default stream aspect ratio,
    dimensions) from ffprobe JSON. Safe to call in unit tests with fixture JSON.
    """
    fmt = (data or {}).get("format", {}) or {}
    streams = list((data or {}).get("streams", []) or [])

    v_stream = pick_default_video_stream(streams)

    duration = _maybe_float(fmt.get("duration"))
    if duration is None:
        # fallback: longest stream duration
        durs = [d for d in (_maybe_float(s.get("duration")) for s in streams) if d is not None]
        duration = max(durs) if durs else None

    return {
        "duration_sec": duration,
        "container": fmt.get("format_name"),
        "codec_video": (v_stream or {}).get("codec_name"),
        "width": _maybe_int((v_stream or {}).get("width")),
        "height": _maybe_int((v_stream or {}).get("height")),
        "aspect_ratio": stream_aspect_ratio(v_stream),
    }
