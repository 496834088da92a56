# origaspect/domain/policies/ratio_converter.py
from __future__ import annotations

import re
from decimal import Decimal, DecimalException
from typing import Iterable, List, Optional

from origaspect.domain.dataclasses.reconcile import AspectRatioCandidate

# plain decimal notation only: no exponent, no underscores, no NaN/Infinity
_DECIMAL_RE = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)", re.ASCII)

_INFINITE_DISTANCE = Decimal("Infinity")


def _to_decimal(token: str) -> Optional[Decimal]:
    if not token or not _DECIMAL_RE.fullmatch(token):
        return None
    return Decimal(token)


def parse_ratio(text: Optional[str]) -> Optional[Decimal]:
    """
    Convert an aspect-ratio string to a comparable decimal.

        "16:9"   -> Decimal(16) / Decimal(9)
        "2.35"   -> Decimal("2.35")
        " 4 : 3" -> Decimal(4) / Decimal(3)

    Returns None for anything that is not a ratio ("abc", "1:", ":1", "",
    "1:0", "1e2") or whose quotient does not fit a decimal. Never raises.
    """
    if text is None:
        return None
    s = "".join(str(text).split())
    if ":" in s:
        num_s, den_s = s.split(":", 1)
        num = _to_decimal(num_s)
        den = _to_decimal(den_s)
        if num is None or den is None or den == 0:
            return None
        try:
            return num / den
        except DecimalException:
            return None
    return _to_decimal(s)


def ratio_distance(a: Decimal, b: Decimal) -> Decimal:
    """abs(a - b); Infinity when the difference overflows."""
    try:
        return abs(a - b)
    except DecimalException:
        return _INFINITE_DISTANCE


def prepare_candidates(texts: Iterable[str]) -> List[AspectRatioCandidate]:
    """Parse configured ratios, dropping invalid and repeated entries, keeping order."""
    out: List[AspectRatioCandidate] = []
    seen = set()
    for raw in texts:
        text = (raw or "").strip()
        if not text or text in seen:
            continue
        value = parse_ratio(text)
        if value is None:
            continue
        seen.add(text)
        out.append(AspectRatioCandidate(text=text, value=value))
    return out


def select_nearest(detected: Decimal, candidates: Iterable[AspectRatioCandidate]) -> Optional[AspectRatioCandidate]:
    """
    Candidate closest to `detected`. sorted() is stable, so equal distances
    resolve to the first configured candidate.
    """
    ranked = sorted(candidates, key=lambda c: ratio_distance(detected, c.value))
    return ranked[0] if ranked else None


def format_ratio(value: Optional[Decimal], places: int = 2) -> str:
    if value is None:
        return "n/a"
    return f"{value:.{places}f}"
