# lyrics/lrc.py
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List

from lyricloop.core.models import Line

logger = logging.getLogger(__name__)

_TS_RE = re.compile(r"\[(\d+):(\d+)(?:[.:](\d+))?\]")
_META_RE = re.compile(r"^\[(ar|ti|al|by|offset|au|length|re|ve):", re.IGNORECASE)

DEFAULT_LYRICS_PATH = Path(__file__).resolve().parent.parent / "data" / "heart_sutra.lrc"


def _ts_to_seconds(mm: str, ss: str, frac: str | None) -> float:
    m = int(mm)
    s = int(ss)
    if frac is None:
        ms = 0
    else:
        frac = frac.strip()
        if len(frac) == 1:
            ms = int(frac) * 100
        elif len(frac) == 2:
            ms = int(frac) * 10
        else:
            ms = int(frac[:3])
    return ((m * 60 + s) * 1000 + ms) / 1000.0


def format_timestamp(seconds: float) -> str:
    """Format seconds as mm:ss.xx (centiseconds)."""
    cs = max(0, int(round(seconds * 100)))
    m, rest = divmod(cs, 6000)
    return f"{m:02d}:{rest // 100:02d}.{rest % 100:02d}"


def parse_lrc(lrc_text: str) -> List[Line]:
    """
    Returns Lines sorted by time.
    Supports multiple timestamps per line.
    Timestamped lines without text are kept as rests.
    Ignores metadata tags like [ar:], [ti:], etc.
    """
    out: List[Line] = []
    if not lrc_text:
        return out

    for raw_line in lrc_text.splitlines():
        line = raw_line.strip()
        if not line or _META_RE.match(line):
            continue

        matches = list(_TS_RE.finditer(line))
        if not matches:
            continue

        text = _TS_RE.sub("", line).strip()
        for m in matches:
            out.append(Line(time=_ts_to_seconds(m.group(1), m.group(2), m.group(3)), text=text))

    # stable: equal timestamps keep file order
    out.sort(key=lambda x: x.time)
    return out


def load_lrc(path: str | Path) -> List[Line]:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        lines = parse_lrc(f.read())
    logger.info("Loaded %d lines from %s", len(lines), p)
    return lines


def default_lyrics() -> List[Line]:
    return load_lrc(DEFAULT_LYRICS_PATH)
