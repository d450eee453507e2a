# library/track_probe.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile
from mutagen._util import MutagenError

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3", ".m4a", ".flac", ".ogg", ".opus", ".wav"}

def probe_duration(path: str | os.PathLike) -> Optional[float]:
    """
    Read the track length from the file's tags, before the media backend
    has loaded it. Returns None if the file can't be parsed.
    """
    p = Path(path)
    if p.suffix.lower() not in AUDIO_EXTS or not p.is_file():
        return None

    try:
        audio = MutagenFile(str(p))
    except (MutagenError, OSError) as e:
        logger.warning("Failed to probe %s: %s", p, e)
        return None

    if audio is None or not getattr(audio, "info", None):
        return None

    length = float(getattr(audio.info, "length", 0.0) or 0.0)
    return length if length > 0 else None

def sidecar_lrc_path(audio_path: str | os.PathLike) -> Optional[Path]:
    """`song.mp3` -> `song.lrc` when it exists."""
    p = Path(audio_path).with_suffix(".lrc")
    return p if p.is_file() else None
