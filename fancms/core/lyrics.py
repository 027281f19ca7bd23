"""
Synced lyrics timeline lookups for the audio player.
Lines are assumed to be in ascending ``t`` order, as stored.
"""

import math
from typing import Dict, List, Optional, Sequence, Union

from .schema import Lyrics, MemberPart


def current_line(lyrics: Lyrics, current_time: float) -> Optional[Dict[str, Union[int, str]]]:
    """The last line whose start time has passed, or None before the first line."""
    current_index = -1
    for i, line in enumerate(lyrics.lines):
        if line.t <= current_time:
            current_index = i
        else:
            break

    if current_index == -1:
        return None

    return {"index": current_index, "line": lyrics.lines[current_index].l}


def upcoming_lines(lyrics: Lyrics, current_time: float, count: int = 3) -> List[Dict[str, Union[int, float, str]]]:
    upcoming = []
    for i, line in enumerate(lyrics.lines):
        if line.t > current_time:
            upcoming.append({"index": i, "time": line.t, "line": line.l})
            if len(upcoming) >= count:
                break
    return upcoming


def format_time(seconds: float) -> str:
    """``M:SS``."""
    mins = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return f"{mins}:{secs:02d}"


def calculate_progress(current: float, total: float) -> float:
    """Percentage clamped to [0, 100]; zero when ``total`` is zero."""
    if total == 0:
        return 0.0
    return min(100.0, max(0.0, (current / total) * 100))


def current_member(parts: Optional[Sequence[MemberPart]], current_time: float) -> Optional[str]:
    """Member singing at ``current_time`` (inclusive bounds), first match wins."""
    if not parts:
        return None
    part = next((p for p in parts if p.start <= current_time <= p.end), None)
    return part.member if part else None
