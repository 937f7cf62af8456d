# app/utils/clock.py
from __future__ import annotations

import re

_DISPLAY_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")

def to_minutes(display_time: str) -> int:
    """
    "9:00 PM" -> 1260. 12-hour clock aware:
      12:xx AM is just after midnight, 12:xx PM is just after noon.
    """
    m = _DISPLAY_TIME_RE.match(display_time or "")
    if not m:
        raise ValueError(f"not a 12-hour clock time: {display_time!r}")

    hour, minute, meridiem = int(m.group(1)), int(m.group(2)), m.group(3).upper()
    if not (1 <= hour <= 12 and 0 <= minute <= 59):
        raise ValueError(f"not a 12-hour clock time: {display_time!r}")

    hour = hour % 12
    if meridiem == "PM":
        hour += 12
    return hour * 60 + minute

def to_hhmm(display_time: str) -> str:
    """12-hour display time to 24-hour HH:MM, e.g. 9:00 PM -> 21:00."""
    h, m = divmod(to_minutes(display_time), 60)
    return f"{h:02d}:{m:02d}"
