# app/services/schedule.py
import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.schemas.models import DayProgress, Medicine, ReminderSlot, SlotState
from app.utils.clock import to_minutes

logger = logging.getLogger(__name__)

# Ordered: first rule whose keyword appears in the lowercased frequency wins.
# The bare digits are loose on purpose ("every 12 hours" hits the "2" rule).
FREQUENCY_RULES: List[Tuple[str, Tuple[str, ...], Tuple[str, ...]]] = [
    ("twice", ("twice", "bid", "2"), ("9:00 AM", "9:00 PM")),
    ("three_times", ("three", "tid", "3"), ("8:00 AM", "2:00 PM", "8:00 PM")),
    ("four_times", ("four", "qid", "4"), ("8:00 AM", "12:00 PM", "4:00 PM", "8:00 PM")),
    ("bedtime", ("night", "bedtime", "hs"), ("9:00 PM",)),
    ("morning", ("morning",), ("8:00 AM",)),
]
DEFAULT_RULE = "default"
DEFAULT_TIMES: Tuple[str, ...] = ("9:00 AM",)

def match_frequency_rule(frequency: Optional[str]) -> Tuple[str, Tuple[str, ...]]:
    f = (frequency or "").lower()
    for rule_name, keywords, times in FREQUENCY_RULES:
        if any(k in f for k in keywords):
            return rule_name, times

    logger.debug("no frequency rule matched %r, using default reminder time", frequency)
    return DEFAULT_RULE, DEFAULT_TIMES

def times_for_frequency(frequency: Optional[str]) -> List[str]:
    _, times = match_frequency_rule(frequency)
    return list(times)

def coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValueError(f"invalid reminder date: {value!r}")

def slot_id_for(day: date, time: str) -> str:
    return f"{day.isoformat()} {time}"

def parse_slot_id(slot_id: str) -> Tuple[date, str]:
    """Inverse of slot_id_for: "2026-10-17 9:00 PM" -> (date(2026, 10, 17), "9:00 PM")."""
    day_part, _, time_part = (slot_id or "").partition(" ")
    day = coerce_date(day_part)
    to_minutes(time_part)  # validates
    return day, time_part

def _display_name(med: Medicine) -> str:
    return f"{med.name} {med.dosage}"

def build_slots(
    medicines: Iterable[Medicine],
    day: Any,
    saved_state: Optional[Mapping] = None,
) -> List[ReminderSlot]:
    """
    One ReminderSlot per distinct time-of-day across *all* medicines for `day`.
    Slot identity is date + time only, so saved taken/notification state
    survives medicines being added to or removed from a time.
    """
    d = coerce_date(day)
    saved_state = saved_state or {}

    grouped: Dict[str, List[str]] = {}
    for med in medicines:
        label = _display_name(med)
        for t in times_for_frequency(med.frequency):
            names = grouped.setdefault(t, [])
            if label not in names:
                names.append(label)

    slots: List[ReminderSlot] = []
    for t in sorted(grouped, key=to_minutes):
        sid = slot_id_for(d, t)
        state = SlotState.model_validate(saved_state.get(sid) or {})
        slots.append(ReminderSlot(
            slot_id=sid,
            date=d.isoformat(),
            time=t,
            medicines=grouped[t],
            taken=state.taken,
            notification_enabled=state.notification_enabled,
        ))
    return slots

def find_slot(slots: Iterable[ReminderSlot], slot_id: str) -> Optional[ReminderSlot]:
    return next((s for s in slots if s.slot_id == slot_id), None)

def day_progress(slots: List[ReminderSlot]) -> DayProgress:
    return DayProgress(taken=sum(1 for s in slots if s.taken), total=len(slots))
