# app/services/notifications.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from app.schemas.models import ToolResult
from app.utils.clock import to_hhmm, to_minutes

logger = logging.getLogger(__name__)

REMINDER_TITLE = "💊 Medicine Reminder"

# (patient_id, slot_id) -> pending reminder (mock dispatcher; device delivery lives elsewhere)
PENDING_REMINDERS: Dict[Tuple[str, str], Dict[str, Any]] = {}

def next_fire_time(display_time: str, now: datetime, on_date: Optional[date] = None) -> datetime:
    """
    When a reminder for `display_time` should fire.
    Uses the slot's date when given; if that moment already passed, rolls
    forward to the next occurrence of the clock time after `now`.
    """
    h, m = divmod(to_minutes(display_time), 60)
    fire_at = datetime.combine(on_date or now.date(), time(h, m), tzinfo=now.tzinfo)
    if fire_at <= now:
        fire_at = datetime.combine(now.date(), time(h, m), tzinfo=now.tzinfo)
        if fire_at <= now:
            fire_at += timedelta(days=1)
    return fire_at

def pending_for(patient_id: str) -> Dict[str, Dict[str, Any]]:
    return {sid: entry for (pid, sid), entry in PENDING_REMINDERS.items() if pid == patient_id}

def schedule_reminder(
    patient_id: str,
    slot_id: str,
    display_time: str,
    medicines: List[str],
    on_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> ToolResult:
    fire_at = next_fire_time(display_time, now or datetime.now(), on_date)
    entry = {
        "patient_id": patient_id,
        "slot_id": slot_id,
        "time_local": to_hhmm(display_time),
        "fire_at": fire_at.isoformat(),
        "title": REMINDER_TITLE,
        "body": f"Time to take: {', '.join(medicines)}",
    }
    key = (patient_id, slot_id)
    replaced = key in PENDING_REMINDERS
    PENDING_REMINDERS[key] = entry
    logger.info("reminder %s for %s scheduled for %s", slot_id, patient_id, entry["fire_at"])
    return ToolResult(ok=True, mock=True, details={"scheduled": True, "replaced": replaced, **entry})

def cancel_reminder(patient_id: str, slot_id: str) -> ToolResult:
    removed = PENDING_REMINDERS.pop((patient_id, slot_id), None)
    if removed:
        logger.info("reminder %s for %s cancelled", slot_id, patient_id)
    return ToolResult(
        ok=True, mock=True,
        details={"patient_id": patient_id, "slot_id": slot_id, "cancelled": removed is not None},
    )
