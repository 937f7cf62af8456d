# app/api/routes_reminders.py
import sqlite3
from datetime import date
from typing import List, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.db_config import get_db
from app.schemas.models import (
    Medicine, NotificationToggleRequest, ReminderDayResponse, ReminderSlot,
    SlotActionRequest, SlotActionResponse,
)
from app.services.notifications import cancel_reminder, schedule_reminder
from app.services.prescription_store import list_prescriptions
from app.services.reminder_state import (
    SlotAlreadyTakenError, get_slot_state, mark_taken, save_slot_state, saved_state_for,
    set_notification,
)
from app.services.schedule import build_slots, coerce_date, day_progress, find_slot, parse_slot_id

router = APIRouter(prefix="/reminders", tags=["reminders"])

def _patient_medicines(conn: sqlite3.Connection, patient_id: str) -> List[Medicine]:
    meds: List[Medicine] = []
    for rx in list_prescriptions(conn, patient_id):
        meds.extend(rx.medicines)
    return meds

def _slots_for(conn: sqlite3.Connection, patient_id: str, day: date) -> List[ReminderSlot]:
    # always recomputed from the current medicines + saved state
    return build_slots(_patient_medicines(conn, patient_id), day, saved_state_for(patient_id))

def _load_slot(conn: sqlite3.Connection, patient_id: str, slot_id: str) -> Tuple[date, ReminderSlot]:
    try:
        day, _ = parse_slot_id(slot_id)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    slot = find_slot(_slots_for(conn, patient_id, day), slot_id)
    if not slot:
        raise HTTPException(status_code=404, detail="slot_id not found for that day")
    return day, slot

@router.get("", response_model=ReminderDayResponse)
def reminders_for_day(
    patient_id: str,
    day_param: str = Query(..., alias="date"),
    conn: sqlite3.Connection = Depends(get_db),
):
    try:
        day = coerce_date(day_param)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    slots = _slots_for(conn, patient_id, day)
    return ReminderDayResponse(
        patient_id=patient_id,
        date=day.isoformat(),
        slots=slots,
        progress=day_progress(slots),
    )

@router.post("/taken", response_model=SlotActionResponse)
def mark_slot_taken(req: SlotActionRequest, conn: sqlite3.Connection = Depends(get_db)):
    _, slot = _load_slot(conn, req.patient_id, req.slot_id)

    new_state = mark_taken(get_slot_state(req.patient_id, req.slot_id))
    save_slot_state(req.patient_id, req.slot_id, new_state)
    dispatch = cancel_reminder(req.patient_id, req.slot_id)

    return SlotActionResponse(
        slot=slot.model_copy(update=new_state.model_dump()),
        dispatch=dispatch,
    )

@router.post("/notification", response_model=SlotActionResponse)
def toggle_notification(req: NotificationToggleRequest, conn: sqlite3.Connection = Depends(get_db)):
    day, slot = _load_slot(conn, req.patient_id, req.slot_id)

    try:
        new_state = set_notification(get_slot_state(req.patient_id, req.slot_id), req.enabled)
    except SlotAlreadyTakenError as e:
        raise HTTPException(status_code=409, detail=str(e))
    save_slot_state(req.patient_id, req.slot_id, new_state)

    if new_state.notification_enabled:
        dispatch = schedule_reminder(req.patient_id, slot.slot_id, slot.time, slot.medicines, on_date=day)
    else:
        dispatch = cancel_reminder(req.patient_id, slot.slot_id)

    return SlotActionResponse(
        slot=slot.model_copy(update=new_state.model_dump()),
        dispatch=dispatch,
    )
