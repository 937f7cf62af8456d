# app/services/reminder_state.py
import logging
from datetime import date, timedelta
from typing import Dict

from app.schemas.models import SlotState
from app.services.schedule import parse_slot_id

logger = logging.getLogger(__name__)

# slot states older than this (relative to the newest write) are dropped
SLOT_STATE_RETENTION_DAYS = 30

class SlotAlreadyTakenError(RuntimeError):
    pass

# patient_id -> slot_id -> state. Per-patient scope, single interactive user.
SLOT_STATE: Dict[str, Dict[str, SlotState]] = {}

def mark_taken(state: SlotState) -> SlotState:
    """pending -> acknowledged. Notification is switched off in the same update."""
    return state.model_copy(update={"taken": True, "notification_enabled": False})

def set_notification(state: SlotState, enabled: bool) -> SlotState:
    if state.taken:
        raise SlotAlreadyTakenError("slot already marked taken; notifications stay off")
    return state.model_copy(update={"notification_enabled": bool(enabled)})

def saved_state_for(patient_id: str) -> Dict[str, SlotState]:
    # copy so slot derivation never sees a half-applied update
    return dict(SLOT_STATE.get(patient_id, {}))

def get_slot_state(patient_id: str, slot_id: str) -> SlotState:
    return SLOT_STATE.get(patient_id, {}).get(slot_id) or SlotState()

def prune_slot_states(patient_id: str, before: date) -> int:
    """Drop a patient's saved states for slots dated before `before`."""
    states = SLOT_STATE.get(patient_id, {})
    stale = []
    for slot_id in states:
        try:
            day, _ = parse_slot_id(slot_id)
        except ValueError:
            continue
        if day < before:
            stale.append(slot_id)
    for slot_id in stale:
        del states[slot_id]
    if stale:
        logger.debug("pruned %d old slot state(s) for %s", len(stale), patient_id)
    return len(stale)

def save_slot_state(patient_id: str, slot_id: str, state: SlotState) -> None:
    SLOT_STATE.setdefault(patient_id, {})[slot_id] = state
    logger.info("slot %s for %s: taken=%s notify=%s", slot_id, patient_id, state.taken, state.notification_enabled)

    day, _ = parse_slot_id(slot_id)
    prune_slot_states(patient_id, day - timedelta(days=SLOT_STATE_RETENTION_DAYS))
