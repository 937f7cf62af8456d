"""
Unit tests for slot state transitions and the mock notification dispatcher
"""
from datetime import date, datetime

import pytest

from app.schemas.models import SlotState
from app.services import notifications, reminder_state
from app.services.notifications import cancel_reminder, next_fire_time, schedule_reminder
from app.services.reminder_state import (
    SlotAlreadyTakenError, get_slot_state, mark_taken, save_slot_state, saved_state_for,
    set_notification,
)


def test_mark_taken_forces_notification_off():
    state = SlotState(taken=False, notification_enabled=True)
    taken = mark_taken(state)

    assert taken.taken is True
    assert taken.notification_enabled is False
    # input left untouched
    assert state.notification_enabled is True


def test_mark_taken_is_idempotent():
    once = mark_taken(SlotState())
    assert mark_taken(once) == once


def test_notification_toggles_while_pending():
    state = set_notification(SlotState(), True)
    assert state.notification_enabled is True
    assert set_notification(state, False).notification_enabled is False


def test_notification_cannot_be_enabled_after_taken():
    with pytest.raises(SlotAlreadyTakenError):
        set_notification(mark_taken(SlotState()), True)


def test_no_untake_operation_exposed():
    assert not any("untake" in n or "un_take" in n for n in dir(reminder_state))


def test_store_is_scoped_per_patient():
    save_slot_state("p1", "2026-10-17 9:00 AM", SlotState(taken=True))

    assert get_slot_state("p1", "2026-10-17 9:00 AM").taken is True
    assert get_slot_state("p2", "2026-10-17 9:00 AM").taken is False
    snapshot = saved_state_for("p1")
    snapshot.clear()
    assert saved_state_for("p1")


def test_next_fire_time_same_day():
    now = datetime(2026, 10, 17, 8, 0)
    assert next_fire_time("9:00 PM", now) == datetime(2026, 10, 17, 21, 0)


def test_next_fire_time_rolls_to_tomorrow_when_passed():
    now = datetime(2026, 10, 17, 22, 0)
    assert next_fire_time("9:00 PM", now) == datetime(2026, 10, 18, 21, 0)


def test_next_fire_time_future_slot_date():
    now = datetime(2026, 10, 17, 22, 0)
    assert next_fire_time("9:00 AM", now, on_date=date(2026, 10, 20)) == datetime(2026, 10, 20, 9, 0)


def test_schedule_then_cancel():
    now = datetime(2026, 10, 17, 7, 0)
    res = schedule_reminder("p1", "2026-10-17 9:00 AM", "9:00 AM", ["Amoxicillin 500mg", "Paracetamol 650mg"], now=now)

    assert res.ok and res.mock
    assert res.details["body"] == "Time to take: Amoxicillin 500mg, Paracetamol 650mg"
    assert res.details["fire_at"] == "2026-10-17T09:00:00"
    assert "2026-10-17 9:00 AM" in notifications.pending_for("p1")

    again = schedule_reminder("p1", "2026-10-17 9:00 AM", "9:00 AM", ["Amoxicillin 500mg"], now=now)
    assert again.details["replaced"] is True
    assert len(notifications.PENDING_REMINDERS) == 1

    assert cancel_reminder("p1", "2026-10-17 9:00 AM").details["cancelled"] is True
    assert cancel_reminder("p1", "2026-10-17 9:00 AM").details["cancelled"] is False


def test_reminders_are_scoped_per_patient():
    now = datetime(2026, 10, 17, 7, 0)
    schedule_reminder("alice", "2026-10-17 9:00 AM", "9:00 AM", ["Amoxicillin 500mg"], now=now)
    schedule_reminder("bob", "2026-10-17 9:00 AM", "9:00 AM", ["Metformin 500mg"], now=now)

    assert cancel_reminder("alice", "2026-10-17 9:00 AM").details["cancelled"] is True
    assert notifications.pending_for("alice") == {}
    assert notifications.pending_for("bob")["2026-10-17 9:00 AM"]["body"] == "Time to take: Metformin 500mg"


def test_old_slot_states_are_pruned_on_write():
    save_slot_state("p1", "2026-08-01 9:00 AM", SlotState(taken=True))
    save_slot_state("p1", "2026-09-20 9:00 AM", SlotState(taken=True))
    save_slot_state("p2", "2026-08-01 9:00 AM", SlotState(taken=True))

    save_slot_state("p1", "2026-10-17 9:00 AM", SlotState(taken=True))

    assert set(saved_state_for("p1")) == {"2026-09-20 9:00 AM", "2026-10-17 9:00 AM"}
    assert get_slot_state("p2", "2026-08-01 9:00 AM").taken is True


def test_prune_slot_states_counts_removed():
    save_slot_state("p1", "2026-10-15 9:00 AM", SlotState(taken=True))
    save_slot_state("p1", "2026-10-16 9:00 PM", SlotState(taken=True))

    assert reminder_state.prune_slot_states("p1", date(2026, 10, 16)) == 1
    assert list(saved_state_for("p1")) == ["2026-10-16 9:00 PM"]
