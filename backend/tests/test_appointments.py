# tests/test_appointments.py
from datetime import datetime, timezone

import pytest

from docbook.core.appointments import (
    allowed_actions,
    apply_action,
    can_transition,
    is_terminal,
    new_appointment,
    transition,
)
from docbook.core.errors import InvalidTransition
from docbook.schemas.appointment import AppointmentAction as A
from docbook.schemas.appointment import AppointmentStatus as S


@pytest.mark.parametrize(
    "status, action, expected",
    [
        (S.pending, A.confirm, S.confirmed),
        (S.pending, A.cancel, S.cancelled),
        (S.confirmed, A.complete, S.completed),
        (S.confirmed, A.cancel, S.cancelled),
    ],
)
def test_legal_transitions(status, action, expected):
    assert transition(status, action) == expected


@pytest.mark.parametrize(
    "status, action",
    [
        (S.pending, A.complete),
        (S.confirmed, A.confirm),
        (S.cancelled, A.confirm),
        (S.cancelled, A.cancel),
        (S.cancelled, A.complete),
        (S.completed, A.cancel),
        (S.completed, A.confirm),
        (S.completed, A.complete),
    ],
)
def test_illegal_transitions(status, action):
    with pytest.raises(InvalidTransition) as excinfo:
        transition(status, action)
    assert excinfo.value.status_code == 409
    assert excinfo.value.code == "invalid_transition"


def test_transition_accepts_plain_strings():
    assert transition("pending", "confirm") == S.confirmed


def test_terminal_states():
    assert is_terminal(S.cancelled)
    assert is_terminal(S.completed)
    assert not is_terminal(S.pending)
    assert not is_terminal(S.confirmed)
    assert allowed_actions(S.completed) == []
    assert set(allowed_actions(S.pending)) == {A.confirm, A.cancel}


def test_can_transition():
    assert can_transition(S.pending, S.confirmed)
    assert can_transition(S.confirmed, S.completed)
    assert not can_transition(S.pending, S.completed)
    assert not can_transition(S.completed, S.pending)


def test_new_appointment_starts_pending():
    created = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    appt = new_appointment(
        patient_id="p1",
        patient_name="Ann",
        doctor_id="d1",
        doctor_name="Dr House",
        appointment_date="2026-03-10",
        time_slot="09:00-09:30",
        reason_for_visit="Checkup",
        now=created,
    )
    assert appt.status == S.pending
    assert appt.created_at == appt.updated_at == created
    assert appt.id


def test_apply_action_returns_updated_copy():
    created = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
    later = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    appt = new_appointment("p1", "Ann", "d1", "Dr House", "2026-03-10", "09:00-09:30", now=created)

    confirmed = apply_action(appt, A.confirm, now=later)

    assert confirmed.status == S.confirmed
    assert confirmed.updated_at == later
    assert confirmed.created_at == created
    assert appt.status == S.pending

    done = apply_action(confirmed, A.complete)
    with pytest.raises(InvalidTransition):
        apply_action(done, A.cancel)


def test_appointment_serializes_camel_case():
    appt = new_appointment("p1", "Ann", "d1", "Dr House", "2026-03-10", "09:00-09:30")
    data = appt.model_dump(by_alias=True, mode="json")
    assert data["patientId"] == "p1"
    assert data["timeSlot"] == "09:00-09:30"
    assert data["status"] == "pending"
    assert "reasonForVisit" in data
