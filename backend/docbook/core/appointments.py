"""
Appointment status lifecycle.

    pending ──confirm──▶ confirmed ──complete──▶ completed
       │                     │
       └──────cancel─────────┴──────cancel─────▶ cancelled

``cancelled`` and ``completed`` are terminal. Anything not drawn above raises
:class:`InvalidTransition`.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from docbook.core.errors import InvalidTransition
from docbook.schemas.appointment import Appointment, AppointmentAction, AppointmentStatus

logger = logging.getLogger(__name__)

INITIAL_STATUS = AppointmentStatus.pending

TRANSITIONS: Dict[AppointmentStatus, Dict[AppointmentAction, AppointmentStatus]] = {
    AppointmentStatus.pending: {
        AppointmentAction.confirm: AppointmentStatus.confirmed,
        AppointmentAction.cancel: AppointmentStatus.cancelled,
    },
    AppointmentStatus.confirmed: {
        AppointmentAction.complete: AppointmentStatus.completed,
        AppointmentAction.cancel: AppointmentStatus.cancelled,
    },
    AppointmentStatus.cancelled: {},
    AppointmentStatus.completed: {},
}


def transition(status: AppointmentStatus, action: AppointmentAction) -> AppointmentStatus:
    status = AppointmentStatus(status)
    action = AppointmentAction(action)
    try:
        return TRANSITIONS[status][action]
    except KeyError:
        raise InvalidTransition(
            f"Cannot {action.value} an appointment that is {status.value}"
        ) from None


def allowed_actions(status: AppointmentStatus) -> List[AppointmentAction]:
    return list(TRANSITIONS[AppointmentStatus(status)])


def can_transition(src: AppointmentStatus, dst: AppointmentStatus) -> bool:
    return AppointmentStatus(dst) in TRANSITIONS[AppointmentStatus(src)].values()


def is_terminal(status: AppointmentStatus) -> bool:
    return not TRANSITIONS[AppointmentStatus(status)]


def new_appointment(
    patient_id: str,
    patient_name: str,
    doctor_id: str,
    doctor_name: str,
    appointment_date: str,
    time_slot: str,
    reason_for_visit: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Appointment:
    """Build an appointment in the initial ``pending`` state."""
    now = now or datetime.now(timezone.utc)
    return Appointment(
        id=str(uuid.uuid4()),
        patient_id=patient_id,
        patient_name=patient_name,
        doctor_id=doctor_id,
        doctor_name=doctor_name,
        appointment_date=appointment_date,
        time_slot=time_slot,
        status=INITIAL_STATUS,
        reason_for_visit=reason_for_visit,
        notes=notes,
        created_at=now,
        updated_at=now,
    )


def apply_action(
    appointment: Appointment,
    action: AppointmentAction,
    now: Optional[datetime] = None,
) -> Appointment:
    """Return a copy of ``appointment`` moved to its next status; the original is untouched."""
    new_status = transition(appointment.status, action)
    logger.info(
        f"Appointment {appointment.id}: {appointment.status.value} -> {new_status.value}"
    )
    return appointment.model_copy(
        update={
            "status": new_status,
            "updated_at": now or datetime.now(timezone.utc),
        }
    )
