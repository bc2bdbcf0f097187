# docbook/schemas/appointment.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class AppointmentAction(str, Enum):
    confirm = "confirm"
    cancel = "cancel"
    complete = "complete"


class CamelModel(BaseModel):
    """Serialized with the camelCase keys the frontend uses (``patientId``, ``timeSlot``...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeSlot(CamelModel):
    day: str
    start_time: str
    end_time: str
    is_available: bool = True


class Doctor(CamelModel):
    id: str
    user_id: str
    name: str
    email: str
    specialization: str
    qualifications: List[str] = Field(default_factory=list)
    experience: int = Field(ge=0)
    consultation_fee: float = Field(ge=0)
    available_slots: List[TimeSlot] = Field(default_factory=list)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    bio: Optional[str] = None
    profile_image: Optional[str] = None


class Appointment(CamelModel):
    id: str
    patient_id: str
    patient_name: str
    doctor_id: str
    doctor_name: str
    appointment_date: str
    time_slot: str
    status: AppointmentStatus = AppointmentStatus.pending
    reason_for_visit: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
