"""Appointment domain schemas - Pydantic models for validation"""

import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_notes


class StatusUpdate(BaseModel):
    # Validated by AppointmentService.update_appointment_status
    status: str


class NotesUpdate(BaseModel):
    adminNotes: Optional[str] = None

    @field_validator("adminNotes")
    @classmethod
    def validate_notes_field(cls, v):
        return validate_notes(v)


class AppointmentResponse(BaseModel):
    id: int
    user_id: int
    date: datetime.date
    time: str
    service_type: str
    image_url: Optional[str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    status: str
    created_at: Optional[datetime.datetime] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None

    @classmethod
    def from_appointment(cls, appointment) -> "AppointmentResponse":
        owner = getattr(appointment, "owner", None)
        return cls(
            id=appointment.id,
            user_id=appointment.user_id,
            date=appointment.date,
            time=appointment.time,
            service_type=appointment.service_type,
            image_url=appointment.image_url,
            notes=appointment.notes,
            admin_notes=appointment.admin_notes,
            status=appointment.status,
            created_at=appointment.created_at,
            user_name=owner.name if owner else None,
            user_email=owner.email if owner else None,
        )


class AppointmentMessageResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class AvailabilityResponse(BaseModel):
    date: datetime.date
    time: str
    available: bool
