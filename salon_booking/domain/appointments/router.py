"""Appointment router - customer-facing booking endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import require
from ...database import get_db
from ...errors import BookingError, ConflictError
from ...models import User
from ...policy import (
    CANCEL_OWN_APPOINTMENT,
    CHECK_AVAILABILITY,
    CREATE_APPOINTMENT,
    LIST_OWN_APPOINTMENTS,
    ensure_can_view,
)
from ...shared.validators import normalize_time, parse_date
from ...uploads import delete_appointment_image, save_appointment_image
from ..users.repository import SqlAlchemyUserRepository
from .repository import SqlAlchemyAppointmentRepository
from .schemas import AppointmentMessageResponse, AppointmentResponse, AvailabilityResponse
from .service import SLOT_UNAVAILABLE, AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(SqlAlchemyAppointmentRepository(db), SqlAlchemyUserRepository(db))


@router.get("", response_model=list[AppointmentResponse])
def list_my_appointments(
    current_user: User = Depends(require(LIST_OWN_APPOINTMENTS)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments booked by the current user, newest slot first"""
    appointments = service.list_appointments_for_user(current_user.id)
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.post("", response_model=AppointmentMessageResponse, status_code=201)
def create_appointment(
    date: Optional[str] = Form(None),
    time: Optional[str] = Form(None),
    serviceType: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    current_user: User = Depends(require(CREATE_APPOINTMENT)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book a slot. Accepts multipart form data with an optional reference image."""
    # Reject bad input and visibly taken slots before storing the image
    day, time, service_type, notes = service.validate_booking(date, time, serviceType, notes)
    if not service.check_slot_availability(day, time):
        raise ConflictError(SLOT_UNAVAILABLE)

    image_url = save_appointment_image(image)
    try:
        appointment = service.create_appointment(
            current_user.id,
            day,
            time,
            service_type,
            image_url=image_url,
            notes=notes,
        )
    except BookingError:
        delete_appointment_image(image_url)
        raise
    return AppointmentMessageResponse(
        message="Cita agendada exitosamente",
        appointment=AppointmentResponse.from_appointment(appointment),
    )


@router.get("/availability", response_model=AvailabilityResponse)
def check_availability(
    date: str = Query(...),
    time: str = Query(...),
    current_user: User = Depends(require(CHECK_AVAILABILITY)),
    service: AppointmentService = Depends(get_appointment_service),
):
    available = service.check_slot_availability(date, time)
    return AvailabilityResponse(date=parse_date(date), time=normalize_time(time), available=available)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    current_user: User = Depends(require(LIST_OWN_APPOINTMENTS)),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.get_appointment(appointment_id)
    ensure_can_view(current_user, appointment)
    return AppointmentResponse.from_appointment(appointment)


@router.put("/{appointment_id}/cancel", response_model=AppointmentMessageResponse)
def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(require(CANCEL_OWN_APPOINTMENT)),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel one of the caller's own appointments"""
    appointment = service.cancel_appointment(appointment_id, current_user.id)
    return AppointmentMessageResponse(
        message="Cita cancelada exitosamente",
        appointment=AppointmentResponse.from_appointment(appointment),
    )
