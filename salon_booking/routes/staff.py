"""Appointment management shared by the attendant and admin panels"""

import logging
from datetime import date

from fastapi import APIRouter, Depends

from ..auth import require
from ..domain.appointments.router import get_appointment_service
from ..domain.appointments.schemas import (
    AppointmentMessageResponse,
    AppointmentResponse,
    NotesUpdate,
    StatusUpdate,
)
from ..domain.appointments.service import AppointmentService
from ..models import User
from ..policy import (
    LIST_ALL_APPOINTMENTS,
    UPDATE_APPOINTMENT_NOTES,
    UPDATE_APPOINTMENT_STATUS,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments")


@router.get("", response_model=list[AppointmentResponse])
def list_all_appointments(
    current_user: User = Depends(require(LIST_ALL_APPOINTMENTS)),
    service: AppointmentService = Depends(get_appointment_service),
):
    return [AppointmentResponse.from_appointment(a) for a in service.list_all_appointments()]


@router.get("/today", response_model=list[AppointmentResponse])
def list_today_appointments(
    current_user: User = Depends(require(LIST_ALL_APPOINTMENTS)),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointments = service.list_appointments_for_date(date.today())
    return [AppointmentResponse.from_appointment(a) for a in appointments]


@router.put("/{appointment_id}/status", response_model=AppointmentMessageResponse)
def update_appointment_status(
    appointment_id: int,
    data: StatusUpdate,
    current_user: User = Depends(require(UPDATE_APPOINTMENT_STATUS)),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_appointment_status(appointment_id, data.status)
    logger.info(f"🔄 {current_user.role} {current_user.id} set appointment {appointment_id} to {data.status}")
    return AppointmentMessageResponse(
        message="Estado de cita actualizado",
        appointment=AppointmentResponse.from_appointment(appointment),
    )


@router.put("/{appointment_id}/notes", response_model=AppointmentMessageResponse)
def update_appointment_notes(
    appointment_id: int,
    data: NotesUpdate,
    current_user: User = Depends(require(UPDATE_APPOINTMENT_NOTES)),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.update_appointment_notes(appointment_id, data.adminNotes)
    return AppointmentMessageResponse(
        message="Notas actualizadas",
        appointment=AppointmentResponse.from_appointment(appointment),
    )
