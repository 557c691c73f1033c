"""Appointment service - availability checks and the appointment lifecycle"""

import logging
from datetime import date
from typing import Optional

from ...errors import (
    AlreadyCancelledError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ...models import Appointment, AppointmentStatus
from ...shared.validators import (
    normalize_time,
    parse_date,
    require_text,
    validate_notes,
    validate_status,
)
from ..users.repository import UserRepository
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE = "El horario seleccionado no está disponible"
ALREADY_CANCELLED = "Esta cita ya está cancelada"


def _clean(func, *args):
    """Run a shared validator, turning ValueError into ValidationError."""
    try:
        return func(*args)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class AppointmentService:
    """
    Owns appointment state.

    Role checks happen before these methods are called (see ``policy``); the
    only authorization done here is the ownership check on cancel, which is
    part of the operation's contract.

    Statuses move freely between the four states when staff change them.
    """

    def __init__(self, appointments: AppointmentRepository, users: Optional[UserRepository] = None):
        self.repo = appointments
        self.users = users

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def check_slot_availability(self, day, time: str) -> bool:
        """True iff no non-cancelled appointment holds (day, time)."""
        day = _clean(parse_date, day)
        time = _clean(normalize_time, time)
        return self.repo.find_active_in_slot(day, time) is None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Cita no encontrada")
        return appointment

    def list_appointments_for_user(self, owner_id: int) -> list[Appointment]:
        return self.repo.list_by_owner(owner_id)

    def list_all_appointments(self) -> list[Appointment]:
        return self.repo.list_all()

    def list_appointments_for_date(self, day: date) -> list[Appointment]:
        return self.repo.list_by_date(_clean(parse_date, day))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def validate_booking(day, time: str, service_type: str, notes: Optional[str] = None):
        """Clean the booking fields; returns ``(day, time, service_type, notes)``."""
        return (
            _clean(parse_date, day),
            _clean(normalize_time, time),
            _clean(require_text, service_type, "El tipo de servicio es requerido"),
            _clean(validate_notes, notes),
        )

    def create_appointment(
        self,
        owner_id: int,
        day,
        time: str,
        service_type: str,
        image_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book (day, time) for ``owner_id`` in ``pendiente`` status.

        The availability lookup only short-circuits the common case; the
        repository's slot constraint decides races between concurrent bookings.

        Raises:
            ValidationError: missing or malformed date, time or service type
            NotFoundError: the owner does not exist
            ConflictError: the slot is already taken
        """
        day, time, service_type, notes = self.validate_booking(day, time, service_type, notes)

        if self.users is not None and not self.users.get_by_id(owner_id):
            raise NotFoundError("Usuario no encontrado")

        if self.repo.find_active_in_slot(day, time) is not None:
            logger.info(f"⏰ Slot {day} {time} already taken (user {owner_id})")
            raise ConflictError(SLOT_UNAVAILABLE)

        try:
            appointment = self.repo.add(
                owner_id,
                day,
                time,
                service_type,
                image_url=image_url,
                notes=notes,
            )
        except ConflictError:
            logger.warning(f"⚠️ Slot {day} {time} was booked concurrently (user {owner_id})")
            raise

        logger.info(f"📅 Appointment {appointment.id} booked for user {owner_id} on {day} {time}")
        return appointment

    def cancel_appointment(self, appointment_id: int, requester_id: int) -> Appointment:
        """
        Owner self-cancel.

        Raises:
            NotFoundError: no such appointment
            ForbiddenError: the requester does not own it
            AlreadyCancelledError: it is already ``cancelada``
        """
        appointment = self.get_appointment(appointment_id)

        if appointment.user_id != requester_id:
            logger.warning(
                f"🚫 User {requester_id} tried to cancel appointment {appointment_id} "
                f"owned by {appointment.user_id}"
            )
            raise ForbiddenError("No tienes permiso para cancelar esta cita")

        if appointment.status == AppointmentStatus.CANCELLED.value:
            raise AlreadyCancelledError(ALREADY_CANCELLED)

        if not self.repo.cancel(appointment):
            logger.info(f"⏳ Appointment {appointment_id} was cancelled by a concurrent request")
            raise AlreadyCancelledError(ALREADY_CANCELLED)

        logger.info(f"❌ Appointment {appointment_id} cancelled by its owner")
        return appointment

    def update_appointment_status(self, appointment_id: int, new_status: str) -> Appointment:
        """
        Staff status change.

        Raises:
            ValidationError: ``new_status`` is not one of the four states
            NotFoundError: no such appointment
            ConflictError: re-activating an appointment whose slot was re-booked
        """
        new_status = _clean(validate_status, new_status)
        appointment = self.get_appointment(appointment_id)

        previous = appointment.status
        appointment = self.repo.update(appointment, status=new_status)
        logger.info(f"🔄 Appointment {appointment_id} status {previous} -> {new_status}")
        return appointment

    def update_appointment_notes(self, appointment_id: int, admin_notes: Optional[str]) -> Appointment:
        """Overwrite the staff notes; ``None`` clears them to an empty string."""
        admin_notes = _clean(validate_notes, admin_notes or "")
        appointment = self.get_appointment(appointment_id)
        return self.repo.update(appointment, admin_notes=admin_notes)
