"""Appointment repository - Database operations for appointments"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from sqlalchemy import distinct, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...errors import ConflictError
from ...models import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

SLOT_INDEX_NAME = "uq_appointments_active_slot"


class AppointmentRepository(ABC):
    """
    Storage interface for appointments.

    Implementations must enforce the one-live-appointment-per-slot rule
    themselves and report a violation as ``ConflictError`` from ``add`` and
    ``update``; callers treat that as the authoritative answer.
    """

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: int) -> list[Appointment]:
        pass

    @abstractmethod
    def list_all(self) -> list[Appointment]:
        pass

    @abstractmethod
    def list_by_date(self, day: date) -> list[Appointment]:
        pass

    @abstractmethod
    def find_active_in_slot(self, day: date, time: str) -> Optional[Appointment]:
        """The non-cancelled appointment holding (day, time), if any."""

    @abstractmethod
    def add(
        self,
        owner_id: int,
        day: date,
        time: str,
        service_type: str,
        image_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        """Insert a new ``pendiente`` appointment."""

    @abstractmethod
    def update(self, appointment: Appointment, **updates) -> Appointment:
        pass

    @abstractmethod
    def cancel(self, appointment: Appointment) -> bool:
        """
        Set ``cancelada`` only while the row is still live.

        Returns False when another request cancelled it first.
        """

    # Aggregations used by the dashboard

    @abstractmethod
    def count_by_status(self) -> dict[str, int]:
        pass

    @abstractmethod
    def count_by_service(self) -> list[tuple[str, int]]:
        pass

    @abstractmethod
    def count_by_date(self, start: date, end: date) -> list[tuple[date, int]]:
        """Counts per day for start <= date <= end, ordered by date."""

    @abstractmethod
    def count_on_date(self, day: date) -> int:
        pass

    @abstractmethod
    def count_distinct_owners(self) -> int:
        pass


def is_slot_violation(error: IntegrityError) -> bool:
    """Whether an IntegrityError comes from the active-slot unique index."""
    message = str(error.orig).lower()
    if SLOT_INDEX_NAME in message:
        return True
    # SQLite names the columns instead of the index
    return "unique" in message and "appointments.date" in message and "appointments.time" in message


class SqlAlchemyAppointmentRepository(AppointmentRepository):
    """AppointmentRepository backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Appointment).options(joinedload(Appointment.owner))

    def _listing(self, query) -> list[Appointment]:
        return query.order_by(Appointment.date.desc(), Appointment.time.desc(), Appointment.id.desc()).all()

    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        return self._query().filter(Appointment.id == appointment_id).first()

    def list_by_owner(self, owner_id: int) -> list[Appointment]:
        return self._listing(self._query().filter(Appointment.user_id == owner_id))

    def list_all(self) -> list[Appointment]:
        return self._listing(self._query())

    def list_by_date(self, day: date) -> list[Appointment]:
        return self._listing(self._query().filter(Appointment.date == day))

    def find_active_in_slot(self, day: date, time: str) -> Optional[Appointment]:
        return (
            self.db.query(Appointment)
            .filter(
                Appointment.date == day,
                Appointment.time == time,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
            .first()
        )

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if is_slot_violation(e):
                raise ConflictError("El horario seleccionado no está disponible") from e
            raise

    def add(
        self,
        owner_id: int,
        day: date,
        time: str,
        service_type: str,
        image_url: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Appointment:
        appointment = Appointment(
            user_id=owner_id,
            date=day,
            time=time,
            service_type=service_type,
            image_url=image_url,
            notes=notes,
            status=AppointmentStatus.PENDING.value,
        )
        self.db.add(appointment)
        self._commit()
        self.db.refresh(appointment)
        return appointment

    def update(self, appointment: Appointment, **updates) -> Appointment:
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)

        self._commit()
        self.db.refresh(appointment)
        return appointment

    def cancel(self, appointment: Appointment) -> bool:
        # Conditional UPDATE so two concurrent cancels cannot both succeed
        changed = (
            self.db.query(Appointment)
            .filter(
                Appointment.id == appointment.id,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
            .update({Appointment.status: AppointmentStatus.CANCELLED.value}, synchronize_session=False)
        )
        self._commit()
        self.db.refresh(appointment)
        return changed == 1

    def count_by_status(self) -> dict[str, int]:
        rows = (
            self.db.query(Appointment.status, func.count(Appointment.id))
            .group_by(Appointment.status)
            .all()
        )
        return {status: count for status, count in rows}

    def count_by_service(self) -> list[tuple[str, int]]:
        rows = (
            self.db.query(Appointment.service_type, func.count(Appointment.id))
            .group_by(Appointment.service_type)
            .order_by(Appointment.service_type)
            .all()
        )
        return [(service, count) for service, count in rows]

    def count_by_date(self, start: date, end: date) -> list[tuple[date, int]]:
        rows = (
            self.db.query(Appointment.date, func.count(Appointment.id))
            .filter(Appointment.date >= start, Appointment.date <= end)
            .group_by(Appointment.date)
            .order_by(Appointment.date)
            .all()
        )
        return [(day, count) for day, count in rows]

    def count_on_date(self, day: date) -> int:
        return (
            self.db.query(func.count(Appointment.id)).filter(Appointment.date == day).scalar() or 0
        )

    def count_distinct_owners(self) -> int:
        return self.db.query(func.count(distinct(Appointment.user_id))).scalar() or 0
