"""In-memory repositories for exercising services without a database."""

import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from salon_booking.domain.appointments.repository import AppointmentRepository
from salon_booking.domain.users.repository import UserRepository
from salon_booking.errors import ConflictError
from salon_booking.models import AppointmentStatus


@dataclass
class FakeUser:
    id: int
    name: str
    email: str
    password: str
    role: str = "user"
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class FakeAppointment:
    id: int
    user_id: int
    date: date
    time: str
    service_type: str
    image_url: Optional[str] = None
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    status: str = AppointmentStatus.PENDING.value
    created_at: datetime = field(default_factory=datetime.now)
    owner: Optional[FakeUser] = None


class InMemoryUserRepository(UserRepository):
    def __init__(self):
        self.rows: dict[int, FakeUser] = {}
        self._next_id = 1

    def get_by_id(self, user_id):
        return self.rows.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.rows.values() if u.email == email), None)

    def list_users(self):
        return sorted(self.rows.values(), key=lambda u: (u.created_at, u.id), reverse=True)

    def create(self, name, email, password_hash, role):
        if self.get_by_email(email):
            raise ConflictError("El correo electrónico ya está registrado")
        user = FakeUser(id=self._next_id, name=name, email=email, password=password_hash, role=role)
        self.rows[user.id] = user
        self._next_id += 1
        return user

    def update(self, user, **updates):
        for key, value in updates.items():
            if value is not None:
                setattr(user, key, value)
        return user

    def count_by_role(self):
        counts: dict[str, int] = {}
        for user in self.rows.values():
            counts[user.role] = counts.get(user.role, 0) + 1
        return counts


class InMemoryAppointmentRepository(AppointmentRepository):
    """Enforces the live-slot rule under a lock, like the database's partial unique index."""

    def __init__(self, users: Optional[InMemoryUserRepository] = None):
        self.rows: dict[int, FakeAppointment] = {}
        self.users = users
        self._next_id = 1
        self._lock = threading.Lock()

    def _listing(self, rows):
        return sorted(rows, key=lambda a: (a.date, a.time, a.id), reverse=True)

    def _slot_taken(self, day, time, exclude_id=None):
        return any(
            a.date == day
            and a.time == time
            and a.status != AppointmentStatus.CANCELLED.value
            and a.id != exclude_id
            for a in self.rows.values()
        )

    def get_by_id(self, appointment_id):
        return self.rows.get(appointment_id)

    def list_by_owner(self, owner_id):
        return self._listing(a for a in self.rows.values() if a.user_id == owner_id)

    def list_all(self):
        return self._listing(self.rows.values())

    def list_by_date(self, day):
        return self._listing(a for a in self.rows.values() if a.date == day)

    def find_active_in_slot(self, day, time):
        return next(
            (
                a
                for a in self.rows.values()
                if a.date == day and a.time == time and a.status != AppointmentStatus.CANCELLED.value
            ),
            None,
        )

    def add(self, owner_id, day, time, service_type, image_url=None, notes=None):
        with self._lock:
            if self._slot_taken(day, time):
                raise ConflictError("El horario seleccionado no está disponible")
            owner = self.users.get_by_id(owner_id) if self.users else None
            appointment = FakeAppointment(
                id=self._next_id,
                user_id=owner_id,
                date=day,
                time=time,
                service_type=service_type,
                image_url=image_url,
                notes=notes,
                owner=owner,
            )
            self.rows[appointment.id] = appointment
            self._next_id += 1
            return appointment

    def update(self, appointment, **updates):
        with self._lock:
            new_status = updates.get("status", appointment.status)
            if new_status != AppointmentStatus.CANCELLED.value and self._slot_taken(
                appointment.date, appointment.time, exclude_id=appointment.id
            ):
                raise ConflictError("El horario seleccionado no está disponible")
            for key, value in updates.items():
                setattr(appointment, key, value)
            return appointment

    def cancel(self, appointment):
        with self._lock:
            if appointment.status == AppointmentStatus.CANCELLED.value:
                return False
            appointment.status = AppointmentStatus.CANCELLED.value
            return True

    def count_by_status(self):
        counts: dict[str, int] = {}
        for a in self.rows.values():
            counts[a.status] = counts.get(a.status, 0) + 1
        return counts

    def count_by_service(self):
        counts: dict[str, int] = {}
        for a in self.rows.values():
            counts[a.service_type] = counts.get(a.service_type, 0) + 1
        return sorted(counts.items())

    def count_by_date(self, start, end):
        counts: dict[date, int] = {}
        for a in self.rows.values():
            if start <= a.date <= end:
                counts[a.date] = counts.get(a.date, 0) + 1
        return sorted(counts.items())

    def count_on_date(self, day):
        return sum(1 for a in self.rows.values() if a.date == day)

    def count_distinct_owners(self):
        return len({a.user_id for a in self.rows.values()})
