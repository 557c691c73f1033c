"""
Access policy

Maps the role of the authenticated principal to the operations it may run.
Checks are role based; cancelling and reading a single appointment also look
at ownership.
"""

import logging

from .errors import ForbiddenError
from .models import Role

logger = logging.getLogger(__name__)

CREATE_APPOINTMENT = "create_appointment"
LIST_OWN_APPOINTMENTS = "list_own_appointments"
CANCEL_OWN_APPOINTMENT = "cancel_own_appointment"
CHECK_AVAILABILITY = "check_availability"
LIST_ALL_APPOINTMENTS = "list_all_appointments"
UPDATE_APPOINTMENT_STATUS = "update_appointment_status"
UPDATE_APPOINTMENT_NOTES = "update_appointment_notes"
VIEW_DASHBOARD = "view_dashboard"
MANAGE_USERS = "manage_users"

_USER_OPERATIONS = frozenset(
    {
        CREATE_APPOINTMENT,
        LIST_OWN_APPOINTMENTS,
        CANCEL_OWN_APPOINTMENT,
        CHECK_AVAILABILITY,
    }
)
_ATTENDANT_OPERATIONS = _USER_OPERATIONS | {
    LIST_ALL_APPOINTMENTS,
    UPDATE_APPOINTMENT_STATUS,
    UPDATE_APPOINTMENT_NOTES,
}
_ADMIN_OPERATIONS = _ATTENDANT_OPERATIONS | {VIEW_DASHBOARD, MANAGE_USERS}

PERMISSIONS = {
    Role.USER.value: _USER_OPERATIONS,
    Role.ATTENDANT.value: _ATTENDANT_OPERATIONS,
    Role.ADMIN.value: _ADMIN_OPERATIONS,
}

STAFF_ROLES = frozenset({Role.ATTENDANT.value, Role.ADMIN.value})

_DENIED_MESSAGES = {
    VIEW_DASHBOARD: "Acceso denegado. Se requiere rol de administrador.",
    MANAGE_USERS: "Acceso denegado. Se requiere rol de administrador.",
}


def is_allowed(role: str, operation: str) -> bool:
    return operation in PERMISSIONS.get(role, frozenset())


def is_staff(principal) -> bool:
    return principal.role in STAFF_ROLES


def authorize(principal, operation: str) -> None:
    """
    Raise ForbiddenError unless ``principal`` may run ``operation``.

    ``principal`` is anything with ``id`` and ``role`` attributes.
    """
    if is_allowed(principal.role, operation):
        return

    logger.warning(
        f"🚫 Access denied: user {principal.id} ({principal.role}) attempted {operation}"
    )
    raise ForbiddenError(
        _DENIED_MESSAGES.get(operation, "Acceso denegado. Se requiere rol de attendant.")
    )


def ensure_can_view(principal, appointment) -> None:
    """Staff see every appointment; everybody else only their own."""
    if is_staff(principal) or appointment.user_id == principal.id:
        return

    logger.warning(
        f"🚫 Access denied: user {principal.id} tried to read appointment {appointment.id}"
    )
    raise ForbiddenError("No tienes permiso para ver esta cita")
