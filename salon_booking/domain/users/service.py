"""User service - Registration, login and account management"""

import logging
from typing import Optional

from ...errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ...models import Role, User
from ...security_utils import create_access_token, hash_password, verify_password
from ...shared.validators import validate_role
from .repository import UserRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Credenciales inválidas"


def _check_role(role: str) -> str:
    try:
        return validate_role(role)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class UserService:
    """Service layer for user accounts"""

    def __init__(self, users: UserRepository):
        self.repo = users

    def _create(self, name: str, email: str, password: str, role: str) -> User:
        if self.repo.get_by_email(email):
            raise ConflictError("El correo electrónico ya está registrado")
        user = self.repo.create(name, email, hash_password(password), role)
        logger.info(f"🆕 Created {role} account {user.id} ({email})")
        return user

    def register(self, name: str, email: str, password: str) -> User:
        return self._create(name, email, password, Role.USER.value)

    def authenticate(self, email: str, password: str) -> User:
        """Return the user for valid credentials; one message for every failure."""
        user = self.repo.get_by_email(email)
        if not user or not verify_password(password, user.password):
            logger.info(f"🔒 Failed login for {email}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(user.id, user.email, user.role)

    def get_user(self, user_id: int) -> User:
        user = self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("Usuario no encontrado")
        return user

    def list_users(self) -> list[User]:
        return self.repo.list_users()

    def create_user(self, name: str, email: str, password: str, role: str) -> User:
        return self._create(name, email, password, _check_role(role))

    def update_user(self, user_id: int, name: Optional[str] = None, role: Optional[str] = None) -> User:
        if role is not None:
            role = _check_role(role)
        user = self.get_user(user_id)
        if role is not None and role != user.role:
            logger.info(f"👤 User {user_id} role {user.role} -> {role}")
        return self.repo.update(user, name=name, role=role)

    def ensure_admin(self, email: str, password: str, name: str) -> Optional[User]:
        """Create the seed admin account when it does not exist yet (idempotent)."""
        email = email.strip().lower()
        if self.repo.get_by_email(email):
            return None
        return self._create(name, email, password, Role.ADMIN.value)
