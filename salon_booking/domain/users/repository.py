"""User repository - Database operations for users"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError
from ...models import User

logger = logging.getLogger(__name__)


class UserRepository(ABC):
    """Storage interface for user accounts."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        """All users, newest first."""

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str, role: str) -> User:
        """
        Insert a user.

        Raises:
            ConflictError: the email is already registered
        """

    @abstractmethod
    def update(self, user: User, **updates) -> User:
        pass

    @abstractmethod
    def count_by_role(self) -> dict[str, int]:
        pass


class SqlAlchemyUserRepository(UserRepository):
    """UserRepository backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def create(self, name: str, email: str, password_hash: str, role: str) -> User:
        user = User(name=name, email=email, password=password_hash, role=role)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # Handle race condition where email was taken between check and insert
            logger.warning(f"⚠️ Email {email} was registered concurrently")
            raise ConflictError("El correo electrónico ya está registrado") from e
        self.db.refresh(user)
        return user

    def update(self, user: User, **updates) -> User:
        for key, value in updates.items():
            if value is not None and hasattr(user, key):
                setattr(user, key, value)

        self.db.commit()
        self.db.refresh(user)
        return user

    def count_by_role(self) -> dict[str, int]:
        rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        return {role: count for role, count in rows}
