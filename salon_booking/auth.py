import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .domain.users.repository import SqlAlchemyUserRepository
from .models import User
from .policy import authorize
from .security_utils import verify_access_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is a 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user row; the role is always read fresh from the database"""

    if not credentials:
        raise _unauthorized("Acceso denegado. Token no proporcionado.")

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Token inválido o expirado.")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        logger.warning(f"⚠️ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise _unauthorized("Token inválido o expirado.") from None

    user = SqlAlchemyUserRepository(db).get_by_id(user_id)
    if not user:
        logger.warning(f"⚠️ Token for unknown user {user_id}")
        raise _unauthorized("Token inválido o expirado.")

    logger.debug(f"✅ User authenticated: {user.email} ({user.role})")
    return user


def require(operation: str):
    """
    Create a dependency that authenticates the caller and checks the access policy

    Example usage:
        @router.get("/appointments")
        async def list_all(current_user: User = Depends(require(LIST_ALL_APPOINTMENTS))):
            ...
    """

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, operation)
        return current_user

    return dependency
