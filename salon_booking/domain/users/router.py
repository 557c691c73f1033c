"""Auth router - registration, login and the current-user endpoint"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .repository import SqlAlchemyUserRepository
from .schemas import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(SqlAlchemyUserRepository(db))


def _auth_response(message: str, user: User) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=UserService.issue_token(user),
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(data: RegisterRequest, service: UserService = Depends(get_user_service)):
    user = service.register(data.name, data.email, data.password)
    return _auth_response("Usuario registrado exitosamente", user)


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, service: UserService = Depends(get_user_service)):
    user = service.authenticate(data.email, data.password)
    return _auth_response("Inicio de sesión exitoso", user)


@router.get("/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
