"""Admin panel - user management, dashboard statistics and appointment management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import require
from ..database import get_db
from ..domain.appointments.repository import SqlAlchemyAppointmentRepository
from ..domain.dashboard.schemas import DashboardStats
from ..domain.dashboard.service import DashboardService
from ..domain.users.repository import SqlAlchemyUserRepository
from ..domain.users.router import get_user_service
from ..domain.users.schemas import UserCreate, UserMessageResponse, UserResponse, UserUpdate
from ..domain.users.service import UserService
from ..models import Role, User
from ..policy import MANAGE_USERS, VIEW_DASHBOARD
from .staff import router as staff_appointments_router

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])
router.include_router(staff_appointments_router)

_ROLE_LABELS = {
    Role.ADMIN.value: "administrador",
    Role.ATTENDANT.value: "empleado",
    Role.USER.value: "cliente",
}


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(SqlAlchemyAppointmentRepository(db), SqlAlchemyUserRepository(db))


@router.get("/users", response_model=list[UserResponse])
def list_users(
    current_user: User = Depends(require(MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    return service.list_users()


@router.post("/users", response_model=UserMessageResponse, status_code=201)
def create_user(
    data: UserCreate,
    current_user: User = Depends(require(MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    """Create an account of any role (used to onboard attendants and admins)"""
    user = service.create_user(data.name, data.email, data.password, data.role)
    logger.info(f"👤 Admin {current_user.id} created {data.role} account {user.id}")
    return UserMessageResponse(
        message=f"Usuario {_ROLE_LABELS[user.role]} creado exitosamente",
        user=UserResponse.model_validate(user),
    )


@router.put("/users/{user_id}", response_model=UserMessageResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: User = Depends(require(MANAGE_USERS)),
    service: UserService = Depends(get_user_service),
):
    user = service.update_user(user_id, name=data.name, role=data.role)
    return UserMessageResponse(
        message="Usuario actualizado exitosamente",
        user=UserResponse.model_validate(user),
    )


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    current_user: User = Depends(require(VIEW_DASHBOARD)),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.compute_dashboard_stats()
