from fastapi import APIRouter

from .staff import router as staff_appointments_router

router = APIRouter(prefix="/api/attendant", tags=["Attendant"])
router.include_router(staff_appointments_router)
