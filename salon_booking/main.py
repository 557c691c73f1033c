import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from . import config
from . import models  # noqa: F401 - registers tables with Base
from .database import Base, SessionLocal, engine
from .domain.appointments.router import router as appointments_router
from .domain.users.repository import SqlAlchemyUserRepository
from .domain.users.router import router as auth_router
from .domain.users.service import UserService
from .errors import BookingError
from .routes.admin import router as admin_router
from .routes.attendant import router as attendant_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.ERROR)


def seed_admin() -> None:
    """Create the configured admin account on first start"""
    if not (config.ADMIN_EMAIL and config.ADMIN_PASSWORD):
        return

    db = SessionLocal()
    try:
        created = UserService(SqlAlchemyUserRepository(db)).ensure_admin(
            config.ADMIN_EMAIL, config.ADMIN_PASSWORD, config.ADMIN_NAME
        )
        if created:
            logger.info(f"👑 Seeded admin account {created.email}")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    seed_admin()
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Nail Salon Booking API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    # ctx may hold the raised ValueError, which is not JSON serialisable
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} - Unhandled error: {exc}")
    return JSONResponse(status_code=500, content={"error": "Error interno del servidor"})


# CORS - credentials cannot be combined with a wildcard origin
_allow_any_origin = "*" in config.ALLOWED_ORIGINS
logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=not _allow_any_origin,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router)
app.include_router(appointments_router)
app.include_router(attendant_router)
app.include_router(admin_router)

# Locally stored appointment images
config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(config.UPLOAD_DIR)), name="uploads")


@app.get("/api/health")
def health():
    return {"status": "OK", "message": "API del Salón de Manicura funcionando"}
