import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from training_app.api import (
    routes_backup,
    routes_courses,
    routes_employees,
    routes_import,
    routes_reports,
    routes_training,
)
from training_app.core.config import settings
from training_app.core.exceptions import DuplicateError, MalformedSnapshotError, ValidationError
from training_app.core.logging_config import setup_logging
from training_app.db import database
from training_app.services.state_store import StateStore
from training_app.services.storage import SqlAlchemyStorage

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and load the training records snapshot on startup."""
    database.init_db()
    app.state.store = StateStore(SqlAlchemyStorage(database.SessionLocal), settings.STORAGE_KEY)
    logger.info("Training records loaded from %s", settings.DATABASE_URL)
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

origins = [
    "http://127.0.0.1:5500",
    "http://localhost:5500",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DuplicateError)
async def duplicate_error_handler(request: Request, exc: DuplicateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(MalformedSnapshotError)
async def malformed_snapshot_handler(request: Request, exc: MalformedSnapshotError):
    logger.warning("Rejected snapshot import: %s", exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/")
def read_root():
    return {"message": "Welcome to the Training Compliance Records API"}

# Routers
app.include_router(routes_employees.router, prefix="/employees", tags=["Employees"])
app.include_router(routes_courses.router, prefix="/courses", tags=["Courses"])
app.include_router(routes_training.router, prefix="/training", tags=["Training"])
app.include_router(routes_import.router, prefix="/import", tags=["Import"])
app.include_router(routes_backup.router, prefix="/backup", tags=["Backup"])
app.include_router(routes_reports.router, prefix="/reports", tags=["Reports"])
