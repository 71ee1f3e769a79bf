from typing import List

from fastapi import APIRouter, Depends, status

from training_app.core.exceptions import DuplicateError
from training_app.schemas.training_schema import (
    AttendanceRecord,
    AttendanceRequest,
    ManualHistoryRequest,
    Registration,
    RegistrationRequest,
    SessionCreateRequest,
    TrainingSession,
)
from training_app.services import report_service, training_service
from training_app.services.state_store import StateStore, get_store

router = APIRouter()

# --- Sessions ---

@router.get("/sessions", response_model=List[TrainingSession])
def list_sessions(store: StateStore = Depends(get_store)):
    return store.get().sessions


@router.post("/sessions", response_model=TrainingSession, status_code=status.HTTP_201_CREATED)
def create_session(req: SessionCreateRequest, store: StateStore = Depends(get_store)):
    return training_service.add_session(
        store,
        req.course_code,
        req.start_date,
        end_date=req.end_date,
        location=req.location,
        trainer=req.trainer,
        organizer=req.organizer,
        session_id=req.id,
    )

# --- Registrations ---

@router.get("/registrations", response_model=List[Registration])
def list_registrations(store: StateStore = Depends(get_store)):
    return store.get().registrations


@router.get("/registrations/recent")
def recent_registrations(limit: int = 10, store: StateStore = Depends(get_store)):
    return report_service.get_recent_registrations(store, limit)


@router.post("/registrations", response_model=Registration, status_code=status.HTTP_201_CREATED)
def register_employee(req: RegistrationRequest, store: StateStore = Depends(get_store)):
    registration = training_service.register_employee(store, req.employee_id, req.session_id)
    if registration is None:
        raise DuplicateError(f"Employee {req.employee_id} is already registered for session {req.session_id}.")
    return registration

# --- Attendance ---

@router.get("/attendance", response_model=List[AttendanceRecord])
def list_attendance(store: StateStore = Depends(get_store)):
    return store.get().attendance


@router.post("/attendance", response_model=AttendanceRecord, status_code=status.HTTP_201_CREATED)
def record_attendance(req: AttendanceRequest, store: StateStore = Depends(get_store)):
    return training_service.record_attendance(store, req.registration_id, req.date, req.hours)


@router.post("/history", response_model=Registration, status_code=status.HTTP_201_CREATED)
def record_manual_history(req: ManualHistoryRequest, store: StateStore = Depends(get_store)):
    """Quick entry of past training; reuses the manual session/registration for the same day."""
    return training_service.record_manual_history(
        store, req.employee_id, req.course_code, req.date, req.hours, trainer=req.trainer,
    )
