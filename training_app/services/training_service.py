"""
Reconciliation engine: every write that has to keep employees, courses,
sessions, registrations and attendance consistent with each other.

All lookups go through normalize_key(), so " emp001 " and "EMP001" are the
same employee everywhere. Each operation builds a new AppState and hands it to
StateStore.commit(), which saves once. Writes run inside store.transaction()
so overlapping requests never build on the same snapshot.
"""
import functools
import logging
import math
import uuid
from typing import Iterable, List, Optional

from training_app.core.exceptions import ValidationError
from training_app.schemas.training_schema import (
    AppState,
    AttendanceRecord,
    AttendanceStatus,
    Course,
    Employee,
    Registration,
    TrainingSession,
    build_course,
    build_employee,
    build_session,
)
from training_app.services.state_store import StateStore

logger = logging.getLogger(__name__)

MANUAL_ENTRY_LOCATION = "Manual Entry"
MANUAL_ENTRY_TRAINER = "External"
MANUAL_ENTRY_ORGANIZER = "Self/Manual"

EMPLOYEE_FILTERS = ("all", "active", "resigned")

# Status only ever moves up this ladder.
_STATUS_RANK = {
    AttendanceStatus.registered: 0,
    AttendanceStatus.absent: 0,
    AttendanceStatus.partially_attended: 1,
    AttendanceStatus.attended: 2,
}


# ==================================================
# KEYS & LOOKUPS
# ==================================================

def normalize_key(value) -> str:
    """Trimmed, lower-cased form of a natural key ("" for None)."""
    if value is None:
        return ""
    return str(value).strip().lower()


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"


def _index_of(items: List, attr: str, key) -> Optional[int]:
    wanted = normalize_key(key)
    for index, item in enumerate(items):
        if normalize_key(getattr(item, attr)) == wanted:
            return index
    return None


def _find(items: List, attr: str, key):
    index = _index_of(items, attr, key)
    return items[index] if index is not None else None


def _find_registration_in(registrations: Iterable[Registration], employee_id, session_id) -> Optional[Registration]:
    emp_key = normalize_key(employee_id)
    session_key = normalize_key(session_id)
    for reg in registrations:
        if normalize_key(reg.employee_id) == emp_key and normalize_key(reg.session_id) == session_key:
            return reg
    return None


def find_employee(state: AppState, employee_id) -> Optional[Employee]:
    return _find(state.employees, "id", employee_id)


def find_course(state: AppState, code) -> Optional[Course]:
    return _find(state.courses, "code", code)


def find_session(state: AppState, session_id) -> Optional[TrainingSession]:
    return _find(state.sessions, "id", session_id)


def find_registration(state: AppState, employee_id, session_id) -> Optional[Registration]:
    return _find_registration_in(state.registrations, employee_id, session_id)


def _sum_hours(attendance: Iterable[AttendanceRecord], registration_id) -> float:
    reg_key = normalize_key(registration_id)
    return sum(a.hours for a in attendance if normalize_key(a.registration_id) == reg_key)


def attended_hours(state: AppState, registration_id) -> float:
    return _sum_hours(state.attendance, registration_id)


# ==================================================
# STATUS DERIVATION
# ==================================================

def derive_status(total_hours: float, course_hours: float, current: AttendanceStatus) -> AttendanceStatus:
    """
    Completion status from logged hours vs. the course threshold.
    Zero hours leaves the status alone and a lower result never replaces a higher one.
    """
    if total_hours >= course_hours:
        target = AttendanceStatus.attended
    elif total_hours > 0:
        target = AttendanceStatus.partially_attended
    else:
        return current

    if _STATUS_RANK[target] > _STATUS_RANK[current]:
        return target
    return current


def _with_derived_status(
    registrations: List[Registration],
    attendance: List[AttendanceRecord],
    registration_id: str,
    course: Optional[Course],
) -> List[Registration]:
    """Return registrations with the given one's status re-derived (unchanged list if skipped)."""
    if course is None:
        logger.debug("Course not found for registration %s, status derivation skipped", registration_id)
        return registrations

    index = _index_of(registrations, "id", registration_id)
    if index is None:
        return registrations

    reg = registrations[index]
    status = derive_status(_sum_hours(attendance, reg.id), course.total_hours, reg.status)
    if status == reg.status:
        return registrations

    updated = list(registrations)
    updated[index] = reg.model_copy(update={"status": status})
    logger.info("Registration %s: %s -> %s", reg.id, reg.status.value, status.value)
    return updated


def _check_hours(hours) -> float:
    try:
        value = float(hours)
    except (TypeError, ValueError):
        raise ValidationError(f"Hours must be a number, got {hours!r}")
    if not math.isfinite(value):
        raise ValidationError(f"Hours must be a finite number, got {hours!r}")
    if value < 0:
        raise ValidationError("Hours cannot be negative")
    return value


def _atomic(func):
    """Run an engine write while holding the store's transaction lock."""
    @functools.wraps(func)
    def wrapper(store: StateStore, *args, **kwargs):
        with store.transaction():
            return func(store, *args, **kwargs)
    return wrapper


# ==================================================
# EMPLOYEES
# ==================================================

def list_employees(store: StateStore, status: str = "all") -> List[Employee]:
    """Roster filtered by 'active', 'resigned' or 'all'."""
    employees = store.get().employees
    if status == "active":
        return [e for e in employees if e.is_active]
    if status == "resigned":
        return [e for e in employees if not e.is_active]
    return list(employees)


@_atomic
def upsert_employee(
    store: StateStore,
    employee_id: str,
    name_local: Optional[str] = None,
    name_international: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> Employee:
    """
    Insert or replace (in place) the employee with this normalized id.
    When is_active is not given, a new employee starts active and an existing
    one keeps its current flag.
    """
    if not normalize_key(employee_id):
        raise ValidationError("Employee ID is required")

    state = store.get()
    employees = list(state.employees)
    index = _index_of(employees, "id", employee_id)

    if is_active is None:
        is_active = employees[index].is_active if index is not None else True

    employee = build_employee(employee_id, name_local, name_international, department, position, is_active)
    if index is None:
        employees.append(employee)
    else:
        employees[index] = employee

    store.commit(state.model_copy(update={"employees": employees}))
    return employee


@_atomic
def toggle_employee_status(store: StateStore, employee_id: str) -> Optional[Employee]:
    state = store.get()
    index = _index_of(state.employees, "id", employee_id)
    if index is None:
        logger.info("Toggle status: employee %s not found", employee_id)
        return None

    employees = list(state.employees)
    current = employees[index]
    employees[index] = current.model_copy(update={"is_active": not current.is_active})
    store.commit(state.model_copy(update={"employees": employees}))
    return employees[index]


@_atomic
def delete_employee(store: StateStore, employee_id: str) -> bool:
    """Remove the employee, their registrations and those registrations' attendance."""
    state = store.get()
    emp_key = normalize_key(employee_id)
    if _index_of(state.employees, "id", employee_id) is None:
        return False

    removed_regs = {
        normalize_key(r.id) for r in state.registrations if normalize_key(r.employee_id) == emp_key
    }
    employees = [e for e in state.employees if normalize_key(e.id) != emp_key]
    registrations = [r for r in state.registrations if normalize_key(r.id) not in removed_regs]
    attendance = [a for a in state.attendance if normalize_key(a.registration_id) not in removed_regs]

    store.commit(state.model_copy(update={
        "employees": employees,
        "registrations": registrations,
        "attendance": attendance,
    }))
    logger.info(
        "Deleted employee %s with %d registration(s) and %d attendance record(s)",
        employee_id, len(removed_regs), len(state.attendance) - len(attendance),
    )
    return True


# ==================================================
# COURSES & SESSIONS
# ==================================================

@_atomic
def upsert_course(
    store: StateStore,
    code: str,
    name_local: Optional[str] = None,
    name_international: Optional[str] = None,
    category: Optional[str] = None,
    total_hours: float = 0,
    validity_months: Optional[int] = None,
) -> Course:
    if not normalize_key(code):
        raise ValidationError("Course code is required")
    if not normalize_key(name_local) and not normalize_key(name_international):
        raise ValidationError("Course needs a local or international name")
    try:
        total_hours = float(total_hours)
    except (TypeError, ValueError):
        raise ValidationError(f"Total hours must be a number, got {total_hours!r}")
    if not math.isfinite(total_hours) or total_hours <= 0:
        raise ValidationError("Total hours must be greater than 0")

    state = store.get()
    courses = list(state.courses)
    course = build_course(code, total_hours, name_local, name_international, category, validity_months)
    index = _index_of(courses, "code", code)
    if index is None:
        courses.append(course)
    else:
        courses[index] = course

    store.commit(state.model_copy(update={"courses": courses}))
    return course


@_atomic
def add_session(
    store: StateStore,
    course_code: str,
    start_date: str,
    end_date: Optional[str] = None,
    location: Optional[str] = None,
    trainer: Optional[str] = None,
    organizer: Optional[str] = None,
    session_id: Optional[str] = None,
) -> TrainingSession:
    """Append a session. The course code is not required to exist yet."""
    if not normalize_key(course_code):
        raise ValidationError("Course code is required")
    if not normalize_key(start_date):
        raise ValidationError("Start date is required")

    state = store.get()
    if session_id and find_session(state, session_id) is not None:
        raise ValidationError(f"Session ID {session_id} already exists")

    session = build_session(
        session_id or new_id("SESS"), course_code, str(start_date).strip(),
        end_date, location, trainer, organizer,
    )
    store.commit(state.model_copy(update={"sessions": state.sessions + [session]}))
    return session


# ==================================================
# REGISTRATIONS & ATTENDANCE
# ==================================================

@_atomic
def register_employee(
    store: StateStore,
    employee_id: str,
    session_id: str,
    registration_id: Optional[str] = None,
) -> Optional[Registration]:
    """
    Enroll an employee in a session. Returns None (and saves nothing) when the
    employee already has a registration for that session.
    """
    if not normalize_key(employee_id) or not normalize_key(session_id):
        raise ValidationError("Employee ID and session ID are required")

    state = store.get()
    if find_registration(state, employee_id, session_id) is not None:
        logger.info("Employee %s is already registered for session %s", employee_id, session_id)
        return None

    registration = Registration(
        id=registration_id or new_id("REG"),
        employee_id=str(employee_id).strip(),
        session_id=str(session_id).strip(),
        status=AttendanceStatus.registered,
    )
    store.commit(state.model_copy(update={"registrations": state.registrations + [registration]}))
    return registration


@_atomic
def record_attendance(
    store: StateStore,
    registration_id: str,
    date: str,
    hours: float,
    record_id: Optional[str] = None,
) -> AttendanceRecord:
    """
    Append an attendance record and re-derive the owning registration's status.
    A missing registration, session or course only skips the derivation.
    """
    hours = _check_hours(hours)
    state = store.get()

    record = AttendanceRecord(
        id=record_id or new_id("ATT"),
        registration_id=str(registration_id).strip(),
        date=str(date).strip(),
        hours=hours,
    )
    attendance = state.attendance + [record]

    registrations = state.registrations
    reg = _find(registrations, "id", registration_id)
    if reg is not None:
        session = find_session(state, reg.session_id)
        course = find_course(state, session.course_code) if session else None
        registrations = _with_derived_status(registrations, attendance, reg.id, course)

    store.commit(state.model_copy(update={"attendance": attendance, "registrations": registrations}))
    return record


@_atomic
def record_manual_history(
    store: StateStore,
    employee_id: str,
    course_code: str,
    date: str,
    hours: float,
    trainer: Optional[str] = None,
) -> Registration:
    """
    Log past training without a scheduled session.

    Reuses the "Manual Entry" session for (course, date) and the employee's
    registration in it when they exist, so repeating the call only adds
    attendance records. Returns the registration with its re-derived status.
    """
    if not normalize_key(employee_id) or not normalize_key(course_code):
        raise ValidationError("Employee ID and course code are required")
    if not normalize_key(date):
        raise ValidationError("Date is required")
    hours = _check_hours(hours)
    date = str(date).strip()

    state = store.get()
    course_key = normalize_key(course_code)

    sessions = state.sessions
    session = next(
        (
            s for s in sessions
            if normalize_key(s.course_code) == course_key
            and s.start_date == date
            and s.location == MANUAL_ENTRY_LOCATION
        ),
        None,
    )
    if session is None:
        session = build_session(
            new_id("SESS"), course_code, date, date,
            MANUAL_ENTRY_LOCATION, trainer or MANUAL_ENTRY_TRAINER, MANUAL_ENTRY_ORGANIZER,
        )
        sessions = sessions + [session]

    registrations = state.registrations
    registration = _find_registration_in(registrations, employee_id, session.id)
    if registration is None:
        registration = Registration(
            id=new_id("REG"),
            employee_id=str(employee_id).strip(),
            session_id=session.id,
            status=AttendanceStatus.registered,
        )
        registrations = registrations + [registration]

    attendance = state.attendance + [
        AttendanceRecord(id=new_id("ATT"), registration_id=registration.id, date=date, hours=hours)
    ]
    registrations = _with_derived_status(registrations, attendance, registration.id, find_course(state, course_code))

    store.commit(state.model_copy(update={
        "sessions": sessions,
        "registrations": registrations,
        "attendance": attendance,
    }))
    return _find(registrations, "id", registration.id)
