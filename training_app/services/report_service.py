from typing import Dict, List, Optional

from training_app.schemas.training_schema import AppState
from training_app.services.state_store import StateStore
from training_app.services.training_service import (
    attended_hours,
    find_course,
    find_employee,
    find_session,
    normalize_key,
)

DEFAULT_TRAINER = "Internal"


def get_employee_training_history(store: StateStore, employee_id: str) -> Optional[Dict]:
    """Audit log for one employee: every attendance record, newest first, plus total hours.

    Registrations whose session or course no longer resolves are left out.
    Returns None for an unknown employee.
    """
    state: AppState = store.get()
    employee = find_employee(state, employee_id)
    if employee is None:
        return None

    emp_key = normalize_key(employee.id)
    entries = []
    for reg in state.registrations:
        if normalize_key(reg.employee_id) != emp_key:
            continue
        session = find_session(state, reg.session_id)
        if session is None:
            continue
        course = find_course(state, session.course_code)
        if course is None:
            continue

        reg_key = normalize_key(reg.id)
        for att in state.attendance:
            if normalize_key(att.registration_id) != reg_key:
                continue
            entries.append({
                "course_code": course.code,
                "course_name_local": course.name_local,
                "course_name_international": course.name_international,
                "date": att.date,
                "hours": att.hours,
                "trainer": session.trainer or DEFAULT_TRAINER,
                "location": session.location,
                "status": reg.status,
            })

    entries.sort(key=lambda e: e["date"], reverse=True)
    return {
        "employee": employee,
        "entries": entries,
        "total_hours": sum(e["hours"] for e in entries),
    }


def get_dashboard_overview(store: StateStore) -> Dict:
    state = store.get()
    return {
        "active_staff": sum(1 for e in state.employees if e.is_active),
        "total_staff": len(state.employees),
        "courses": len(state.courses),
        "sessions": len(state.sessions),
        "total_hours": sum(a.hours for a in state.attendance),
    }


def get_recent_registrations(store: StateStore, limit: int = 10) -> List[Dict]:
    """Latest registrations first, with names resolved for display."""
    state = store.get()
    recent = state.registrations[-limit:] if limit > 0 else []

    result = []
    for reg in reversed(recent):
        employee = find_employee(state, reg.employee_id)
        session = find_session(state, reg.session_id)
        course = find_course(state, session.course_code) if session else None
        result.append({
            "registration_id": reg.id,
            "employee_id": reg.employee_id,
            "employee_name_local": employee.name_local if employee else None,
            "employee_name_international": employee.name_international if employee else None,
            "course_code": course.code if course else None,
            "course_name_international": course.name_international if course else None,
            "status": reg.status,
            "hours": attended_hours(state, reg.id),
        })
    return result
