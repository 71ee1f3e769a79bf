import enum
from typing import List, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

NOT_AVAILABLE = "N/A"
DEFAULT_CATEGORY = "Technical"

# --- Shared config ---
# Python code uses snake_case, the persisted snapshot uses camelCase keys.
class ConfigBase(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AttendanceStatus(str, enum.Enum):
    registered = "Registered"
    partially_attended = "Partially Attended"
    attended = "Attended"
    absent = "Absent"


# --- Entities ---
class Employee(ConfigBase):
    id: str
    name_local: str = NOT_AVAILABLE
    name_international: str = NOT_AVAILABLE
    department: str = NOT_AVAILABLE
    position: str = NOT_AVAILABLE
    is_active: bool = True


class Course(ConfigBase):
    code: str
    name_local: str = NOT_AVAILABLE
    name_international: str = NOT_AVAILABLE
    category: str = DEFAULT_CATEGORY
    total_hours: float
    validity_months: Optional[int] = None


class TrainingSession(ConfigBase):
    id: str
    course_code: str
    start_date: str
    end_date: str
    location: str
    trainer: Optional[str] = None
    organizer: Optional[str] = None


class Registration(ConfigBase):
    id: str
    employee_id: str
    session_id: str
    status: AttendanceStatus = AttendanceStatus.registered


class AttendanceRecord(ConfigBase):
    id: str
    registration_id: str
    date: str
    hours: float


class AppState(ConfigBase):
    employees: List[Employee] = Field(default_factory=list)
    courses: List[Course] = Field(default_factory=list)
    sessions: List[TrainingSession] = Field(default_factory=list)
    registrations: List[Registration] = Field(default_factory=list)
    attendance: List[AttendanceRecord] = Field(default_factory=list)


# --- Factories: the only place entity defaults are decided ---
def _text_or_none(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_employee(
    employee_id: str,
    name_local: Optional[str] = None,
    name_international: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
    is_active: bool = True,
) -> Employee:
    """Missing names fall back to the other language, then to "N/A"."""
    local = _text_or_none(name_local)
    international = _text_or_none(name_international)
    return Employee(
        id=str(employee_id).strip(),
        name_local=local or international or NOT_AVAILABLE,
        name_international=international or local or NOT_AVAILABLE,
        department=_text_or_none(department) or NOT_AVAILABLE,
        position=_text_or_none(position) or NOT_AVAILABLE,
        is_active=is_active,
    )


def build_course(
    code: str,
    total_hours: float,
    name_local: Optional[str] = None,
    name_international: Optional[str] = None,
    category: Optional[str] = None,
    validity_months: Optional[int] = None,
) -> Course:
    local = _text_or_none(name_local)
    international = _text_or_none(name_international)
    return Course(
        code=str(code).strip(),
        name_local=local or international or NOT_AVAILABLE,
        name_international=international or local or NOT_AVAILABLE,
        category=_text_or_none(category) or DEFAULT_CATEGORY,
        total_hours=total_hours,
        validity_months=validity_months,
    )


def build_session(
    session_id: str,
    course_code: str,
    start_date: str,
    end_date: Optional[str] = None,
    location: Optional[str] = None,
    trainer: Optional[str] = None,
    organizer: Optional[str] = None,
) -> TrainingSession:
    return TrainingSession(
        id=session_id,
        course_code=str(course_code).strip(),
        start_date=start_date,
        end_date=end_date or start_date,
        location=_text_or_none(location) or NOT_AVAILABLE,
        trainer=_text_or_none(trainer),
        organizer=_text_or_none(organizer),
    )


# --- Request bodies ---
class EmployeeUpsertRequest(ConfigBase):
    id: str
    name_local: Optional[str] = None
    name_international: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: Optional[bool] = None


class CourseUpsertRequest(ConfigBase):
    code: str
    name_local: Optional[str] = None
    name_international: Optional[str] = None
    category: Optional[str] = None
    total_hours: float
    validity_months: Optional[int] = None


class SessionCreateRequest(ConfigBase):
    id: Optional[str] = None
    course_code: str
    start_date: str
    end_date: Optional[str] = None
    location: str
    trainer: Optional[str] = None
    organizer: Optional[str] = None


class RegistrationRequest(ConfigBase):
    employee_id: str
    session_id: str


class AttendanceRequest(ConfigBase):
    registration_id: str
    date: str
    hours: float


class ManualHistoryRequest(ConfigBase):
    employee_id: str
    course_code: str
    date: str
    hours: float
    trainer: Optional[str] = None
