# Initial dataset: used when nothing has been persisted yet,
# or when the persisted snapshot cannot be read.
from training_app.schemas.training_schema import AppState

SEED_DATA = {
    "employees": [
        {"id": "EMP001", "nameLocal": "จอห์น โด", "nameInternational": "John Doe",
         "department": "Engineering", "position": "Senior Dev", "isActive": True},
        {"id": "EMP002", "nameLocal": "เจน สมิธ", "nameInternational": "Jane Smith",
         "department": "Operations", "position": "Manager", "isActive": True},
    ],
    "courses": [
        {"code": "SEC101", "nameLocal": "การตระหนักรู้ความปลอดภัยไซเบอร์",
         "nameInternational": "Cybersecurity Awareness", "category": "Compliance",
         "totalHours": 4, "validityMonths": 12},
        {"code": "REACT202", "nameLocal": "รูปแบบ React ขั้นสูง",
         "nameInternational": "Advanced React Patterns", "category": "Technical",
         "totalHours": 16},
        {"code": "SAFE505", "nameLocal": "ความปลอดภัยจากอัคคีภัยและเหตุฉุกเฉิน",
         "nameInternational": "Fire & Emergency Safety", "category": "Safety",
         "totalHours": 8, "validityMonths": 24},
    ],
    "sessions": [
        {"id": "SESS001", "courseCode": "SEC101", "startDate": "2024-05-01", "endDate": "2024-05-01",
         "location": "Online", "trainer": "Alice Vance", "organizer": "IT Security Dept"},
        {"id": "SESS002", "courseCode": "REACT202", "startDate": "2024-06-10", "endDate": "2024-06-12",
         "location": "Room A", "trainer": "Bob Martin", "organizer": "L&D Team"},
        {"id": "SESS003", "courseCode": "SAFE505", "startDate": "2024-07-20", "endDate": "2024-07-20",
         "location": "Assembly Point", "trainer": "Safety Officer", "organizer": "HR"},
    ],
    "registrations": [
        {"id": "REG001", "employeeId": "EMP001", "sessionId": "SESS001", "status": "Attended"},
        {"id": "REG002", "employeeId": "EMP002", "sessionId": "SESS001", "status": "Registered"},
        {"id": "REG003", "employeeId": "EMP001", "sessionId": "SESS003", "status": "Attended"},
    ],
    "attendance": [
        {"id": "ATT001", "registrationId": "REG001", "date": "2024-05-01", "hours": 4},
        {"id": "ATT002", "registrationId": "REG003", "date": "2024-07-20", "hours": 8},
    ],
}


def seed_state() -> AppState:
    """Return a fresh AppState built from SEED_DATA (never shared between stores)."""
    return AppState.model_validate(SEED_DATA)
