import enum
from typing import List
from pydantic import BaseModel


class ImportKind(str, enum.Enum):
    employee = "employee"
    course = "course"
    history = "history"


class ImportResponse(BaseModel):
    kind: ImportKind
    rows_received: int
    rows_imported: int
    errors: List[str]
    summary: str
