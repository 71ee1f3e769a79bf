"""
Bulk import of spreadsheet rows (employee roster, course catalog, training history).

Rows arrive as loosely keyed dicts. Headers are normalized, matched against the
alias tables below, validated, then handed to the reconciliation engine one
row at a time. Bad rows are reported as "Row N: ..." strings (N counts the
header as row 1) and never stop the batch.
"""
import copy
import io
import logging
import math
import re
import zipfile
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import openpyxl
from openpyxl.styles import Font, PatternFill
from openpyxl.utils.exceptions import InvalidFileException

from training_app.core.exceptions import ValidationError
from training_app.schemas.import_schema import ImportKind
from training_app.services import training_service
from training_app.services.state_store import StateStore

logger = logging.getLogger(__name__)

Row = Dict[str, object]
FieldAliases = Dict[str, Tuple[str, ...]]

# canonical field -> accepted header variants (after normalize_header)
EMPLOYEE_FIELDS: FieldAliases = {
    "id": ("id", "employeeid", "employee_id", "personnel_id"),
    "name_local": ("name_th", "nameth", "full_name_th", "name_local", "namelocal"),
    "name_international": ("name_en", "nameen", "full_name_en", "name_international", "nameinternational"),
    "department": ("department", "dept", "sector"),
    "position": ("position", "job_title", "pos"),
}

COURSE_FIELDS: FieldAliases = {
    "code": ("code", "coursecode", "course_code"),
    "name_local": ("name_th", "nameth", "name_local", "namelocal"),
    "name_international": ("name_en", "nameen", "name_international", "nameinternational"),
    "total_hours": ("hours", "total_hours", "totalhours", "credit"),
    "category": ("category", "type"),
    "validity_months": ("validity", "validity_months", "validitymonths", "expire"),
}

HISTORY_FIELDS: FieldAliases = {
    "employee_id": ("employeeid", "employee_id", "id"),
    "course_code": ("coursecode", "course_code", "code"),
    "date": ("date", "training_date"),
    "hours": ("hours", "attended_hours", "credit"),
    "trainer": ("trainer", "instructor"),
}

TEMPLATES: Dict[ImportKind, List[Row]] = {
    ImportKind.employee: [
        {"ID": "EMP001", "Name_TH": "สมชาย รักดี", "Name_EN": "Somchai Rakdee",
         "Department": "Engineering", "Position": "Developer"},
    ],
    ImportKind.course: [
        {"Code": "C001", "Name_TH": "ความปลอดภัย", "Name_EN": "Safety Training",
         "Category": "Safety", "Hours": 8, "Validity": 12},
    ],
    ImportKind.history: [
        {"EmployeeID": "EMP001", "CourseCode": "C001", "Date": "2023-01-01", "Hours": 4},
    ],
}


# ==================================================
# ROW CANONICALIZATION
# ==================================================

def normalize_header(key) -> str:
    return re.sub(r"\s+", "_", str(key).strip().lower())


def normalize_row(row: Row) -> Row:
    return {normalize_header(key): value for key, value in row.items()}


def cell_text(value) -> Optional[str]:
    """Spreadsheet cell as trimmed text; None for blanks."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


def canonicalize(row: Row, fields: FieldAliases) -> Dict[str, Optional[str]]:
    """First non-blank value among each canonical field's aliases."""
    normalized = normalize_row(row)
    record: Dict[str, Optional[str]] = {}
    for field, aliases in fields.items():
        record[field] = None
        for alias in aliases:
            text = cell_text(normalized.get(alias))
            if text is not None:
                record[field] = text
                break
    return record


def _number(text: str, label: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise ValidationError(f"{label} must be a number, got '{text}'")
    if not math.isfinite(value):
        raise ValidationError(f"{label} must be a finite number, got '{text}'")
    return value


def _months(text: str, label: str) -> int:
    value = _number(text, label)
    if value < 0 or not value.is_integer():
        raise ValidationError(f"{label} must be a whole number of months, got '{text}'")
    return int(value)


# ==================================================
# IMPORTERS
# ==================================================

def _run_batch(
    kind: ImportKind,
    store: StateStore,
    rows: Sequence[Row],
    handle_row: Callable[[Row], Optional[str]],
) -> List[str]:
    errors: List[str] = []
    for index, raw in enumerate(rows):
        try:
            # lookups and the write for one row see the same snapshot
            with store.transaction():
                problem = handle_row(raw)
        except ValidationError as e:
            problem = str(e)
        if problem:
            errors.append(f"Row {index + 2}: {problem}")

    logger.info("%s import finished: %d row(s), %d error(s)", kind.value, len(rows), len(errors))
    return errors


def import_employees(store: StateStore, rows: Sequence[Row]) -> List[str]:
    def handle_row(raw: Row) -> Optional[str]:
        rec = canonicalize(raw, EMPLOYEE_FIELDS)
        if not rec["id"] or not (rec["name_local"] or rec["name_international"]):
            return "Missing ID or Name (local/international)"

        training_service.upsert_employee(
            store,
            rec["id"],
            name_local=rec["name_local"],
            name_international=rec["name_international"],
            department=rec["department"],
            position=rec["position"],
        )
        return None

    return _run_batch(ImportKind.employee, store, rows, handle_row)


def import_courses(store: StateStore, rows: Sequence[Row]) -> List[str]:
    def handle_row(raw: Row) -> Optional[str]:
        rec = canonicalize(raw, COURSE_FIELDS)
        if not rec["code"] or not (rec["name_local"] or rec["name_international"]) or not rec["total_hours"]:
            return "Missing required fields (Code, Name, or Hours)"

        total_hours = _number(rec["total_hours"], "Hours")
        validity = None
        if rec["validity_months"]:
            validity = _months(rec["validity_months"], "Validity")

        training_service.upsert_course(
            store,
            rec["code"],
            name_local=rec["name_local"],
            name_international=rec["name_international"],
            category=rec["category"],
            total_hours=total_hours,
            validity_months=validity,
        )
        return None

    return _run_batch(ImportKind.course, store, rows, handle_row)


def import_history(store: StateStore, rows: Sequence[Row]) -> List[str]:
    """History rows must reference employees and courses that already exist."""
    def handle_row(raw: Row) -> Optional[str]:
        rec = canonicalize(raw, HISTORY_FIELDS)
        if not rec["employee_id"] or not rec["course_code"] or not rec["date"] or rec["hours"] is None:
            return "Missing required fields (EmployeeID, CourseCode, Date, Hours)"

        hours = _number(rec["hours"], "Hours")
        state = store.get()
        employee = training_service.find_employee(state, rec["employee_id"])
        if employee is None:
            return f"Employee ID {rec['employee_id']} not found in database"
        course = training_service.find_course(state, rec["course_code"])
        if course is None:
            return f"Course Code {rec['course_code']} not found in database"

        training_service.record_manual_history(
            store, employee.id, course.code, rec["date"], hours, trainer=rec["trainer"],
        )
        return None

    return _run_batch(ImportKind.history, store, rows, handle_row)


IMPORTERS: Dict[ImportKind, Callable[[StateStore, Sequence[Row]], List[str]]] = {
    ImportKind.employee: import_employees,
    ImportKind.course: import_courses,
    ImportKind.history: import_history,
}


def import_rows(store: StateStore, kind: ImportKind, rows: Sequence[Row]) -> List[str]:
    return IMPORTERS[ImportKind(kind)](store, rows)


def summarize(errors: List[str]) -> str:
    return f"{len(errors)} error" + ("" if len(errors) == 1 else "s")


# ==================================================
# WORKBOOKS & TEMPLATES
# ==================================================

def read_workbook_rows(content: bytes) -> List[Row]:
    """
    Rows of the first worksheet as dicts keyed by the header row.
    Completely blank rows are skipped.
    """
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise ValidationError(f"File is not a readable .xlsx workbook: {e}")

    try:
        values = wb.worksheets[0].iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        keys = [str(h).strip() if h is not None else "" for h in header]

        records: List[Row] = []
        for cells in values:
            if all(cell_text(c) is None for c in cells):
                continue
            records.append({k: v for k, v in zip(keys, cells) if k})
        return records
    finally:
        wb.close()


def build_template(kind: ImportKind) -> List[Row]:
    return copy.deepcopy(TEMPLATES[ImportKind(kind)])


def template_filename(kind: ImportKind) -> str:
    return f"{ImportKind(kind).value}_template.xlsx"


HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")


def template_workbook(kind: ImportKind) -> bytes:
    records = build_template(kind)
    headers = list(records[0].keys())

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Template"
    ws.append(headers)
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    for record in records:
        ws.append([record[h] for h in headers])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
