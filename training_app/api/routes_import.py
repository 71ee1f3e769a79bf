from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, File, Response, UploadFile

from training_app.schemas.import_schema import ImportKind, ImportResponse
from training_app.services import import_service
from training_app.services.state_store import StateStore, get_store

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _import_response(kind: ImportKind, rows: List[Dict[str, Any]], errors: List[str]) -> ImportResponse:
    return ImportResponse(
        kind=kind,
        rows_received=len(rows),
        rows_imported=len(rows) - len(errors),
        errors=errors,
        summary=import_service.summarize(errors),
    )


@router.post("/{kind}", response_model=ImportResponse)
async def import_workbook(
    kind: ImportKind,
    file: UploadFile = File(...),
    store: StateStore = Depends(get_store),
):
    """Upload an .xlsx sheet (first worksheet, header row first). Bad rows are listed, not fatal."""
    content = await file.read()
    rows = import_service.read_workbook_rows(content)
    errors = import_service.import_rows(store, kind, rows)
    return _import_response(kind, rows, errors)


@router.post("/{kind}/rows", response_model=ImportResponse)
def import_rows(
    kind: ImportKind,
    rows: List[Dict[str, Any]] = Body(...),
    store: StateStore = Depends(get_store),
):
    """Same as the workbook upload, for clients that already decoded the sheet."""
    errors = import_service.import_rows(store, kind, rows)
    return _import_response(kind, rows, errors)


@router.get("/templates/{kind}")
def download_template(kind: ImportKind):
    return Response(
        content=import_service.template_workbook(kind),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{import_service.template_filename(kind)}"'},
    )
