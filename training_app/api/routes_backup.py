from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from fastapi.responses import FileResponse

from training_app.services import backup_service
from training_app.services.state_store import StateStore, get_store, snapshot_filename

router = APIRouter()


@router.get("/export")
def export_snapshot(store: StateStore = Depends(get_store)):
    """Download the whole dataset as pretty-printed JSON."""
    return Response(
        content=store.export_snapshot(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{snapshot_filename()}"'},
    )


@router.post("/import")
async def import_snapshot(file: UploadFile = File(...), store: StateStore = Depends(get_store)):
    """Replace everything with a previously exported snapshot (rejected as a whole if malformed)."""
    store.import_snapshot(await file.read())
    state = store.get()
    return {
        "message": "Snapshot restored.",
        "employees": len(state.employees),
        "courses": len(state.courses),
        "sessions": len(state.sessions),
        "registrations": len(state.registrations),
        "attendance": len(state.attendance),
    }


@router.post("/archive")
async def archive_snapshot(store: StateStore = Depends(get_store)):
    """Keep a server-side copy of the current dataset (e.g. before deleting employees)."""
    filename = await backup_service.archive_snapshot(store)
    return {"filename": filename}


@router.get("/archive/{filename}")
def download_archive(filename: str):
    try:
        file_path = backup_service.get_archive_path(filename)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Backup file not found.")
    return FileResponse(path=file_path, filename=filename, media_type="application/json")
