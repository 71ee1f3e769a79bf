from fastapi import APIRouter, Depends

from training_app.services import report_service
from training_app.services.state_store import StateStore, get_store

router = APIRouter()


@router.get("/overview")
def dashboard_overview(store: StateStore = Depends(get_store)):
    """Headline numbers for the dashboard."""
    return report_service.get_dashboard_overview(store)
