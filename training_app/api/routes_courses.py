from typing import List

from fastapi import APIRouter, Depends

from training_app.schemas.training_schema import Course, CourseUpsertRequest
from training_app.services import training_service
from training_app.services.state_store import StateStore, get_store

router = APIRouter()


@router.get("", response_model=List[Course])
def list_courses(store: StateStore = Depends(get_store)):
    return store.get().courses


@router.post("", response_model=Course)
def upsert_course(req: CourseUpsertRequest, store: StateStore = Depends(get_store)):
    return training_service.upsert_course(
        store,
        req.code,
        name_local=req.name_local,
        name_international=req.name_international,
        category=req.category,
        total_hours=req.total_hours,
        validity_months=req.validity_months,
    )
