from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from training_app.schemas.training_schema import Employee, EmployeeUpsertRequest
from training_app.services import report_service, training_service
from training_app.services.state_store import StateStore, get_store

router = APIRouter()


@router.get("", response_model=List[Employee])
def list_employees(status_filter: str = "all", store: StateStore = Depends(get_store)):
    """Roster. `status_filter` is one of 'all', 'active', 'resigned'."""
    status_filter = (status_filter or "all").lower()
    if status_filter not in training_service.EMPLOYEE_FILTERS:
        raise HTTPException(status_code=400, detail="Invalid status_filter. Use 'all', 'active' or 'resigned'.")
    return training_service.list_employees(store, status_filter)


@router.post("", response_model=Employee)
def upsert_employee(req: EmployeeUpsertRequest, store: StateStore = Depends(get_store)):
    """Create the employee, or replace the one whose ID matches (case/space-insensitive)."""
    return training_service.upsert_employee(
        store,
        req.id,
        name_local=req.name_local,
        name_international=req.name_international,
        department=req.department,
        position=req.position,
        is_active=req.is_active,
    )


@router.post("/{employee_id}/status", response_model=Employee)
def toggle_employee_status(employee_id: str, store: StateStore = Depends(get_store)):
    employee = training_service.toggle_employee_status(store, employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(employee_id: str, store: StateStore = Depends(get_store)):
    """Delete the employee together with their registrations and attendance."""
    if not training_service.delete_employee(store, employee_id):
        raise HTTPException(status_code=404, detail="Employee not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{employee_id}/report")
def get_employee_report(employee_id: str, store: StateStore = Depends(get_store)):
    report = report_service.get_employee_training_history(store, employee_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Employee not found")
    return report
