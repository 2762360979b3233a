from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse, Page
from app.database import get_db
from app.models.employee import EmployeeStatus
from app.routers.auth_deps import ensure_company_access, get_current_actor, require_admin
from app.schemas.attendance import AttendanceWithChanges
from app.schemas.auth import Actor
from app.schemas.booking import BookingResponse
from app.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeStatusUpdate
from app.services.attendance_service import AttendanceService
from app.services.booking_service import BookingService
from app.services.employee_service import EmployeeService

router = APIRouter(tags=["employees"])

@router.get("/companies/{company_id}/employees", response_model=ApiResponse[List[EmployeeResponse]])
def list_employees(
    company_id: int,
    status: Optional[EmployeeStatus] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    ensure_company_access(actor, company_id)
    employees = EmployeeService(db).list_employees(company_id, status)
    return ApiResponse.ok([EmployeeResponse.model_validate(e) for e in employees])

@router.post("/companies/{company_id}/employees", response_model=ApiResponse[EmployeeResponse], status_code=201)
def create_employee(
    company_id: int,
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin()),
):
    ensure_company_access(actor, company_id, write=True)
    employee = EmployeeService(db).create_employee(company_id, payload, actor=actor)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))

@router.get("/employees/{employee_id}", response_model=ApiResponse[EmployeeResponse])
def get_employee(employee_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    employee = EmployeeService(db).get_employee(employee_id)
    ensure_company_access(actor, employee.company_id)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))

@router.patch("/employees/{employee_id}/status", response_model=ApiResponse[EmployeeResponse])
def update_employee_status(
    employee_id: int,
    payload: EmployeeStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin()),
):
    service = EmployeeService(db)
    ensure_company_access(actor, service.get_employee(employee_id).company_id, write=True)
    employee = service.set_status(employee_id, payload.status, actor=actor)
    return ApiResponse.ok(EmployeeResponse.model_validate(employee))

@router.delete("/employees/{employee_id}", response_model=ApiResponse[dict])
def delete_employee(employee_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin())):
    service = EmployeeService(db)
    ensure_company_access(actor, service.get_employee(employee_id).company_id, write=True)
    service.delete_employee(employee_id, actor=actor)
    return ApiResponse.ok({"id": employee_id, "deleted": True})

@router.get("/employees/{employee_id}/attendance", response_model=ApiResponse[Page[AttendanceWithChanges]])
def employee_attendance_history(
    employee_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    ensure_company_access(actor, EmployeeService(db).get_employee(employee_id).company_id)
    return ApiResponse.ok(AttendanceService(db).get_history(employee_id, page, page_size))

@router.get("/employees/{employee_id}/bookings", response_model=ApiResponse[List[BookingResponse]])
def employee_bookings(employee_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    ensure_company_access(actor, EmployeeService(db).get_employee(employee_id).company_id)
    bookings = BookingService(db).list_for_employee(employee_id)
    return ApiResponse.ok([BookingResponse.model_validate(b) for b in bookings])
