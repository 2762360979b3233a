from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.user import UserRole
from app.routers.auth_deps import can_access_company, ensure_company_access, get_current_actor, require_admin
from app.schemas.attendance import (
    AttendanceChangeResponse,
    AttendanceMark,
    AttendanceResponse,
    DailyAttendanceRow,
)
from app.schemas.auth import Actor
from app.services.attendance_service import AttendanceService

router = APIRouter(prefix="/attendance", tags=["attendance"])

@router.post("", response_model=ApiResponse[AttendanceResponse])
def mark_attendance(
    payload: AttendanceMark,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_admin()),
):
    ensure_company_access(actor, payload.company_id, write=True)
    record = AttendanceService(db).mark(
        payload.employee_id,
        payload.company_id,
        payload.status,
        on_date=payload.date,
        actor=actor,
    )
    return ApiResponse.ok(AttendanceResponse.model_validate(record))

@router.get("", response_model=ApiResponse[List[DailyAttendanceRow]])
def daily_attendance(
    company_id: Optional[int] = None,
    date: Optional[date] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    # Only super admins see the cross-company sheet
    if company_id is None and actor.role != UserRole.SUPER_ADMIN:
        company_id = actor.company_id
    if company_id is not None:
        ensure_company_access(actor, company_id)
    rows = AttendanceService(db).list_for_date(on_date=date, company_id=company_id)
    return ApiResponse.ok(rows)

@router.get("/{attendance_id}/changes", response_model=ApiResponse[List[AttendanceChangeResponse]])
def attendance_changes(attendance_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    service = AttendanceService(db)
    record = service.get_record(attendance_id)
    # Another tenant's record answers exactly like a missing one
    if not can_access_company(actor, record.company_id):
        raise NotFoundError("Attendance", attendance_id)
    changes = service.get_changes(record.id)
    return ApiResponse.ok([AttendanceChangeResponse.model_validate(c) for c in changes])
