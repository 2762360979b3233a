from pydantic import BaseModel, ConfigDict
from typing import List, Optional
import datetime as dt
from datetime import date, datetime
from app.models.attendance import AttendanceStatus

class AttendanceMark(BaseModel):
    employee_id: int
    company_id: int
    status: AttendanceStatus
    date: Optional[dt.date] = None

class AttendanceChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    attendance_id: int
    old_status: str
    new_status: str
    changed_by: Optional[int] = None
    created_at: datetime

class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    company_id: int
    date: date
    status: str
    created_at: Optional[datetime] = None

class AttendanceWithChanges(AttendanceResponse):
    changes: List[AttendanceChangeResponse] = []

class DailyAttendanceRow(BaseModel):
    """An active employee and their status for one day (None when unmarked)."""
    employee_id: int
    full_name: str
    email: str
    company_id: int
    company_name: str
    attendance_id: Optional[int] = None
    attendance_status: Optional[AttendanceStatus] = None
