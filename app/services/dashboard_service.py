"""
Dashboard rollups.

Pure reads: every figure is recomputed from the ledger tables for the
``QueryContext`` handed in by the caller. Nothing is cached between requests.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.attendance import Attendance, AttendanceStatus
from app.models.company import Company
from app.models.credit_history import CreditAction, CreditHistory
from app.models.employee import Employee, EmployeeStatus
from app.models.seat_booking import BookingStatus, SeatBooking
from app.schemas.dashboard import (
    AttendanceStats,
    BookingStats,
    CompanyStats,
    CreditStats,
    DashboardStats,
)
from app.services.base import BaseService


@dataclass
class QueryContext:
    db: Session
    on_date: date = field(default_factory=date.today)


def booking_percentage(booked: int, limit: int) -> float:
    if limit <= 0:
        return 0.0
    return round(booked / limit * 100, 2)


class DashboardService(BaseService):
    def __init__(self, ctx: QueryContext):
        super().__init__(ctx.db)
        self.ctx = ctx

    def _scalar(self, stmt) -> int:
        return self.db.execute(stmt).scalar_one() or 0

    def _attendance(self, company_id: Optional[int]) -> AttendanceStats:
        employees = select(func.count(Employee.id)).where(Employee.status == EmployeeStatus.ACTIVE.value)
        present = select(func.count(Attendance.id)).where(
            Attendance.date == self.ctx.on_date,
            Attendance.status == AttendanceStatus.PRESENT.value,
        )
        if company_id is not None:
            employees = employees.where(Employee.company_id == company_id)
            present = present.where(Attendance.company_id == company_id)

        total = self._scalar(employees)
        present_count = self._scalar(present)
        # Unmarked employees count as absent
        return AttendanceStats(
            present=present_count,
            absent=max(total - present_count, 0),
            total=total,
        )

    def _credits(self, company_id: Optional[int]) -> CreditStats:
        current = select(func.coalesce(func.sum(Company.credits), 0))
        used = select(func.coalesce(func.sum(CreditHistory.amount), 0)).where(
            CreditHistory.action == CreditAction.USED.value
        )
        if company_id is not None:
            current = current.where(Company.id == company_id)
            used = used.where(CreditHistory.company_id == company_id)

        current_total = self._scalar(current)
        used_total = self._scalar(used)
        return CreditStats(
            current=current_total,
            used=used_total,
            total=current_total + used_total,
            remaining=current_total,
        )

    def _bookings(self, company_id: Optional[int]) -> BookingStats:
        booked = select(func.count(SeatBooking.id)).where(
            SeatBooking.date == self.ctx.on_date,
            SeatBooking.status == BookingStatus.CONFIRMED.value,
        )
        limit = select(func.coalesce(func.sum(Company.seat_booking_limit), 0))
        if company_id is not None:
            booked = booked.where(SeatBooking.company_id == company_id)
            limit = limit.where(Company.id == company_id)

        booked_count = self._scalar(booked)
        limit_total = self._scalar(limit)
        return BookingStats(
            booked=booked_count,
            limit=limit_total,
            percentage=booking_percentage(booked_count, limit_total),
        )

    def company_rollup(self, company_id: int) -> DashboardStats:
        with self.reading():
            if self.db.get(Company, company_id) is None:
                raise NotFoundError("Company", company_id)
            return DashboardStats(
                date=self.ctx.on_date,
                company_id=company_id,
                attendance=self._attendance(company_id),
                credits=self._credits(company_id),
                bookings=self._bookings(company_id),
            )

    def system_rollup(self) -> DashboardStats:
        with self.reading():
            return DashboardStats(
                date=self.ctx.on_date,
                attendance=self._attendance(None),
                credits=self._credits(None),
                bookings=self._bookings(None),
                companies=CompanyStats(total=self._scalar(select(func.count(Company.id)))),
            )
