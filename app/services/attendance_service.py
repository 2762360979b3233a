"""
Attendance Service Layer

Owns the per-(employee, date) attendance state machine and its coupling to
the company credit ledger:

    unmarked -> present   charge seat price, credit history row
    unmarked -> absent    record only
    present  -> absent    refund seat price, attendance history row only
    absent   -> present   charge seat price, credit history row, attendance history row

Re-marking the current status is a no-op, including when a concurrent
correction moved the row between our read and our write: the status change
is a conditional update claimed before any credits move. Every mark runs as one
transaction, so a failure at any step leaves balance, attendance and history
exactly as they were.

Note the bookkeeping asymmetry: a present -> absent correction refunds the
balance without writing a credit history row, while absent -> present charges
with one. Dashboards therefore keep counting the first charge as "used".
"""
from datetime import date
from typing import List, Optional, Union

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.exceptions import AppException, InsufficientCreditsError, NotFoundError
from app.core.schemas import Page
from app.models.attendance import Attendance, AttendanceHistory, AttendanceStatus
from app.models.company import Company
from app.models.credit_history import CreditAction
from app.models.employee import Employee, EmployeeStatus
from app.schemas.attendance import AttendanceWithChanges, DailyAttendanceRow
from app.schemas.auth import Actor
from app.services.base import BaseService
from app.services.ledger_procedures import (
    adjust_balance,
    current_balance,
    record_attendance_change,
    record_credit_transaction,
)


def attendance_description(on_date: date) -> str:
    return f"Attendance marked for {on_date.isoformat()}"


def _coerce_status(status: Union[str, AttendanceStatus]) -> AttendanceStatus:
    try:
        return AttendanceStatus(status)
    except ValueError:
        raise AppException(
            message=f"Invalid attendance status: {status}",
            status_code=400,
            error_code="INVALID_STATUS",
        )


class AttendanceService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def mark(
        self,
        employee_id: int,
        company_id: int,
        status: Union[str, AttendanceStatus],
        on_date: Optional[date] = None,
        actor: Optional[Actor] = None,
    ) -> Attendance:
        actor = self.require_actor(actor)
        status = _coerce_status(status)
        on_date = on_date or date.today()

        with self.reading():
            company = self.db.get(Company, company_id)
            if company is None:
                raise NotFoundError("Company", company_id)
            employee = self.db.get(Employee, employee_id)
            if employee is None or employee.company_id != company_id:
                raise NotFoundError("Employee", employee_id)
            existing = self._find(employee_id, on_date)

        if existing is not None and existing.status == status.value:
            self.log_info(
                f"Attendance unchanged: employee={employee_id} date={on_date} status={status.value}"
            )
            return existing

        seat_price = company.seat_price
        moved = False
        with self.transaction():
            if existing is None:
                if status == AttendanceStatus.PRESENT:
                    self._charge_seat(company_id, seat_price, on_date, actor)
                record = Attendance(
                    user_id=employee_id,
                    company_id=company_id,
                    date=on_date,
                    status=status.value,
                )
                self.db.add(record)
                self.db.flush()
            else:
                record = existing
                # Claim the transition first; a concurrent correction that got
                # there before us leaves nothing to charge or refund
                change = record_attendance_change(
                    self.db, record, existing.status, status.value, actor.user_id
                )
                if change is None:
                    moved = True
                elif status == AttendanceStatus.ABSENT:
                    # Correction refund: balance only, no credit history row
                    if seat_price > 0:
                        adjust_balance(self.db, company_id, seat_price)
                else:
                    self._charge_seat(company_id, seat_price, on_date, actor)

        self.db.refresh(record)
        if moved:
            self.log_info(
                f"Attendance already corrected: employee={employee_id} date={on_date} status={record.status}"
            )
            return record
        self.log_info(
            f"Attendance marked: employee={employee_id} company={company_id} "
            f"date={on_date} status={status.value}"
        )
        return record

    def _charge_seat(self, company_id: int, seat_price: int, on_date: date, actor: Actor):
        if seat_price <= 0:
            return
        available = current_balance(self.db, company_id)
        if available is None:
            raise NotFoundError("Company", company_id)
        if available < seat_price:
            self.log_warning(
                f"Insufficient credits: company={company_id} required={seat_price} available={available}"
            )
            raise InsufficientCreditsError(required=seat_price, available=available)
        # The conditional update inside re-checks under the row lock
        record_credit_transaction(
            self.db,
            company_id=company_id,
            amount=seat_price,
            action=CreditAction.USED,
            description=attendance_description(on_date),
            created_by=actor.user_id,
        )

    def _find(self, employee_id: int, on_date: date) -> Optional[Attendance]:
        return self.db.execute(
            select(Attendance).where(
                Attendance.user_id == employee_id,
                Attendance.date == on_date,
            )
        ).scalar_one_or_none()

    def get_history(
        self,
        employee_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page[AttendanceWithChanges]:
        """Attendance records for one employee with their change trail, newest date first."""
        page, page_size = self.clamp_page(
            page, page_size or settings.default_page_size, settings.max_page_size
        )
        with self.reading():
            if self.db.get(Employee, employee_id) is None:
                raise NotFoundError("Employee", employee_id)
            total = self.db.execute(
                select(func.count(Attendance.id)).where(Attendance.user_id == employee_id)
            ).scalar_one()
            rows = self.db.execute(
                select(Attendance)
                .options(selectinload(Attendance.changes))
                .where(Attendance.user_id == employee_id)
                .order_by(Attendance.date.desc(), Attendance.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            ).scalars().all()

        return Page[AttendanceWithChanges](
            items=[AttendanceWithChanges.model_validate(r) for r in rows],
            total=total,
            page=page,
            page_size=page_size,
        )

    def get_record(self, attendance_id: int) -> Attendance:
        with self.reading():
            record = self.db.get(Attendance, attendance_id)
        if record is None:
            raise NotFoundError("Attendance", attendance_id)
        return record

    def get_changes(self, attendance_id: int) -> List[AttendanceHistory]:
        """Change trail of one attendance record, newest first."""
        record = self.get_record(attendance_id)
        with self.reading():
            return list(self.db.execute(
                select(AttendanceHistory)
                .where(AttendanceHistory.attendance_id == record.id)
                .order_by(AttendanceHistory.created_at.desc(), AttendanceHistory.id.desc())
            ).scalars().all())

    def list_for_date(self, on_date: Optional[date] = None, company_id: Optional[int] = None) -> List[DailyAttendanceRow]:
        """Active employees with their status for ``on_date``; unmarked employees have no status."""
        on_date = on_date or date.today()
        query = (
            select(Employee, Company.name, Attendance)
            .join(Company, Company.id == Employee.company_id)
            .outerjoin(
                Attendance,
                and_(Attendance.user_id == Employee.id, Attendance.date == on_date),
            )
            .where(Employee.status == EmployeeStatus.ACTIVE.value)
            .order_by(Employee.full_name)
        )
        if company_id is not None:
            query = query.where(Employee.company_id == company_id)

        with self.reading():
            rows = self.db.execute(query).all()

        return [
            DailyAttendanceRow(
                employee_id=emp.id,
                full_name=emp.full_name,
                email=emp.email,
                company_id=emp.company_id,
                company_name=company_name,
                attendance_id=record.id if record else None,
                attendance_status=record.status if record else None,
            )
            for emp, company_name, record in rows
        ]
