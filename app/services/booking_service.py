from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import Date, DateTime, func, insert, literal, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import (
    BookingLimitReachedError,
    ConstraintViolationError,
    InsufficientCreditsError,
    NotFoundError,
)
from app.models.company import Company
from app.models.credit_history import CreditAction
from app.models.employee import Employee
from app.models.seat_booking import BookingStatus, SeatBooking
from app.schemas.auth import Actor
from app.services.base import BaseService
from app.services.ledger_procedures import current_balance, record_credit_transaction


class BookingService(BaseService):
    """
    Seat bookings consume one seat price per booking and respect the company's
    daily booking limit. Cancelling refunds the seat price with an ``assigned``
    history row, unlike attendance corrections.

    Concurrent writers are held off by the store, not by the reads: the limit
    is part of the INSERT itself, one confirmed booking per (employee, date)
    is a partial unique index, and cancelling is a conditional UPDATE.
    """

    def __init__(self, db: Session):
        super().__init__(db)

    def create_booking(
        self,
        company_id: int,
        employee_id: int,
        on_date: Optional[date] = None,
        actor: Optional[Actor] = None,
    ) -> SeatBooking:
        actor = self.require_actor(actor)
        on_date = on_date or date.today()

        with self.transaction():
            # Row lock on stores that support it; same-company bookings queue here
            company = self.db.get(Company, company_id, with_for_update=True)
            if company is None:
                raise NotFoundError("Company", company_id)
            employee = self.db.get(Employee, employee_id)
            if employee is None or employee.company_id != company_id:
                raise NotFoundError("Employee", employee_id)

            available = current_balance(self.db, company_id)
            if available < company.seat_price:
                raise InsufficientCreditsError(required=company.seat_price, available=available)

            duplicate = self._confirmed_booking(employee_id, on_date)
            if duplicate is not None:
                raise ConstraintViolationError(
                    "User already has a booking for this date",
                    details={"booking_id": duplicate},
                )

            booking_id = self._insert_within_limit(company, employee_id, on_date)
            if booking_id is None:
                raise BookingLimitReachedError(limit=company.seat_booking_limit)

            if company.seat_price > 0:
                record_credit_transaction(
                    self.db,
                    company_id=company_id,
                    amount=company.seat_price,
                    action=CreditAction.USED,
                    description=f"Seat booking for {on_date.isoformat()}",
                    created_by=actor.user_id,
                )

        booking = self.db.get(SeatBooking, booking_id)
        self.log_info(f"Seat booked: company={company_id} employee={employee_id} date={on_date}")
        return booking

    def _confirmed_booking(self, employee_id: int, on_date: date) -> Optional[int]:
        return self.db.execute(
            select(SeatBooking.id).where(
                SeatBooking.user_id == employee_id,
                SeatBooking.date == on_date,
                SeatBooking.status == BookingStatus.CONFIRMED.value,
            )
        ).scalar_one_or_none()

    def _insert_within_limit(self, company: Company, employee_id: int, on_date: date) -> Optional[int]:
        """INSERT ... SELECT guarded by the day's confirmed count; None when the limit is reached."""
        booked = (
            select(func.count(SeatBooking.id))
            .where(
                SeatBooking.company_id == company.id,
                SeatBooking.date == on_date,
                SeatBooking.status == BookingStatus.CONFIRMED.value,
            )
            .correlate(None)
            .scalar_subquery()
        )
        row = select(
            literal(company.id),
            literal(employee_id),
            literal(on_date, Date),
            literal(BookingStatus.CONFIRMED.value),
            literal(datetime.now(timezone.utc), DateTime(timezone=True)),
        ).where(booked < company.seat_booking_limit)

        stmt = (
            insert(SeatBooking)
            .from_select(["company_id", "user_id", "date", "status", "created_at"], row)
            .returning(SeatBooking.id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def cancel_booking(self, booking_id: int, actor: Optional[Actor] = None) -> SeatBooking:
        actor = self.require_actor(actor)

        with self.transaction():
            booking = self.db.get(SeatBooking, booking_id)
            if booking is None:
                raise NotFoundError("Booking", booking_id)

            # Only the writer that flips confirmed -> cancelled refunds
            result = self.db.execute(
                update(SeatBooking)
                .where(
                    SeatBooking.id == booking_id,
                    SeatBooking.status == BookingStatus.CONFIRMED.value,
                )
                .values(status=BookingStatus.CANCELLED.value)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConstraintViolationError("Booking is already cancelled")

            company = self.db.get(Company, booking.company_id)
            if company.seat_price > 0:
                record_credit_transaction(
                    self.db,
                    company_id=company.id,
                    amount=company.seat_price,
                    action=CreditAction.ASSIGNED,
                    description=f"Refund for cancelled booking on {booking.date.isoformat()}",
                    created_by=actor.user_id,
                )

        self.db.refresh(booking)
        self.log_info(f"Seat booking cancelled: booking={booking_id}")
        return booking

    def list_for_company(self, company_id: int, on_date: Optional[date] = None) -> List[SeatBooking]:
        query = select(SeatBooking).where(SeatBooking.company_id == company_id)
        if on_date is not None:
            query = query.where(SeatBooking.date == on_date)
        with self.reading():
            return list(self.db.execute(query.order_by(SeatBooking.date.desc(), SeatBooking.id.desc())).scalars().all())

    def list_for_employee(self, employee_id: int) -> List[SeatBooking]:
        with self.reading():
            return list(self.db.execute(
                select(SeatBooking)
                .where(SeatBooking.user_id == employee_id)
                .order_by(SeatBooking.date.desc(), SeatBooking.id.desc())
            ).scalars().all())
