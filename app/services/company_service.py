"""
Company Service Layer

Tenant administration: create, read, update and the explicit ordered teardown
used when a company is deleted. Balance changes are not made here; they go
through CreditService.
"""
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConstraintViolationError, NotFoundError
from app.core.security import sanitize_input
from app.models.attendance import Attendance, AttendanceHistory
from app.models.company import Company, CompanyStatus
from app.models.credit_history import CreditHistory
from app.models.employee import Employee
from app.models.seat_booking import SeatBooking
from app.models.user import User, UserRole
from app.schemas.auth import Actor
from app.schemas.company import CompanyCreate, CompanyUpdate
from app.services import auth as auth_service
from app.services.base import BaseService


class CompanyService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_company(self, payload: CompanyCreate, actor: Optional[Actor] = None) -> Company:
        """Create a company with a zero balance, optionally with its admin login."""
        actor = self.require_actor(actor)

        with self.transaction():
            company = Company(
                name=sanitize_input(payload.name),
                credits=0,
                seat_price=payload.seat_price,
                seat_booking_limit=payload.seat_booking_limit,
                status=CompanyStatus.ACTIVE.value,
            )
            self.db.add(company)
            self.db.flush()

            if payload.admin is not None:
                existing = self.db.execute(
                    select(User.id).where(User.email == payload.admin.email)
                ).first()
                if existing is not None:
                    raise ConstraintViolationError("A user with this email already exists")
                admin = User(
                    email=payload.admin.email,
                    hashed_password=auth_service.get_password_hash(payload.admin.password),
                    full_name=sanitize_input(payload.admin.full_name),
                    phone=payload.admin.phone,
                    role=UserRole.ADMIN,
                    company_id=company.id,
                    is_active=True,
                )
                self.db.add(admin)
                self.db.flush()
                company.admin_id = admin.id

        self.db.refresh(company)
        self.log_info(f"Company created: {company.id} ({company.name}) by user {actor.user_id}")
        return company

    def list_companies(self) -> List[Company]:
        with self.reading():
            return list(self.db.execute(
                select(Company).order_by(Company.created_at.desc(), Company.id.desc())
            ).scalars().all())

    def get_company(self, company_id: int) -> Company:
        with self.reading():
            company = self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company", company_id)
        return company

    def get_company_by_admin(self, admin_id: int) -> Company:
        with self.reading():
            company = self.db.execute(
                select(Company).where(Company.admin_id == admin_id)
            ).scalar_one_or_none()
        if company is None:
            raise NotFoundError("Company for admin", admin_id)
        return company

    def update_company(self, company_id: int, updates: CompanyUpdate, actor: Optional[Actor] = None) -> Company:
        """Edit descriptive fields. The balance is never touched here."""
        self.require_actor(actor)
        changes = updates.model_dump(exclude_unset=True)

        with self.transaction():
            company = self.db.get(Company, company_id)
            if company is None:
                raise NotFoundError("Company", company_id)
            if "admin_id" in changes and changes["admin_id"] is not None:
                if self.db.get(User, changes["admin_id"]) is None:
                    raise NotFoundError("User", changes["admin_id"])
            for field, value in changes.items():
                if field == "name":
                    value = sanitize_input(value)
                elif field == "status" and value is not None:
                    value = CompanyStatus(value).value
                setattr(company, field, value)

        self.db.refresh(company)
        return company

    def delete_company(self, company_id: int, actor: Optional[Actor] = None) -> None:
        """
        Ordered teardown, one transaction: attendance history, attendance,
        seat bookings, credit history, employees, users, then the company.
        """
        actor = self.require_actor(actor)

        with self.transaction():
            company = self.db.get(Company, company_id)
            if company is None:
                raise NotFoundError("Company", company_id)

            attendance_ids = select(Attendance.id).where(Attendance.company_id == company_id)
            employee_ids = select(Employee.id).where(Employee.company_id == company_id)
            steps = [
                ("attendance_history", delete(AttendanceHistory).where(AttendanceHistory.attendance_id.in_(attendance_ids))),
                # Also catch rows recorded against this company's employees under another company id
                ("attendance", delete(Attendance).where(
                    (Attendance.company_id == company_id) | Attendance.user_id.in_(employee_ids)
                )),
                ("seat_bookings", delete(SeatBooking).where(
                    (SeatBooking.company_id == company_id) | SeatBooking.user_id.in_(employee_ids)
                )),
                ("credit_history", delete(CreditHistory).where(CreditHistory.company_id == company_id)),
                ("employees", delete(Employee).where(Employee.company_id == company_id)),
            ]
            removed = {}
            for table, stmt in steps:
                result = self.db.execute(stmt.execution_options(synchronize_session=False))
                removed[table] = result.rowcount

            # The admin link points back at users, so clear it before removing them
            company.admin_id = None
            self.db.flush()
            result = self.db.execute(
                delete(User).where(User.company_id == company_id).execution_options(synchronize_session=False)
            )
            removed["users"] = result.rowcount
            self.db.delete(company)

        self.db.expunge_all()
        self.log_info(f"Company {company_id} deleted by user {actor.user_id}", removed=removed)
