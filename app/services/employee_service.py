from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ConstraintViolationError, NotFoundError
from app.core.security import sanitize_input
from app.models.attendance import Attendance
from app.models.company import Company
from app.models.employee import Employee, EmployeeStatus
from app.models.seat_booking import SeatBooking
from app.schemas.auth import Actor
from app.schemas.employee import EmployeeCreate
from app.services.base import BaseService


class EmployeeService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_employee(self, company_id: int, payload: EmployeeCreate, actor: Optional[Actor] = None) -> Employee:
        self.require_actor(actor)

        with self.transaction():
            if self.db.get(Company, company_id) is None:
                raise NotFoundError("Company", company_id)
            duplicate = self.db.execute(
                select(Employee.id).where(Employee.email == payload.email)
            ).first()
            if duplicate is not None:
                raise ConstraintViolationError("An employee with this email already exists")

            employee = Employee(
                company_id=company_id,
                full_name=sanitize_input(payload.full_name),
                email=payload.email,
                phone=payload.phone,
                status=EmployeeStatus.ACTIVE.value,
            )
            self.db.add(employee)

        self.db.refresh(employee)
        return employee

    def list_employees(self, company_id: int, status: Optional[EmployeeStatus] = None) -> List[Employee]:
        query = select(Employee).where(Employee.company_id == company_id)
        if status is not None:
            query = query.where(Employee.status == EmployeeStatus(status).value)
        with self.reading():
            return list(self.db.execute(query.order_by(Employee.full_name, Employee.id)).scalars().all())

    def get_employee(self, employee_id: int) -> Employee:
        with self.reading():
            employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    def set_status(
        self,
        employee_id: int,
        status: Union[str, EmployeeStatus],
        actor: Optional[Actor] = None,
    ) -> Employee:
        """Soft enable/disable; history keeps referencing the row either way."""
        self.require_actor(actor)
        with self.transaction():
            employee = self.db.get(Employee, employee_id)
            if employee is None:
                raise NotFoundError("Employee", employee_id)
            employee.status = EmployeeStatus(status).value

        self.db.refresh(employee)
        return employee

    def delete_employee(self, employee_id: int, actor: Optional[Actor] = None) -> None:
        self.require_actor(actor)
        with self.transaction():
            employee = self.db.get(Employee, employee_id)
            if employee is None:
                raise NotFoundError("Employee", employee_id)

            referenced = self.db.execute(
                select(Attendance.id).where(Attendance.user_id == employee_id).limit(1)
            ).first() or self.db.execute(
                select(SeatBooking.id).where(SeatBooking.user_id == employee_id).limit(1)
            ).first()
            if referenced is not None:
                raise ConstraintViolationError(
                    "Employee has attendance or booking history; deactivate instead of deleting"
                )
            self.db.delete(employee)
