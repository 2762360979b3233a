# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    company, user, employee, attendance, credit_history, seat_booking, visitor
)

# Explicit class exports for cleaner imports
from .company import Company, CompanyStatus
from .user import User, UserRole
from .employee import Employee, EmployeeStatus
from .attendance import Attendance, AttendanceHistory, AttendanceStatus
from .credit_history import CreditHistory, CreditAction
from .seat_booking import SeatBooking, BookingStatus
from .visitor import Visitor

__all__ = [
    "Company",
    "CompanyStatus",
    "User",
    "UserRole",
    "Employee",
    "EmployeeStatus",
    "Attendance",
    "AttendanceHistory",
    "AttendanceStatus",
    "CreditHistory",
    "CreditAction",
    "SeatBooking",
    "BookingStatus",
    "Visitor",
]
