from pydantic import BaseModel
from typing import Optional
from datetime import date

class AttendanceStats(BaseModel):
    present: int = 0
    absent: int = 0
    total: int = 0

class CreditStats(BaseModel):
    current: int = 0
    used: int = 0
    total: int = 0
    remaining: int = 0

class BookingStats(BaseModel):
    booked: int = 0
    limit: int = 0
    percentage: float = 0.0

class CompanyStats(BaseModel):
    total: int = 0

class DashboardStats(BaseModel):
    date: date
    company_id: Optional[int] = None
    attendance: AttendanceStats
    credits: CreditStats
    bookings: BookingStats
    companies: Optional[CompanyStats] = None
