from pydantic import BaseModel, ConfigDict
from typing import Optional
import datetime as dt
from datetime import date, datetime

class BookingCreate(BaseModel):
    company_id: int
    employee_id: int
    date: Optional[dt.date] = None

class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: int
    date: date
    status: str
    created_at: Optional[datetime] = None
