from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime
from app.models.employee import EmployeeStatus

class EmployeeCreate(BaseModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None

class EmployeeStatusUpdate(BaseModel):
    status: EmployeeStatus

class EmployeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
