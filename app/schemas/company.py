from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime
from app.models.company import CompanyStatus

class AdminAccountCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    full_name: Optional[str] = None
    phone: Optional[str] = None

class CompanyCreate(BaseModel):
    name: str = Field(min_length=1)
    seat_price: int = Field(ge=0)
    seat_booking_limit: int = Field(ge=0)
    admin: Optional[AdminAccountCreate] = None

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    admin_id: Optional[int] = None
    seat_price: Optional[int] = Field(default=None, ge=0)
    seat_booking_limit: Optional[int] = Field(default=None, ge=0)
    status: Optional[CompanyStatus] = None

class CompanyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    admin_id: Optional[int] = None
    credits: int
    seat_price: int
    seat_booking_limit: int
    status: str
    created_at: Optional[datetime] = None
