from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class CompanyStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Company(Base):
    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_companies_credits_non_negative"),
        CheckConstraint("seat_price >= 0", name="ck_companies_seat_price_non_negative"),
        CheckConstraint("seat_booking_limit >= 0", name="ck_companies_booking_limit_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    # Company admin login; set after the admin user exists
    admin_id = Column(Integer, ForeignKey("users.id", use_alter=True, name="fk_company_admin_id"), nullable=True)

    credits = Column(Integer, nullable=False, default=0)
    seat_price = Column(Integer, nullable=False, default=0)
    seat_booking_limit = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default=CompanyStatus.ACTIVE.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    admin = relationship("User", foreign_keys=[admin_id])
    employees = relationship("Employee", back_populates="company")

    def __repr__(self):
        return f"<Company {self.id}: {self.name} ({self.credits} credits)>"
