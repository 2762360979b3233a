from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint
import enum
from app.database import Base


class CreditAction(str, enum.Enum):
    ASSIGNED = "assigned"
    USED = "used"


class CreditHistory(Base):
    """Append-only record of an auditable balance change. Rows are never updated."""
    __tablename__ = "credit_history"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_credit_history_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    action = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    previous_balance = Column(Integer, nullable=False)
    new_balance = Column(Integer, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    # Microsecond timestamps keep newest-first ordering stable on SQLite
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
