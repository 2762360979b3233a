from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

# Amounts are validated in the service layer so that non-positive values
# surface as INVALID_AMOUNT rather than a generic validation error.
class CreditChange(BaseModel):
    amount: int
    description: Optional[str] = None

class CreditOverride(BaseModel):
    credits: int

class CreditHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    amount: int
    action: str
    description: Optional[str] = None
    previous_balance: int
    new_balance: int
    created_by: Optional[int] = None
    created_at: datetime
