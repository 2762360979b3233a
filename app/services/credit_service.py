"""
Credit Ledger Service

All changes to a company's prepaid seat-credit balance go through here.
Auditable changes (``add_credits``, ``deduct``) write the balance and a
credit history row in one transaction; ``set_credits`` is the administrative
override and deliberately leaves no history row.
"""
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidAmountError, NotFoundError
from app.core.schemas import Page
from app.core.security import sanitize_input
from app.models.company import Company
from app.models.credit_history import CreditAction, CreditHistory
from app.schemas.auth import Actor
from app.schemas.credit import CreditHistoryResponse
from app.services.base import BaseService
from app.services.ledger_procedures import record_credit_transaction

DEFAULT_ASSIGN_DESCRIPTION = "Credits assigned by admin"
DEFAULT_DEDUCT_DESCRIPTION = "Credits deducted by admin"


def _validate_amount(amount) -> int:
    # bool is an int subclass; True must not pass as one credit
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError(amount=amount)
    return amount


class CreditService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_balance(self, company_id: int) -> int:
        with self.reading():
            balance = self.db.execute(
                select(Company.credits).where(Company.id == company_id)
            ).scalar_one_or_none()
        if balance is None:
            raise NotFoundError("Company", company_id)
        return balance

    def add_credits(
        self,
        company_id: int,
        amount: int,
        description: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> CreditHistory:
        actor = self.require_actor(actor)
        amount = _validate_amount(amount)

        with self.transaction():
            entry = record_credit_transaction(
                self.db,
                company_id=company_id,
                amount=amount,
                action=CreditAction.ASSIGNED,
                description=sanitize_input(description) if description else DEFAULT_ASSIGN_DESCRIPTION,
                created_by=actor.user_id,
            )
        self.db.refresh(entry)
        return entry

    def deduct(
        self,
        company_id: int,
        amount: int,
        description: Optional[str] = None,
        actor: Optional[Actor] = None,
    ) -> CreditHistory:
        actor = self.require_actor(actor)
        amount = _validate_amount(amount)

        with self.transaction():
            entry = record_credit_transaction(
                self.db,
                company_id=company_id,
                amount=amount,
                action=CreditAction.USED,
                description=sanitize_input(description) if description else DEFAULT_DEDUCT_DESCRIPTION,
                created_by=actor.user_id,
            )
        self.db.refresh(entry)
        return entry

    def set_credits(self, company_id: int, new_value: int, actor: Optional[Actor] = None) -> Company:
        """
        Administrative override of the absolute balance. No credit history row
        is written; callers that need an audit trail use add_credits/deduct.
        """
        actor = self.require_actor(actor)
        if isinstance(new_value, bool) or not isinstance(new_value, int) or new_value < 0:
            raise InvalidAmountError("Credits cannot be negative", amount=new_value)

        with self.transaction():
            company = self.db.get(Company, company_id)
            if company is None:
                raise NotFoundError("Company", company_id)
            old_value = company.credits
            self.db.execute(
                update(Company)
                .where(Company.id == company_id)
                .values(credits=new_value)
                .execution_options(synchronize_session=False)
            )
        self.db.refresh(company)
        self.log_warning(
            f"Credit override: company={company_id} {old_value} -> {new_value} by user {actor.user_id}"
        )
        return company

    def get_credit_history(
        self,
        company_id: int,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> Page[CreditHistoryResponse]:
        page, page_size = self.clamp_page(
            page, page_size or settings.default_page_size, settings.max_page_size
        )
        with self.reading():
            if self.db.get(Company, company_id) is None:
                raise NotFoundError("Company", company_id)

            total = self.db.execute(
                select(func.count(CreditHistory.id)).where(CreditHistory.company_id == company_id)
            ).scalar_one()
            rows = self.db.execute(
                select(CreditHistory)
                .where(CreditHistory.company_id == company_id)
                .order_by(CreditHistory.created_at.desc(), CreditHistory.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
            ).scalars().all()

        return Page[CreditHistoryResponse](
            items=[CreditHistoryResponse.model_validate(r) for r in rows],
            total=total,
            page=page,
            page_size=page_size,
        )
