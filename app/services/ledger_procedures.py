"""
Atomic ledger procedures.

Both procedures run inside the caller's open transaction and never commit.
The balance change is issued as a single conditional UPDATE, so concurrent
writers against the same company serialize on that row and a check-then-write
race cannot overdraw the balance. The caller commits the balance change
together with the history row, or rolls both back.
"""
import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientCreditsError, NotFoundError
from app.models.attendance import Attendance, AttendanceHistory
from app.models.company import Company
from app.models.credit_history import CreditAction, CreditHistory

logger = logging.getLogger(__name__)


def current_balance(db: Session, company_id: int) -> Optional[int]:
    return db.execute(
        select(Company.credits).where(Company.id == company_id)
    ).scalar_one_or_none()


def adjust_balance(db: Session, company_id: int, delta: int) -> tuple[int, int]:
    """
    Apply ``delta`` to the company balance without touching credit history.

    Returns ``(previous_balance, new_balance)``. A negative delta only applies
    while the balance covers it; otherwise InsufficientCreditsError is raised
    and nothing changes.
    """
    stmt = update(Company).where(Company.id == company_id)
    if delta < 0:
        stmt = stmt.where(Company.credits >= -delta)
    result = db.execute(
        stmt.values(credits=Company.credits + delta).execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        available = current_balance(db, company_id)
        if available is None:
            raise NotFoundError("Company", company_id)
        raise InsufficientCreditsError(required=-delta, available=available)

    new_balance = current_balance(db, company_id)
    # Drop any stale in-session copy so later reads see the committed value
    company = db.identity_map.get(db.identity_key(Company, company_id))
    if company is not None:
        db.expire(company, ["credits"])
    return new_balance - delta, new_balance


def record_credit_transaction(
    db: Session,
    company_id: int,
    amount: int,
    action: CreditAction,
    description: Optional[str],
    created_by: Optional[int],
) -> CreditHistory:
    """
    Change a balance and append the matching credit history row.
    ``amount`` is always positive; ``action`` gives the direction.
    """
    delta = amount if action == CreditAction.ASSIGNED else -amount
    previous_balance, new_balance = adjust_balance(db, company_id, delta)

    entry = CreditHistory(
        company_id=company_id,
        amount=amount,
        action=action.value,
        description=description,
        previous_balance=previous_balance,
        new_balance=new_balance,
        created_by=created_by,
    )
    db.add(entry)
    db.flush()
    logger.info(
        f"Credit {action.value}: company={company_id} amount={amount} "
        f"balance {previous_balance} -> {new_balance}"
    )
    return entry


def record_attendance_change(
    db: Session,
    attendance: Attendance,
    old_status: str,
    new_status: str,
    changed_by: Optional[int],
) -> Optional[AttendanceHistory]:
    """
    Move an attendance row from ``old_status`` to ``new_status`` and append
    the transition to its history.

    The status write is conditional on the row still holding ``old_status``.
    Returns None when another writer already moved it; nothing is written then.
    """
    result = db.execute(
        update(Attendance)
        .where(Attendance.id == attendance.id, Attendance.status == old_status)
        .values(status=new_status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None

    change = AttendanceHistory(
        attendance_id=attendance.id,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by,
    )
    db.add(change)
    db.flush()
    db.expire(attendance, ["status"])
    return change
