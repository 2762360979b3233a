import pytest
from sqlalchemy import func, select

from app.core.exceptions import (
    AuthenticationError,
    InsufficientCreditsError,
    InvalidAmountError,
    NotFoundError,
)
from app.models.credit_history import CreditAction, CreditHistory
from app.services.credit_service import CreditService


def _history_count(db, company_id):
    return db.execute(
        select(func.count(CreditHistory.id)).where(CreditHistory.company_id == company_id)
    ).scalar_one()


def test_add_credits_updates_balance_and_writes_history(db_session, company, actor):
    entry = CreditService(db_session).add_credits(company.id, 50, "Monthly top-up", actor=actor)

    assert company.credits == 150
    assert entry.action == CreditAction.ASSIGNED.value
    assert entry.amount == 50
    assert entry.previous_balance == 100
    assert entry.new_balance == 150
    assert entry.description == "Monthly top-up"
    assert entry.created_by == actor.user_id
    assert _history_count(db_session, company.id) == 1


def test_add_credits_uses_default_description(db_session, company, actor):
    entry = CreditService(db_session).add_credits(company.id, 5, actor=actor)
    assert entry.description == "Credits assigned by admin"


@pytest.mark.parametrize("amount", [0, -10])
def test_add_credits_rejects_non_positive_amount(db_session, company, actor, amount):
    with pytest.raises(InvalidAmountError):
        CreditService(db_session).add_credits(company.id, amount, "bad", actor=actor)

    assert company.credits == 100
    assert _history_count(db_session, company.id) == 0


def test_add_credits_unknown_company(db_session, actor):
    with pytest.raises(NotFoundError):
        CreditService(db_session).add_credits(9999, 10, "nobody", actor=actor)
    assert db_session.execute(select(func.count(CreditHistory.id))).scalar_one() == 0


def test_mutations_require_an_actor(db_session, company):
    service = CreditService(db_session)
    with pytest.raises(AuthenticationError):
        service.add_credits(company.id, 10, "anonymous")
    with pytest.raises(AuthenticationError):
        service.deduct(company.id, 10, "anonymous")
    with pytest.raises(AuthenticationError):
        service.set_credits(company.id, 10)
    assert company.credits == 100


def test_deduct_writes_used_entry(db_session, company, actor):
    entry = CreditService(db_session).deduct(company.id, 30, "Meeting room", actor=actor)

    assert company.credits == 70
    assert entry.action == CreditAction.USED.value
    assert entry.previous_balance == 100
    assert entry.new_balance == 70


def test_deduct_insufficient_credits_leaves_state_unchanged(db_session, make_company, actor):
    company = make_company(credits=20)

    with pytest.raises(InsufficientCreditsError) as exc_info:
        CreditService(db_session).deduct(company.id, 25, "Too much", actor=actor)

    assert exc_info.value.details == {"required": 25, "available": 20}
    assert exc_info.value.message == "Company does not have enough credits"
    assert company.credits == 20
    assert _history_count(db_session, company.id) == 0


def test_deduct_entire_balance_is_allowed(db_session, make_company, actor):
    company = make_company(credits=20)
    CreditService(db_session).deduct(company.id, 20, "All of it", actor=actor)
    assert company.credits == 0


def test_set_credits_overrides_without_history(db_session, company, actor):
    CreditService(db_session).set_credits(company.id, 42, actor=actor)

    assert company.credits == 42
    assert _history_count(db_session, company.id) == 0


def test_set_credits_rejects_negative(db_session, company, actor):
    with pytest.raises(InvalidAmountError):
        CreditService(db_session).set_credits(company.id, -1, actor=actor)
    assert company.credits == 100


def test_set_credits_unknown_company(db_session, actor):
    with pytest.raises(NotFoundError):
        CreditService(db_session).set_credits(12345, 10, actor=actor)


def test_credit_history_pagination_newest_first(db_session, make_company, actor):
    company = make_company(credits=0)
    service = CreditService(db_session)
    for i in range(1, 16):
        service.add_credits(company.id, i, f"Top-up {i}", actor=actor)

    first = service.get_credit_history(company.id, page=1, page_size=10)
    second = service.get_credit_history(company.id, page=2, page_size=10)

    assert first.total == 15
    assert len(first.items) == 10
    assert [e.amount for e in first.items] == list(range(15, 5, -1))

    assert second.total == 15
    assert second.page == 2
    assert len(second.items) == 5
    assert [e.amount for e in second.items] == [5, 4, 3, 2, 1]
    created = [e.created_at for e in second.items]
    assert created == sorted(created, reverse=True)


def test_credit_history_unknown_company(db_session):
    with pytest.raises(NotFoundError):
        CreditService(db_session).get_credit_history(777)


def test_balance_equals_initial_plus_assigned_minus_used(db_session, make_company, actor):
    company = make_company(credits=40)
    service = CreditService(db_session)

    service.add_credits(company.id, 25, "a", actor=actor)
    service.deduct(company.id, 30, "b", actor=actor)
    with pytest.raises(InsufficientCreditsError):
        service.deduct(company.id, 500, "c", actor=actor)
    service.add_credits(company.id, 5, "d", actor=actor)
    service.deduct(company.id, 40, "e", actor=actor)

    rows = db_session.execute(
        select(CreditHistory).where(CreditHistory.company_id == company.id)
    ).scalars().all()
    assigned = sum(r.amount for r in rows if r.action == CreditAction.ASSIGNED.value)
    used = sum(r.amount for r in rows if r.action == CreditAction.USED.value)

    assert company.credits == 40 + assigned - used == 0
    assert all(r.new_balance >= 0 for r in rows)
