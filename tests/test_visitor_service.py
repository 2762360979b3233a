import pytest

from app.core.exceptions import AuthenticationError, NotFoundError
from app.schemas.visitor import VisitorCreate, VisitorUpdate
from app.services.visitor_service import VisitorService


def _register(service, actor, name, purpose="Meeting", email=None):
    return service.create_visitor(
        VisitorCreate(name=name, phone="+1 555 0100", email=email, purpose=purpose), actor=actor
    )


def test_create_visitor_records_who_registered(db_session, actor):
    visitor = _register(VisitorService(db_session), actor, "  Dana Scott ", email="dana@example.com")

    assert visitor.id is not None
    assert visitor.name == "Dana Scott"
    assert visitor.email == "dana@example.com"
    assert visitor.created_by == actor.user_id
    assert visitor.created_at is not None


def test_create_visitor_requires_actor(db_session):
    with pytest.raises(AuthenticationError):
        VisitorService(db_session).create_visitor(
            VisitorCreate(name="Dana", phone="1", purpose="Tour"), actor=None
        )


def test_visitors_listed_newest_first_and_searchable(db_session, actor):
    service = VisitorService(db_session)
    first = _register(service, actor, "Dana Scott", purpose="Tour")
    second = _register(service, actor, "Lee Park", purpose="Interview", email="lee@example.com")
    third = _register(service, actor, "Sam Ortiz", purpose="Delivery")

    assert [v.id for v in service.list_visitors()] == [third.id, second.id, first.id]
    assert [v.id for v in service.list_visitors(search="INTERVIEW")] == [second.id]
    assert [v.id for v in service.list_visitors(search="lee@")] == [second.id]
    assert service.list_visitors(search="nobody") == []


def test_update_visitor_changes_only_given_fields(db_session, actor):
    service = VisitorService(db_session)
    visitor = _register(service, actor, "Dana Scott", purpose="Tour")

    updated = service.update_visitor(visitor.id, VisitorUpdate(purpose="Interview"), actor=actor)
    assert updated.purpose == "Interview"
    assert updated.name == "Dana Scott"

    with pytest.raises(NotFoundError):
        service.update_visitor(777, VisitorUpdate(name="Ghost"), actor=actor)


def test_delete_visitor(db_session, actor):
    service = VisitorService(db_session)
    visitor = _register(service, actor, "Dana Scott")

    service.delete_visitor(visitor.id, actor=actor)
    with pytest.raises(NotFoundError):
        service.get_visitor(visitor.id)
    with pytest.raises(NotFoundError):
        service.delete_visitor(visitor.id, actor=actor)
