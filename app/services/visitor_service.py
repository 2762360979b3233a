from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.security import sanitize_input
from app.models.visitor import Visitor
from app.schemas.auth import Actor
from app.schemas.visitor import VisitorCreate, VisitorUpdate
from app.services.base import BaseService

_TEXT_FIELDS = ("name", "phone", "purpose")


class VisitorService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def list_visitors(self, search: Optional[str] = None) -> List[Visitor]:
        """Newest first; ``search`` matches name, phone, email or purpose, case-insensitively."""
        query = select(Visitor)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.where(or_(
                func.lower(Visitor.name).like(pattern),
                func.lower(Visitor.phone).like(pattern),
                func.lower(Visitor.email).like(pattern),
                func.lower(Visitor.purpose).like(pattern),
            ))
        with self.reading():
            return list(self.db.execute(
                query.order_by(Visitor.created_at.desc(), Visitor.id.desc())
            ).scalars().all())

    def get_visitor(self, visitor_id: int) -> Visitor:
        with self.reading():
            visitor = self.db.get(Visitor, visitor_id)
        if visitor is None:
            raise NotFoundError("Visitor", visitor_id)
        return visitor

    def create_visitor(self, payload: VisitorCreate, actor: Optional[Actor] = None) -> Visitor:
        actor = self.require_actor(actor)
        with self.transaction():
            visitor = Visitor(
                name=sanitize_input(payload.name),
                phone=sanitize_input(payload.phone),
                email=payload.email,
                purpose=sanitize_input(payload.purpose),
                created_by=actor.user_id,
            )
            self.db.add(visitor)

        self.db.refresh(visitor)
        self.log_info(f"Visitor registered: {visitor.id} by user {actor.user_id}")
        return visitor

    def update_visitor(self, visitor_id: int, updates: VisitorUpdate, actor: Optional[Actor] = None) -> Visitor:
        self.require_actor(actor)
        changes = updates.model_dump(exclude_unset=True)

        with self.transaction():
            visitor = self.db.get(Visitor, visitor_id)
            if visitor is None:
                raise NotFoundError("Visitor", visitor_id)
            for field, value in changes.items():
                if field in _TEXT_FIELDS:
                    value = sanitize_input(value)
                setattr(visitor, field, value)

        self.db.refresh(visitor)
        return visitor

    def delete_visitor(self, visitor_id: int, actor: Optional[Actor] = None) -> None:
        actor = self.require_actor(actor)
        with self.transaction():
            visitor = self.db.get(Visitor, visitor_id)
            if visitor is None:
                raise NotFoundError("Visitor", visitor_id)
            self.db.delete(visitor)
        self.log_info(f"Visitor {visitor_id} deleted by user {actor.user_id}")
