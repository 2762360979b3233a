from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.routers.auth_deps import require_super_admin
from app.schemas.auth import Actor
from app.schemas.visitor import VisitorCreate, VisitorResponse, VisitorUpdate
from app.services.visitor_service import VisitorService

router = APIRouter(prefix="/visitors", tags=["visitors"])

@router.get("", response_model=ApiResponse[List[VisitorResponse]])
def list_visitors(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    visitors = VisitorService(db).list_visitors(search)
    return ApiResponse.ok([VisitorResponse.model_validate(v) for v in visitors])

@router.post("", response_model=ApiResponse[VisitorResponse], status_code=201)
def create_visitor(
    payload: VisitorCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    visitor = VisitorService(db).create_visitor(payload, actor=actor)
    return ApiResponse.ok(VisitorResponse.model_validate(visitor))

@router.get("/{visitor_id}", response_model=ApiResponse[VisitorResponse])
def get_visitor(visitor_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_super_admin())):
    return ApiResponse.ok(VisitorResponse.model_validate(VisitorService(db).get_visitor(visitor_id)))

@router.patch("/{visitor_id}", response_model=ApiResponse[VisitorResponse])
def update_visitor(
    visitor_id: int,
    updates: VisitorUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    visitor = VisitorService(db).update_visitor(visitor_id, updates, actor=actor)
    return ApiResponse.ok(VisitorResponse.model_validate(visitor))

@router.delete("/{visitor_id}", response_model=ApiResponse[dict])
def delete_visitor(visitor_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_super_admin())):
    VisitorService(db).delete_visitor(visitor_id, actor=actor)
    return ApiResponse.ok({"id": visitor_id, "deleted": True})
