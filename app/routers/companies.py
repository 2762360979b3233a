from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse, Page
from app.database import get_db
from app.models.user import UserRole
from app.routers.auth_deps import ensure_company_access, get_current_actor, require_super_admin
from app.schemas.auth import Actor
from app.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from app.schemas.credit import CreditChange, CreditHistoryResponse, CreditOverride
from app.services.company_service import CompanyService
from app.services.credit_service import CreditService

router = APIRouter(prefix="/companies", tags=["companies"])

@router.get("", response_model=ApiResponse[List[CompanyResponse]])
def list_companies(db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    service = CompanyService(db)
    match actor.role:
        case UserRole.SUPER_ADMIN:
            companies = service.list_companies()
        case UserRole.ADMIN | UserRole.EMPLOYEE:
            companies = [service.get_company(actor.company_id)] if actor.company_id else []
        case _:
            companies = []
    return ApiResponse.ok([CompanyResponse.model_validate(c) for c in companies])

@router.post("", response_model=ApiResponse[CompanyResponse], status_code=201)
def create_company(
    payload: CompanyCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    company = CompanyService(db).create_company(payload, actor=actor)
    return ApiResponse.ok(CompanyResponse.model_validate(company))

@router.get("/{company_id}", response_model=ApiResponse[CompanyResponse])
def get_company(company_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_current_actor)):
    ensure_company_access(actor, company_id)
    return ApiResponse.ok(CompanyResponse.model_validate(CompanyService(db).get_company(company_id)))

@router.patch("/{company_id}", response_model=ApiResponse[CompanyResponse])
def update_company(
    company_id: int,
    updates: CompanyUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    company = CompanyService(db).update_company(company_id, updates, actor=actor)
    return ApiResponse.ok(CompanyResponse.model_validate(company))

@router.delete("/{company_id}", response_model=ApiResponse[dict])
def delete_company(
    company_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    CompanyService(db).delete_company(company_id, actor=actor)
    return ApiResponse.ok({"id": company_id, "deleted": True})

# --- Credits ---

@router.post("/{company_id}/credits", response_model=ApiResponse[CreditHistoryResponse], status_code=201)
def add_credits(
    company_id: int,
    payload: CreditChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    entry = CreditService(db).add_credits(company_id, payload.amount, payload.description, actor=actor)
    return ApiResponse.ok(CreditHistoryResponse.model_validate(entry))

@router.post("/{company_id}/credits/deduct", response_model=ApiResponse[CreditHistoryResponse], status_code=201)
def deduct_credits(
    company_id: int,
    payload: CreditChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    entry = CreditService(db).deduct(company_id, payload.amount, payload.description, actor=actor)
    return ApiResponse.ok(CreditHistoryResponse.model_validate(entry))

@router.put("/{company_id}/credits", response_model=ApiResponse[CompanyResponse])
def set_credits(
    company_id: int,
    payload: CreditOverride,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_super_admin()),
):
    company = CreditService(db).set_credits(company_id, payload.credits, actor=actor)
    return ApiResponse.ok(CompanyResponse.model_validate(company))

@router.get("/{company_id}/credits/history", response_model=ApiResponse[Page[CreditHistoryResponse]])
def credit_history(
    company_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    ensure_company_access(actor, company_id)
    return ApiResponse.ok(CreditService(db).get_credit_history(company_id, page, page_size))
