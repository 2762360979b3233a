from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.schemas import ApiResponse
from app.database import get_db
from app.routers.auth_deps import ensure_company_access, get_current_actor, require_super_admin
from app.schemas.auth import Actor
from app.schemas.dashboard import DashboardStats
from app.services.dashboard_service import DashboardService, QueryContext

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

def get_query_context(on_date: Optional[date] = None, db: Session = Depends(get_db)) -> QueryContext:
    return QueryContext(db=db, on_date=on_date or date.today())

@router.get("/system", response_model=ApiResponse[DashboardStats])
def system_dashboard(
    ctx: QueryContext = Depends(get_query_context),
    actor: Actor = Depends(require_super_admin()),
):
    return ApiResponse.ok(DashboardService(ctx).system_rollup())

@router.get("/companies/{company_id}", response_model=ApiResponse[DashboardStats])
def company_dashboard(
    company_id: int,
    ctx: QueryContext = Depends(get_query_context),
    actor: Actor = Depends(get_current_actor),
):
    ensure_company_access(actor, company_id)
    return ApiResponse.ok(DashboardService(ctx).company_rollup(company_id))
