from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.seat_booking import SeatBooking
from app.routers.auth_deps import ensure_company_access, get_current_actor, require_admin
from app.schemas.auth import Actor
from app.schemas.booking import BookingCreate, BookingResponse
from app.services.booking_service import BookingService

router = APIRouter(tags=["bookings"])

@router.post("/bookings", response_model=ApiResponse[BookingResponse], status_code=201)
def create_booking(payload: BookingCreate, db: Session = Depends(get_db), actor: Actor = Depends(require_admin())):
    ensure_company_access(actor, payload.company_id, write=True)
    booking = BookingService(db).create_booking(
        payload.company_id, payload.employee_id, on_date=payload.date, actor=actor
    )
    return ApiResponse.ok(BookingResponse.model_validate(booking))

@router.post("/bookings/{booking_id}/cancel", response_model=ApiResponse[BookingResponse])
def cancel_booking(booking_id: int, db: Session = Depends(get_db), actor: Actor = Depends(require_admin())):
    booking = db.get(SeatBooking, booking_id)
    if booking is None:
        raise NotFoundError("Booking", booking_id)
    ensure_company_access(actor, booking.company_id, write=True)
    booking = BookingService(db).cancel_booking(booking_id, actor=actor)
    return ApiResponse.ok(BookingResponse.model_validate(booking))

@router.get("/companies/{company_id}/bookings", response_model=ApiResponse[List[BookingResponse]])
def company_bookings(
    company_id: int,
    date: Optional[date] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    ensure_company_access(actor, company_id)
    bookings = BookingService(db).list_for_company(company_id, on_date=date)
    return ApiResponse.ok([BookingResponse.model_validate(b) for b in bookings])
