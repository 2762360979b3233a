from fastapi import APIRouter
from app.routers import attendance, auth, bookings, companies, dashboard, employees, visitors

# Centralized API router hub
# Routers are aggregated here and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(companies.router, tags=["Companies"])
api_router.include_router(employees.router, tags=["Employees"])
api_router.include_router(attendance.router, tags=["Attendance"])
api_router.include_router(bookings.router, tags=["Seat Bookings"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
api_router.include_router(visitors.router, tags=["Visitors"])
