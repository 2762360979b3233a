import pytest

from app.core.exceptions import NotFoundError
from app.services.attendance_service import AttendanceService
from app.services.booking_service import BookingService
from app.services.dashboard_service import DashboardService, QueryContext, booking_percentage
from tests.conftest import TEST_DATE


@pytest.mark.parametrize(
    "booked, limit, expected",
    [(0, 5, 0.0), (1, 5, 20.0), (1, 3, 33.33), (3, 0, 0.0), (0, 0, 0.0)],
)
def test_booking_percentage(booked, limit, expected):
    assert booking_percentage(booked, limit) == expected


def test_company_rollup(db_session, company, employees, actor):
    attendance = AttendanceService(db_session)
    for emp in employees[:3]:
        attendance.mark(emp.id, company.id, "present", on_date=TEST_DATE, actor=actor)
    attendance.mark(employees[3].id, company.id, "absent", on_date=TEST_DATE, actor=actor)
    BookingService(db_session).create_booking(company.id, employees[4].id, on_date=TEST_DATE, actor=actor)

    stats = DashboardService(QueryContext(db_session, TEST_DATE)).company_rollup(company.id)

    assert stats.date == TEST_DATE
    assert stats.company_id == company.id
    assert (stats.attendance.present, stats.attendance.absent, stats.attendance.total) == (3, 2, 5)
    assert stats.credits.current == 60
    assert stats.credits.used == 40
    assert stats.credits.total == 100
    assert stats.credits.remaining == 60
    assert (stats.bookings.booked, stats.bookings.limit, stats.bookings.percentage) == (1, 5, 20.0)
    assert stats.companies is None


def test_company_rollup_keeps_refunded_charge_as_used(db_session, company, employees, actor):
    attendance = AttendanceService(db_session)
    attendance.mark(employees[0].id, company.id, "present", on_date=TEST_DATE, actor=actor)
    attendance.mark(employees[0].id, company.id, "absent", on_date=TEST_DATE, actor=actor)

    stats = DashboardService(QueryContext(db_session, TEST_DATE)).company_rollup(company.id)

    assert stats.attendance.present == 0
    assert stats.credits.current == 100
    assert stats.credits.used == 10
    assert stats.credits.total == 110


def test_company_rollup_reads_only_the_requested_date(db_session, company, employees, actor):
    AttendanceService(db_session).mark(employees[0].id, company.id, "present", on_date=TEST_DATE, actor=actor)

    other_day = TEST_DATE.replace(day=20)
    stats = DashboardService(QueryContext(db_session, other_day)).company_rollup(company.id)

    assert stats.attendance.present == 0
    assert stats.attendance.absent == 5
    assert stats.bookings.booked == 0


def test_company_rollup_unknown_company(db_session):
    with pytest.raises(NotFoundError):
        DashboardService(QueryContext(db_session, TEST_DATE)).company_rollup(404)


def test_system_rollup_spans_companies(db_session, company, employees, make_company, make_employee, actor):
    other = make_company(name="Beta Studio", credits=50, seat_price=5, seat_booking_limit=0)
    outsider = make_employee(other)
    attendance = AttendanceService(db_session)
    attendance.mark(employees[0].id, company.id, "present", on_date=TEST_DATE, actor=actor)
    attendance.mark(outsider.id, other.id, "present", on_date=TEST_DATE, actor=actor)

    stats = DashboardService(QueryContext(db_session, TEST_DATE)).system_rollup()

    assert stats.company_id is None
    assert stats.companies.total == 2
    assert (stats.attendance.present, stats.attendance.total) == (2, 6)
    assert stats.credits.current == 90 + 45
    assert stats.credits.used == 15
    assert stats.bookings.limit == 5


def test_zero_limit_company_reports_zero_percent(db_session, make_company):
    company = make_company(seat_booking_limit=0)
    stats = DashboardService(QueryContext(db_session, TEST_DATE)).company_rollup(company.id)
    assert stats.bookings.percentage == 0.0
    assert stats.attendance.total == 0
