import pytest
import os
from datetime import date
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["BOOTSTRAP_SUPER_ADMIN"] = "false"

from app.database import Base, get_db
from app.main import app
from app.models.company import Company
from app.models.employee import Employee
from app.models.user import User, UserRole
from app.schemas.auth import Actor
from app.services import auth as auth_service
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_DATE = date(2026, 10, 19)
TEST_PASSWORD = "Password123!"

@pytest.fixture(scope="function", autouse=True)
def setup_database():
    """Fresh schema per test: services commit for real, so nothing can leak between tests."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    session = TestingSessionLocal()
    yield session
    session.close()

@pytest.fixture(scope="function")
def super_admin(db_session):
    user = User(
        email="admin@desqworx.com",
        hashed_password=auth_service.get_password_hash(TEST_PASSWORD),
        role=UserRole.SUPER_ADMIN,
        is_active=True,
        full_name="Super Admin",
    )
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def actor(super_admin):
    return Actor(user_id=super_admin.id, role=UserRole.SUPER_ADMIN)

@pytest.fixture(scope="function")
def make_company(db_session):
    def _make_company(name="Acme Labs", credits=100, seat_price=10, seat_booking_limit=5):
        company = Company(
            name=name,
            credits=credits,
            seat_price=seat_price,
            seat_booking_limit=seat_booking_limit,
        )
        db_session.add(company)
        db_session.commit()
        return company
    return _make_company

@pytest.fixture(scope="function")
def company(make_company):
    return make_company()

@pytest.fixture(scope="function")
def make_employee(db_session):
    counter = {"n": 0}

    def _make_employee(company, full_name=None):
        counter["n"] += 1
        employee = Employee(
            company_id=company.id,
            full_name=full_name or f"Employee {counter['n']}",
            email=f"employee{counter['n']}@example.com",
        )
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make_employee

@pytest.fixture(scope="function")
def employees(company, make_employee):
    return [make_employee(company) for _ in range(5)]

@pytest.fixture(scope="function")
def company_admin(db_session, company):
    user = User(
        email="owner@acme.example.com",
        hashed_password=auth_service.get_password_hash(TEST_PASSWORD),
        role=UserRole.ADMIN,
        company_id=company.id,
        is_active=True,
        full_name="Acme Admin",
    )
    db_session.add(user)
    db_session.commit()
    company.admin_id = user.id
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {auth_service.token_for_user(user)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
