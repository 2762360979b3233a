from app.models.user import User, UserRole
from app.services import auth as auth_service
from tests.conftest import TEST_DATE, TEST_PASSWORD


def test_login_and_me(client, super_admin):
    response = client.post("/api/auth/login", json={"email": super_admin.email, "password": TEST_PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    token = body["data"]["access_token"]
    assert body["data"]["user"]["role"] == "super_admin"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["email"] == super_admin.email


def test_login_wrong_password(client, super_admin):
    response = client.post("/api/auth/login", json={"email": super_admin.email, "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"


def test_missing_token_returns_failure_envelope(client, company):
    response = client.get(f"/api/companies/{company.id}")
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["message"] == "User not authenticated"


def test_mark_attendance_via_api(client, super_admin, company, employees, auth_headers):
    payload = {
        "employee_id": employees[0].id,
        "company_id": company.id,
        "status": "present",
        "date": TEST_DATE.isoformat(),
    }
    response = client.post("/api/attendance", json=payload, headers=auth_headers(super_admin))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "present"

    payload["status"] = "absent"
    client.post("/api/attendance", json=payload, headers=auth_headers(super_admin))
    history = client.get(f"/api/employees/{employees[0].id}/attendance", headers=auth_headers(super_admin))
    record = history.json()["data"]["items"][0]
    assert record["status"] == "absent"
    assert record["changes"][0]["old_status"] == "present"

    company_view = client.get(f"/api/companies/{company.id}", headers=auth_headers(super_admin))
    assert company_view.json()["data"]["credits"] == 100


def test_invalid_attendance_status_is_a_validation_error(client, super_admin, company, employees, auth_headers):
    payload = {"employee_id": employees[0].id, "company_id": company.id, "status": "late"}
    response = client.post("/api/attendance", json=payload, headers=auth_headers(super_admin))
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_company_admin_is_confined_to_own_company(
    client, db_session, company, company_admin, make_company, make_employee, auth_headers
):
    other = make_company(name="Other Co")
    outsider = make_employee(other)
    headers = auth_headers(company_admin)

    assert client.get(f"/api/companies/{company.id}", headers=headers).status_code == 200

    denied = client.get(f"/api/companies/{other.id}", headers=headers)
    assert denied.status_code == 403
    assert denied.json()["error"]["code"] == "PERMISSION_DENIED"

    mark = client.post(
        "/api/attendance",
        json={"employee_id": outsider.id, "company_id": other.id, "status": "present"},
        headers=headers,
    )
    assert mark.status_code == 403

    listing = client.get("/api/companies", headers=headers)
    assert [c["id"] for c in listing.json()["data"]] == [company.id]


def test_company_admin_cannot_change_credits(client, company, company_admin, auth_headers):
    response = client.post(
        f"/api/companies/{company.id}/credits", json={"amount": 10}, headers=auth_headers(company_admin)
    )
    assert response.status_code == 403


def test_employee_login_is_read_only(client, db_session, company, employees, auth_headers):
    user = User(
        email="reader@acme.example.com",
        hashed_password=auth_service.get_password_hash(TEST_PASSWORD),
        role=UserRole.EMPLOYEE,
        company_id=company.id,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    headers = auth_headers(user)

    assert client.get(f"/api/dashboard/companies/{company.id}", headers=headers).status_code == 200
    mark = client.post(
        "/api/attendance",
        json={"employee_id": employees[0].id, "company_id": company.id, "status": "present"},
        headers=headers,
    )
    assert mark.status_code == 403


def test_add_credits_with_zero_amount(client, super_admin, company, auth_headers):
    response = client.post(
        f"/api/companies/{company.id}/credits", json={"amount": 0}, headers=auth_headers(super_admin)
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"]["code"] == "INVALID_AMOUNT"


def test_credit_endpoints(client, super_admin, company, auth_headers):
    headers = auth_headers(super_admin)

    added = client.post(
        f"/api/companies/{company.id}/credits", json={"amount": 25, "description": "Top-up"}, headers=headers
    )
    assert added.status_code == 201
    assert added.json()["data"]["new_balance"] == 125

    too_much = client.post(f"/api/companies/{company.id}/credits/deduct", json={"amount": 500}, headers=headers)
    assert too_much.status_code == 409
    assert too_much.json()["error"]["code"] == "INSUFFICIENT_CREDITS"
    assert too_much.json()["error"]["details"] == {"required": 500, "available": 125}

    override = client.put(f"/api/companies/{company.id}/credits", json={"credits": 7}, headers=headers)
    assert override.status_code == 200
    assert override.json()["data"]["credits"] == 7

    history = client.get(f"/api/companies/{company.id}/credits/history?page=1&page_size=10", headers=headers)
    data = history.json()["data"]
    assert data["total"] == 1
    assert data["items"][0]["description"] == "Top-up"


def test_dashboard_endpoints(client, super_admin, company, employees, auth_headers):
    headers = auth_headers(super_admin)
    client.post(
        "/api/bookings",
        json={"company_id": company.id, "employee_id": employees[0].id, "date": TEST_DATE.isoformat()},
        headers=headers,
    )

    company_stats = client.get(
        f"/api/dashboard/companies/{company.id}?on_date={TEST_DATE.isoformat()}", headers=headers
    ).json()["data"]
    assert company_stats["bookings"] == {"booked": 1, "limit": 5, "percentage": 20.0}
    assert company_stats["credits"]["used"] == 10
    assert company_stats["attendance"]["absent"] == 5

    system_stats = client.get(f"/api/dashboard/system?on_date={TEST_DATE.isoformat()}", headers=headers).json()["data"]
    assert system_stats["companies"]["total"] == 1


def test_unknown_company_is_not_found(client, super_admin, auth_headers):
    response = client.get("/api/companies/9999", headers=auth_headers(super_admin))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


def test_attendance_changes_hide_other_tenants(
    client, super_admin, company, company_admin, employees, make_company, make_employee, auth_headers
):
    other = make_company(name="Other Co")
    outsider = make_employee(other)
    payload = {"employee_id": outsider.id, "company_id": other.id, "status": "present", "date": TEST_DATE.isoformat()}
    record_id = client.post("/api/attendance", json=payload, headers=auth_headers(super_admin)).json()["data"]["id"]
    payload["status"] = "absent"
    client.post("/api/attendance", json=payload, headers=auth_headers(super_admin))

    foreign = client.get(f"/api/attendance/{record_id}/changes", headers=auth_headers(company_admin))
    missing = client.get("/api/attendance/424242/changes", headers=auth_headers(company_admin))
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json()["error"]["code"] == missing.json()["error"]["code"] == "NOT_FOUND"

    visible = client.get(f"/api/attendance/{record_id}/changes", headers=auth_headers(super_admin))
    assert visible.status_code == 200
    assert [c["new_status"] for c in visible.json()["data"]] == ["absent"]


def test_visitors_are_super_admin_only(client, super_admin, company_admin, auth_headers):
    headers = auth_headers(super_admin)
    denied = client.get("/api/visitors", headers=auth_headers(company_admin))
    assert denied.status_code == 403
    assert denied.json()["error"]["code"] == "PERMISSION_DENIED"

    created = client.post(
        "/api/visitors",
        json={"name": "Dana Scott", "phone": "+1 555 0100", "email": "dana@example.com", "purpose": "Tour"},
        headers=headers,
    )
    assert created.status_code == 201
    visitor_id = created.json()["data"]["id"]

    updated = client.patch(f"/api/visitors/{visitor_id}", json={"purpose": "Interview"}, headers=headers)
    assert updated.json()["data"]["purpose"] == "Interview"
    assert client.get("/api/visitors?search=dana", headers=headers).json()["data"][0]["id"] == visitor_id

    assert client.delete(f"/api/visitors/{visitor_id}", headers=headers).status_code == 200
    assert client.get(f"/api/visitors/{visitor_id}", headers=headers).status_code == 404
