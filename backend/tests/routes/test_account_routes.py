# backend/tests/routes/test_account_routes.py
"""HTTP tests for /api/v1/accounts and /api/v1/jobs."""

ACCOUNTS = "/api/v1/accounts"

NEW_ACCOUNT = {
    "account_type": "RESIDENTIAL",
    "customer": {"first_name": "Lee", "last_name": "Okafor"},
    "email": "lee.okafor@example.com",
    "phone": "555-0199",
    "address": {"street1": "4 Elm Court", "city": "Dayton", "state": "OH", "zip_code": "45402"},
}


def test_create_account(client, csr_headers, recorded_events):
    response = client.post(ACCOUNTS, json=NEW_ACCOUNT, headers=csr_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["account_number"] == "ACC-00002"
    assert data["status"] == "ACTIVE"
    assert data["contacts"][0]["email"] == "lee.okafor@example.com"
    assert data["addresses"][0]["is_primary"] is True
    assert [e.type for e in recorded_events] == ["account.created"]


def test_create_account_rejects_bad_email(client, csr_headers):
    body = {**NEW_ACCOUNT, "email": "not-an-email"}
    assert client.post(ACCOUNTS, json=body, headers=csr_headers).status_code == 422


def test_technician_cannot_create_account(client, tech_headers):
    assert client.post(ACCOUNTS, json=NEW_ACCOUNT, headers=tech_headers).status_code == 403


def test_get_and_update_status(client, seed, csr_headers):
    response = client.get(f"{ACCOUNTS}/{seed.account_id}", headers=csr_headers)
    assert response.status_code == 200
    assert response.json()["account_number"] == "ACC-90000"

    patched = client.patch(
        f"{ACCOUNTS}/{seed.account_id}/status", json={"status": "SUSPENDED"}, headers=csr_headers
    )
    assert patched.status_code == 200
    assert patched.json()["status"] == "SUSPENDED"


def test_unknown_status_rejected(client, seed, csr_headers):
    response = client.patch(
        f"{ACCOUNTS}/{seed.account_id}/status", json={"status": "FROZEN"}, headers=csr_headers
    )
    assert response.status_code == 422


def test_missing_account(client, csr_headers):
    assert client.get(f"{ACCOUNTS}/missing", headers=csr_headers).status_code == 404


def test_get_job_with_visits(client, seed, csr_headers, tech_headers):
    client.post(
        "/api/v1/visits",
        json={
            "job_id": seed.job_id,
            "technician_id": seed.tech_a_id,
            "start_time": "2031-01-06T09:00:00Z",
            "end_time": "2031-01-06T10:00:00Z",
        },
        headers=csr_headers,
    )

    response = client.get(f"/api/v1/jobs/{seed.job_id}", headers=tech_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Replace water heater"
    assert len(data["visits"]) == 1
