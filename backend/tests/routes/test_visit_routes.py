# backend/tests/routes/test_visit_routes.py
"""HTTP tests for /api/v1/visits."""

import time

from fieldops.core.config import settings
from fieldops.events import EventType
from fieldops.services.scheduling_service import SchedulingService

VISITS = "/api/v1/visits"


def visit_body(seed, start="2031-01-06T09:00:00Z", end="2031-01-06T10:00:00Z", technician_id=None):
    return {
        "job_id": seed.job_id,
        "technician_id": technician_id or seed.tech_a_id,
        "start_time": start,
        "end_time": end,
    }


class TestScheduleVisit:
    def test_created(self, client, seed, csr_headers, recorded_events):
        response = client.post(VISITS, json=visit_body(seed), headers=csr_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["technician_id"] == seed.tech_a_id
        assert data["summary"] is None
        assert "X-Event-Propagation" not in response.headers
        assert [e.type for e in recorded_events] == ["visit.scheduled"]

    def test_offset_times_are_normalized_to_utc(self, client, seed, csr_headers):
        body = visit_body(seed, start="2031-01-06T04:00:00-05:00", end="2031-01-06T05:00:00-05:00")
        response = client.post(VISITS, json=body, headers=csr_headers)

        assert response.status_code == 201
        assert response.json()["start_time"].startswith("2031-01-06T09:00:00")

    def test_overlap_conflict(self, client, seed, csr_headers):
        assert client.post(VISITS, json=visit_body(seed), headers=csr_headers).status_code == 201

        response = client.post(
            VISITS,
            json=visit_body(seed, start="2031-01-06T09:30:00Z", end="2031-01-06T10:30:00Z"),
            headers=csr_headers,
        )

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "CONFLICT_ERROR"
        assert detail["details"]["conflict_type"] == "schedule"

    def test_back_to_back_allowed(self, client, seed, csr_headers):
        assert client.post(VISITS, json=visit_body(seed), headers=csr_headers).status_code == 201
        response = client.post(
            VISITS,
            json=visit_body(seed, start="2031-01-06T10:00:00Z", end="2031-01-06T11:00:00Z"),
            headers=csr_headers,
        )
        assert response.status_code == 201

    def test_technician_forbidden(self, client, seed, tech_headers, recorded_events):
        response = client.post(VISITS, json=visit_body(seed), headers=tech_headers)

        assert response.status_code == 403
        assert response.json()["detail"]["details"]["required"] == "canScheduleVisits"
        assert recorded_events == []

    def test_end_before_start_rejected(self, client, seed, csr_headers):
        body = visit_body(seed, start="2031-01-06T10:00:00Z", end="2031-01-06T09:00:00Z")
        assert client.post(VISITS, json=body, headers=csr_headers).status_code == 422

    def test_zero_length_rejected(self, client, seed, csr_headers):
        body = visit_body(seed, start="2031-01-06T10:00:00Z", end="2031-01-06T10:00:00Z")
        assert client.post(VISITS, json=body, headers=csr_headers).status_code == 422

    def test_unknown_role_rejected(self, client, seed):
        response = client.post(VISITS, json=visit_body(seed), headers={"X-Actor-Role": "JANITOR"})
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_ROLE"

    def test_missing_job(self, client, seed, csr_headers):
        body = visit_body(seed)
        body["job_id"] = "no-such-job"
        response = client.post(VISITS, json=body, headers=csr_headers)
        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "JOB_NOT_FOUND"

    def test_handler_failure_reports_incomplete_propagation(self, client, dispatcher, seed, csr_headers):
        def dispatch_board(event):
            raise RuntimeError("board offline")

        dispatcher.on(EventType.VISIT_SCHEDULED, dispatch_board)

        response = client.post(VISITS, json=visit_body(seed), headers=csr_headers)

        assert response.status_code == 201
        assert response.headers["X-Event-Propagation"] == "incomplete"

        upcoming = client.get(f"{VISITS}/upcoming", headers=csr_headers)
        assert [v["id"] for v in upcoming.json()] == [response.json()["id"]]

    def test_timed_out_write_is_not_stored(
        self, client, seed, csr_headers, technician_locks, recorded_events, monkeypatch
    ):
        insert_visit = SchedulingService._insert_visit

        def slow_insert(self, session, data):
            visit = insert_visit(self, session, data)
            time.sleep(0.3)
            return visit

        monkeypatch.setattr(settings, "persistence_timeout_seconds", 0.05)
        monkeypatch.setattr(SchedulingService, "_insert_visit", slow_insert)

        response = client.post(VISITS, json=visit_body(seed), headers=csr_headers)

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "2"
        assert response.json()["detail"]["code"] == "OPERATION_TIMEOUT"
        for _ in range(100):
            if not technician_locks.is_locked(seed.tech_a_id):
                break
            time.sleep(0.02)
        assert not technician_locks.is_locked(seed.tech_a_id)
        assert client.get(f"{VISITS}/upcoming", headers=csr_headers).json() == []
        assert recorded_events == []

        monkeypatch.setattr(SchedulingService, "_insert_visit", insert_visit)
        monkeypatch.setattr(settings, "persistence_timeout_seconds", 10.0)
        retried = client.post(VISITS, json=visit_body(seed), headers=csr_headers)

        assert retried.status_code == 201
        upcoming = client.get(f"{VISITS}/upcoming", headers=csr_headers).json()
        assert [v["id"] for v in upcoming] == [retried.json()["id"]]


class TestCompleteVisit:
    def test_technician_completes_own_visit(self, client, seed, csr_headers, tech_headers):
        visit_id = client.post(VISITS, json=visit_body(seed), headers=csr_headers).json()["id"]

        response = client.post(
            f"{VISITS}/{visit_id}/complete",
            json={"summary": "  Flushed tank, replaced valve  "},
            headers=tech_headers,
        )

        assert response.status_code == 200
        assert response.json()["summary"] == "Flushed tank, replaced valve"

    def test_other_technician_forbidden(self, client, seed, csr_headers):
        visit_id = client.post(VISITS, json=visit_body(seed), headers=csr_headers).json()["id"]

        response = client.post(
            f"{VISITS}/{visit_id}/complete",
            json={"summary": "Done"},
            headers={"X-Actor-Id": seed.tech_b_id, "X-Actor-Role": "TECHNICIAN"},
        )

        assert response.status_code == 403
        assert response.json()["detail"]["details"] == {"resource": f"visit:{visit_id}"}

    def test_blank_summary_rejected(self, client, seed, csr_headers, tech_headers):
        visit_id = client.post(VISITS, json=visit_body(seed), headers=csr_headers).json()["id"]
        response = client.post(f"{VISITS}/{visit_id}/complete", json={"summary": "   "}, headers=tech_headers)
        assert response.status_code == 422

    def test_unknown_visit(self, client, tech_headers):
        response = client.post(f"{VISITS}/missing/complete", json={"summary": "Done"}, headers=tech_headers)
        assert response.status_code == 404


class TestUpcoming:
    def test_filtered_by_technician(self, client, seed, csr_headers):
        client.post(VISITS, json=visit_body(seed), headers=csr_headers)
        client.post(VISITS, json=visit_body(seed, technician_id=seed.tech_b_id), headers=csr_headers)

        response = client.get(
            f"{VISITS}/upcoming", params={"technician_id": seed.tech_b_id}, headers=csr_headers
        )

        assert response.status_code == 200
        assert [v["technician_id"] for v in response.json()] == [seed.tech_b_id]


class TestRequestTracing:
    def test_request_id_is_echoed(self, client, csr_headers):
        response = client.get(f"{VISITS}/upcoming", headers={**csr_headers, "X-Request-ID": "req-abc"})
        assert response.headers["X-Request-ID"] == "req-abc"

    def test_request_id_is_generated(self, client, csr_headers):
        response = client.get(f"{VISITS}/upcoming", headers=csr_headers)
        assert len(response.headers["X-Request-ID"]) == 26
        assert "X-Response-Time-MS" in response.headers

    def test_request_id_reaches_events(self, client, seed, csr_headers, recorded_events):
        client.post(VISITS, json=visit_body(seed), headers={**csr_headers, "X-Request-ID": "req-trace"})
        assert recorded_events[0].context.request_id == "req-trace"
        assert recorded_events[0].context.actor.id == seed.csr_id


def test_health_and_metrics(client, seed, csr_headers):
    client.post(VISITS, json=visit_body(seed), headers=csr_headers)

    assert client.get("/health").json()["status"] == "healthy"
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "fieldops_domain_events_total" in metrics.text
