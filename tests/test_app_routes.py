from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from src.academy_system.academy_system.attendance.service import AttendanceService
from src.academy_system.academy_system.courses.model import Cohort, Course
from src.academy_system.academy_system.main import create_app
from src.academy_system.academy_system.registration.service import RegistrationService
from src.academy_system.academy_system.registration.storage import UploadStorage
from src.academy_system.academy_system.schedules.service import ScheduleService

TENANT = "AC000001"
NOW = datetime(2026, 1, 6, 12, 0)


class FakeCoursesRepo:
    def list_courses(self, tenant_id):
        return [
            Course(course_id="COURSE0001", tenant_id=TENANT, name="Piano", instructor_id="INS001",
                   instructor_name="Ana Lee", start_date=date(2026, 1, 5), end_date=date(2026, 1, 18))
        ]

    def list_cohorts(self, tenant_id, course_id=None):
        return [
            Cohort(cohort_id="COH0001", tenant_id=TENANT, course_id="COURSE0001", name="Mornings",
                   days_of_week=(1, 3), start_time="09:00", end_time="10:30")
        ]


class FakeSchedulesRepo:
    def list_sessions(self, tenant_id):
        return []

    def list_reschedules(self, tenant_id, session_id=None):
        return []

    def list_cancellations(self, tenant_id, session_id=None):
        return []

    def list_reassignments(self, tenant_id, session_id=None):
        return []


class FakeLeavesRepo:
    def list_leaves(self, tenant_id, *, status=None, instructor_id=None):
        return []


class FakeAttendanceRepo:
    def list_records(self, tenant_id):
        return []

    def insert_planned(self, tenant_id, rows, *, notes):
        return 0


@pytest.fixture()
def client(monkeypatch, tmp_path):
    monkeypatch.setenv("APP_ENV", "testing")
    container = SimpleNamespace(
        auth_service=None,
        registration_service=RegistrationService(None, None),
        upload_storage=UploadStorage(str(tmp_path)),
        course_service=None,
        schedule_service=ScheduleService(
            FakeCoursesRepo(), FakeSchedulesRepo(), FakeLeavesRepo(), clock=lambda: NOW
        ),
        leave_service=None,
        attendance_service=AttendanceService(FakeAttendanceRepo(), FakeLeavesRepo(), today=lambda: date(2026, 1, 6)),
    )
    app = create_app(container)
    return app.test_client()


def _login(client):
    with client.session_transaction() as sess:
        sess["email"] = "admin@demo-academy.test"
        sess["name"] = "Demo Admin"
        sess["role"] = "admin"
        sess["tenant_id"] = TENANT


def test_dashboard_requires_tenant(client):
    resp = client.get("/api/dashboard/services/schedules")

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Unauthorized"}


def test_schedule_list_and_grid(client):
    _login(client)

    listed = client.get("/api/dashboard/services/schedules?limit=2").get_json()
    assert [s["sessionId"] for s in listed["schedules"]] == ["COH0001_2026-01-05_1", "COH0001_2026-01-07_2"]
    assert listed["pagination"]["total"] == 4
    assert listed["schedules"][0]["badge"]["status"] == "Completed"

    grid = client.get("/api/dashboard/services/schedules?view=grid&weekStart=2026-01-07").get_json()
    assert grid["days"][0]["date"] == "2026-01-05"
    assert len(grid["days"][2]["sessions"]) == 1


def test_bad_query_is_400(client):
    _login(client)

    resp = client.get("/api/dashboard/services/schedules?view=timeline")

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_attendance_export_is_csv(client):
    _login(client)

    resp = client.get("/api/dashboard/staff/instructor/attendance/export")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attendance-all-2026-01-06.csv" in resp.headers["Content-Disposition"]


def test_register_validate_returns_field_errors(client):
    resp = client.post("/api/register/validate", json={"step": 0, "businessInfo": {"businessName": "D"}})

    body = resp.get_json()
    assert resp.status_code == 200
    assert body["valid"] is False
    assert "businessName" in body["errors"]


def test_business_upload_requires_email(client):
    resp = client.post("/api/business-upload", data={})

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Email is required for image upload"


def test_me_reflects_session_until_logout(client):
    assert client.get("/api/auth/me").status_code == 401

    _login(client)
    resp = client.get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.get_json() == {
        "email": "admin@demo-academy.test",
        "fullName": "Demo Admin",
        "role": "admin",
        "tenantId": TENANT,
    }

    assert client.post("/api/auth/logout").get_json() == {"success": True}
    assert client.get("/api/auth/me").status_code == 401


def test_upcoming_filter_follows_the_service_clock(client):
    _login(client)

    body = client.get("/api/dashboard/services/schedules?upcoming=true").get_json()

    assert [s["sessionId"] for s in body["schedules"]] == [
        "COH0001_2026-01-07_2",
        "COH0001_2026-01-12_3",
        "COH0001_2026-01-14_4",
    ]


def test_reschedule_slot_check(client):
    _login(client)
    url = "/api/dashboard/services/session-management/session-reschedules"

    busy = client.put(url, json={"instructorId": "INS001", "date": "2026-01-07", "startTime": "10:00", "endTime": "11:00"})
    assert busy.status_code == 200
    assert busy.get_json()["available"] is False
    assert busy.get_json()["conflicts"][0]["sessionId"] == "COH0001_2026-01-07_2"

    free = client.put(url, json={"instructorId": "INS001", "date": "2026-01-08", "startTime": "10:00", "endTime": "11:00"})
    assert free.get_json()["available"] is True

    missing = client.put(url, json={"instructorId": "INS001"})
    assert missing.status_code == 400
