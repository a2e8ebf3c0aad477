from __future__ import annotations

from datetime import date, datetime

import pytest

from src.academy_system.academy_system.core.enums import ModificationType, RequestStatus, SessionStatus
from src.academy_system.academy_system.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.academy_system.academy_system.courses.model import Cohort, Course
from src.academy_system.academy_system.leaves.model import LeaveRequest
from src.academy_system.academy_system.schedules.model import ScheduleEvent
from src.academy_system.academy_system.schedules.service import ScheduleService

TENANT = "AC000001"
NOW = datetime(2026, 1, 6, 12, 0)
SECOND = "COH0001_2026-01-07_2"


class FakeCoursesRepo:
    def __init__(self):
        self.courses = [
            Course(
                course_id="COURSE0001",
                tenant_id=TENANT,
                name="Piano",
                status="Active",
                instructor_id="INS001",
                instructor_name="Ana Lee",
                start_date=date(2026, 1, 5),
                end_date=date(2026, 1, 18),
            )
        ]
        self.cohorts = [
            Cohort(
                cohort_id="COH0001",
                tenant_id=TENANT,
                course_id="COURSE0001",
                name="Mornings",
                days_of_week=(1, 3),
                start_time="09:00",
                end_time="10:30",
            )
        ]

    def list_courses(self, tenant_id):
        return list(self.courses)

    def list_cohorts(self, tenant_id, course_id=None):
        return [c for c in self.cohorts if course_id is None or c.course_id == course_id]


class FakeSchedulesRepo:
    def __init__(self):
        self.sessions: dict[str, ScheduleEvent] = {}
        self.reschedules = []
        self.cancellations = []
        self.reassignments = []

    def list_sessions(self, tenant_id):
        return list(self.sessions.values())

    def get_session(self, tenant_id, session_id):
        return self.sessions.get(session_id)

    def upsert_sessions(self, tenant_id, events):
        n = 0
        for e in events:
            self.sessions[e.session_id] = e
            n += 1
        return n

    def delete_session(self, tenant_id, session_id):
        return self.sessions.pop(session_id, None) is not None

    def list_reschedules(self, tenant_id, session_id=None):
        return [r for r in self.reschedules if session_id is None or r.session_id == session_id]

    def list_cancellations(self, tenant_id, session_id=None):
        return [r for r in self.cancellations if session_id is None or r.session_id == session_id]

    def list_reassignments(self, tenant_id, session_id=None):
        return [r for r in self.reassignments if session_id is None or r.session_id == session_id]

    def add_reschedule(self, tenant_id, record):
        self.reschedules.append(record)
        return len(self.reschedules)

    def add_cancellation(self, tenant_id, record):
        self.cancellations.append(record)
        return len(self.cancellations)

    def add_reassignment(self, tenant_id, record):
        self.reassignments.append(record)
        return len(self.reassignments)


class FakeLeavesRepo:
    def __init__(self, leaves=()):
        self.leaves = list(leaves)

    def list_leaves(self, tenant_id, *, status=None, instructor_id=None):
        return [l for l in self.leaves if status is None or l.status == status]


def _leave(instructor_id, name, start, end):
    return LeaveRequest(
        request_id=1,
        tenant_id=TENANT,
        instructor_id=instructor_id,
        instructor_name=name,
        start_date=start,
        end_date=end,
        reason="Trip",
        status=RequestStatus.APPROVED,
        created_at=datetime(2026, 1, 1),
    )


def _service(leaves=()):
    schedules = FakeSchedulesRepo()
    svc = ScheduleService(FakeCoursesRepo(), schedules, FakeLeavesRepo(leaves), clock=lambda: NOW)
    return svc, schedules


def _stored(session_id, day, start, end, **kw):
    return ScheduleEvent(
        session_id=session_id,
        title="Workshop",
        date=day,
        start_time=start,
        end_time=end,
        instructor_id=kw.pop("instructor_id", "INS001"),
        instructor_name=kw.pop("instructor_name", "Ana Lee"),
        **kw,
    )


def test_build_schedule_merges_generated_and_stored():
    svc, schedules = _service()
    schedules.sessions["W1"] = _stored("W1", date(2026, 1, 9), "15:00", "16:00")
    # Same id as a generated session: the generated one is kept
    schedules.sessions[SECOND] = _stored(SECOND, date(2026, 2, 1), "15:00", "16:00")

    board = svc.build_schedule(TENANT)

    ids = [e.session_id for e in board]
    assert ids.count(SECOND) == 1
    assert "W1" in ids
    assert next(e for e in board if e.session_id == SECOND).date == date(2026, 1, 7)
    assert next(e for e in board if e.session_id == "W1").status == SessionStatus.UPCOMING


def test_reschedule_moves_session_and_records_original():
    svc, schedules = _service()

    event = svc.reschedule(
        TENANT,
        session_id=SECOND,
        new_date="2026-01-08",
        new_start_time="14:00",
        new_end_time="15:00",
        reason="Room booked",
        rescheduled_by="Dana",
    )

    assert event.date == date(2026, 1, 8)
    assert event.status == SessionStatus.RESCHEDULED
    assert event.modification_type == ModificationType.RESCHEDULE
    record = schedules.reschedules[0]
    assert (record.original_date, record.original_start_time) == (date(2026, 1, 7), "09:00")
    assert record.rescheduled_by == "Dana"
    assert [e.session_id for e in svc.list_modified(TENANT)] == [SECOND]


def test_reschedule_into_busy_slot_conflicts():
    svc, schedules = _service()
    schedules.sessions["W1"] = _stored("W1", date(2026, 1, 8), "14:30", "15:30")

    with pytest.raises(ConflictError, match="Ana Lee already has a session scheduled") as exc:
        svc.reschedule(
            TENANT,
            session_id=SECOND,
            new_date="2026-01-08",
            new_start_time="14:00",
            new_end_time="15:00",
            reason="Room booked",
        )
    assert exc.value.details[0]["sessionId"] == "W1"
    assert schedules.reschedules == []


def test_reschedule_onto_leave_day_conflicts():
    svc, _ = _service([_leave("INS001", "Ana Lee", date(2026, 1, 8), date(2026, 1, 9))])

    with pytest.raises(ConflictError, match="on leave"):
        svc.reschedule(
            TENANT, session_id=SECOND, new_date="2026-01-08", new_start_time="14:00", new_end_time="15:00", reason="x"
        )


def test_reschedule_requires_valid_input():
    svc, _ = _service()

    with pytest.raises(ValidationError):
        svc.reschedule(TENANT, session_id=SECOND, new_date="2026-01-08", new_start_time="9", new_end_time="10:00", reason="x")
    with pytest.raises(ValidationError):
        svc.reschedule(TENANT, session_id=SECOND, new_date="2026-01-08", new_start_time="14:00", new_end_time="15:00", reason=" ")
    with pytest.raises(NotFoundError):
        svc.reschedule(TENANT, session_id="nope", new_date="2026-01-08", new_start_time="14:00", new_end_time="15:00", reason="x")


def test_cancel_marks_session_and_blocks_further_changes():
    svc, schedules = _service()

    event = svc.cancel(TENANT, session_id=SECOND, reason="Holiday")

    assert event.status == SessionStatus.CANCELLED
    assert schedules.cancellations[0].cancelled_by == "System"
    with pytest.raises(ValidationError, match="cancelled"):
        svc.reschedule(
            TENANT, session_id=SECOND, new_date="2026-01-08", new_start_time="14:00", new_end_time="15:00", reason="x"
        )


def test_completed_session_cannot_be_cancelled():
    svc, _ = _service()

    with pytest.raises(ValidationError, match="completed"):
        svc.cancel(TENANT, session_id="COH0001_2026-01-05_1", reason="Too late")


def test_reassign_uses_default_reason():
    svc, schedules = _service()

    event = svc.reassign(TENANT, session_id=SECOND, new_instructor_id="INS002", new_instructor_name="Ben Cruz")

    assert (event.instructor_id, event.instructor_name) == ("INS002", "Ben Cruz")
    assert event.modification_type == ModificationType.REASSIGNMENT
    assert schedules.reassignments[0].reason == "Instructor reassigned from Ana Lee to Ben Cruz"
    assert schedules.reassignments[0].original_instructor_id == "INS001"


def test_reassignment_listing_filters_by_cohort_and_instructor():
    svc, _ = _service()
    svc.reassign(TENANT, session_id=SECOND, new_instructor_id="INS002", new_instructor_name="Ben Cruz")

    assert len(svc.list_reassignments(TENANT, cohort_id="COH0001")) == 1
    assert svc.list_reassignments(TENANT, cohort_id="COH0002") == []
    assert len(svc.list_reassignments(TENANT, instructor_id="INS001")) == 1
    assert svc.list_reassignments(TENANT, course_id="COURSE0009") == []


def test_check_instructor_slot_reports_clashes_and_leave():
    svc, _ = _service([_leave("INS001", "Ana Lee", date(2026, 1, 12), date(2026, 1, 12))])

    busy = svc.check_instructor_slot(TENANT, instructor_id="INS001", day="2026-01-07", start_time="9:30", end_time="10:00")
    assert busy["available"] is False
    assert [c["sessionId"] for c in busy["conflicts"]] == [SECOND]

    free = svc.check_instructor_slot(TENANT, instructor_id="INS001", day="2026-01-07", start_time="10:30", end_time="11:30")
    assert free == {"available": True, "conflicts": [], "reason": None}

    away = svc.check_instructor_slot(TENANT, instructor_id="INS001", day="2026-01-12", start_time="18:00", end_time="19:00")
    assert away["available"] is False
    assert "on leave" in away["reason"]

    with pytest.raises(ValidationError, match="Missing required fields"):
        svc.check_instructor_slot(TENANT, instructor_id="INS001", day="2026-01-07", start_time="", end_time="10:00")


def test_reassign_to_instructor_on_leave_conflicts():
    svc, _ = _service([_leave("INS002", "Ben Cruz", date(2026, 1, 7), date(2026, 1, 7))])

    with pytest.raises(ConflictError):
        svc.reassign(TENANT, session_id=SECOND, new_instructor_id="INS002", new_instructor_name="Ben Cruz")


def test_create_session_checks_instructor_conflicts():
    svc, schedules = _service()

    with pytest.raises(ConflictError, match="conflicting schedule"):
        svc.create_session(
            TENANT,
            {"title": "Masterclass", "date": "2026-01-07", "startTime": "10:00", "endTime": "11:00", "instructorId": "INS001"},
        )

    event = svc.create_session(
        TENANT,
        {"sessionId": "MC1", "title": "Masterclass", "date": "2026-01-07", "startTime": "10:30", "endTime": "11:30",
         "instructorId": "INS001", "instructor": "Ana Lee"},
    )
    assert event.session_id == "MC1"
    assert event.status == SessionStatus.UPCOMING
    assert "MC1" in schedules.sessions


def test_update_and_delete_stored_session():
    svc, schedules = _service()
    schedules.sessions["W1"] = _stored("W1", date(2026, 1, 9), "15:00", "16:00")

    updated = svc.update_session(TENANT, "W1", {"title": "Recital", "startTime": "15:30"})
    assert (updated.title, updated.start_time) == ("Recital", "15:30")

    with pytest.raises(ValidationError):
        svc.update_session(TENANT, "W1", {"endTime": "14:00"})

    svc.delete_session(TENANT, "W1")
    with pytest.raises(NotFoundError):
        svc.delete_session(TENANT, "W1")
    with pytest.raises(NotFoundError):
        svc.update_session(TENANT, "W1", {})


def test_sync_sessions_rejects_payload_without_id():
    svc, schedules = _service()

    assert svc.sync_sessions(TENANT, [{"sessionId": "X1", "title": "X", "date": "2026-01-09"}]) == 1
    with pytest.raises(ValidationError):
        svc.sync_sessions(TENANT, [{"title": "no id", "date": "2026-01-09"}])


def test_synced_single_digit_hours_are_padded_and_stay_editable():
    svc, schedules = _service()

    svc.sync_sessions(
        TENANT,
        [{"sessionId": "Y1", "title": "Yoga", "date": "2026-01-09", "startTime": "9:00", "endTime": "10:00"}],
    )
    assert (schedules.sessions["Y1"].start_time, schedules.sessions["Y1"].end_time) == ("09:00", "10:00")

    updated = svc.update_session(TENANT, "Y1", {"title": "Yoga 2"})
    assert (updated.title, updated.start_time, updated.end_time) == ("Yoga 2", "09:00", "10:00")

    with pytest.raises(ValidationError, match="startTime"):
        svc.sync_sessions(TENANT, [{"sessionId": "Y2", "date": "2026-01-09", "startTime": "25:00"}])


def test_session_qr_png_is_png():
    svc, _ = _service()

    png = svc.session_qr_png(TENANT, SECOND)

    assert png.startswith(b"\x89PNG")
