from datetime import date, datetime

from src.academy_system.academy_system.core.enums import RequestStatus, SessionStatus
from src.academy_system.academy_system.leaves.model import LeaveRequest
from src.academy_system.academy_system.schedules.availability import instructor_availability
from src.academy_system.academy_system.schedules.conflicts import find_instructor_conflicts, times_overlap
from src.academy_system.academy_system.schedules.model import ScheduleEvent

DAY = date(2026, 3, 10)


def _event(session_id, start, end, **kw):
    data = dict(
        session_id=session_id,
        title=session_id,
        date=DAY,
        start_time=start,
        end_time=end,
        status=SessionStatus.UPCOMING,
        instructor_id="INS001",
        instructor_name="Ana Lee",
    )
    data.update(kw)
    return ScheduleEvent(**data)


def _leave(status=RequestStatus.APPROVED, **kw):
    data = dict(
        request_id=7,
        tenant_id="AC000001",
        instructor_id="INS001",
        instructor_name="Ana Lee",
        start_date=date(2026, 3, 9),
        end_date=date(2026, 3, 11),
        reason="Trip",
        status=status,
        created_at=datetime(2026, 2, 1),
    )
    data.update(kw)
    return LeaveRequest(**data)


def test_touching_ranges_do_not_overlap():
    assert not times_overlap("09:00", "10:00", "10:00", "11:00")
    assert times_overlap("09:00", "10:00", "09:30", "10:30")


def test_conflict_found_by_id_or_name():
    events = [_event("A", "09:00", "10:00"), _event("B", "11:00", "12:00", instructor_id=None)]

    by_id = find_instructor_conflicts(events, instructor_id="INS001", day=DAY, start_time="09:30", end_time="10:30")
    by_name = find_instructor_conflicts(
        events, instructor_id=None, instructor_name="ana lee", day=DAY, start_time="11:30", end_time="12:30"
    )

    assert [e.session_id for e in by_id] == ["A"]
    assert [e.session_id for e in by_name] == ["B"]


def test_conflict_ignores_excluded_cancelled_and_other_days():
    events = [
        _event("A", "09:00", "10:00"),
        _event("B", "09:00", "10:00", status=SessionStatus.CANCELLED),
        _event("C", "09:00", "10:00", date=date(2026, 3, 11)),
    ]

    found = find_instructor_conflicts(
        events, instructor_id="INS001", day=DAY, start_time="09:00", end_time="10:00", exclude_session_id="A"
    )

    assert found == []


def test_instructor_on_approved_leave_is_unavailable():
    result = instructor_availability(instructor_id="INS001", instructor_name=None, day=DAY, leaves=[_leave()])

    assert not result.available
    assert result.leave_id == 7
    assert "on leave" in result.reason


def test_pending_leave_or_other_day_keeps_instructor_available():
    leaves = [_leave(status=RequestStatus.PENDING), _leave(start_date=date(2026, 4, 1), end_date=date(2026, 4, 2))]

    assert instructor_availability(instructor_id="INS001", instructor_name="Ana Lee", day=DAY, leaves=leaves).available
