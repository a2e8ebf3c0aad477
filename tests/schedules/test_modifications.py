from datetime import date, datetime

import pytest

from src.academy_system.academy_system.core.enums import ModificationType, SessionStatus
from src.academy_system.academy_system.core.exceptions import ValidationError
from src.academy_system.academy_system.schedules.model import (
    Cancellation,
    Reassignment,
    Reschedule,
    ScheduleEvent,
    SessionModifications,
)
from src.academy_system.academy_system.schedules.modifications import (
    apply_modifications,
    apply_to_session,
    group_modifications,
    validate_modification,
)

NOW = datetime(2026, 3, 1, 8, 0)


def _event(**kw):
    data = dict(
        session_id="COH0001_2026-03-10_1",
        title="Piano - Session 1",
        date=date(2026, 3, 10),
        start_time="09:00",
        end_time="10:00",
        status=SessionStatus.UPCOMING,
        instructor_id="INS001",
        instructor_name="Ana Lee",
        course_status="Active",
        cohort_status="Active",
    )
    data.update(kw)
    return ScheduleEvent(**data)


def _reschedule(at, new_date=date(2026, 3, 12)):
    return Reschedule(
        session_id="COH0001_2026-03-10_1",
        original_date=date(2026, 3, 10),
        new_date=new_date,
        new_start_time="14:00",
        new_end_time="15:00",
        reason="Room clash",
        rescheduled_by="Admin",
        rescheduled_at=at,
    )


def _reassignment(at):
    return Reassignment(
        session_id="COH0001_2026-03-10_1",
        new_instructor="Ben Cruz",
        new_instructor_id="INS002",
        reason="Cover",
        reassigned_by="Admin",
        reassigned_at=at,
        original_instructor="Ana Lee",
        original_instructor_id="INS001",
    )


def test_group_keeps_latest_record_per_kind():
    older = _reschedule(datetime(2026, 2, 1), new_date=date(2026, 3, 11))
    newer = _reschedule(datetime(2026, 2, 2), new_date=date(2026, 3, 12))

    grouped = group_modifications([newer, older], [], [])

    assert grouped["COH0001_2026-03-10_1"].reschedule.new_date == date(2026, 3, 12)
    assert grouped["COH0001_2026-03-10_1"].cancellation is None


def test_reschedule_moves_session_and_keeps_original():
    mods = SessionModifications(reschedule=_reschedule(datetime(2026, 2, 1)))

    out = apply_to_session(_event(), mods, NOW)

    assert out.date == date(2026, 3, 12)
    assert (out.start_time, out.end_time) == ("14:00", "15:00")
    assert out.status == SessionStatus.RESCHEDULED
    assert out.modification_type == ModificationType.RESCHEDULE
    assert out.original.date == date(2026, 3, 10)
    assert out.to_dict()["originalData"]["startTime"] == "09:00"


def test_latest_cancellation_wins_over_older_reschedule():
    mods = SessionModifications(
        reschedule=_reschedule(datetime(2026, 2, 1)),
        cancellation=Cancellation(
            session_id="COH0001_2026-03-10_1",
            reason="Holiday",
            cancelled_by="Admin",
            cancelled_at=datetime(2026, 2, 5),
        ),
    )

    out = apply_to_session(_event(), mods, NOW)

    assert out.status == SessionStatus.CANCELLED
    assert out.is_cancelled
    assert out.modification_type == ModificationType.CANCELLATION


def test_reassignment_changes_instructor_and_keeps_time_status():
    mods = SessionModifications(reassignment=_reassignment(datetime(2026, 2, 1)))

    out = apply_to_session(_event(), mods, NOW)

    assert (out.instructor_id, out.instructor_name) == ("INS002", "Ben Cruz")
    assert out.status == SessionStatus.UPCOMING
    assert out.original.instructor_name == "Ana Lee"


def test_reassignment_after_reschedule_stays_rescheduled():
    mods = SessionModifications(
        reschedule=_reschedule(datetime(2026, 2, 1)),
        reassignment=_reassignment(datetime(2026, 2, 3)),
    )

    out = apply_to_session(_event(), mods, NOW)

    assert out.modification_type == ModificationType.REASSIGNMENT
    assert out.status == SessionStatus.RESCHEDULED
    assert out.date == date(2026, 3, 12)


def test_reassignment_after_cancellation_and_reschedule_stays_cancelled():
    mods = SessionModifications(
        reschedule=_reschedule(datetime(2026, 2, 1)),
        cancellation=Cancellation(
            session_id="COH0001_2026-03-10_1",
            reason="Holiday",
            cancelled_by="Admin",
            cancelled_at=datetime(2026, 2, 2),
        ),
        reassignment=_reassignment(datetime(2026, 2, 3)),
    )

    out = apply_to_session(_event(), mods, NOW)

    assert out.modification_type == ModificationType.REASSIGNMENT
    assert out.status == SessionStatus.CANCELLED
    assert out.instructor_id == "INS002"


def test_apply_modifications_leaves_untouched_sessions_alone():
    other = _event(session_id="OTHER")
    mods = {"COH0001_2026-03-10_1": SessionModifications(reassignment=_reassignment(datetime(2026, 2, 1)))}

    out = apply_modifications([_event(), other], mods, NOW)

    assert out[1] is other
    assert out[0].instructor_id == "INS002"


def test_validate_rejects_changes_to_finished_sessions():
    with pytest.raises(ValidationError):
        validate_modification(_event(status=SessionStatus.CANCELLED), ModificationType.RESCHEDULE,
                              new_date=date(2026, 3, 12), new_start_time="09:00", new_end_time="10:00")
    with pytest.raises(ValidationError):
        validate_modification(_event(status=SessionStatus.COMPLETED), ModificationType.CANCELLATION)


def test_validate_reschedule_needs_ordered_times():
    with pytest.raises(ValidationError, match="End time must be after start time"):
        validate_modification(_event(), ModificationType.RESCHEDULE,
                              new_date=date(2026, 3, 12), new_start_time="10:00", new_end_time="09:00")
    with pytest.raises(ValidationError, match="required"):
        validate_modification(_event(), ModificationType.RESCHEDULE, new_date=date(2026, 3, 12))


def test_validate_reassignment_needs_a_different_instructor():
    with pytest.raises(ValidationError, match="different"):
        validate_modification(_event(), ModificationType.REASSIGNMENT,
                              new_instructor_id="INS001", new_instructor_name="Ana Lee")
    validate_modification(_event(), ModificationType.REASSIGNMENT,
                          new_instructor_id="INS002", new_instructor_name="Ben Cruz")
