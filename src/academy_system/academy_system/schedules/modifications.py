"""Overlaying reschedule, cancellation and reassignment records on sessions."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import is_valid_hhmm
from ..core.enums import ModificationType, SessionStatus
from ..core.exceptions import ValidationError
from .model import Cancellation, OriginalSlot, Reassignment, Reschedule, ScheduleEvent, SessionModifications
from .status import determine_session_status, latest_modification_type


def group_modifications(
    reschedules: Iterable[Reschedule],
    cancellations: Iterable[Cancellation],
    reassignments: Iterable[Reassignment],
) -> Dict[str, SessionModifications]:
    """Keep the most recent record of each kind per session."""

    latest_r: Dict[str, Reschedule] = {}
    for r in reschedules:
        cur = latest_r.get(r.session_id)
        if cur is None or r.rescheduled_at >= cur.rescheduled_at:
            latest_r[r.session_id] = r

    latest_c: Dict[str, Cancellation] = {}
    for c in cancellations:
        cur = latest_c.get(c.session_id)
        if cur is None or c.cancelled_at >= cur.cancelled_at:
            latest_c[c.session_id] = c

    latest_a: Dict[str, Reassignment] = {}
    for a in reassignments:
        cur = latest_a.get(a.session_id)
        if cur is None or a.reassigned_at >= cur.reassigned_at:
            latest_a[a.session_id] = a

    out: Dict[str, SessionModifications] = {}
    for session_id in set(latest_r) | set(latest_c) | set(latest_a):
        out[session_id] = SessionModifications(
            reschedule=latest_r.get(session_id),
            cancellation=latest_c.get(session_id),
            reassignment=latest_a.get(session_id),
        )
    return out


def apply_to_session(event: ScheduleEvent, mods: SessionModifications, now: datetime) -> ScheduleEvent:
    if mods.is_empty:
        return event

    changes: Dict[str, object] = {}
    original = OriginalSlot(
        date=event.date,
        start_time=event.start_time,
        end_time=event.end_time,
        instructor_id=event.instructor_id,
        instructor_name=event.instructor_name,
    )

    if mods.reassignment:
        changes["instructor_id"] = mods.reassignment.new_instructor_id
        changes["instructor_name"] = mods.reassignment.new_instructor

    if mods.reschedule:
        changes["date"] = mods.reschedule.new_date
        changes["start_time"] = mods.reschedule.new_start_time
        changes["end_time"] = mods.reschedule.new_end_time

    kind = latest_modification_type(mods)
    if kind == ModificationType.CANCELLATION:
        status = SessionStatus.CANCELLED
    elif kind == ModificationType.RESCHEDULE:
        status = SessionStatus.RESCHEDULED
    elif mods.cancellation:
        # Latest is a reassignment; an older cancellation still wins.
        status = SessionStatus.CANCELLED
    else:
        status = determine_session_status(
            changes.get("date", event.date),
            changes.get("start_time", event.start_time),
            changes.get("end_time", event.end_time),
            event.course_status,
            event.cohort_status,
            now,
            is_rescheduled=mods.reschedule is not None,
        )

    return replace(
        event,
        status=status,
        modifications=mods,
        modification_type=kind,
        original=original,
        **changes,
    )


def apply_modifications(
    events: Iterable[ScheduleEvent],
    modifications: Mapping[str, SessionModifications],
    now: datetime,
) -> List[ScheduleEvent]:
    out = []
    for event in events:
        mods = modifications.get(event.session_id)
        out.append(apply_to_session(event, mods, now) if mods else event)
    return out


def validate_modification(
    event: Optional[ScheduleEvent],
    kind: ModificationType,
    *,
    new_date: Optional[date] = None,
    new_start_time: Optional[str] = None,
    new_end_time: Optional[str] = None,
    new_instructor_id: Optional[str] = None,
    new_instructor_name: Optional[str] = None,
) -> None:
    """Raise ValidationError when the requested change is not allowed."""

    if event is None or not event.session_id:
        raise ValidationError("Session ID is required")

    if event.status == SessionStatus.CANCELLED and kind != ModificationType.CANCELLATION:
        raise ValidationError("Cannot modify a cancelled session")
    if event.status == SessionStatus.COMPLETED:
        raise ValidationError("Cannot modify a completed session")

    if kind == ModificationType.RESCHEDULE:
        if not new_date or not new_start_time or not new_end_time:
            raise ValidationError("New date, start time, and end time are required for rescheduling")
        if not is_valid_hhmm(new_start_time) or not is_valid_hhmm(new_end_time):
            raise ValidationError("Times must be in HH:MM format")
        if parse_hhmm(new_end_time) <= parse_hhmm(new_start_time):
            raise ValidationError("End time must be after start time")

    if kind == ModificationType.REASSIGNMENT:
        if not new_instructor_id or not new_instructor_name:
            raise ValidationError("New instructor name and ID are required for reassignment")
        if new_instructor_id == event.instructor_id:
            raise ValidationError("New instructor must be different from the current instructor")
