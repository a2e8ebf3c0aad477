from __future__ import annotations

import io
import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import qrcode

from ..common.datetime_utils import now_local, parse_hhmm, parse_optional_date
from ..common.validators import require_hhmm, require_non_empty
from ..core.constants import DEFAULT_HORIZON_DAYS, DEFAULT_MODIFIED_BY
from ..core.enums import ModificationType, RequestStatus, SessionStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..courses.repository import CourseRepository
from ..leaves.repository import LeaveRepository
from .availability import instructor_availability
from .conflicts import find_instructor_conflicts
from .model import Cancellation, Reassignment, Reschedule, ScheduleEvent
from .modifications import apply_modifications, apply_to_session, group_modifications, validate_modification
from .recurrence import generate_sessions
from .repository import ScheduleRepository
from .status import determine_session_status

logger = logging.getLogger(__name__)

_FINISHED = (SessionStatus.CANCELLED, SessionStatus.COMPLETED)


def _require_date(value: Any, field_name: str) -> date:
    try:
        parsed = parse_optional_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")
    return parsed


def _require_slot(start_time: str, end_time: str) -> None:
    if parse_hhmm(end_time) <= parse_hhmm(start_time):
        raise ValidationError("End time must be after start time")


def _conflict_payload(events: Iterable[ScheduleEvent]) -> List[Dict[str, Any]]:
    return [
        {
            "sessionId": e.session_id,
            "title": e.title,
            "date": e.date.isoformat(),
            "startTime": e.start_time,
            "endTime": e.end_time,
        }
        for e in events
    ]


class ScheduleService:
    """The schedule board of one tenant: generated sessions plus stored ones, with modifications applied."""

    def __init__(
        self,
        courses: CourseRepository,
        schedules: ScheduleRepository,
        leaves: LeaveRepository,
        *,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._courses = courses
        self._schedules = schedules
        self._leaves = leaves
        self._horizon_days = int(horizon_days)
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self._clock()

    # Board
    def _refresh_stored(self, event: ScheduleEvent, now: datetime) -> ScheduleEvent:
        if event.status == SessionStatus.CANCELLED:
            return event
        status = determine_session_status(
            event.date, event.start_time, event.end_time, event.course_status, event.cohort_status, now
        )
        return replace(event, status=status)

    def _base_sessions(self, tenant_id: str, now: datetime) -> List[ScheduleEvent]:
        generated = generate_sessions(
            self._courses.list_courses(tenant_id),
            self._courses.list_cohorts(tenant_id),
            now,
            horizon_days=self._horizon_days,
        )
        seen = {e.session_id for e in generated}
        stored = [self._refresh_stored(e, now) for e in self._schedules.list_sessions(tenant_id) if e.session_id not in seen]
        return generated + stored

    def _modifications(self, tenant_id: str):
        return group_modifications(
            self._schedules.list_reschedules(tenant_id),
            self._schedules.list_cancellations(tenant_id),
            self._schedules.list_reassignments(tenant_id),
        )

    def build_schedule(self, tenant_id: str, *, now: Optional[datetime] = None) -> List[ScheduleEvent]:
        now = self._now(now)
        events = apply_modifications(self._base_sessions(tenant_id, now), self._modifications(tenant_id), now)
        events.sort(key=lambda e: (e.date, e.start_time, e.session_id))
        return events

    def get_session(self, tenant_id: str, session_id: str, *, now: Optional[datetime] = None) -> ScheduleEvent:
        for event in self.build_schedule(tenant_id, now=now):
            if event.session_id == session_id:
                return event
        raise NotFoundError("Session not found")

    def list_modified(self, tenant_id: str, *, now: Optional[datetime] = None) -> List[ScheduleEvent]:
        return [e for e in self.build_schedule(tenant_id, now=now) if e.modification_type is not None]

    # Stored sessions
    def sync_sessions(self, tenant_id: str, payloads: Sequence[Dict[str, Any]]) -> int:
        events = []
        for index, payload in enumerate(payloads):
            if not isinstance(payload, dict) or not (payload.get("sessionId") or payload.get("id")):
                raise ValidationError(f"Session #{index + 1} has no sessionId")
            for key in ("startTime", "endTime"):
                if payload.get(key):
                    require_hhmm(payload[key], f"Session #{index + 1} {key}")
            try:
                events.append(ScheduleEvent.from_dict(payload))
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Session #{index + 1} is invalid: {e}")
        count = self._schedules.upsert_sessions(tenant_id, events)
        logger.info("Synced %d sessions for tenant %s", count, tenant_id)
        return count

    def create_session(self, tenant_id: str, data: Dict[str, Any], *, now: Optional[datetime] = None) -> ScheduleEvent:
        now = self._now(now)
        title = require_non_empty(data.get("title"), "Title")
        session_date = _require_date(data.get("date"), "date")
        start_time = require_hhmm(data.get("startTime"), "startTime")
        end_time = require_hhmm(data.get("endTime"), "endTime")
        _require_slot(start_time, end_time)

        board = self.build_schedule(tenant_id, now=now)
        session_id = str(data.get("sessionId") or data.get("id") or f"S{uuid.uuid4().hex[:10].upper()}")
        if any(e.session_id == session_id for e in board):
            raise ConflictError(f"Session {session_id} already exists")

        instructor_id = (data.get("instructorId") or "").strip() or None
        instructor_name = (data.get("instructor") or data.get("instructorName") or "").strip() or None
        if instructor_id or instructor_name:
            conflicts = find_instructor_conflicts(
                board,
                instructor_id=instructor_id,
                instructor_name=instructor_name,
                day=session_date,
                start_time=start_time,
                end_time=end_time,
                ignore_statuses=_FINISHED,
            )
            if conflicts:
                raise ConflictError("Instructor has a conflicting schedule", details=_conflict_payload(conflicts))

        payload = dict(data)
        payload.update(
            sessionId=session_id,
            title=title,
            date=session_date.isoformat(),
            startTime=start_time,
            endTime=end_time,
            instructorId=instructor_id,
            instructor=instructor_name,
        )
        event = self._refresh_stored(ScheduleEvent.from_dict(payload), now)
        self._schedules.upsert_sessions(tenant_id, [event])
        logger.info("Created session %s for tenant %s", session_id, tenant_id)
        return event

    def update_session(
        self, tenant_id: str, session_id: str, data: Dict[str, Any], *, now: Optional[datetime] = None
    ) -> ScheduleEvent:
        if not session_id:
            raise ValidationError("Schedule ID is required")
        existing = self._schedules.get_session(tenant_id, session_id)
        if not existing:
            raise NotFoundError("Schedule not found")

        payload = existing.to_dict()
        payload.update({k: v for k, v in data.items() if k not in ("id", "sessionId")})
        payload["startTime"] = require_hhmm(payload.get("startTime"), "startTime")
        payload["endTime"] = require_hhmm(payload.get("endTime"), "endTime")
        _require_slot(payload["startTime"], payload["endTime"])
        try:
            updated = ScheduleEvent.from_dict(payload)
        except ValueError as e:
            raise ValidationError(str(e))
        updated = self._refresh_stored(updated, self._now(now))
        self._schedules.upsert_sessions(tenant_id, [updated])
        return updated

    def delete_session(self, tenant_id: str, session_id: str) -> None:
        if not self._schedules.delete_session(tenant_id, session_id):
            raise NotFoundError("Schedule not found")

    # Modifications
    def list_reschedules(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Reschedule]:
        return self._schedules.list_reschedules(tenant_id, session_id)

    def list_cancellations(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Cancellation]:
        return self._schedules.list_cancellations(tenant_id, session_id)

    def list_reassignments(
        self,
        tenant_id: str,
        session_id: Optional[str] = None,
        *,
        cohort_id: Optional[str] = None,
        course_id: Optional[str] = None,
        instructor_id: Optional[str] = None,
    ) -> List[Reassignment]:
        records = self._schedules.list_reassignments(tenant_id, session_id)
        return [
            r
            for r in records
            if (not cohort_id or r.cohort_id == cohort_id)
            and (not course_id or r.course_id == course_id)
            and (not instructor_id or instructor_id in (r.original_instructor_id, r.new_instructor_id))
        ]

    def _approved_leaves(self, tenant_id: str):
        return self._leaves.list_leaves(tenant_id, status=RequestStatus.APPROVED)

    def check_instructor_slot(
        self,
        tenant_id: str,
        *,
        instructor_id: Any,
        day: Any,
        start_time: Any,
        end_time: Any,
        exclude_session_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Whether an instructor could take the given slot: no clashing session and no approved leave."""
        if not instructor_id or not day or not start_time or not end_time:
            raise ValidationError("Missing required fields: instructorId, date, startTime, endTime")
        target_date = _require_date(day, "date")
        start_time = require_hhmm(start_time, "startTime")
        end_time = require_hhmm(end_time, "endTime")
        _require_slot(start_time, end_time)

        conflicts = find_instructor_conflicts(
            self.build_schedule(tenant_id, now=now),
            instructor_id=str(instructor_id),
            day=target_date,
            start_time=start_time,
            end_time=end_time,
            exclude_session_id=exclude_session_id,
        )
        availability = instructor_availability(
            instructor_id=str(instructor_id),
            instructor_name=None,
            day=target_date,
            leaves=self._approved_leaves(tenant_id),
        )
        return {
            "available": availability.available and not conflicts,
            "conflicts": _conflict_payload(conflicts),
            "reason": availability.reason,
        }

    def reschedule(
        self,
        tenant_id: str,
        *,
        session_id: str,
        new_date: Any,
        new_start_time: Any,
        new_end_time: Any,
        reason: str,
        rescheduled_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleEvent:
        now = self._now(now)
        if not session_id:
            raise ValidationError("Session ID is required")
        if not new_date or not new_start_time or not new_end_time:
            raise ValidationError("New date, start time, and end time are required for rescheduling")
        target_date = _require_date(new_date, "newDate")
        start_time = require_hhmm(new_start_time, "newStartTime")
        end_time = require_hhmm(new_end_time, "newEndTime")
        reason = require_non_empty(reason, "Reason")

        board = self.build_schedule(tenant_id, now=now)
        event = next((e for e in board if e.session_id == session_id), None)
        if event is None:
            raise NotFoundError("Session not found")
        validate_modification(
            event,
            ModificationType.RESCHEDULE,
            new_date=target_date,
            new_start_time=start_time,
            new_end_time=end_time,
        )

        conflicts = find_instructor_conflicts(
            board,
            instructor_id=event.instructor_id,
            instructor_name=event.instructor_name,
            day=target_date,
            start_time=start_time,
            end_time=end_time,
            exclude_session_id=session_id,
        )
        if conflicts:
            raise ConflictError(
                f"{event.instructor_name} already has a session scheduled during this time slot",
                details=_conflict_payload(conflicts),
            )
        availability = instructor_availability(
            instructor_id=event.instructor_id,
            instructor_name=event.instructor_name,
            day=target_date,
            leaves=self._approved_leaves(tenant_id),
        )
        if not availability.available:
            raise ConflictError(availability.reason)

        origin = event.original or event
        record = Reschedule(
            session_id=session_id,
            cohort_id=event.cohort_id,
            course_id=event.course_id,
            instructor=event.instructor_name,
            original_date=origin.date,
            original_start_time=origin.start_time,
            original_end_time=origin.end_time,
            new_date=target_date,
            new_start_time=start_time,
            new_end_time=end_time,
            reason=reason,
            rescheduled_by=(rescheduled_by or "").strip() or DEFAULT_MODIFIED_BY,
            rescheduled_at=now,
        )
        self._schedules.add_reschedule(tenant_id, record)
        logger.info("Rescheduled %s to %s %s-%s", session_id, target_date, start_time, end_time)
        return self._reapply(tenant_id, session_id, now)

    def cancel(
        self,
        tenant_id: str,
        *,
        session_id: str,
        reason: str,
        cancelled_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleEvent:
        now = self._now(now)
        if not session_id:
            raise ValidationError("Session ID is required")
        reason = require_non_empty(reason, "Cancellation reason")
        event = self.get_session(tenant_id, session_id, now=now)
        validate_modification(event, ModificationType.CANCELLATION)

        origin = event.original or event
        record = Cancellation(
            session_id=session_id,
            cohort_id=event.cohort_id,
            course_id=event.course_id,
            session_date=origin.date,
            reason=reason,
            cancelled_by=(cancelled_by or "").strip() or DEFAULT_MODIFIED_BY,
            cancelled_at=now,
        )
        self._schedules.add_cancellation(tenant_id, record)
        logger.info("Cancelled session %s: %s", session_id, reason)
        return self._reapply(tenant_id, session_id, now)

    def reassign(
        self,
        tenant_id: str,
        *,
        session_id: str,
        new_instructor_id: str,
        new_instructor_name: str,
        reason: Optional[str] = None,
        reassigned_by: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScheduleEvent:
        now = self._now(now)
        if not session_id:
            raise ValidationError("Session ID is required")
        new_instructor_id = (new_instructor_id or "").strip()
        new_instructor_name = (new_instructor_name or "").strip()

        board = self.build_schedule(tenant_id, now=now)
        event = next((e for e in board if e.session_id == session_id), None)
        if event is None:
            raise NotFoundError("Session not found")
        validate_modification(
            event,
            ModificationType.REASSIGNMENT,
            new_instructor_id=new_instructor_id,
            new_instructor_name=new_instructor_name,
        )

        availability = instructor_availability(
            instructor_id=new_instructor_id,
            instructor_name=new_instructor_name,
            day=event.date,
            leaves=self._approved_leaves(tenant_id),
        )
        if not availability.available:
            raise ConflictError(availability.reason)

        conflicts = find_instructor_conflicts(
            board,
            instructor_id=new_instructor_id,
            instructor_name=new_instructor_name,
            day=event.date,
            start_time=event.start_time,
            end_time=event.end_time,
            exclude_session_id=session_id,
        )
        if conflicts:
            raise ConflictError(
                f"{new_instructor_name} already has a session scheduled during this time slot",
                details=_conflict_payload(conflicts),
            )

        original_name = event.instructor_name
        record = Reassignment(
            session_id=session_id,
            cohort_id=event.cohort_id,
            course_id=event.course_id,
            session_date=event.date,
            original_instructor=original_name,
            original_instructor_id=event.instructor_id,
            new_instructor=new_instructor_name,
            new_instructor_id=new_instructor_id,
            reason=(reason or "").strip() or f"Instructor reassigned from {original_name} to {new_instructor_name}",
            reassigned_by=(reassigned_by or "").strip() or DEFAULT_MODIFIED_BY,
            reassigned_at=now,
        )
        self._schedules.add_reassignment(tenant_id, record)
        logger.info("Reassigned %s from %s to %s", session_id, original_name, new_instructor_name)
        return self._reapply(tenant_id, session_id, now)

    def _reapply(self, tenant_id: str, session_id: str, now: datetime) -> ScheduleEvent:
        base = next((e for e in self._base_sessions(tenant_id, now) if e.session_id == session_id), None)
        if base is None:
            raise NotFoundError("Session not found")
        mods = self._modifications(tenant_id).get(session_id)
        return apply_to_session(base, mods, now) if mods else base

    def session_qr_png(self, tenant_id: str, session_id: str, *, now: Optional[datetime] = None) -> bytes:
        """PNG QR code encoding the session's check-in code."""
        event = self.get_session(tenant_id, session_id, now=now)
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(f"{tenant_id}:{event.qr_code or event.session_id}:{event.session_id}")
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()
