from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import parse_optional_date
from ..common.validators import is_valid_hhmm, require_hhmm
from ..core.enums import ModificationType, SessionStatus


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _slot_time(value: Any) -> str:
    # "9:00" and "09:00" must sort and compare the same.
    text = str(value or "").strip()
    return require_hhmm(text, "time") if is_valid_hhmm(text) else text


@dataclass(frozen=True)
class Reschedule:
    session_id: str
    original_date: date
    new_date: date
    new_start_time: str
    new_end_time: str
    reason: str
    rescheduled_by: str
    rescheduled_at: datetime
    original_start_time: Optional[str] = None
    original_end_time: Optional[str] = None
    cohort_id: Optional[str] = None
    course_id: Optional[str] = None
    instructor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "cohortId": self.cohort_id,
            "courseId": self.course_id,
            "instructor": self.instructor,
            "originalDate": self.original_date.isoformat(),
            "originalStartTime": self.original_start_time,
            "originalEndTime": self.original_end_time,
            "newDate": self.new_date.isoformat(),
            "newStartTime": self.new_start_time,
            "newEndTime": self.new_end_time,
            "reason": self.reason,
            "rescheduledBy": self.rescheduled_by,
            "rescheduledAt": _ts(self.rescheduled_at),
        }


@dataclass(frozen=True)
class Cancellation:
    session_id: str
    reason: str
    cancelled_by: str
    cancelled_at: datetime
    cohort_id: Optional[str] = None
    course_id: Optional[str] = None
    session_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "cohortId": self.cohort_id,
            "courseId": self.course_id,
            "sessionDate": self.session_date.isoformat() if self.session_date else None,
            "reason": self.reason,
            "cancelledBy": self.cancelled_by,
            "cancelledAt": _ts(self.cancelled_at),
        }


@dataclass(frozen=True)
class Reassignment:
    session_id: str
    new_instructor: str
    new_instructor_id: str
    reason: str
    reassigned_by: str
    reassigned_at: datetime
    original_instructor: Optional[str] = None
    original_instructor_id: Optional[str] = None
    cohort_id: Optional[str] = None
    course_id: Optional[str] = None
    session_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "cohortId": self.cohort_id,
            "courseId": self.course_id,
            "sessionDate": self.session_date.isoformat() if self.session_date else None,
            "originalInstructor": self.original_instructor,
            "originalInstructorId": self.original_instructor_id,
            "newInstructor": self.new_instructor,
            "newInstructorId": self.new_instructor_id,
            "reason": self.reason,
            "reassignedBy": self.reassigned_by,
            "reassignedAt": _ts(self.reassigned_at),
        }


@dataclass(frozen=True)
class SessionModifications:
    """Latest record of each kind overlaying one session."""

    reschedule: Optional[Reschedule] = None
    cancellation: Optional[Cancellation] = None
    reassignment: Optional[Reassignment] = None

    @property
    def is_empty(self) -> bool:
        return not (self.reschedule or self.cancellation or self.reassignment)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reschedule": self.reschedule.to_dict() if self.reschedule else None,
            "cancellation": self.cancellation.to_dict() if self.cancellation else None,
            "reassignment": self.reassignment.to_dict() if self.reassignment else None,
        }


@dataclass(frozen=True)
class OriginalSlot:
    """Where and with whom a session was before it got modified."""

    date: date
    start_time: str
    end_time: str
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEvent:
    session_id: str
    title: str
    date: date
    start_time: str
    end_time: str
    status: SessionStatus = SessionStatus.PENDING
    course_id: Optional[str] = None
    course_name: Optional[str] = None
    cohort_id: Optional[str] = None
    cohort_name: Optional[str] = None
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None
    location: Optional[str] = None
    type: str = "online"
    category: Optional[str] = None
    max_capacity: int = 0
    students: int = 0
    session_number: Optional[int] = None
    is_recurring: bool = False
    course_status: Optional[str] = None
    cohort_status: Optional[str] = None
    qr_code: Optional[str] = None
    modifications: Optional[SessionModifications] = None
    modification_type: Optional[ModificationType] = None
    original: Optional[OriginalSlot] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_cancelled(self) -> bool:
        return self.status == SessionStatus.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.session_id,
            "sessionId": self.session_id,
            "title": self.title,
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status.value,
            "courseId": self.course_id,
            "courseName": self.course_name,
            "cohortId": self.cohort_id,
            "cohortName": self.cohort_name,
            "instructorId": self.instructor_id,
            "instructor": self.instructor_name,
            "location": self.location,
            "type": self.type,
            "category": self.category,
            "maxCapacity": self.max_capacity,
            "students": self.students,
            "sessionNumber": self.session_number,
            "isRecurring": self.is_recurring,
            "courseStatus": self.course_status,
            "cohortStatus": self.cohort_status,
            "qrCode": self.qr_code,
            "isCancelled": self.is_cancelled,
            "modificationType": self.modification_type.value if self.modification_type else None,
        }
        if self.modifications and not self.modifications.is_empty:
            out["modifications"] = self.modifications.to_dict()
        if self.original:
            out["originalData"] = {
                "date": self.original.date.isoformat(),
                "startTime": self.original.start_time,
                "endTime": self.original.end_time,
                "instructorId": self.original.instructor_id,
                "instructor": self.original.instructor_name,
            }
        if self.extra:
            out.update({k: v for k, v in self.extra.items() if k not in out})
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleEvent":
        """Build an event from a client payload or a stored row payload."""
        known = {
            "id", "sessionId", "title", "date", "startTime", "endTime", "status", "courseId", "courseName",
            "cohortId", "cohortName", "instructorId", "instructor", "instructorName", "location", "type",
            "category", "maxCapacity", "students", "sessionNumber", "isRecurring", "courseStatus",
            "cohortStatus", "qrCode", "isCancelled", "modificationType", "modifications", "originalData",
        }
        session_date = parse_optional_date(data.get("date"))
        if session_date is None:
            raise ValueError("date is required")
        try:
            status = SessionStatus(data.get("status") or SessionStatus.PENDING.value)
        except ValueError:
            status = SessionStatus.PENDING
        return cls(
            session_id=str(data.get("sessionId") or data.get("id")),
            title=str(data.get("title") or ""),
            date=session_date,
            start_time=_slot_time(data.get("startTime")),
            end_time=_slot_time(data.get("endTime")),
            status=status,
            course_id=data.get("courseId"),
            course_name=data.get("courseName"),
            cohort_id=data.get("cohortId"),
            cohort_name=data.get("cohortName"),
            instructor_id=data.get("instructorId"),
            instructor_name=data.get("instructor") or data.get("instructorName"),
            location=data.get("location"),
            type=str(data.get("type") or "online"),
            category=data.get("category"),
            max_capacity=int(data.get("maxCapacity") or 0),
            students=int(data.get("students") or 0),
            session_number=data.get("sessionNumber"),
            is_recurring=bool(data.get("isRecurring")),
            course_status=data.get("courseStatus"),
            cohort_status=data.get("cohortStatus"),
            qr_code=data.get("qrCode"),
            extra={k: v for k, v in data.items() if k not in known},
        )
