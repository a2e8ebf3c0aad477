"""Status rules shared by generated and stored sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import parse_hhmm
from ..core.constants import ACTIVE_COHORT_STATUSES, ACTIVE_COURSE_STATUSES
from ..core.enums import ModificationType, SessionStatus
from .model import ScheduleEvent, SessionModifications

logger = logging.getLogger(__name__)

_ACTIVE_COURSE = {s.lower() for s in ACTIVE_COURSE_STATUSES}
_ACTIVE_COHORT = {s.lower() for s in ACTIVE_COHORT_STATUSES}


def is_course_active(status: Optional[str]) -> bool:
    return (status or "").strip().lower() in _ACTIVE_COURSE


def is_cohort_active(status: Optional[str]) -> bool:
    return (status or "").strip().lower() in _ACTIVE_COHORT


def determine_session_status(
    session_date: date,
    start_time: str,
    end_time: str,
    course_status: Optional[str],
    cohort_status: Optional[str],
    now: datetime,
    *,
    is_cancelled: bool = False,
    is_rescheduled: bool = False,
) -> SessionStatus:
    """Derive the display status of a session.

    A missing course or cohort status (a stand-alone session) counts as active.
    """

    if is_rescheduled:
        return SessionStatus.RESCHEDULED
    if course_status is not None and not is_course_active(course_status):
        return SessionStatus.CANCELLED
    if (cohort_status is not None and not is_cohort_active(cohort_status)) or is_cancelled:
        return SessionStatus.CANCELLED

    try:
        start = datetime.combine(session_date, parse_hhmm(start_time))
        end = datetime.combine(session_date, parse_hhmm(end_time))
    except (TypeError, ValueError, AttributeError):
        logger.warning("Cannot parse session time %r-%r on %s", start_time, end_time, session_date)
        return SessionStatus.PENDING

    if now < start:
        return SessionStatus.UPCOMING
    if start <= now <= end:
        return SessionStatus.ONGOING
    return SessionStatus.COMPLETED


def latest_modification_type(mods: Optional[SessionModifications]) -> Optional[ModificationType]:
    if not mods:
        return None
    stamped = []
    if mods.reschedule:
        stamped.append((mods.reschedule.rescheduled_at, ModificationType.RESCHEDULE))
    if mods.cancellation:
        stamped.append((mods.cancellation.cancelled_at, ModificationType.CANCELLATION))
    if mods.reassignment:
        stamped.append((mods.reassignment.reassigned_at, ModificationType.REASSIGNMENT))
    if not stamped:
        return None
    stamped.sort(key=lambda item: item[0], reverse=True)
    return stamped[0][1]


@dataclass(frozen=True)
class StatusBadge:
    label: str
    variant: str
    description: str
    class_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "status": self.label,
            "variant": self.variant,
            "description": self.description,
            "className": self.class_name,
        }


_BADGES = {
    SessionStatus.UPCOMING: ("default", "bg-blue-100 text-blue-800 border-blue-200"),
    SessionStatus.ONGOING: ("default", "bg-green-100 text-green-800 border-green-200"),
    SessionStatus.COMPLETED: ("secondary", "bg-gray-100 text-gray-800 border-gray-200"),
    SessionStatus.CANCELLED: ("destructive", "bg-red-100 text-red-800 border-red-200"),
    SessionStatus.PENDING: ("outline", "bg-yellow-100 text-yellow-800 border-yellow-200"),
    SessionStatus.RESCHEDULED: ("default", "bg-purple-100 text-purple-800 border-purple-200"),
}


def status_badge(course_status: Optional[str], cohort_status: Optional[str], status: SessionStatus) -> StatusBadge:
    if course_status is not None and not is_course_active(course_status):
        return StatusBadge("Course Inactive", "destructive", f"Course is {course_status}", _BADGES[SessionStatus.CANCELLED][1])
    if cohort_status is not None and not is_cohort_active(cohort_status):
        return StatusBadge("Cohort Inactive", "secondary", f"Cohort is {cohort_status}", "bg-orange-100 text-orange-800 border-orange-200")
    variant, class_name = _BADGES.get(status, ("outline", "bg-gray-100 text-gray-800"))
    return StatusBadge(status.value, variant, status.value, class_name)


@dataclass(frozen=True)
class ConsistencyReport:
    is_valid: bool
    inconsistent_session_ids: List[str]
    warnings: List[str]


def validate_schedule_consistency(events: Sequence[ScheduleEvent]) -> ConsistencyReport:
    inconsistent: List[str] = []
    warnings: List[str] = []
    for event in events:
        if event.course_status and not is_course_active(event.course_status):
            inconsistent.append(event.session_id)
            warnings.append(
                f"Session {event.session_id} from inactive course ({event.course_status}): {event.course_name}"
            )
        if event.cohort_status and not is_cohort_active(event.cohort_status):
            inconsistent.append(event.session_id)
            warnings.append(
                f"Session {event.session_id} from inactive cohort ({event.cohort_status}): {event.cohort_name}"
            )
        if not event.course_id or not event.cohort_id:
            warnings.append(f"Session {event.session_id} missing course/cohort reference")
    return ConsistencyReport(is_valid=not inconsistent, inconsistent_session_ids=inconsistent, warnings=warnings)
