"""Expansion of cohort weekly patterns into calendar sessions."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..common.datetime_utils import daterange, js_weekday
from ..core.constants import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_INSTRUCTOR_NAME,
    DEFAULT_SESSION_CAPACITY,
    DEFAULT_SESSION_END,
    DEFAULT_SESSION_LOCATION,
    DEFAULT_SESSION_START,
)
from ..core.enums import SessionType
from .model import ScheduleEvent
from .status import determine_session_status, is_cohort_active, is_course_active

logger = logging.getLogger(__name__)

_SESSION_TYPES = {t.value for t in SessionType}


def parse_days_of_week(value: Any) -> Tuple[int, ...]:
    """Accept [1, 3], "1 3", "1,3" and drop anything outside 0..6."""

    if value is None:
        return ()
    if isinstance(value, str):
        tokens: Iterable[Any] = [t for t in re.split(r"[\s,]+", value.strip()) if t]
    elif isinstance(value, (list, tuple, set)):
        tokens = value
    else:
        tokens = [value]

    days = set()
    for token in tokens:
        try:
            day = int(token)
        except (TypeError, ValueError):
            continue
        if 0 <= day <= 6:
            days.add(day)
    return tuple(sorted(days))


def session_id_for(cohort_id: str, day: date, number: int) -> str:
    return f"{cohort_id}_{day.isoformat()}_{number}"


def _course_window(course, today: date, horizon_days: int) -> Tuple[date, date]:
    start = getattr(course, "start_date", None)
    end = getattr(course, "end_date", None)
    if start and end:
        return start, end
    logger.warning(
        "Course %s has no complete date range; expanding %s + %d days",
        getattr(course, "course_id", "?"),
        today,
        horizon_days,
    )
    return today, today + timedelta(days=horizon_days)


def expand_cohort(
    cohort,
    course,
    now: datetime,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> List[ScheduleEvent]:
    """One session per matching weekday of the course window, numbered from 1."""

    days = set(parse_days_of_week(cohort.days_of_week))
    if not days:
        logger.warning("Cohort %s has no valid days of week; skipped", cohort.cohort_id)
        return []

    start, end = _course_window(course, now.date(), horizon_days)
    start_time = cohort.start_time or DEFAULT_SESSION_START
    end_time = cohort.end_time or DEFAULT_SESSION_END
    session_type = cohort.session_type if cohort.session_type in _SESSION_TYPES else SessionType.ONLINE.value

    events: List[ScheduleEvent] = []
    for day in daterange(start, end):
        if js_weekday(day) not in days:
            continue
        number = len(events) + 1
        events.append(
            ScheduleEvent(
                session_id=session_id_for(cohort.cohort_id, day, number),
                title=f"{course.name} - Session {number}",
                date=day,
                start_time=start_time,
                end_time=end_time,
                status=determine_session_status(day, start_time, end_time, course.status, cohort.status, now),
                course_id=course.course_id,
                course_name=course.name,
                cohort_id=cohort.cohort_id,
                cohort_name=cohort.name,
                instructor_id=cohort.instructor_id or course.instructor_id,
                instructor_name=cohort.instructor_name or course.instructor_name or DEFAULT_INSTRUCTOR_NAME,
                location=cohort.location or DEFAULT_SESSION_LOCATION,
                type=session_type,
                category=course.category,
                max_capacity=cohort.max_students or DEFAULT_SESSION_CAPACITY,
                students=cohort.current_students or 0,
                session_number=number,
                is_recurring=True,
                course_status=course.status,
                cohort_status=cohort.status,
                qr_code=f"qr-{cohort.cohort_id}",
            )
        )
    return events


def active_cohorts(courses: Sequence, cohorts: Sequence) -> List[Tuple[Any, Any]]:
    """Pair each active cohort with its parent course; orphans and inactive parents are dropped."""

    by_id: Dict[str, Any] = {c.course_id: c for c in courses}
    out = []
    for cohort in cohorts:
        if not is_cohort_active(cohort.status):
            continue
        course = by_id.get(cohort.course_id)
        if course is None:
            logger.warning("Cohort %s references non-existent course %s", cohort.cohort_id, cohort.course_id)
            continue
        if not is_course_active(course.status):
            logger.info("Skipping cohort %s: course %s is %s", cohort.cohort_id, course.course_id, course.status)
            continue
        out.append((cohort, course))
    return out


def generate_sessions(
    courses: Sequence,
    cohorts: Sequence,
    now: datetime,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    window: Optional[Tuple[date, date]] = None,
) -> List[ScheduleEvent]:
    events: List[ScheduleEvent] = []
    for cohort, course in active_cohorts(courses, cohorts):
        events.extend(expand_cohort(cohort, course, now, horizon_days=horizon_days))
    if window:
        lo, hi = window
        events = [e for e in events if lo <= e.date <= hi]
    return events
