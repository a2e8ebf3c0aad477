"""Filtering, sorting and the list/grid/calendar shapes of the schedule board."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..common.datetime_utils import parse_optional_date
from ..core.enums import SessionStatus
from ..core.exceptions import ValidationError
from .model import ScheduleEvent

ALL = "All"
SORT_FIELDS = ("date", "title", "instructor", "status", "course")


@dataclass(frozen=True)
class SessionFilter:
    statuses: Sequence[SessionStatus] = field(default_factory=tuple)
    instructor: Optional[str] = None
    course: Optional[str] = None
    cohort: Optional[str] = None
    category: Optional[str] = None
    session_type: Optional[str] = None
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "SessionFilter":
        statuses = []
        raw = args.get("status")
        if raw and raw != ALL:
            for part in str(raw).split(","):
                part = part.strip()
                if not part or part == ALL:
                    continue
                try:
                    statuses.append(SessionStatus(part))
                except ValueError:
                    raise ValidationError(f"Unknown status {part!r}")
        try:
            single_day = parse_optional_date(args.get("date"))
            date_from = parse_optional_date(args.get("dateFrom")) or single_day
            date_to = parse_optional_date(args.get("dateTo")) or single_day
        except ValueError:
            raise ValidationError("Dates must be in YYYY-MM-DD format")

        def _opt(key: str) -> Optional[str]:
            value = (args.get(key) or "").strip()
            return value if value and value != ALL else None

        return cls(
            statuses=tuple(statuses),
            instructor=_opt("instructor"),
            course=_opt("course") or _opt("courseId"),
            cohort=_opt("cohortId"),
            category=_opt("category"),
            session_type=_opt("type") or _opt("mode"),
            search=_opt("search"),
            date_from=date_from,
            date_to=date_to,
        )

    def matches(self, event: ScheduleEvent) -> bool:
        if self.statuses and event.status not in self.statuses:
            return False
        if self.instructor and self.instructor not in (event.instructor_id, event.instructor_name):
            return False
        if self.course and self.course not in (event.course_id, event.course_name):
            return False
        if self.cohort and event.cohort_id != self.cohort:
            return False
        if self.category and (event.category or "").lower() != self.category.lower():
            return False
        if self.session_type and event.type != self.session_type:
            return False
        if self.date_from and event.date < self.date_from:
            return False
        if self.date_to and event.date > self.date_to:
            return False
        if self.search:
            needle = self.search.lower()
            haystack = (
                event.title,
                event.course_name,
                event.cohort_name,
                event.instructor_name,
                event.location,
                event.session_id,
            )
            if not any(needle in (h or "").lower() for h in haystack):
                return False
        return True


def filter_sessions(events: Sequence[ScheduleEvent], flt: SessionFilter) -> List[ScheduleEvent]:
    return [e for e in events if flt.matches(e)]


def sort_sessions(events: Sequence[ScheduleEvent], sort_by: str = "date", order: str = "asc") -> List[ScheduleEvent]:
    if sort_by not in SORT_FIELDS:
        raise ValidationError(f"sortBy must be one of {', '.join(SORT_FIELDS)}")

    def key(e: ScheduleEvent):
        if sort_by == "title":
            return ((e.title or "").lower(), e.date, e.start_time)
        if sort_by == "instructor":
            return ((e.instructor_name or "").lower(), e.date, e.start_time)
        if sort_by == "status":
            return (e.status.value, e.date, e.start_time)
        if sort_by == "course":
            return ((e.course_name or "").lower(), e.date, e.start_time)
        return (e.date, e.start_time)

    return sorted(events, key=key, reverse=(order == "desc"))


def paginate(items: Sequence[Any], page: int, limit: int) -> Dict[str, Any]:
    page = max(1, page)
    limit = max(1, limit)
    total = len(items)
    start = (page - 1) * limit
    return {
        "items": list(items[start:start + limit]),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    }


def week_start_for(day: date) -> date:
    return day - timedelta(days=day.weekday())


def week_grid(events: Sequence[ScheduleEvent], week_start: date) -> List[Dict[str, Any]]:
    """Seven Monday-first buckets, each sorted by start time."""
    week_start = week_start_for(week_start)
    out = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        day_events = sorted((e for e in events if e.date == day), key=lambda e: e.start_time)
        out.append({"date": day, "weekday": calendar.day_name[day.weekday()], "sessions": day_events})
    return out


def month_calendar(events: Sequence[ScheduleEvent], year: int, month: int) -> List[List[Dict[str, Any]]]:
    """Weeks of seven Monday-first cells; cells outside the month are flagged."""
    by_day: Dict[date, List[ScheduleEvent]] = {}
    for e in events:
        by_day.setdefault(e.date, []).append(e)

    weeks = []
    for week in calendar.Calendar(firstweekday=0).monthdatescalendar(year, month):
        weeks.append(
            [
                {
                    "date": day,
                    "inMonth": day.month == month,
                    "sessions": sorted(by_day.get(day, []), key=lambda e: e.start_time),
                }
                for day in week
            ]
        )
    return weeks
