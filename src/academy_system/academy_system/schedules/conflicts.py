from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional

from ..common.datetime_utils import parse_hhmm
from ..core.enums import SessionStatus
from .model import ScheduleEvent


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open overlap: touching ranges (10:00-11:00, 11:00-12:00) do not clash."""
    a0, a1 = parse_hhmm(start_a), parse_hhmm(end_a)
    b0, b1 = parse_hhmm(start_b), parse_hhmm(end_b)
    return a0 < b1 and a1 > b0


def find_instructor_conflicts(
    events: Iterable[ScheduleEvent],
    *,
    instructor_id: Optional[str],
    instructor_name: Optional[str] = None,
    day: date,
    start_time: str,
    end_time: str,
    exclude_session_id: Optional[str] = None,
    ignore_statuses=(SessionStatus.CANCELLED,),
) -> List[ScheduleEvent]:
    name = (instructor_name or "").strip().lower()
    out = []
    for event in events:
        if event.session_id == exclude_session_id or event.status in ignore_statuses:
            continue
        if event.date != day:
            continue
        same_id = bool(instructor_id) and event.instructor_id == instructor_id
        same_name = bool(name) and (event.instructor_name or "").strip().lower() == name
        if not (same_id or same_name):
            continue
        try:
            if times_overlap(event.start_time, event.end_time, start_time, end_time):
                out.append(event)
        except ValueError:
            continue
    return out
