from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class Availability:
    available: bool
    reason: Optional[str] = None
    leave_id: Optional[int] = None


def _same_instructor(leave, instructor_id: Optional[str], instructor_name: Optional[str]) -> bool:
    if instructor_id and leave.instructor_id == instructor_id:
        return True
    name = (instructor_name or "").strip().lower()
    return bool(name) and (leave.instructor_name or "").strip().lower() == name


def instructor_availability(
    *,
    instructor_id: Optional[str],
    instructor_name: Optional[str],
    day: date,
    leaves: Iterable,
) -> Availability:
    """An instructor is away on a day covered by one of their approved leaves."""

    for leave in leaves:
        if leave.status != RequestStatus.APPROVED:
            continue
        if not _same_instructor(leave, instructor_id, instructor_name):
            continue
        if leave.start_date <= day <= leave.end_date:
            return Availability(
                available=False,
                reason=f"{leave.instructor_name} is on leave from {leave.start_date} to {leave.end_date}",
                leave_id=leave.request_id,
            )
    return Availability(available=True)
