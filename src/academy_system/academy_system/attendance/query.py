from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_optional_date
from ..core.exceptions import ValidationError
from .model import InstructorAttendance

SORT_FIELDS = ("date", "instructorName", "instructorId", "status")


@dataclass(frozen=True)
class AttendanceQuery:
    search: str = ""
    statuses: Tuple[str, ...] = field(default_factory=tuple)
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: str = "date"
    order: str = "desc"

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "AttendanceQuery":
        raw_status = args.get("status") or ""
        statuses = tuple(s.strip().lower() for s in str(raw_status).split(",") if s.strip() and s.strip() != "All")
        try:
            date_from = parse_optional_date(args.get("dateFrom"))
            date_to = parse_optional_date(args.get("dateTo"))
        except ValueError:
            raise ValidationError("Dates must be in YYYY-MM-DD format")
        sort_by = args.get("sortBy") or "date"
        if sort_by not in SORT_FIELDS:
            raise ValidationError(f"sortBy must be one of {', '.join(SORT_FIELDS)}")
        order = (args.get("sortOrder") or "desc").lower()
        if order not in ("asc", "desc"):
            raise ValidationError("sortOrder must be asc or desc")
        return cls(
            search=(args.get("search") or "").strip(),
            statuses=statuses,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            order=order,
        )

    def matches(self, r: InstructorAttendance) -> bool:
        if self.search:
            needle = self.search.lower()
            fields = (r.instructor_name, r.instructor_id, r.cohort_instructor, r.notes)
            if not any(needle in (f or "").lower() for f in fields):
                return False
        if self.statuses and r.status.value not in self.statuses:
            return False
        if self.date_from and r.date < self.date_from:
            return False
        if self.date_to and r.date > self.date_to:
            return False
        return True

    def _key(self, r: InstructorAttendance):
        if self.sort_by == "instructorName":
            return (r.instructor_name or "").lower()
        if self.sort_by == "instructorId":
            return (r.instructor_id or "").lower()
        if self.sort_by == "status":
            return r.status.value
        return r.date

    def apply(self, records: Sequence[InstructorAttendance]) -> List[InstructorAttendance]:
        rows = [r for r in records if self.matches(r)]
        rows.sort(key=self._key, reverse=self.order == "desc")
        return rows
