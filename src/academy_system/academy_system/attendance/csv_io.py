"""CSV export and import of instructor attendance."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .model import InstructorAttendance

EXPORT_HEADERS = ["Instructor ID", "Instructor Name", "Date", "Start Time", "End Time", "Status", "Remarks"]

# Older exports used Student* headers; both map onto the same fields.
_ALIASES = {
    "instructorId": ("studentId", "StudentId", "Student ID", "instructorId", "InstructorId", "Instructor ID"),
    "instructorName": ("studentName", "StudentName", "Student Name", "instructorName", "InstructorName", "Instructor Name"),
    "cohortInstructor": ("cohortInstructor", "CohortInstructor", "Cohort Instructor"),
    "cohortTiming": ("cohortTiming", "CohortTiming", "Cohort Timing"),
    "date": ("date", "Date"),
    "startTime": ("startTime", "StartTime", "Start Time"),
    "endTime": ("endTime", "EndTime", "End Time"),
    "status": ("status", "Status"),
    "notes": ("notes", "Notes", "remarks", "Remarks"),
}


def status_label(status: str) -> str:
    if status == "planned":
        return "Planned leave"
    if status == "absent":
        return "Unplanned Leave"
    return status[:1].upper() + status[1:] if status else ""


def status_from_label(label: str) -> str:
    raw = (label or "present").strip().lower()
    if raw == "planned leave":
        return "planned"
    if raw == "unplanned leave":
        return "absent"
    return raw


def display_date(value: date) -> str:
    """05-Oct-2026"""
    return value.strftime("%d-%b-%Y")


def parse_import_date(value: str) -> Optional[date]:
    value = (value or "").strip()
    for fmt in ("%Y-%m-%d", "%d-%b-%Y", "%d %b %Y", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def export_filename(*, selected: bool, today: date) -> str:
    return f"attendance-{'selected' if selected else 'all'}-{today.isoformat()}.csv"


def export_csv(records: Iterable[InstructorAttendance]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    for r in records:
        writer.writerow(
            [
                r.instructor_id,
                r.instructor_name,
                display_date(r.date),
                r.start_time or "",
                r.end_time or "",
                status_label(r.status.value),
                r.notes or "",
            ]
        )
    return out.getvalue()


def _pick(row: Dict[str, Any], keys: Tuple[str, ...]) -> str:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return str(value).strip()
    return ""


def normalize_row(row: Dict[str, Any]) -> Dict[str, str]:
    """Map one CSV row onto the JSON field names AttendanceService accepts."""
    out = {field: _pick(row, keys) for field, keys in _ALIASES.items()}
    out["status"] = status_from_label(out["status"])
    return out


def read_csv(text: str) -> List[Dict[str, str]]:
    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    if reader.fieldnames:
        reader.fieldnames = [h.strip() for h in reader.fieldnames]
    rows = []
    for row in reader:
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        rows.append(normalize_row(row))
    return rows
