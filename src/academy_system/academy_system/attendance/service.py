from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..common.datetime_utils import daterange, parse_optional_date
from ..common.validators import require_hhmm
from ..core.constants import PLANNED_LEAVE_NOTE
from ..core.enums import InstructorAttendanceStatus, RequestStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..leaves.repository import LeaveRepository
from .csv_io import export_csv, export_filename, parse_import_date, read_csv
from .model import AttendanceDraft, ImportStats, InstructorAttendance
from .query import AttendanceQuery
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def normalize_status(value: Any) -> InstructorAttendanceStatus:
    raw = str(value or "").strip().lower()
    if raw == "absent":
        return InstructorAttendanceStatus.ABSENT
    if raw == "planned":
        return InstructorAttendanceStatus.PLANNED
    return InstructorAttendanceStatus.PRESENT


def _opt_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def _opt_time(value: Any, field_name: str) -> Optional[str]:
    text = _opt_text(value)
    return require_hhmm(text, field_name) if text else None


def _require_date(value: Any) -> date:
    try:
        parsed = parse_optional_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError("Date must be in YYYY-MM-DD format")
    return parsed


class AttendanceService:
    """Instructor attendance of one tenant: records, drafts and CSV exchange."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        *,
        today: Callable[[], date] = date.today,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._today = today

    # Planned leave sync
    def sync_planned_leaves(self, tenant_id: str, *, today: Optional[date] = None) -> int:
        """Create a planned row for each remaining day of every approved leave.

        Past days and days that already have a row are left alone.
        """

        today = today or self._today()
        rows = []
        for leave in self._leaves.list_leaves(tenant_id, status=RequestStatus.APPROVED):
            if leave.end_date < today:
                continue
            start = max(leave.start_date, today)
            for day in daterange(start, leave.end_date):
                rows.append((leave.instructor_id, leave.instructor_name, day))
        inserted = self._attendance.insert_planned(tenant_id, rows, notes=PLANNED_LEAVE_NOTE)
        if inserted:
            logger.info("Added %d planned leave rows for tenant %s", inserted, tenant_id)
        return inserted

    # Records
    def list_records(
        self,
        tenant_id: str,
        *,
        query: Optional[AttendanceQuery] = None,
        today: Optional[date] = None,
    ) -> List[InstructorAttendance]:
        self.sync_planned_leaves(tenant_id, today=today)
        records = list(self._attendance.list_records(tenant_id))
        if query is None:
            records.sort(key=lambda r: r.date, reverse=True)
            return records
        return query.apply(records)

    def _build(self, tenant_id: str, data: Dict[str, Any], record_id: int = 0) -> InstructorAttendance:
        instructor_id = _opt_text(data.get("instructorId"))
        instructor_name = _opt_text(data.get("instructorName"))
        if not instructor_id or not instructor_name or not _opt_text(data.get("date")):
            raise ValidationError("Missing required fields: instructorId, instructorName, date")

        start_time = _opt_time(data.get("startTime"), "startTime")
        end_time = _opt_time(data.get("endTime"), "endTime")
        if start_time and end_time and end_time < start_time:
            raise ValidationError("End time cannot be before start time")

        return InstructorAttendance(
            record_id=record_id,
            tenant_id=tenant_id,
            instructor_id=instructor_id,
            instructor_name=instructor_name,
            date=_require_date(data.get("date")),
            status=normalize_status(data.get("status")),
            start_time=start_time,
            end_time=end_time,
            cohort_instructor=_opt_text(data.get("cohortInstructor")),
            cohort_timing=_opt_text(data.get("cohortTiming")),
            notes=_opt_text(data.get("notes")),
        )

    def create_record(self, tenant_id: str, data: Dict[str, Any]) -> InstructorAttendance:
        record = self._build(tenant_id, data)
        if self._attendance.find_for_day(tenant_id, record.instructor_id, record.date):
            raise ConflictError(
                f"Attendance record already exists for {record.instructor_name} on {record.date.isoformat()}. "
                "Please edit the existing record instead."
            )
        record_id = self._attendance.create_record(record)
        return replace(record, record_id=record_id)

    def update_record(self, tenant_id: str, record_id: int, data: Dict[str, Any]) -> InstructorAttendance:
        existing = self._attendance.get_record(tenant_id, record_id)
        if not existing:
            raise NotFoundError("Attendance record not found")

        merged = existing.to_dict()
        merged.update({k: v for k, v in data.items() if k != "id"})
        updated = self._build(tenant_id, merged, record_id=existing.record_id)

        other = self._attendance.find_for_day(tenant_id, updated.instructor_id, updated.date)
        if other and other.record_id != existing.record_id:
            raise ConflictError(
                f"Attendance record already exists for {updated.instructor_name} on {updated.date.isoformat()}. "
                "Please edit the existing record instead."
            )
        self._attendance.update_record(updated)
        return updated

    def delete_record(self, tenant_id: str, record_id: int) -> None:
        if not self._attendance.delete_record(tenant_id, record_id):
            raise NotFoundError("Attendance record not found")

    # Drafts
    def list_drafts(self, tenant_id: str) -> Sequence[AttendanceDraft]:
        return self._attendance.list_drafts(tenant_id)

    def save_draft(self, tenant_id: str, data: Dict[str, Any], draft_id: int = 0) -> AttendanceDraft:
        if draft_id and not self._attendance.get_draft(tenant_id, draft_id):
            raise NotFoundError("Draft not found")
        raw_date = _opt_text(data.get("date"))
        raw_status = _opt_text(data.get("status"))
        draft = AttendanceDraft(
            draft_id=int(draft_id or 0),
            tenant_id=tenant_id,
            instructor_id=_opt_text(data.get("instructorId")),
            instructor_name=_opt_text(data.get("instructorName")),
            date=_require_date(raw_date) if raw_date else None,
            status=normalize_status(raw_status).value if raw_status else None,
            start_time=_opt_time(data.get("startTime"), "startTime"),
            end_time=_opt_time(data.get("endTime"), "endTime"),
            cohort_instructor=_opt_text(data.get("cohortInstructor")),
            cohort_timing=_opt_text(data.get("cohortTiming")),
            notes=_opt_text(data.get("notes")),
        )
        saved_id = self._attendance.save_draft(draft)
        return replace(draft, draft_id=saved_id)

    def delete_draft(self, tenant_id: str, draft_id: int) -> None:
        if not self._attendance.delete_draft(tenant_id, draft_id):
            raise NotFoundError("Draft not found")

    def convert_draft(self, tenant_id: str, draft_id: int) -> InstructorAttendance:
        draft = self._attendance.get_draft(tenant_id, draft_id)
        if not draft:
            raise NotFoundError("Draft not found")
        record = self.create_record(tenant_id, draft.as_payload())
        self._attendance.delete_draft(tenant_id, draft_id)
        logger.info("Converted draft %s into attendance record %s", draft_id, record.record_id)
        return record

    # CSV
    def export_csv(
        self,
        tenant_id: str,
        *,
        ids: Optional[Sequence[int]] = None,
        query: Optional[AttendanceQuery] = None,
        today: Optional[date] = None,
    ):
        """Return (filename, csv text); selected ids keep the order given."""
        today = today or self._today()
        records = self.list_records(tenant_id, query=query, today=today)
        if ids:
            by_id = {r.record_id: r for r in records}
            records = [by_id[i] for i in ids if i in by_id]
        return export_filename(selected=bool(ids), today=today), export_csv(records)

    def import_csv(self, tenant_id: str, *, filename: str, content: bytes) -> ImportStats:
        if not (filename or "").lower().endswith(".csv"):
            raise ValidationError("Only .csv files are supported")
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError("CSV file must be UTF-8 encoded")

        processed = inserted = duplicates = invalid = 0
        errors: List[str] = []
        for line_no, row in enumerate(read_csv(text), start=2):
            processed += 1
            parsed_date = parse_import_date(row.get("date", ""))
            if not row.get("instructorId") or not row.get("instructorName") or parsed_date is None:
                invalid += 1
                errors.append(f"Row {line_no}: instructor ID, name and a valid date are required")
                continue
            row["date"] = parsed_date.isoformat()
            try:
                self.create_record(tenant_id, row)
                inserted += 1
            except ConflictError:
                duplicates += 1
            except ValidationError as e:
                invalid += 1
                errors.append(f"Row {line_no}: {e}")

        logger.info(
            "Imported %s for tenant %s: %d processed, %d inserted, %d duplicates, %d invalid",
            filename, tenant_id, processed, inserted, duplicates, invalid,
        )
        return ImportStats(
            processed=processed,
            inserted=inserted,
            duplicates=duplicates,
            invalid=invalid,
            errors=tuple(errors),
        )
