from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from .model import AttendanceDraft, InstructorAttendance


class AttendanceRepository(Protocol):
    def list_records(self, tenant_id: str) -> Sequence[InstructorAttendance]:
        """All rows of the tenant, newest date first."""

        raise NotImplementedError

    def get_record(self, tenant_id: str, record_id: int) -> Optional[InstructorAttendance]:
        raise NotImplementedError

    def find_for_day(self, tenant_id: str, instructor_id: str, day: date) -> Optional[InstructorAttendance]:
        raise NotImplementedError

    def create_record(self, record: InstructorAttendance) -> int:
        raise NotImplementedError

    def update_record(self, record: InstructorAttendance) -> bool:
        raise NotImplementedError

    def delete_record(self, tenant_id: str, record_id: int) -> bool:
        raise NotImplementedError

    def insert_planned(self, tenant_id: str, rows: Iterable[Tuple[str, str, date]], *, notes: str) -> int:
        """Insert planned rows (instructor_id, instructor_name, day); existing days are left untouched."""

        raise NotImplementedError

    # Drafts
    def list_drafts(self, tenant_id: str) -> Sequence[AttendanceDraft]:
        raise NotImplementedError

    def get_draft(self, tenant_id: str, draft_id: int) -> Optional[AttendanceDraft]:
        raise NotImplementedError

    def save_draft(self, draft: AttendanceDraft) -> int:
        """Insert when draft_id is 0, update otherwise; returns the draft id."""

        raise NotImplementedError

    def delete_draft(self, tenant_id: str, draft_id: int) -> bool:
        raise NotImplementedError
