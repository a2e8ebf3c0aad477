from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence, Tuple

from ..core.enums import InstructorAttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, hhmm_or_none
from .model import AttendanceDraft, InstructorAttendance
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    record_id, tenant_id, instructor_id, instructor_name, attendance_date, start_time, end_time,
    status, cohort_instructor, cohort_timing, notes
"""
_DRAFT_COLUMNS = """
    draft_id, tenant_id, instructor_id, instructor_name, attendance_date, start_time, end_time,
    status, cohort_instructor, cohort_timing, notes, updated_at
"""


def _to_record(r: dict) -> InstructorAttendance:
    return InstructorAttendance(
        record_id=int(r["record_id"]),
        tenant_id=r["tenant_id"],
        instructor_id=r["instructor_id"],
        instructor_name=r["instructor_name"],
        date=r["attendance_date"],
        status=InstructorAttendanceStatus(r["status"]),
        start_time=hhmm_or_none(r.get("start_time")),
        end_time=hhmm_or_none(r.get("end_time")),
        cohort_instructor=r.get("cohort_instructor"),
        cohort_timing=r.get("cohort_timing"),
        notes=r.get("notes"),
    )


def _to_draft(r: dict) -> AttendanceDraft:
    return AttendanceDraft(
        draft_id=int(r["draft_id"]),
        tenant_id=r["tenant_id"],
        instructor_id=r.get("instructor_id"),
        instructor_name=r.get("instructor_name"),
        date=r.get("attendance_date"),
        status=r.get("status"),
        start_time=hhmm_or_none(r.get("start_time")),
        end_time=hhmm_or_none(r.get("end_time")),
        cohort_instructor=r.get("cohort_instructor"),
        cohort_timing=r.get("cohort_timing"),
        notes=r.get("notes"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_records(self, tenant_id: str) -> Sequence[InstructorAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM instructor_attendance
                WHERE tenant_id=%s
                ORDER BY attendance_date DESC, record_id DESC
                """,
                (tenant_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_record(self, tenant_id: str, record_id: int) -> Optional[InstructorAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM instructor_attendance WHERE tenant_id=%s AND record_id=%s",
                (tenant_id, int(record_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_for_day(self, tenant_id: str, instructor_id: str, day: date) -> Optional[InstructorAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM instructor_attendance
                WHERE tenant_id=%s AND instructor_id=%s AND attendance_date=%s
                """,
                (tenant_id, instructor_id, day),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_record(self, record: InstructorAttendance) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO instructor_attendance(
                    tenant_id, instructor_id, instructor_name, attendance_date, start_time, end_time,
                    status, cohort_instructor, cohort_timing, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.tenant_id,
                    record.instructor_id,
                    record.instructor_name,
                    record.date,
                    record.start_time,
                    record.end_time,
                    record.status.value,
                    record.cohort_instructor,
                    record.cohort_timing,
                    record.notes,
                ),
            )
            return int(cur.lastrowid)

    def update_record(self, record: InstructorAttendance) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE instructor_attendance
                SET instructor_id=%s, instructor_name=%s, attendance_date=%s, start_time=%s, end_time=%s,
                    status=%s, cohort_instructor=%s, cohort_timing=%s, notes=%s
                WHERE tenant_id=%s AND record_id=%s
                """,
                (
                    record.instructor_id,
                    record.instructor_name,
                    record.date,
                    record.start_time,
                    record.end_time,
                    record.status.value,
                    record.cohort_instructor,
                    record.cohort_timing,
                    record.notes,
                    record.tenant_id,
                    int(record.record_id),
                ),
            )
            return cur.rowcount > 0

    def delete_record(self, tenant_id: str, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM instructor_attendance WHERE tenant_id=%s AND record_id=%s",
                (tenant_id, int(record_id)),
            )
            return cur.rowcount > 0

    def insert_planned(self, tenant_id: str, rows: Iterable[Tuple[str, str, date]], *, notes: str) -> int:
        params = [
            (tenant_id, instructor_id, name, day, InstructorAttendanceStatus.PLANNED.value, notes)
            for instructor_id, name, day in rows
        ]
        if not params:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE leaves rows already present for that instructor/day untouched.
            cur.executemany(
                """
                INSERT IGNORE INTO instructor_attendance(
                    tenant_id, instructor_id, instructor_name, attendance_date, status, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                params,
            )
            return max(int(cur.rowcount or 0), 0)

    def list_drafts(self, tenant_id: str) -> Sequence[AttendanceDraft]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DRAFT_COLUMNS}
                FROM instructor_attendance_drafts
                WHERE tenant_id=%s
                ORDER BY updated_at DESC, draft_id DESC
                """,
                (tenant_id,),
            )
            return [_to_draft(r) for r in fetchall(cur)]

    def get_draft(self, tenant_id: str, draft_id: int) -> Optional[AttendanceDraft]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_DRAFT_COLUMNS} FROM instructor_attendance_drafts WHERE tenant_id=%s AND draft_id=%s",
                (tenant_id, int(draft_id)),
            )
            r = fetchone(cur)
            return _to_draft(r) if r else None

    def save_draft(self, draft: AttendanceDraft) -> int:
        values = (
            draft.instructor_id,
            draft.instructor_name,
            draft.date,
            draft.start_time,
            draft.end_time,
            draft.status,
            draft.cohort_instructor,
            draft.cohort_timing,
            draft.notes,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if draft.draft_id:
                cur.execute(
                    """
                    UPDATE instructor_attendance_drafts
                    SET instructor_id=%s, instructor_name=%s, attendance_date=%s, start_time=%s, end_time=%s,
                        status=%s, cohort_instructor=%s, cohort_timing=%s, notes=%s
                    WHERE tenant_id=%s AND draft_id=%s
                    """,
                    values + (draft.tenant_id, int(draft.draft_id)),
                )
                return int(draft.draft_id)

            cur.execute(
                """
                INSERT INTO instructor_attendance_drafts(
                    instructor_id, instructor_name, attendance_date, start_time, end_time,
                    status, cohort_instructor, cohort_timing, notes, tenant_id
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                values + (draft.tenant_id,),
            )
            return int(cur.lastrowid)

    def delete_draft(self, tenant_id: str, draft_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM instructor_attendance_drafts WHERE tenant_id=%s AND draft_id=%s",
                (tenant_id, int(draft_id)),
            )
            return cur.rowcount > 0
