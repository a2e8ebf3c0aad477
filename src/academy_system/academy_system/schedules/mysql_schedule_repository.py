from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Cancellation, Reassignment, Reschedule, ScheduleEvent
from .repository import ScheduleRepository


def _session_filter(tenant_id: str, session_id: Optional[str]):
    clauses = ["tenant_id=%s"]
    params: list[object] = [tenant_id]
    if session_id:
        clauses.append("session_id=%s")
        params.append(session_id)
    return " AND ".join(clauses), params


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_sessions(self, tenant_id: str) -> Sequence[ScheduleEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT payload FROM schedules WHERE tenant_id=%s ORDER BY session_date, session_id",
                (tenant_id,),
            )
            return [ScheduleEvent.from_dict(load_json(r["payload"], {})) for r in fetchall(cur)]

    def get_session(self, tenant_id: str, session_id: str) -> Optional[ScheduleEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT payload FROM schedules WHERE tenant_id=%s AND session_id=%s",
                (tenant_id, session_id),
            )
            r = fetchone(cur)
            return ScheduleEvent.from_dict(load_json(r["payload"], {})) if r else None

    def upsert_sessions(self, tenant_id: str, events: Iterable[ScheduleEvent]) -> int:
        rows = [
            (tenant_id, e.session_id, dump_json(e.to_dict()), e.date, e.instructor_id, e.status.value)
            for e in events
        ]
        if not rows:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO schedules(tenant_id, session_id, payload, session_date, instructor_id, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    payload=VALUES(payload), session_date=VALUES(session_date),
                    instructor_id=VALUES(instructor_id), status=VALUES(status)
                """,
                rows,
            )
        return len(rows)

    def delete_session(self, tenant_id: str, session_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE tenant_id=%s AND session_id=%s", (tenant_id, session_id))
            return cur.rowcount > 0

    def list_reschedules(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Reschedule]:
        where, params = _session_filter(tenant_id, session_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, cohort_id, course_id, instructor, original_date, original_start_time,
                       original_end_time, new_date, new_start_time, new_end_time, reason,
                       rescheduled_by, rescheduled_at
                FROM session_reschedules
                WHERE {where}
                ORDER BY rescheduled_at DESC
                """,
                tuple(params),
            )
            return [
                Reschedule(
                    session_id=r["session_id"],
                    cohort_id=r.get("cohort_id"),
                    course_id=r.get("course_id"),
                    instructor=r.get("instructor"),
                    original_date=r["original_date"],
                    original_start_time=r.get("original_start_time"),
                    original_end_time=r.get("original_end_time"),
                    new_date=r["new_date"],
                    new_start_time=r["new_start_time"],
                    new_end_time=r["new_end_time"],
                    reason=r["reason"],
                    rescheduled_by=r["rescheduled_by"],
                    rescheduled_at=r["rescheduled_at"],
                )
                for r in fetchall(cur)
            ]

    def list_cancellations(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Cancellation]:
        where, params = _session_filter(tenant_id, session_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, cohort_id, course_id, session_date, reason, cancelled_by, cancelled_at
                FROM session_cancellations
                WHERE {where}
                ORDER BY cancelled_at DESC
                """,
                tuple(params),
            )
            return [
                Cancellation(
                    session_id=r["session_id"],
                    cohort_id=r.get("cohort_id"),
                    course_id=r.get("course_id"),
                    session_date=r.get("session_date"),
                    reason=r["reason"],
                    cancelled_by=r["cancelled_by"],
                    cancelled_at=r["cancelled_at"],
                )
                for r in fetchall(cur)
            ]

    def list_reassignments(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Reassignment]:
        where, params = _session_filter(tenant_id, session_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, cohort_id, course_id, session_date, original_instructor,
                       original_instructor_id, new_instructor, new_instructor_id, reason,
                       reassigned_by, reassigned_at
                FROM instructor_reassignments
                WHERE {where}
                ORDER BY reassigned_at DESC
                """,
                tuple(params),
            )
            return [
                Reassignment(
                    session_id=r["session_id"],
                    cohort_id=r.get("cohort_id"),
                    course_id=r.get("course_id"),
                    session_date=r.get("session_date"),
                    original_instructor=r.get("original_instructor"),
                    original_instructor_id=r.get("original_instructor_id"),
                    new_instructor=r["new_instructor"],
                    new_instructor_id=r["new_instructor_id"],
                    reason=r["reason"],
                    reassigned_by=r["reassigned_by"],
                    reassigned_at=r["reassigned_at"],
                )
                for r in fetchall(cur)
            ]

    def add_reschedule(self, tenant_id: str, record: Reschedule) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO session_reschedules(
                    tenant_id, session_id, cohort_id, course_id, instructor, original_date,
                    original_start_time, original_end_time, new_date, new_start_time, new_end_time,
                    reason, rescheduled_by, rescheduled_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    tenant_id,
                    record.session_id,
                    record.cohort_id,
                    record.course_id,
                    record.instructor,
                    record.original_date,
                    record.original_start_time,
                    record.original_end_time,
                    record.new_date,
                    record.new_start_time,
                    record.new_end_time,
                    record.reason,
                    record.rescheduled_by,
                    record.rescheduled_at,
                ),
            )
            return int(cur.lastrowid)

    def add_cancellation(self, tenant_id: str, record: Cancellation) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO session_cancellations(
                    tenant_id, session_id, cohort_id, course_id, session_date, reason, cancelled_by, cancelled_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    tenant_id,
                    record.session_id,
                    record.cohort_id,
                    record.course_id,
                    record.session_date,
                    record.reason,
                    record.cancelled_by,
                    record.cancelled_at,
                ),
            )
            return int(cur.lastrowid)

    def add_reassignment(self, tenant_id: str, record: Reassignment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO instructor_reassignments(
                    tenant_id, session_id, cohort_id, course_id, session_date, original_instructor,
                    original_instructor_id, new_instructor, new_instructor_id, reason, reassigned_by, reassigned_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    tenant_id,
                    record.session_id,
                    record.cohort_id,
                    record.course_id,
                    record.session_date,
                    record.original_instructor,
                    record.original_instructor_id,
                    record.new_instructor,
                    record.new_instructor_id,
                    record.reason,
                    record.reassigned_by,
                    record.reassigned_at,
                ),
            )
            return int(cur.lastrowid)
