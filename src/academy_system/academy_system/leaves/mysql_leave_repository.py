from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, tenant_id, instructor_id, instructor_name, start_date, end_date, leave_type,
    reason, status, created_at, decided_by, decided_at, admin_note
"""


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        tenant_id=r["tenant_id"],
        instructor_id=r["instructor_id"],
        instructor_name=r["instructor_name"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_type=r.get("leave_type"),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        decided_by=r.get("decided_by"),
        decided_at=r.get("decided_at"),
        admin_note=r.get("admin_note"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_leave(
        self,
        *,
        tenant_id: str,
        instructor_id: str,
        instructor_name: str,
        start_date: date,
        end_date: date,
        reason: str,
        leave_type: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(tenant_id, instructor_id, instructor_name, start_date, end_date,
                                           leave_type, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    tenant_id,
                    instructor_id,
                    instructor_name,
                    start_date,
                    end_date,
                    leave_type,
                    reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_leave(self, tenant_id: str, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE tenant_id=%s AND request_id=%s",
                (tenant_id, int(request_id)),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_leaves(
        self,
        tenant_id: str,
        *,
        status: Optional[RequestStatus] = None,
        instructor_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["tenant_id=%s"]
        params: list[object] = [tenant_id]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if instructor_id:
            clauses.append("instructor_id=%s")
            params.append(instructor_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leave_requests WHERE {where} ORDER BY start_date DESC, request_id DESC",
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def decide_leave(
        self,
        tenant_id: str,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s, decided_at=NOW(), admin_note=%s
                WHERE tenant_id=%s AND request_id=%s AND status=%s
                """,
                (status.value, decided_by, admin_note, tenant_id, int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount > 0
