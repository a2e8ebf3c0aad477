from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
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
        raise NotImplementedError

    def get_leave(self, tenant_id: str, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leaves(
        self,
        tenant_id: str,
        *,
        status: Optional[RequestStatus] = None,
        instructor_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide_leave(
        self,
        tenant_id: str,
        *,
        request_id: int,
        status: RequestStatus,
        decided_by: str,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Only PENDING requests change; returns False otherwise."""

        raise NotImplementedError
