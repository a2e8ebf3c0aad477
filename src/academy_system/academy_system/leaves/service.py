from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Instructor leave requests and their approval."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

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
        instructor_id = require_non_empty(instructor_id, "Instructor ID")
        instructor_name = require_non_empty(instructor_name, "Instructor name")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        reason = require_non_empty(reason, "Reason")

        return self._leaves.create_leave(
            tenant_id=tenant_id,
            instructor_id=instructor_id,
            instructor_name=instructor_name,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            leave_type=(leave_type or "").strip() or None,
        )

    def list_leaves(self, tenant_id: str, *, status: Optional[RequestStatus] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_leaves(tenant_id, status=status)

    def approved_leaves(self, tenant_id: str) -> Sequence[LeaveRequest]:
        return self._leaves.list_leaves(tenant_id, status=RequestStatus.APPROVED)

    def approved_between(self, tenant_id: str, start: date, end: date) -> List[LeaveRequest]:
        return [
            leave
            for leave in self.approved_leaves(tenant_id)
            if leave.start_date <= end and leave.end_date >= start
        ]

    def _decide(
        self,
        *,
        tenant_id: str,
        current_role: Role,
        decided_by: str,
        request_id: int,
        status: RequestStatus,
        admin_note: str,
    ) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can decide leave requests")

        leave = self._leaves.get_leave(tenant_id, int(request_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        if leave.status != RequestStatus.PENDING:
            raise ValidationError("Leave request has already been decided")

        ok = self._leaves.decide_leave(
            tenant_id,
            request_id=int(request_id),
            status=status,
            decided_by=decided_by,
            admin_note=(admin_note or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Leave request has already been decided")
        logger.info("Leave %s %s by %s", request_id, status.value, decided_by)

    def approve_leave(self, *, tenant_id: str, current_role: Role, decided_by: str, request_id: int, admin_note: str = "") -> None:
        self._decide(
            tenant_id=tenant_id,
            current_role=current_role,
            decided_by=decided_by,
            request_id=request_id,
            status=RequestStatus.APPROVED,
            admin_note=admin_note,
        )

    def reject_leave(self, *, tenant_id: str, current_role: Role, decided_by: str, request_id: int, admin_note: str = "") -> None:
        self._decide(
            tenant_id=tenant_id,
            current_role=current_role,
            decided_by=decided_by,
            request_id=request_id,
            status=RequestStatus.REJECTED,
            admin_note=admin_note,
        )
