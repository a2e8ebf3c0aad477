from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    tenant_id: str
    instructor_id: str
    instructor_name: str
    start_date: date
    end_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    leave_type: Optional[str] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    admin_note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.request_id,
            "instructorId": self.instructor_id,
            "instructorName": self.instructor_name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "leaveType": self.leave_type,
            "reason": self.reason,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "decidedBy": self.decided_by,
            "decidedAt": self.decided_at.isoformat() if self.decided_at else None,
            "adminNote": self.admin_note,
        }
