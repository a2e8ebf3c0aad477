from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    STAFF = "staff"


class SessionStatus(str, Enum):
    """Derived display status of one calendar session."""

    UPCOMING = "Upcoming"
    ONGOING = "Ongoing"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    PENDING = "Pending"
    RESCHEDULED = "Rescheduled"


class ModificationType(str, Enum):
    RESCHEDULE = "reschedule"
    CANCELLATION = "cancellation"
    REASSIGNMENT = "reassignment"


class SessionType(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


class InstructorAttendanceStatus(str, Enum):
    """Stored status of an instructor attendance row."""

    PRESENT = "present"
    ABSENT = "absent"
    PLANNED = "planned"


class RequestStatus(str, Enum):
    """Approval flow status of leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
