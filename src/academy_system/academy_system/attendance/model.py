from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import InstructorAttendanceStatus


@dataclass(frozen=True)
class InstructorAttendance:
    """One instructor's attendance on one day (unique per tenant/instructor/date)."""

    record_id: int
    tenant_id: str
    instructor_id: str
    instructor_name: str
    date: date
    status: InstructorAttendanceStatus
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    cohort_instructor: Optional[str] = None
    cohort_timing: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "instructorId": self.instructor_id,
            "instructorName": self.instructor_name,
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status.value,
            "cohortInstructor": self.cohort_instructor,
            "cohortTiming": self.cohort_timing,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceDraft:
    """A partially filled record kept until it is converted or discarded."""

    draft_id: int
    tenant_id: str
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None
    date: Optional[date] = None
    status: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    cohort_instructor: Optional[str] = None
    cohort_timing: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.draft_id,
            "instructorId": self.instructor_id,
            "instructorName": self.instructor_name,
            "date": self.date.isoformat() if self.date else None,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status,
            "cohortInstructor": self.cohort_instructor,
            "cohortTiming": self.cohort_timing,
            "notes": self.notes,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def as_payload(self) -> Dict[str, Any]:
        """Shape accepted by AttendanceService.create_record."""
        data = self.to_dict()
        data.pop("id")
        data.pop("updatedAt")
        return data


@dataclass(frozen=True)
class ImportStats:
    processed: int = 0
    inserted: int = 0
    duplicates: int = 0
    invalid: int = 0
    errors: tuple = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processed": self.processed,
            "inserted": self.inserted,
            "duplicates": self.duplicates,
            "invalid": self.invalid,
            "errors": list(self.errors),
        }
