from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Course:
    course_id: str
    tenant_id: str
    name: str
    status: str = "Active"
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "courseId": self.course_id,
            "name": self.name,
            "status": self.status,
            "instructorId": self.instructor_id,
            "instructor": self.instructor_name,
            "category": self.category,
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
        }


@dataclass(frozen=True)
class Cohort:
    """A recurring group attached to a course.

    days_of_week uses 0 for Sunday through 6 for Saturday.
    """

    cohort_id: str
    tenant_id: str
    course_id: str
    name: str
    status: str = "Active"
    instructor_id: Optional[str] = None
    instructor_name: Optional[str] = None
    days_of_week: Tuple[int, ...] = field(default_factory=tuple)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    max_students: Optional[int] = None
    current_students: int = 0
    location: Optional[str] = None
    session_type: Optional[str] = None
    total_sessions: Optional[int] = None
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cohortId": self.cohort_id,
            "courseId": self.course_id,
            "name": self.name,
            "status": self.status,
            "instructorId": self.instructor_id,
            "instructorName": self.instructor_name,
            "daysOfWeek": list(self.days_of_week),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "capacity": self.max_students,
            "currentStudents": self.current_students,
            "location": self.location,
            "sessionType": self.session_type,
            "totalSessions": self.total_sessions,
            "notes": self.notes,
        }
