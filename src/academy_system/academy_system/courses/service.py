from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import parse_optional_date
from ..common.ids import next_sequential_id
from ..common.validators import require_hhmm, require_non_empty
from ..core.constants import (
    COHORT_ID_PREFIX,
    COURSE_ID_PREFIX,
    DEFAULT_COHORT_CAPACITY,
    DEFAULT_COHORT_DAYS,
    DEFAULT_SESSION_END,
    DEFAULT_SESSION_START,
    ENTITY_ID_DIGITS,
)
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.recurrence import parse_days_of_week
from .model import Cohort, Course
from .repository import CourseRepository

logger = logging.getLogger(__name__)


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _opt_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def _date(value: Any, field_name: str):
    try:
        return parse_optional_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


class CourseService:
    """Courses and their cohorts, scoped to one tenant per call."""

    def __init__(self, courses: CourseRepository):
        self._courses = courses

    def list_courses(self, tenant_id: str) -> Sequence[Course]:
        return self._courses.list_courses(tenant_id)

    def get_course(self, tenant_id: str, course_id: str) -> Course:
        course = self._courses.get_course(tenant_id, course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def create_course(self, tenant_id: str, data: Dict[str, Any]) -> Course:
        name = require_non_empty(data.get("name"), "Course name")
        course_id = _opt_str(data.get("courseId"))
        if course_id:
            if self._courses.get_course(tenant_id, course_id):
                raise ConflictError(f"Course {course_id} already exists")
        else:
            course_id = next_sequential_id(
                COURSE_ID_PREFIX,
                (c.course_id for c in self._courses.list_courses(tenant_id)),
                digits=ENTITY_ID_DIGITS,
            )

        course = Course(
            course_id=course_id,
            tenant_id=tenant_id,
            name=name,
            status=_opt_str(data.get("status")) or "Active",
            instructor_id=_opt_str(data.get("instructorId")),
            instructor_name=_opt_str(data.get("instructor") or data.get("instructorName")),
            category=_opt_str(data.get("category")),
            start_date=_date(data.get("startDate"), "startDate"),
            end_date=_date(data.get("endDate"), "endDate"),
        )
        self._check_dates(course)
        self._courses.save_course(course)
        logger.info("Created course %s for tenant %s", course.course_id, tenant_id)
        return course

    def update_course(self, tenant_id: str, course_id: str, data: Dict[str, Any]) -> Course:
        course = self.get_course(tenant_id, course_id)
        changes: Dict[str, Any] = {}
        if "name" in data:
            changes["name"] = require_non_empty(data.get("name"), "Course name")
        if "status" in data:
            changes["status"] = require_non_empty(data.get("status"), "Status")
        if "instructorId" in data:
            changes["instructor_id"] = _opt_str(data.get("instructorId"))
        if "instructor" in data or "instructorName" in data:
            changes["instructor_name"] = _opt_str(data.get("instructor") or data.get("instructorName"))
        if "category" in data:
            changes["category"] = _opt_str(data.get("category"))
        if "startDate" in data:
            changes["start_date"] = _date(data.get("startDate"), "startDate")
        if "endDate" in data:
            changes["end_date"] = _date(data.get("endDate"), "endDate")

        updated = replace(course, **changes)
        self._check_dates(updated)
        self._courses.save_course(updated)
        return updated

    def delete_course(self, tenant_id: str, course_id: str) -> None:
        if self._courses.list_cohorts(tenant_id, course_id):
            raise ConflictError("Course still has cohorts; delete them first")
        if not self._courses.delete_course(tenant_id, course_id):
            raise NotFoundError("Course not found")

    @staticmethod
    def _check_dates(course: Course) -> None:
        if course.start_date and course.end_date and course.end_date < course.start_date:
            raise ValidationError("End date must be on or after start date")

    # Cohorts
    def list_cohorts(self, tenant_id: str, course_id: Optional[str] = None) -> Sequence[Cohort]:
        return self._courses.list_cohorts(tenant_id, course_id)

    def get_cohort(self, tenant_id: str, cohort_id: str) -> Cohort:
        cohort = self._courses.get_cohort(tenant_id, cohort_id)
        if not cohort:
            raise NotFoundError("Cohort not found")
        return cohort

    def create_cohort(self, tenant_id: str, data: Dict[str, Any]) -> Cohort:
        course_id = require_non_empty(data.get("courseId"), "courseId")
        course = self._courses.get_course(tenant_id, course_id)
        if not course:
            raise ValidationError("Referenced course not found")

        cohort_id = _opt_str(data.get("cohortId"))
        if cohort_id:
            if self._courses.get_cohort(tenant_id, cohort_id):
                raise ConflictError(f"Cohort ID {cohort_id} already exists")
        else:
            cohort_id = next_sequential_id(
                COHORT_ID_PREFIX,
                (c.cohort_id for c in self._courses.list_cohorts(tenant_id)),
                digits=ENTITY_ID_DIGITS,
            )

        days = parse_days_of_week(data.get("daysOfWeek")) if data.get("daysOfWeek") is not None else DEFAULT_COHORT_DAYS
        start_time = require_hhmm(data.get("startTime") or DEFAULT_SESSION_START, "startTime")
        end_time = require_hhmm(data.get("endTime") or DEFAULT_SESSION_END, "endTime")
        if end_time <= start_time:
            raise ValidationError("End time must be after start time")

        capacity = _opt_int(data.get("capacity", data.get("maxStudents")), "capacity")
        cohort = Cohort(
            cohort_id=cohort_id,
            tenant_id=tenant_id,
            course_id=course.course_id,
            name=require_non_empty(data.get("name"), "Cohort name"),
            status=_opt_str(data.get("status")) or "Active",
            instructor_id=_opt_str(data.get("instructorId")) or course.instructor_id,
            instructor_name=_opt_str(data.get("instructorName")) or course.instructor_name,
            days_of_week=tuple(days),
            start_time=start_time,
            end_time=end_time,
            max_students=capacity if capacity is not None else DEFAULT_COHORT_CAPACITY,
            current_students=_opt_int(data.get("currentStudents"), "currentStudents") or 0,
            location=_opt_str(data.get("location")),
            session_type=_opt_str(data.get("sessionType")),
            total_sessions=_opt_int(data.get("totalSessions"), "totalSessions"),
            notes=_opt_str(data.get("notes")),
        )
        self._courses.save_cohort(cohort)
        logger.info("Created cohort %s (course %s) for tenant %s", cohort.cohort_id, course.course_id, tenant_id)
        return cohort

    def update_cohort(self, tenant_id: str, cohort_id: str, data: Dict[str, Any]) -> Cohort:
        cohort = self.get_cohort(tenant_id, cohort_id)
        changes: Dict[str, Any] = {}
        if "courseId" in data:
            course_id = require_non_empty(data.get("courseId"), "courseId")
            if not self._courses.get_course(tenant_id, course_id):
                raise ValidationError("Referenced course not found")
            changes["course_id"] = course_id
        if "name" in data:
            changes["name"] = require_non_empty(data.get("name"), "Cohort name")
        if "status" in data:
            changes["status"] = require_non_empty(data.get("status"), "Status")
        if "instructorId" in data:
            changes["instructor_id"] = _opt_str(data.get("instructorId"))
        if "instructorName" in data:
            changes["instructor_name"] = _opt_str(data.get("instructorName"))
        if "daysOfWeek" in data:
            changes["days_of_week"] = tuple(parse_days_of_week(data.get("daysOfWeek")))
        if "startTime" in data:
            changes["start_time"] = require_hhmm(data.get("startTime"), "startTime")
        if "endTime" in data:
            changes["end_time"] = require_hhmm(data.get("endTime"), "endTime")
        if "capacity" in data or "maxStudents" in data:
            changes["max_students"] = _opt_int(data.get("capacity", data.get("maxStudents")), "capacity")
        if "currentStudents" in data:
            changes["current_students"] = _opt_int(data.get("currentStudents"), "currentStudents") or 0
        for key, attr in (("location", "location"), ("sessionType", "session_type"), ("notes", "notes")):
            if key in data:
                changes[attr] = _opt_str(data.get(key))
        if "totalSessions" in data:
            changes["total_sessions"] = _opt_int(data.get("totalSessions"), "totalSessions")

        updated = replace(cohort, **changes)
        if updated.start_time and updated.end_time and updated.end_time <= updated.start_time:
            raise ValidationError("End time must be after start time")
        self._courses.save_cohort(updated)
        return updated

    def delete_cohort(self, tenant_id: str, cohort_id: str) -> None:
        if not self._courses.delete_cohort(tenant_id, cohort_id):
            raise NotFoundError("Cohort not found")
