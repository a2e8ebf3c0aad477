from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Cohort, Course


class CourseRepository(Protocol):
    def list_courses(self, tenant_id: str) -> Sequence[Course]:
        raise NotImplementedError

    def get_course(self, tenant_id: str, course_id: str) -> Optional[Course]:
        raise NotImplementedError

    def save_course(self, course: Course) -> None:
        """Insert or replace by (tenant_id, course_id)."""

        raise NotImplementedError

    def delete_course(self, tenant_id: str, course_id: str) -> bool:
        raise NotImplementedError

    def list_cohorts(self, tenant_id: str, course_id: Optional[str] = None) -> Sequence[Cohort]:
        raise NotImplementedError

    def get_cohort(self, tenant_id: str, cohort_id: str) -> Optional[Cohort]:
        raise NotImplementedError

    def save_cohort(self, cohort: Cohort) -> None:
        raise NotImplementedError

    def delete_cohort(self, tenant_id: str, cohort_id: str) -> bool:
        raise NotImplementedError
