from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, hhmm_or_none
from ..schedules.recurrence import parse_days_of_week
from .model import Cohort, Course
from .repository import CourseRepository


def _to_course(r: dict) -> Course:
    return Course(
        course_id=r["course_id"],
        tenant_id=r["tenant_id"],
        name=r["name"],
        status=r.get("status") or "Active",
        instructor_id=r.get("instructor_id"),
        instructor_name=r.get("instructor_name"),
        category=r.get("category"),
        start_date=r.get("start_date"),
        end_date=r.get("end_date"),
    )


def _to_cohort(r: dict) -> Cohort:
    return Cohort(
        cohort_id=r["cohort_id"],
        tenant_id=r["tenant_id"],
        course_id=r["course_id"],
        name=r["name"],
        status=r.get("status") or "Active",
        instructor_id=r.get("instructor_id"),
        instructor_name=r.get("instructor_name"),
        days_of_week=parse_days_of_week(r.get("days_of_week")),
        start_time=hhmm_or_none(r.get("start_time")),
        end_time=hhmm_or_none(r.get("end_time")),
        max_students=r.get("max_students"),
        current_students=int(r.get("current_students") or 0),
        location=r.get("location"),
        session_type=r.get("session_type"),
        total_sessions=r.get("total_sessions"),
        notes=r.get("notes"),
    )


_COURSE_COLUMNS = "course_id, tenant_id, name, status, instructor_id, instructor_name, category, start_date, end_date"
_COHORT_COLUMNS = """
    cohort_id, tenant_id, course_id, name, status, instructor_id, instructor_name, days_of_week,
    start_time, end_time, max_students, current_students, location, session_type, total_sessions, notes
"""


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_courses(self, tenant_id: str) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COURSE_COLUMNS} FROM courses WHERE tenant_id=%s ORDER BY course_id",
                (tenant_id,),
            )
            return [_to_course(r) for r in fetchall(cur)]

    def get_course(self, tenant_id: str, course_id: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COURSE_COLUMNS} FROM courses WHERE tenant_id=%s AND course_id=%s",
                (tenant_id, course_id),
            )
            r = fetchone(cur)
            return _to_course(r) if r else None

    def save_course(self, course: Course) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(course_id, tenant_id, name, status, instructor_id, instructor_name,
                                    category, start_date, end_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), status=VALUES(status), instructor_id=VALUES(instructor_id),
                    instructor_name=VALUES(instructor_name), category=VALUES(category),
                    start_date=VALUES(start_date), end_date=VALUES(end_date)
                """,
                (
                    course.course_id,
                    course.tenant_id,
                    course.name,
                    course.status,
                    course.instructor_id,
                    course.instructor_name,
                    course.category,
                    course.start_date,
                    course.end_date,
                ),
            )

    def delete_course(self, tenant_id: str, course_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE tenant_id=%s AND course_id=%s", (tenant_id, course_id))
            return cur.rowcount > 0

    def list_cohorts(self, tenant_id: str, course_id: Optional[str] = None) -> Sequence[Cohort]:
        clauses = ["tenant_id=%s"]
        params: list[object] = [tenant_id]
        if course_id:
            clauses.append("course_id=%s")
            params.append(course_id)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COHORT_COLUMNS} FROM cohorts WHERE {where} ORDER BY cohort_id", tuple(params))
            return [_to_cohort(r) for r in fetchall(cur)]

    def get_cohort(self, tenant_id: str, cohort_id: str) -> Optional[Cohort]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COHORT_COLUMNS} FROM cohorts WHERE tenant_id=%s AND cohort_id=%s",
                (tenant_id, cohort_id),
            )
            r = fetchone(cur)
            return _to_cohort(r) if r else None

    def save_cohort(self, cohort: Cohort) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO cohorts(cohort_id, tenant_id, course_id, name, status, instructor_id, instructor_name,
                                    days_of_week, start_time, end_time, max_students, current_students,
                                    location, session_type, total_sessions, notes)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    course_id=VALUES(course_id), name=VALUES(name), status=VALUES(status),
                    instructor_id=VALUES(instructor_id), instructor_name=VALUES(instructor_name),
                    days_of_week=VALUES(days_of_week), start_time=VALUES(start_time), end_time=VALUES(end_time),
                    max_students=VALUES(max_students), current_students=VALUES(current_students),
                    location=VALUES(location), session_type=VALUES(session_type),
                    total_sessions=VALUES(total_sessions), notes=VALUES(notes)
                """,
                (
                    cohort.cohort_id,
                    cohort.tenant_id,
                    cohort.course_id,
                    cohort.name,
                    cohort.status,
                    cohort.instructor_id,
                    cohort.instructor_name,
                    " ".join(str(d) for d in cohort.days_of_week),
                    cohort.start_time,
                    cohort.end_time,
                    cohort.max_students,
                    cohort.current_students,
                    cohort.location,
                    cohort.session_type,
                    cohort.total_sessions,
                    cohort.notes,
                ),
            )

    def delete_cohort(self, tenant_id: str, cohort_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM cohorts WHERE tenant_id=%s AND cohort_id=%s", (tenant_id, cohort_id))
            return cur.rowcount > 0
