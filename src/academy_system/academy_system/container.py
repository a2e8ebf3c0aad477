from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_HORIZON_DAYS, MAX_UPLOAD_BYTES
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.service import CourseService
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .registration.mysql_registration_repository import MySQLRegistrationRepository
from .registration.service import RegistrationService
from .registration.storage import UploadStorage
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    registrations_repo: MySQLRegistrationRepository
    courses_repo: MySQLCourseRepository
    schedules_repo: MySQLScheduleRepository
    leaves_repo: MySQLLeaveRepository
    attendance_repo: MySQLAttendanceRepository

    upload_storage: UploadStorage

    auth_service: AuthService
    registration_service: RegistrationService
    course_service: CourseService
    schedule_service: ScheduleService
    leave_service: LeaveService
    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    upload_folder: str = "uploads",
    public_base_url: str = "",
    max_upload_bytes: int = MAX_UPLOAD_BYTES,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    registrations_repo = MySQLRegistrationRepository(conn)
    courses_repo = MySQLCourseRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    upload_storage = UploadStorage(upload_folder, public_base_url=public_base_url, max_bytes=max_upload_bytes)

    return Container(
        conn=conn,
        users_repo=users_repo,
        registrations_repo=registrations_repo,
        courses_repo=courses_repo,
        schedules_repo=schedules_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        upload_storage=upload_storage,
        auth_service=AuthService(users_repo),
        registration_service=RegistrationService(users_repo, registrations_repo),
        course_service=CourseService(courses_repo),
        schedule_service=ScheduleService(courses_repo, schedules_repo, leaves_repo, horizon_days=horizon_days),
        leave_service=LeaveService(leaves_repo),
        attendance_service=AttendanceService(attendance_repo, leaves_repo),
    )
