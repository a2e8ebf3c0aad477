from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_USER_COLUMNS = """
    user_id, email, full_name, phone, password_hash, role, verified, registration_complete,
    user_code, academy_id, tenant_id, verification_code
"""


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        email=r["email"],
        full_name=r.get("full_name"),
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        verified=bool(r.get("verified")),
        registration_complete=bool(r.get("registration_complete")),
        phone=r.get("phone"),
        user_code=r.get("user_code"),
        academy_id=r.get("academy_id"),
        tenant_id=r.get("tenant_id"),
        verification_code=r.get("verification_code"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            r = fetchone(cur)
            return _to_user(r) if r else None

    def create_user(
        self,
        *,
        email: str,
        full_name: str,
        password_hash: str,
        role: Role,
        verification_code: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, full_name, password_hash, role, verified, verification_code)
                VALUES(%s,%s,%s,%s,0,%s)
                """,
                (email, full_name, password_hash, role.value, verification_code),
            )
            return int(cur.lastrowid)

    def mark_verified(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET verified=1, verification_code=NULL WHERE user_id=%s",
                (int(user_id),),
            )
            return cur.rowcount > 0
