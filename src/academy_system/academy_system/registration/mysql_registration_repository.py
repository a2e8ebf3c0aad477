from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..common.ids import next_sequential_id
from ..core.constants import ACADEMY_ID_PREFIX, CODE_DIGITS, USER_CODE_PREFIX
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import CompletedRegistration, Registration
from .repository import RegistrationRepository

logger = logging.getLogger(__name__)


class MySQLRegistrationRepository(RegistrationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_email(self, user_email: str) -> Optional[Registration]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT academy_id, user_code, tenant_id, user_email, business_info, admin_info, preferences
                FROM registrations
                WHERE user_email=%s
                """,
                (user_email,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Registration(
                academy_id=r["academy_id"],
                user_code=r["user_code"],
                tenant_id=r["tenant_id"],
                user_email=r["user_email"],
                business_info=load_json(r.get("business_info"), {}),
                admin_info=load_json(r.get("admin_info"), {}),
                preferences=load_json(r.get("preferences"), {}),
            )

    def complete_registration(
        self,
        *,
        user_id: int,
        user_email: str,
        full_name: str,
        phone: Optional[str],
        business_info: Dict[str, Any],
        admin_info: Dict[str, Any],
        preferences: Dict[str, Any],
        existing_user_code: Optional[str],
        existing_academy_id: Optional[str],
    ) -> CompletedRegistration:
        with db_cursor(self._conn_factory) as (_, cur):
            user_code = existing_user_code
            if not user_code:
                # Row locks keep two concurrent registrations from taking the same number.
                cur.execute("SELECT user_code FROM users WHERE user_code LIKE %s FOR UPDATE", (f"{USER_CODE_PREFIX}%",))
                user_code = next_sequential_id(
                    USER_CODE_PREFIX, (r["user_code"] for r in fetchall(cur)), digits=CODE_DIGITS
                )

            academy_id = existing_academy_id
            if not academy_id:
                cur.execute(
                    "SELECT academy_id FROM registrations WHERE academy_id LIKE %s FOR UPDATE",
                    (f"{ACADEMY_ID_PREFIX}%",),
                )
                academy_id = next_sequential_id(
                    ACADEMY_ID_PREFIX, (r["academy_id"] for r in fetchall(cur)), digits=CODE_DIGITS
                )

            cur.execute(
                """
                UPDATE users
                SET full_name=%s, phone=%s, user_code=%s, academy_id=%s, tenant_id=%s
                WHERE user_id=%s
                """,
                (full_name, phone, user_code, academy_id, academy_id, int(user_id)),
            )
            cur.execute(
                """
                INSERT INTO registrations(academy_id, user_code, tenant_id, user_email,
                                          business_info, admin_info, preferences)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    user_code=VALUES(user_code),
                    user_email=VALUES(user_email),
                    business_info=VALUES(business_info),
                    admin_info=VALUES(admin_info),
                    preferences=VALUES(preferences)
                """,
                (
                    academy_id,
                    user_code,
                    academy_id,
                    user_email,
                    dump_json(business_info),
                    dump_json(admin_info),
                    dump_json(preferences),
                ),
            )
            cur.execute("UPDATE users SET registration_complete=1 WHERE user_id=%s", (int(user_id),))

        logger.info("Registration complete for %s: academy=%s user=%s", user_email, academy_id, user_code)
        return CompletedRegistration(user_code=user_code, academy_id=academy_id)
