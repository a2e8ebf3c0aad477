from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

_DATABASE_DIRECTIVE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")

DEMO_ACADEMY_ID = "AC000001"

# (email, full name, password, role, user code)
DEMO_ACCOUNTS = (
    ("admin@demo-academy.test", "Demo Admin", "admin123", "admin", "AD000001"),
    ("staff@demo-academy.test", "Demo Staff", "staff123", "staff", "AD000002"),
)


@contextmanager
def _session(db_config: dict, *, with_database: bool = True) -> Iterator:
    # Scripts may target a database other than the app-wide singleton's.
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect(with_database=with_database)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def split_statements(script: str) -> Iterator[str]:
    """Yield the statements of a SQL script in order.

    ``--`` comment lines and database directives are dropped so the script
    runs against whichever database the config names. Semicolons inside
    quoted literals do not end a statement.
    """
    script = _LINE_COMMENT.sub("", _DATABASE_DIRECTIVE.sub("", script))
    start = 0
    quote = None
    i = 0
    while i < len(script):
        ch = script[i]
        if ch == "\\" and quote:
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            statement = script[start:i].strip()
            if statement:
                yield statement
            start = i + 1
        i += 1
    rest = script[start:].strip()
    if rest:
        yield rest


def _run_script(db_config: dict, path: Union[str, Path]) -> int:
    count = 0
    with _session(db_config) as conn:
        cur = conn.cursor()
        for statement in split_statements(Path(path).read_text(encoding="utf-8")):
            cur.execute(statement)
            count += 1
    return count


def apply_schema(db_config: dict, *, schema_path: Union[str, Path]) -> None:
    database = DBConfig.from_dict(db_config).database
    with _session(db_config, with_database=False) as conn:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
    count = _run_script(db_config, schema_path)
    logger.info("Schema %s applied to %s (%d statements)", schema_path, database, count)


def apply_seed_sql(db_config: dict, *, seed_path: Union[str, Path]) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Seed %s applied (%d statements)", seed_path, count)


def ensure_demo_accounts(db_config: dict, *, academy_id: str = DEMO_ACADEMY_ID) -> None:
    """Make the demo logins exist, verified and bound to the seeded academy."""
    with _session(db_config) as conn:
        cur = conn.cursor()
        for email, full_name, password, role, user_code in DEMO_ACCOUNTS:
            cur.execute(
                """
                INSERT INTO users (email, full_name, password_hash, role, verified, registration_complete,
                                   user_code, academy_id, tenant_id)
                VALUES (%s, %s, %s, %s, 1, 1, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    full_name = VALUES(full_name),
                    password_hash = VALUES(password_hash),
                    role = VALUES(role),
                    verified = 1,
                    registration_complete = 1,
                    user_code = VALUES(user_code),
                    academy_id = VALUES(academy_id),
                    tenant_id = VALUES(tenant_id)
                """,
                (email, full_name, generate_password_hash(password), role, user_code, academy_id, academy_id),
            )
    logger.info("Demo accounts ready for academy %s", academy_id)


def list_tables(db_config: dict) -> list[str]:
    with _session(db_config) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
