from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = ""
    database: str = "academy_db"

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        # Settings modules may hand over strings (env vars) or None for blanks.
        defaults = cls()
        return cls(
            host=str(db_config.get("host") or defaults.host),
            port=int(db_config.get("port") or defaults.port),
            user=str(db_config.get("user") or defaults.user),
            password=str(db_config.get("password") or ""),
            database=str(db_config.get("database") or defaults.database),
        )


class DatabaseConnection:
    """Connection factory shared by every MySQL repository.

    Nothing is pooled: each ``connect()`` opens a fresh connection that the
    caller closes when its unit of work ends.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        params = asdict(self._config)
        if not with_database:
            params.pop("database")
        return mysql.connector.connect(charset="utf8mb4", **params)
