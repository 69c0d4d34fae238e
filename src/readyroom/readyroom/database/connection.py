from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


def _optional_int(value) -> Optional[int]:
    if value in (None, ""):
        return None
    return int(value) or None


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10
    # Server-side cap on each SELECT; None leaves the server default.
    max_execution_ms: Optional[int] = None

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "readyroom")),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
            max_execution_ms=_optional_int(db_config.get("max_execution_ms")),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: We create short-lived connections per operation, so per-pilot and
    per-event lookups running on worker threads never share a connection.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance._config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connect_timeout),
        )
        if self._config.max_execution_ms:
            cur = conn.cursor()
            try:
                cur.execute("SET SESSION MAX_EXECUTION_TIME=%s", (int(self._config.max_execution_ms),))
            finally:
                cur.close()
        return conn
