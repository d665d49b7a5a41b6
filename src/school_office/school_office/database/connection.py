from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "school_office")),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )

    def connect_kwargs(self, *, with_database: bool = True) -> dict:
        kwargs = asdict(self)
        if not with_database:
            kwargs.pop("database")
        return kwargs


class DatabaseConnection:
    """Process-wide connection factory.

    Every repository call opens its own short-lived connection, so nothing is
    shared between requests or between web workers.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None or cls._instance.config != config:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        return mysql.connector.connect(**self._config.connect_kwargs())
