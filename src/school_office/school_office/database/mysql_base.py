from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from mysql.connector import errors as mysql_errors
from mysql.connector import errorcode

from ..core.exceptions import DuplicateKeyConflict, StoreUnavailable
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors() -> Iterator[None]:
    """Map driver errors onto domain errors.

    Anything that is not a connectivity or duplicate-key problem propagates
    unchanged.
    """

    try:
        yield
    except mysql_errors.IntegrityError as e:
        if e.errno == errorcode.ER_DUP_ENTRY:
            raise DuplicateKeyConflict(str(e.msg or e)) from e
        raise
    except (mysql_errors.InterfaceError, mysql_errors.OperationalError, mysql_errors.PoolError) as e:
        logger.warning("database unavailable: %s", e)
        raise StoreUnavailable("Database is unavailable, please retry") from e


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    with translate_errors():
        conn = conn_factory.connect()
        try:
            cur = conn.cursor(dictionary=dictionary)
            try:
                yield conn, cur
                conn.commit()
            finally:
                cur.close()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def load_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON column.

    mysql-connector returns JSON columns as str or bytes depending on version.
    """

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value) if value else default
    return value


def dump_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def like_pattern(value: str) -> str:
    """Substring pattern for LIKE with the wildcards in `value` escaped."""

    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
