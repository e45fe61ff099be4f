from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import AlreadyExistsError, DomainError, InvalidReferenceError, StorageError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_FOREIGN_KEY_ERRORS = {
    errorcode.ER_NO_REFERENCED_ROW,
    errorcode.ER_NO_REFERENCED_ROW_2,
    errorcode.ER_ROW_IS_REFERENCED,
    errorcode.ER_ROW_IS_REFERENCED_2,
}


def translate_mysql_error(exc: mysql.connector.Error) -> DomainError:
    """Map a driver error onto the domain taxonomy.

    Duplicate keys and foreign-key failures are recognizable constraint violations;
    everything else is a generic storage failure.
    """
    errno = getattr(exc, "errno", None)
    if errno == errorcode.ER_DUP_ENTRY:
        return AlreadyExistsError("Record already exists")
    if errno in _FOREIGN_KEY_ERRORS:
        return InvalidReferenceError("Referenced record does not exist")
    return StorageError("Storage operation failed")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction.

    Commits when the block exits cleanly; any exception rolls back every statement
    issued inside the block before propagating.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Database connection failed (errno=%s): %s", getattr(exc, "errno", None), exc)
        raise StorageError("Database unavailable") from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.warning("Transaction rolled back (errno=%s): %s", getattr(exc, "errno", None), exc)
        raise translate_mysql_error(exc) from exc
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


def placeholders(count: int) -> str:
    """'%s,%s,...' for IN (...) clauses."""
    return ",".join(["%s"] * int(count))
