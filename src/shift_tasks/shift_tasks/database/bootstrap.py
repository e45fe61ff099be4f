from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..core.constants import (
    BOOTSTRAP_ADMIN_ID,
    BOOTSTRAP_ADMIN_NAME,
    BOOTSTRAP_ADMIN_POSITION,
    DEFAULT_POSITIONS,
)
from ..core.enums import Role
from .connection import DatabaseConnection
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().with_name("schema.sql")


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    quote: Optional[str] = None
    escape = False

    for ch in _strip_comments(sql):
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif ch in ("'", '"'):
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        elif ch == ";" and quote is None:
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]


class SchemaBootstrapper:
    """Creates tables and seed rows once per process.

    `ensure_schema()` is idempotent: the statements themselves are
    CREATE TABLE IF NOT EXISTS / INSERT IGNORE, and a repeated call on the same
    instance returns without touching the database.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        schema_path: str | Path = DEFAULT_SCHEMA_PATH,
        admin_email: str,
        admin_password: str,
        positions: Sequence[tuple[str, str]] = DEFAULT_POSITIONS,
        create_database: bool = False,
    ):
        self._conn_factory = conn_factory
        self._schema_path = Path(schema_path)
        self._admin_email = admin_email
        self._admin_password = admin_password
        self._positions = tuple(positions)
        self._create_database = create_database
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def ensure_schema(self) -> None:
        if self._ready:
            return

        if self._create_database:
            ensure_database_exists(self._conn_factory)

        sql = self._schema_path.read_text(encoding="utf-8")
        with db_cursor(self._conn_factory) as (_, cur):
            for stmt in iter_sql_statements(sql):
                cur.execute(stmt)

        self._seed_positions()
        self._seed_admin()

        self._ready = True
        logger.info("Schema ready (%d positions seeded)", len(self._positions))

    def _seed_positions(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            for position_id, name in self._positions:
                cur.execute("INSERT IGNORE INTO positions (id, name) VALUES (%s, %s)", (position_id, name))

    def _seed_admin(self) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM users WHERE email=%s", (self._admin_email,))
            if fetchone(cur):
                return

            cur.execute(
                """
                INSERT IGNORE INTO users (id, name, email, password, role)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (
                    BOOTSTRAP_ADMIN_ID,
                    BOOTSTRAP_ADMIN_NAME,
                    self._admin_email,
                    generate_password_hash(self._admin_password),
                    Role.ADMIN.value,
                ),
            )
            if cur.rowcount == 0:
                logger.warning(
                    "Bootstrap admin not created: id %s is taken by another account (wanted %s)",
                    BOOTSTRAP_ADMIN_ID,
                    self._admin_email,
                )
                return
            cur.execute(
                "INSERT IGNORE INTO user_positions (userId, positionId) VALUES (%s, %s)",
                (BOOTSTRAP_ADMIN_ID, BOOTSTRAP_ADMIN_POSITION),
            )
            logger.info("Bootstrap admin account created: %s", self._admin_email)
