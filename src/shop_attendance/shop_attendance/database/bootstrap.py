"""Schema and demo-data setup, used by ``create_app`` and ``scripts/init_db.py``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

DEMO_SHOP_NAME = "Demo Shop"
DEMO_OWNER_PIN = "482915"
DEMO_STAFF = (("Alex", "Morgan", "1234", 11.44), ("Sam", "Taylor", "5678", 12.00))


def _factory(db_config: dict) -> DatabaseConnection:
    return DatabaseConnection(DBConfig.from_settings(db_config))


def _prepare_schema_sql(sql: str) -> str:
    # CREATE DATABASE / USE lines are dropped so the configured name wins
    lines = []
    for line in sql.splitlines():
        stripped = line.strip()
        if stripped.startswith("--"):
            continue
        if re.match(r"(?i)^(CREATE\s+DATABASE|USE)\b", stripped):
            continue
        lines.append(line)
    return "\n".join(lines)


def iter_statements(sql: str) -> Iterator[str]:
    """Split a script on ``;`` outside quoted strings."""

    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    factory = _factory(db_config)
    name = factory.config.database

    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()

    sql = _prepare_schema_sql(Path(schema_path).read_text(encoding="utf-8"))
    conn = factory.connect()
    try:
        cur = conn.cursor()
        for stmt in iter_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s to database %s", schema_path, name)


def ensure_demo_shop(db_config: dict) -> None:
    """Seed one shop with two staff members for local development."""

    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor(dictionary=True)
        cur.execute("SELECT shop_id FROM shops WHERE shop_name=%s", (DEMO_SHOP_NAME,))
        if cur.fetchone():
            return

        cur.execute(
            """
            INSERT INTO shops (shop_name, latitude, longitude, radius_meters, tag_id, tag_active,
                               tag_enabled, code_enabled, require_gps, owner_pin_hash)
            VALUES (%s, %s, %s, %s, %s, 1, 1, 1, 0, %s)
            """,
            (DEMO_SHOP_NAME, 53.4084, -2.9916, 50, "DEMO-TAG-0001", generate_password_hash(DEMO_OWNER_PIN)),
        )
        shop_id = int(cur.lastrowid)
        cur.executemany(
            "INSERT INTO employees (shop_id, first_name, last_name, pin, hourly_rate) VALUES (%s, %s, %s, %s, %s)",
            [(shop_id, first, last, pin, rate) for first, last, pin, rate in DEMO_STAFF],
        )
        conn.commit()
        logger.info("Seeded %s (shop_id=%s, %d staff)", DEMO_SHOP_NAME, shop_id, len(DEMO_STAFF))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _factory(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
