from pathlib import Path

from src.shop_attendance.shop_attendance.database.bootstrap import _prepare_schema_sql, iter_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_split_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c;d\");\nSELECT 1"

    assert list(iter_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT 1",
    ]


def test_schema_file_prepares_cleanly():
    sql = _prepare_schema_sql(SCHEMA.read_text(encoding="utf-8"))
    statements = list(iter_statements(sql))

    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    created = {s.split()[5] for s in statements}
    assert {"shops", "employees", "clock_entries", "clock_in_requests", "pin_attempts"} <= created
