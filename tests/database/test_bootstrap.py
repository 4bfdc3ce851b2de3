from __future__ import annotations

from campus_attendance.database.bootstrap import (
    SCHEMA_PATH,
    SEED_PATH,
    _iter_sql_statements,
    _strip_create_db_and_use,
)


def test_splitter_ignores_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES('a;b'); INSERT INTO t VALUES(\"c;d\");\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES('a;b')",
        'INSERT INTO t VALUES("c;d")',
        "SELECT 1",
    ]


def test_create_database_and_use_are_removed():
    sql = "CREATE DATABASE attendance;\nUSE attendance;\nCREATE TABLE x (id INT);"
    stripped = _strip_create_db_and_use(sql)
    assert "CREATE DATABASE" not in stripped
    assert "USE attendance" not in stripped
    assert list(_iter_sql_statements(stripped)) == ["CREATE TABLE x (id INT)"]


def test_bundled_sql_files_split_into_statements():
    schema = list(_iter_sql_statements(_strip_create_db_and_use(SCHEMA_PATH.read_text(encoding="utf-8"))))
    tables = [s for s in schema if "CREATE TABLE" in s.upper()]
    assert len(tables) == 7
    assert any("uq_users_email" in s for s in schema)
    assert list(_iter_sql_statements(SEED_PATH.read_text(encoding="utf-8")))
