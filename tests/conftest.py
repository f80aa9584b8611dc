"""
Shared pytest fixtures for the SQL dialect converter tests.
"""

import sys
from pathlib import Path

import pytest

# ── Ensure translator modules importable ────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "translator"))


# ── Temporary directory ─────────────────────────────────────────────────────

@pytest.fixture
def tmp_output(tmp_path):
    """Provide a temporary output directory."""
    return tmp_path


# ── Type dictionary ─────────────────────────────────────────────────────────

@pytest.fixture
def dictionary():
    """A fresh TypeDictionary with no custom overrides."""
    from type_dictionary import TypeDictionary
    return TypeDictionary()


# ── Converter factory ───────────────────────────────────────────────────────

@pytest.fixture
def convert():
    """Return a helper converting SQL between two dialects; output is None on failure."""
    from sql_converter import SQLConverter

    def _convert(sql: str, source: str, target: str, dictionary=None):
        return SQLConverter(sql, source, target, dictionary).convert()

    return _convert


@pytest.fixture
def mysql_to_postgres(convert):
    return lambda sql: convert(sql, "mysql", "postgres")


@pytest.fixture
def postgres_to_mysql(convert):
    return lambda sql: convert(sql, "postgres", "mysql")


@pytest.fixture
def sqlite_to_mysql(convert):
    return lambda sql: convert(sql, "sqlite", "mysql")


@pytest.fixture
def sqlite_to_postgres(convert):
    return lambda sql: convert(sql, "sqlite", "postgres")


@pytest.fixture
def mysql_to_sqlite(convert):
    return lambda sql: convert(sql, "mysql", "sqlite")


@pytest.fixture
def postgres_to_sqlite(convert):
    return lambda sql: convert(sql, "postgres", "sqlite")


# ── Sample schemas ──────────────────────────────────────────────────────────

@pytest.fixture
def mysql_schema() -> str:
    return (
        "CREATE TABLE `users` (\n"
        "  `id` INT AUTO_INCREMENT PRIMARY KEY,\n"
        "  `age` TINYINT UNSIGNED NOT NULL,\n"
        "  `bio` LONGTEXT,\n"
        "  `avatar` MEDIUMBLOB,\n"
        "  `balance` DECIMAL(10,2),\n"
        "  `created_at` DATETIME\n"
        ") ENGINE=InnoDB AUTO_INCREMENT=100 DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci;\n"
    )


@pytest.fixture
def postgres_schema() -> str:
    return (
        "CREATE TABLE accounts (\n"
        "  id BIGSERIAL PRIMARY KEY,\n"
        "  active BOOLEAN DEFAULT TRUE,\n"
        "  external_id UUID,\n"
        "  payload JSONB,\n"
        "  created_at TIMESTAMPTZ\n"
        ") WITH (fillfactor=70) TABLESPACE fast_disk;\n"
    )


@pytest.fixture
def sqlite_schema() -> str:
    return (
        "CREATE TABLE notes (\n"
        "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
        "  body TEXT,\n"
        "  score REAL,\n"
        "  attachment BLOB\n"
        ");\n"
    )


@pytest.fixture
def sql_file(tmp_output, mysql_schema):
    path = tmp_output / "schema.sql"
    path.write_text(mysql_schema, encoding="utf-8")
    return path
