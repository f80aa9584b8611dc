"""
End-to-end regression tests.
These run whole schemas through every pipeline, chain conversions across
dialects, and check the outputs are stable across runs.
"""

import pytest

from dialects import CONVERSION_PAIRS
from sql_converter import SQLConverter, convert_file


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _source_schema(pair, mysql_schema, postgres_schema, sqlite_schema):
    source = pair.split("_to_")[0]
    return {"mysql": mysql_schema, "postgres": postgres_schema, "sqlite": sqlite_schema}[source]


# ═══════════════════════════════════════════════════════════════════════════
# 1. EVERY PAIR
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.integration
@pytest.mark.regression
class TestEveryPair:

    @pytest.mark.parametrize("pair", CONVERSION_PAIRS)
    def test_converts_without_errors(self, pair, mysql_schema, postgres_schema, sqlite_schema):
        source, target = pair.split("_to_")
        converter = SQLConverter(_source_schema(pair, mysql_schema, postgres_schema, sqlite_schema), source, target)
        result = converter.convert()
        assert converter.errors == []
        assert converter.warnings == []
        assert result.startswith("CREATE TABLE")
        assert result.rstrip().endswith(";")
        assert "`" not in result or target == "mysql"

    @pytest.mark.parametrize("pair", CONVERSION_PAIRS)
    def test_deterministic(self, pair, mysql_schema, postgres_schema, sqlite_schema):
        source, target = pair.split("_to_")
        sql = _source_schema(pair, mysql_schema, postgres_schema, sqlite_schema)
        first = SQLConverter(sql, source, target).convert()
        second = SQLConverter(sql, source, target).convert()
        assert first == second

    @pytest.mark.parametrize("pair", CONVERSION_PAIRS)
    def test_file_matches_string_conversion(self, pair, tmp_output, mysql_schema, postgres_schema, sqlite_schema):
        source, target = pair.split("_to_")
        sql = _source_schema(pair, mysql_schema, postgres_schema, sqlite_schema)
        path = tmp_output / f"{pair}.sql"
        path.write_text(sql, encoding="utf-8")

        summary = convert_file(str(path), source, target)
        written = (tmp_output / f"{pair}_{target}.sql").read_text(encoding="utf-8")
        assert summary["output_path"].endswith(f"{pair}_{target}.sql")
        assert written == SQLConverter(sql, source, target).convert()


# ═══════════════════════════════════════════════════════════════════════════
# 2. CHAINED CONVERSIONS
# ═══════════════════════════════════════════════════════════════════════════

@pytest.mark.integration
@pytest.mark.regression
class TestChainedConversions:

    def test_mysql_to_postgres_to_sqlite(self, mysql_schema):
        pg = SQLConverter(mysql_schema, "mysql", "postgres").convert()
        lite = SQLConverter(pg, "postgres", "sqlite").convert()
        assert '"id" INTEGER PRIMARY KEY AUTOINCREMENT' in lite
        assert '"avatar" BLOB' in lite
        assert '"created_at" TEXT' in lite

    def test_sqlite_to_mysql_to_postgres(self, sqlite_schema):
        my = SQLConverter(sqlite_schema, "sqlite", "mysql").convert()
        assert "id INT PRIMARY KEY AUTO_INCREMENT" in my
        pg = SQLConverter(my, "mysql", "postgres").convert()
        assert "id SERIAL PRIMARY KEY" in pg
        assert "score DOUBLE PRECISION" in pg

    def test_postgres_to_mysql_to_postgres_serial(self):
        sql = "CREATE TABLE t (id SERIAL PRIMARY KEY, big_id BIGSERIAL);"
        my = SQLConverter(sql, "postgres", "mysql").convert()
        assert my == "CREATE TABLE t (id INT PRIMARY KEY AUTO_INCREMENT, big_id BIGINT AUTO_INCREMENT);"
        back = SQLConverter(my, "mysql", "postgres").convert()
        assert back == "CREATE TABLE t (id SERIAL PRIMARY KEY, big_id BIGSERIAL);"
