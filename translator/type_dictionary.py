"""
Type Dictionary — Directed data-type mapping tables between MySQL, PostgreSQL
and SQLite, plus a per-instance layer of custom overrides.

Base tables are shared read-only by every TypeDictionary. Custom overrides live
on the instance and are merged at lookup time without touching the base tables.

Mappings file format (JSON):
    {
        "mysql_to_postgres": {"TINYINT": "BOOLEAN"},
        "postgres_to_sqlite": {"CITEXT": "TEXT"}
    }
"""

import json
import logging
from types import MappingProxyType
from typing import Dict, Mapping

from dialects import CONVERSION_PAIRS

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════
#  Base tables (key order is application order)
# ═══════════════════════════════════════════════════════════════════════

MYSQL_TO_POSTGRES: Mapping[str, str] = MappingProxyType({
    "TINYINT": "SMALLINT",
    "MEDIUMINT": "INTEGER",
    "INT": "INTEGER",
    "BIGINT": "BIGINT",
    "FLOAT": "REAL",
    "DOUBLE": "DOUBLE PRECISION",
    "DECIMAL": "NUMERIC",
    "DATETIME": "TIMESTAMP",
    "TINYTEXT": "TEXT",
    "MEDIUMTEXT": "TEXT",
    "LONGTEXT": "TEXT",
    "TINYBLOB": "BYTEA",
    "MEDIUMBLOB": "BYTEA",
    "LONGBLOB": "BYTEA",
    "BLOB": "BYTEA",
    "VARBINARY": "BYTEA",
    "BINARY": "BYTEA",
    "BIT": "BIT",
    "UNSIGNED": "",
    "ZEROFILL": "",
})

POSTGRES_TO_MYSQL: Mapping[str, str] = MappingProxyType({
    "SMALLINT": "SMALLINT",
    "INTEGER": "INT",
    "BIGINT": "BIGINT",
    "REAL": "FLOAT",
    "DOUBLE PRECISION": "DOUBLE",
    "NUMERIC": "DECIMAL",
    "TIMESTAMP": "DATETIME",
    "TIMESTAMPTZ": "DATETIME",
    "BYTEA": "BLOB",
    "UUID": "CHAR(36)",
    "JSON": "JSON",
    "JSONB": "JSON",
    "BOOLEAN": "TINYINT(1)",
    "BOOL": "TINYINT(1)",
    "INET": "VARCHAR(45)",
    "CIDR": "VARCHAR(45)",
    "MACADDR": "VARCHAR(17)",
    "MONEY": "DECIMAL(19,2)",
    "INTERVAL": "VARCHAR(255)",
    "TEXT": "LONGTEXT",
})

SQLITE_TO_MYSQL: Mapping[str, str] = MappingProxyType({
    "REAL": "DOUBLE",
    "NUMERIC": "DECIMAL",
    "BLOB": "BLOB",
    "TEXT": "TEXT",
})

SQLITE_TO_POSTGRES: Mapping[str, str] = MappingProxyType({
    "REAL": "DOUBLE PRECISION",
    "NUMERIC": "NUMERIC",
    "BLOB": "BYTEA",
    "TEXT": "TEXT",
})

MYSQL_TO_SQLITE: Mapping[str, str] = MappingProxyType({
    "TINYINT": "INTEGER",
    "SMALLINT": "INTEGER",
    "MEDIUMINT": "INTEGER",
    "INT": "INTEGER",
    "BIGINT": "INTEGER",
    "FLOAT": "REAL",
    "DOUBLE": "REAL",
    "DECIMAL": "NUMERIC",
    "DATETIME": "TEXT",
    "TIMESTAMP": "TEXT",
    "DATE": "TEXT",
    "TIME": "TEXT",
    "YEAR": "INTEGER",
    "TINYTEXT": "TEXT",
    "MEDIUMTEXT": "TEXT",
    "LONGTEXT": "TEXT",
    "TINYBLOB": "BLOB",
    "MEDIUMBLOB": "BLOB",
    "LONGBLOB": "BLOB",
    "JSON": "TEXT",
    "BOOLEAN": "INTEGER",
    "BOOL": "INTEGER",
})

POSTGRES_TO_SQLITE: Mapping[str, str] = MappingProxyType({
    "SMALLINT": "INTEGER",
    "INTEGER": "INTEGER",
    "BIGINT": "INTEGER",
    "REAL": "REAL",
    "DOUBLE PRECISION": "REAL",
    "NUMERIC": "NUMERIC",
    "BOOLEAN": "INTEGER",
    "BOOL": "INTEGER",
    "TIMESTAMP": "TEXT",
    "TIMESTAMPTZ": "TEXT",
    "DATE": "TEXT",
    "TIME": "TEXT",
    "TIMETZ": "TEXT",
    "INTERVAL": "TEXT",
    "UUID": "TEXT",
    "JSON": "TEXT",
    "JSONB": "TEXT",
    "BYTEA": "BLOB",
    "INET": "TEXT",
    "CIDR": "TEXT",
    "MACADDR": "TEXT",
    "MONEY": "REAL",
})

BASE_MAPPINGS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "mysql_to_postgres": MYSQL_TO_POSTGRES,
    "postgres_to_mysql": POSTGRES_TO_MYSQL,
    "sqlite_to_mysql": SQLITE_TO_MYSQL,
    "sqlite_to_postgres": SQLITE_TO_POSTGRES,
    "mysql_to_sqlite": MYSQL_TO_SQLITE,
    "postgres_to_sqlite": POSTGRES_TO_SQLITE,
})

# Tables searched by type_exists(); used for help output only
PRIMARY_TABLES = (MYSQL_TO_POSTGRES, POSTGRES_TO_MYSQL, SQLITE_TO_MYSQL, MYSQL_TO_SQLITE)


def _check_pair(pair: str) -> str:
    if pair not in CONVERSION_PAIRS:
        raise ValueError(
            f"Unknown conversion type '{pair}'. Supported: {', '.join(CONVERSION_PAIRS)}"
        )
    return pair


def _clean_type(value, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{label} must be a string, got {type(value).__name__}")
    cleaned = value.strip().upper()
    if not cleaned:
        raise ValueError(f"{label} cannot be empty")
    return cleaned


class TypeDictionary:
    """Base type tables merged with this instance's custom overrides."""

    def __init__(self):
        self._custom: Dict[str, Dict[str, str]] = {}

    def lookup(self, pair: str) -> Dict[str, str]:
        """
        Return the effective table for a pair as a new dict.

        Base keys keep their position; an override replaces the value in place,
        and override-only keys are appended after the base entries.
        """
        _check_pair(pair)
        merged = dict(BASE_MAPPINGS[pair])
        merged.update(self._custom.get(pair, {}))
        return merged

    def add_custom_mapping(self, pair: str, source_type: str, target_type: str) -> None:
        _check_pair(pair)
        source = _clean_type(source_type, "source_type")
        target = _clean_type(target_type, "target_type")
        self._custom.setdefault(pair, {})[source] = target
        logger.debug(f"[{pair}] Custom mapping {source} → {target}")

    def remove_custom_mapping(self, pair: str, source_type: str) -> bool:
        """Drop an override. Returns False when none was registered."""
        _check_pair(pair)
        overrides = self._custom.get(pair, {})
        return overrides.pop(str(source_type).strip().upper(), None) is not None

    def custom_mappings(self, pair: str) -> Dict[str, str]:
        _check_pair(pair)
        return dict(self._custom.get(pair, {}))

    def clear_custom_mappings(self) -> None:
        self._custom.clear()

    def load_custom_mappings(self, mappings: Mapping[str, Mapping[str, str]]) -> int:
        """Register every override from a ``{pair: {source: target}}`` document."""
        count = 0
        for pair, entries in mappings.items():
            for source_type, target_type in entries.items():
                self.add_custom_mapping(pair, source_type, target_type)
                count += 1
        logger.info(f"Loaded {count} custom type mappings")
        return count

    def type_exists(self, type_name: str) -> bool:
        """True if the name is a source type in one of the primary tables."""
        name = str(type_name).strip().upper()
        return any(name in table for table in PRIMARY_TABLES)


def load_mappings_file(path: str) -> Dict[str, Dict[str, str]]:
    """Read a JSON mappings document and check its shape."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Mappings file '{path}' must contain a JSON object")
    for pair, entries in data.items():
        if not isinstance(entries, dict):
            raise ValueError(f"Mappings for '{pair}' must be an object of SOURCE: TARGET pairs")

    return data
