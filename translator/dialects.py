"""
Dialect Registry — Canonical names, aliases and directed conversion pairs
for the supported SQL dialects (MySQL, PostgreSQL, SQLite).
"""

import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


DIALECTS: Tuple[str, ...] = ("mysql", "postgres", "sqlite")

DIALECT_ALIASES: Dict[str, str] = {
    "postgresql": "postgres",
    "pg": "postgres",
    "pgsql": "postgres",
    "mariadb": "mysql",
    "sqlite3": "sqlite",
}

# Every ordered (source, target) combination of distinct dialects
CONVERSION_PAIRS: Tuple[str, ...] = (
    "mysql_to_postgres",
    "postgres_to_mysql",
    "sqlite_to_mysql",
    "sqlite_to_postgres",
    "mysql_to_sqlite",
    "postgres_to_sqlite",
)


def normalize_dialect(raw: Optional[str]) -> str:
    """Lower-case, trim and resolve aliases. Unknown names pass through unchanged."""
    if raw is None:
        return ""
    normalized = str(raw).lower().strip()
    return DIALECT_ALIASES.get(normalized, normalized)


def resolve_dialect(raw: Optional[str]) -> Optional[str]:
    """Return the canonical dialect name, or None if the text names no supported dialect."""
    normalized = normalize_dialect(raw)
    if normalized in DIALECTS:
        return normalized
    logger.debug(f"Unresolvable dialect: {raw!r}")
    return None


def is_supported_dialect(raw: Optional[str]) -> bool:
    return resolve_dialect(raw) is not None


def supported_dialects() -> List[str]:
    return list(DIALECTS)


def aliases_for(dialect: str) -> List[str]:
    """Aliases resolving to the given canonical dialect, in declaration order."""
    return [alias for alias, canonical in DIALECT_ALIASES.items() if canonical == dialect]


def pair_key(source: str, target: str) -> str:
    """Identifier of a directed pair, e.g. ``mysql_to_postgres``."""
    return f"{source}_to_{target}"
