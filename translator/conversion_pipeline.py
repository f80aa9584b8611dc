"""
Conversion Pipeline — Ordered rewrite passes for each directed dialect pair.

Every pass is a pure ``str -> str`` transform; the pipeline threads the SQL
buffer through them in order. Idiom passes (AUTO_INCREMENT / SERIAL /
AUTOINCREMENT) must run before the type-mapping pass, which would otherwise
rewrite the leading integer type and break the idiom patterns.
"""

import logging
from functools import partial
from typing import Callable, Dict, List, Optional, Tuple, Union

from dialects import pair_key
from rewrite_engine import Rule, apply_rules, apply_type_table
from type_dictionary import TypeDictionary

logger = logging.getLogger(__name__)

Pass = Tuple[str, Callable[[str], str]]


# ═══════════════════════════════════════════════════════════════════════
#  Auto-increment idioms
# ═══════════════════════════════════════════════════════════════════════

AUTO_INCREMENT_TO_SERIAL_RULES: List[Rule] = [
    (r'\bINT(?:EGER)?\s+AUTO_INCREMENT\s+PRIMARY\s+KEY\b', 'SERIAL PRIMARY KEY',
     'INT AUTO_INCREMENT PRIMARY KEY → SERIAL PRIMARY KEY'),
    (r'\bINT(?:EGER)?\s+PRIMARY\s+KEY\s+AUTO_INCREMENT\b', 'SERIAL PRIMARY KEY',
     'INT PRIMARY KEY AUTO_INCREMENT → SERIAL PRIMARY KEY'),
    (r'\bBIGINT\s+AUTO_INCREMENT\s+PRIMARY\s+KEY\b', 'BIGSERIAL PRIMARY KEY',
     'BIGINT AUTO_INCREMENT PRIMARY KEY → BIGSERIAL PRIMARY KEY'),
    (r'\bBIGINT\s+PRIMARY\s+KEY\s+AUTO_INCREMENT\b', 'BIGSERIAL PRIMARY KEY',
     'BIGINT PRIMARY KEY AUTO_INCREMENT → BIGSERIAL PRIMARY KEY'),
    (r'\bINT(?:EGER)?\s+AUTO_INCREMENT\b', 'SERIAL', 'INT AUTO_INCREMENT → SERIAL'),
    (r'\bBIGINT\s+AUTO_INCREMENT\b', 'BIGSERIAL', 'BIGINT AUTO_INCREMENT → BIGSERIAL'),
    (r'\bSMALLINT\s+AUTO_INCREMENT\b', 'SMALLSERIAL', 'SMALLINT AUTO_INCREMENT → SMALLSERIAL'),
]

SERIAL_TO_AUTO_INCREMENT_RULES: List[Rule] = [
    (r'\bBIGSERIAL\s+PRIMARY\s+KEY\b', 'BIGINT PRIMARY KEY AUTO_INCREMENT',
     'BIGSERIAL PRIMARY KEY → BIGINT PRIMARY KEY AUTO_INCREMENT'),
    (r'\bSMALLSERIAL\s+PRIMARY\s+KEY\b', 'SMALLINT PRIMARY KEY AUTO_INCREMENT',
     'SMALLSERIAL PRIMARY KEY → SMALLINT PRIMARY KEY AUTO_INCREMENT'),
    (r'\bSERIAL\s+PRIMARY\s+KEY\b', 'INT PRIMARY KEY AUTO_INCREMENT',
     'SERIAL PRIMARY KEY → INT PRIMARY KEY AUTO_INCREMENT'),
    (r'\bBIGSERIAL\b', 'BIGINT AUTO_INCREMENT', 'BIGSERIAL → BIGINT AUTO_INCREMENT'),
    (r'\bSMALLSERIAL\b', 'SMALLINT AUTO_INCREMENT', 'SMALLSERIAL → SMALLINT AUTO_INCREMENT'),
    (r'\bSERIAL\b', 'INT AUTO_INCREMENT', 'SERIAL → INT AUTO_INCREMENT'),
]

SQLITE_AUTOINCREMENT_TO_MYSQL_RULES: List[Rule] = [
    (r'\bINTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT\b', 'INT PRIMARY KEY AUTO_INCREMENT',
     'INTEGER PRIMARY KEY AUTOINCREMENT → INT PRIMARY KEY AUTO_INCREMENT'),
]

SQLITE_AUTOINCREMENT_TO_POSTGRES_RULES: List[Rule] = [
    (r'\bINTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT\b', 'SERIAL PRIMARY KEY',
     'INTEGER PRIMARY KEY AUTOINCREMENT → SERIAL PRIMARY KEY'),
]

AUTO_INCREMENT_TO_AUTOINCREMENT_RULES: List[Rule] = [
    (r'\bINT\s+PRIMARY\s+KEY\s+AUTO_INCREMENT\b', 'INTEGER PRIMARY KEY AUTOINCREMENT',
     'INT PRIMARY KEY AUTO_INCREMENT → INTEGER PRIMARY KEY AUTOINCREMENT'),
    (r'\bINT\s+AUTO_INCREMENT\s+PRIMARY\s+KEY\b', 'INTEGER PRIMARY KEY AUTOINCREMENT',
     'INT AUTO_INCREMENT PRIMARY KEY → INTEGER PRIMARY KEY AUTOINCREMENT'),
    (r'\bINT\s+AUTO_INCREMENT\b', 'INTEGER AUTOINCREMENT', 'INT AUTO_INCREMENT → INTEGER AUTOINCREMENT'),
]

SERIAL_TO_AUTOINCREMENT_RULES: List[Rule] = [
    (r'\bSERIAL\s+PRIMARY\s+KEY\b', 'INTEGER PRIMARY KEY AUTOINCREMENT',
     'SERIAL PRIMARY KEY → INTEGER PRIMARY KEY AUTOINCREMENT'),
    (r'\bBIGSERIAL\s+PRIMARY\s+KEY\b', 'INTEGER PRIMARY KEY AUTOINCREMENT',
     'BIGSERIAL PRIMARY KEY → INTEGER PRIMARY KEY AUTOINCREMENT'),
    (r'\bSERIAL\b', 'INTEGER AUTOINCREMENT', 'SERIAL → INTEGER AUTOINCREMENT'),
    (r'\bBIGSERIAL\b', 'INTEGER AUTOINCREMENT', 'BIGSERIAL → INTEGER AUTOINCREMENT'),
]


# ═══════════════════════════════════════════════════════════════════════
#  Identifier quoting
# ═══════════════════════════════════════════════════════════════════════

BACKTICKS_TO_QUOTES_RULES: List[Rule] = [
    (r'`([^`]+)`', r'"\1"', 'Backtick → double quote'),
]

# Lookahead heuristic: a double-quoted span counts as an identifier only when
# followed by a comma, a closing parenthesis, a line end or a column keyword.
QUOTES_TO_BACKTICKS_RULES: List[Rule] = [
    (r'"([^"]+)"(?=\s*(?:,|\)|(?m:$)|\s+(?:INT|VARCHAR|TEXT|INTEGER|SERIAL|PRIMARY|NOT|NULL'
     r'|DEFAULT|UNIQUE|CHECK|REFERENCES|CONSTRAINT)))',
     r'`\1`', 'Double-quoted identifier → backtick'),
]


# ═══════════════════════════════════════════════════════════════════════
#  Dialect-specific clauses
# ═══════════════════════════════════════════════════════════════════════

ENGINE_CLAUSE_RULES: List[Rule] = [
    (r'\s*\bENGINE\s*=\s*\w+', '', 'Remove ENGINE='),
]

CHARSET_CLAUSE_RULES: List[Rule] = [
    (r'\s*\bDEFAULT\s+CHARSET\s*=\s*\w+', '', 'Remove DEFAULT CHARSET='),
    (r'\s*\bCHARACTER\s+SET\s*=?\s*\w+', '', 'Remove CHARACTER SET'),
    (r'\s*\bCOLLATE\s*=?\s*\w+', '', 'Remove COLLATE'),
]

MYSQL_TABLE_OPTION_RULES: List[Rule] = [
    (r'\s*\bAUTO_INCREMENT\s*=\s*\d+', '', 'Remove AUTO_INCREMENT=n'),
    (r'\s*\bROW_FORMAT\s*=\s*\w+', '', 'Remove ROW_FORMAT='),
    (r"\s*\bCOMMENT\s*=\s*'[^']*'", '', 'Remove COMMENT='),
    (r'\s*\bUNSIGNED\b', '', 'Remove UNSIGNED'),
    (r'\s*\bZEROFILL\b', '', 'Remove ZEROFILL'),
]

POSTGRES_STORAGE_CLAUSE_RULES: List[Rule] = [
    (r'\s*\bWITH\s*\([^)]+\)', '', 'Remove WITH (storage parameters)'),
    (r'\s*\bTABLESPACE\s+\w+', '', 'Remove TABLESPACE'),
]


# ═══════════════════════════════════════════════════════════════════════
#  Functions
# ═══════════════════════════════════════════════════════════════════════

MYSQL_TO_POSTGRES_FUNCTION_RULES: List[Rule] = [
    (r'\bIFNULL\s*\(', 'COALESCE(', 'IFNULL → COALESCE'),
    # MySQL's LIMIT offset, count puts the offset first
    (r'\bLIMIT\s+(\d+)\s*,\s*(\d+)', r'LIMIT \2 OFFSET \1', 'LIMIT x,y → LIMIT y OFFSET x'),
]

# Lossy when COALESCE has more than two arguments
POSTGRES_TO_MYSQL_FUNCTION_RULES: List[Rule] = [
    (r'\bCOALESCE\s*\(', 'IFNULL(', 'COALESCE → IFNULL'),
]


# ═══════════════════════════════════════════════════════════════════════
#  Pipeline registry
# ═══════════════════════════════════════════════════════════════════════

TYPE_MAPPING = "type mapping"

Step = Union[str, Tuple[str, List[Rule]]]

PIPELINES: Dict[str, Tuple[Step, ...]] = {
    "mysql_to_postgres": (
        ("auto-increment idiom", AUTO_INCREMENT_TO_SERIAL_RULES),
        TYPE_MAPPING,
        ("identifier quoting", BACKTICKS_TO_QUOTES_RULES),
        ("engine clause", ENGINE_CLAUSE_RULES),
        ("charset clause", CHARSET_CLAUSE_RULES),
        ("functions", MYSQL_TO_POSTGRES_FUNCTION_RULES),
    ),
    "postgres_to_mysql": (
        ("serial idiom", SERIAL_TO_AUTO_INCREMENT_RULES),
        TYPE_MAPPING,
        ("identifier quoting", QUOTES_TO_BACKTICKS_RULES),
        ("functions", POSTGRES_TO_MYSQL_FUNCTION_RULES),
    ),
    "sqlite_to_mysql": (
        ("autoincrement idiom", SQLITE_AUTOINCREMENT_TO_MYSQL_RULES),
        TYPE_MAPPING,
    ),
    "sqlite_to_postgres": (
        ("autoincrement idiom", SQLITE_AUTOINCREMENT_TO_POSTGRES_RULES),
        TYPE_MAPPING,
    ),
    "mysql_to_sqlite": (
        ("auto-increment idiom", AUTO_INCREMENT_TO_AUTOINCREMENT_RULES),
        TYPE_MAPPING,
        ("identifier quoting", BACKTICKS_TO_QUOTES_RULES),
        ("engine clause", ENGINE_CLAUSE_RULES),
        ("charset clause", CHARSET_CLAUSE_RULES),
        ("table options", MYSQL_TABLE_OPTION_RULES),
    ),
    "postgres_to_sqlite": (
        ("serial idiom", SERIAL_TO_AUTOINCREMENT_RULES),
        TYPE_MAPPING,
        ("storage clauses", POSTGRES_STORAGE_CLAUSE_RULES),
    ),
}


def _rules_pass(label: str, rules: List[Rule], sql: str) -> str:
    return apply_rules(sql, rules, label)[0]


def build_pipeline(source: str, target: str, dictionary: TypeDictionary) -> Optional[List[Pass]]:
    """
    Return the ordered passes for a dialect pair, or None if no pipeline exists.

    The type-mapping pass is bound to the dictionary's merged table for the pair,
    so custom overrides registered before this call are honoured.
    """
    key = pair_key(source, target)
    steps = PIPELINES.get(key)
    if steps is None:
        return None

    passes: List[Pass] = []
    for step in steps:
        if step == TYPE_MAPPING:
            passes.append((TYPE_MAPPING, partial(apply_type_table, table=dictionary.lookup(key))))
        else:
            name, rules = step
            passes.append((name, partial(_rules_pass, f"{key}: {name}", rules)))
    return passes


def run_pipeline(sql: str, passes: List[Pass], label: str = "") -> str:
    """Thread the buffer through every pass in order and return the final text."""
    buffer = sql
    changed = []
    for name, transform in passes:
        result = transform(buffer)
        if result != buffer:
            changed.append(name)
        buffer = result

    logger.info(f"[{label}] Ran {len(passes)} passes, {len(changed)} changed the SQL"
                + (f": {', '.join(changed)}" if changed else ""))
    return buffer
