"""
Rewrite Engine — Applies type tables and regex rule lists to SQL text.

Rules are (pattern, replacement, description) tuples applied in order, each one
seeing the output of the previous one. Matching is always case-insensitive.
"""

import re
import logging
from typing import List, Mapping, Tuple

logger = logging.getLogger(__name__)

Rule = Tuple[str, str, str]


def token_pattern(token: str) -> str:
    """Whole-token regex for a literal token (no match inside a longer identifier)."""
    return r'(?<!\w)' + re.escape(token) + r'(?!\w)'


def apply_type_table(sql: str, table: Mapping[str, str]) -> str:
    """
    Replace every whole-token occurrence of each source type with its target type.

    Entries are applied sequentially in table order. An empty target removes
    the token; surrounding whitespace is left as is.
    """
    converted = sql
    for source_type, target_type in table.items():
        if not source_type or target_type is None:
            continue
        converted = re.sub(
            token_pattern(source_type),
            lambda _m, _t=target_type: _t,
            converted,
            flags=re.IGNORECASE,
        )
    return converted


def apply_rules(sql: str, rules: List[Rule], label: str = "") -> Tuple[str, List[str]]:
    """Apply regex rules in order. Returns the new text and the descriptions of rules that fired."""
    translated = sql
    applied_rules = []

    for pattern, replacement, description in rules:
        new_sql = re.sub(pattern, replacement, translated, flags=re.IGNORECASE)
        if new_sql != translated:
            applied_rules.append(description)
            translated = new_sql

    if applied_rules:
        logger.debug(f"[{label}] Applied {len(applied_rules)} rules: {', '.join(applied_rules)}")

    return translated, applied_rules
