"""
Dialect-aware database types.
Provides PostgreSQL JSONB when available,
falls back to generic JSON for SQLite.
"""
from typing import Any, Dict, Optional

from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator
from sqlalchemy.engine import Dialect


class UniversalJSON(TypeDecorator):
    """
    Uses JSONB for PostgreSQL.
    Uses JSON for SQLite and others.
    """
    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


class ScoringRulesJSON(UniversalJSON):
    """
    League scoring rule overrides.

    JSON object keys are always strings, so round-point keys are written as
    strings and read back as stored. Rows from other writers may carry keys
    that are not round numbers; validating them is left to the scoring layer.
    """
    cache_ok = True

    def process_bind_param(self, value: Optional[Dict[str, Any]], dialect: Dialect):
        if value is None:
            return None
        rules = dict(value)
        round_points = rules.get("roundPoints")
        if isinstance(round_points, dict):
            rules["roundPoints"] = {str(r): pts for r, pts in round_points.items()}
        return rules
