"""
Custom SQLAlchemy column types.
"""

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import BigInteger, Numeric
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class TokenCount(TypeDecorator):
    """
    Exact non-negative integer column for token counts.

    Stored as NUMERIC(39, 0) on PostgreSQL so values never lose precision and
    compare numerically in ORDER BY / WHERE clauses. SQLite has no arbitrary
    precision numeric type, so it falls back to a 64-bit INTEGER there. The
    Python side is always a plain ``int``.
    """

    impl = Numeric(39, 0)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> Any:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(39, 0, asdecimal=True))

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        value = int(value)
        if dialect.name == "sqlite":
            return value
        return Decimal(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> Optional[int]:
        if value is None:
            return None
        return int(value)
