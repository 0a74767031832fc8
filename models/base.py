import uuid
from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

Base = declarative_base()


def new_uuid() -> str:
    return str(uuid.uuid4())


class Money(TypeDecorator):
    """
    Exact decimal money column.

    NUMERIC(12, 2) on real databases. SQLite has no decimal storage and would
    round-trip NUMERIC through float, so there the value is kept as its
    decimal text representation instead.
    """
    impl = Numeric(12, 2)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(32))
        return dialect.type_descriptor(Numeric(12, 2, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, Decimal):
            return value
        return Decimal(str(value))
