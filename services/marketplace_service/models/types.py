"""Column types shared by marketplace models."""

from sqlalchemy import ARRAY, JSON, Text
from sqlalchemy.types import TypeDecorator

# TEXT[] on Postgres; SQLite (tests) has no arrays so store JSON there.
TextArray = ARRAY(Text).with_variant(JSON(), "sqlite")


class TextEnum(TypeDecorator):
    """Stores a ``str`` enum as plain TEXT and loads it back as the enum.

    Pair with a ``CheckConstraint(check_in(...))`` for the allowed values.
    """

    impl = Text
    cache_ok = True

    def __init__(self, enum_cls, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_cls = enum_cls

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, self.enum_cls):
            return value.value
        # Unknown strings pass through so the CHECK constraint rejects them.
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return self.enum_cls(value)
        except ValueError:
            return value
