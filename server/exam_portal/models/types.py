"""
Enum column type that normalizes stored values on the way in and out.

Rows written by older clients may carry a different casing ("completed"
next to "COMPLETED"); reading through this type always yields the enum
member, so callers compare against members and never against raw strings.
"""
import enum
from typing import Type

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class NormalizedEnum(enum.Enum):
    """Mixin for str enums whose stored form may vary in case or padding."""

    @classmethod
    def normalize(cls, value):
        if value is None or isinstance(value, cls):
            return value
        return cls(str(value).strip().upper())


class EnumString(TypeDecorator):
    impl = String(32)
    cache_ok = True

    def __init__(self, enum_cls: Type[NormalizedEnum], *args, **kwargs):
        self.enum_cls = enum_cls
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return self.enum_cls.normalize(value).value

    def process_result_value(self, value, dialect):
        return self.enum_cls.normalize(value)
