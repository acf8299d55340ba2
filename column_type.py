from enum import Enum

from table_errors import InvalidArgumentError


class ColumnType(Enum):
    TEXT = "Text"
    EMAIL = "Email"
    BOOLEAN = "Boolean"
    INTEGER = "Integer"

    def next(self) -> "ColumnType":
        """Successor in the cycle Text -> Email -> Boolean -> Integer -> Text."""
        return _CYCLE[self]

    @property
    def is_strict(self) -> bool:
        return self is not ColumnType.TEXT

    @classmethod
    def parse(cls, text: str) -> "ColumnType":
        key = (text or "").strip().lower()
        if key not in _ALIASES:
            choices = "/".join(t.value for t in cls)
            raise InvalidArgumentError(f"Unknown column type {text!r}; use one of: {choices}")
        return _ALIASES[key]


_CYCLE = {
    ColumnType.TEXT: ColumnType.EMAIL,
    ColumnType.EMAIL: ColumnType.BOOLEAN,
    ColumnType.BOOLEAN: ColumnType.INTEGER,
    ColumnType.INTEGER: ColumnType.TEXT,
}

_ALIASES = {
    "text": ColumnType.TEXT,
    "string": ColumnType.TEXT,
    "str": ColumnType.TEXT,
    "email": ColumnType.EMAIL,
    "mail": ColumnType.EMAIL,
    "boolean": ColumnType.BOOLEAN,
    "bool": ColumnType.BOOLEAN,
    "integer": ColumnType.INTEGER,
    "int": ColumnType.INTEGER,
}
