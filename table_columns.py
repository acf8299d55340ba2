import copy
import logging

from cell_coercion import (
    coerce_cell_value,
    is_blank,
    is_boolean_text,
    is_integer_in_range,
    is_integer_text,
    value_to_text,
)
from column_type import ColumnType
from table_errors import IndexOutOfRangeError, InvalidArgumentError, InvalidValueError

logger = logging.getLogger(__name__)

COLUMN_CLASSES: dict = {}


def register_column(cls):
    COLUMN_CLASSES[cls.TYPE] = cls
    return cls


def column_class(column_type: ColumnType):
    try:
        return COLUMN_CLASSES[column_type]
    except KeyError:
        raise InvalidArgumentError(f"Unknown column type: {column_type!r}") from None


def create_column(column_type: ColumnType, name: str, column_id: int, allows_blank: bool = True, default_value=None):
    return column_class(column_type)(name, column_id, allows_blank, default_value)


class Column:
    """Shared contract of every column kind: name, id, blank policy, default and values."""

    TYPE: ColumnType = None

    def __init__(self, name: str, column_id: int, allows_blank: bool = True, default_value=None):
        self._name = self._checked_name(name)
        self._id = column_id
        self._allows_blank = bool(allows_blank)
        default_value = None if is_blank(default_value) else default_value
        if not self.is_valid_value(default_value):
            raise InvalidValueError(f"Default value is not valid: {default_value!r}")
        self._default_value = default_value
        self._values: list = []

    # ---------- identity ----------
    @staticmethod
    def _checked_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Column name cannot be blank")
        return name

    @property
    def id(self) -> int:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = self._checked_name(value)

    @property
    def type(self) -> ColumnType:
        return self.TYPE

    # ---------- validity ----------
    def _accepts(self, value) -> bool:
        raise NotImplementedError

    def is_valid_value(self, value) -> bool:
        if is_blank(value):
            return self._allows_blank
        return self._accepts(value)

    def parse_value(self, text):
        if is_blank(text):
            if not self._allows_blank:
                raise InvalidValueError("Blanks not allowed")
            return None
        return coerce_cell_value(self.TYPE, text)

    def can_accept_all_values_from(self, other: "Column") -> bool:
        try:
            for value in (other.default_value, *other.values):
                self.parse_value(value_to_text(value))
        except InvalidValueError:
            return False
        return True

    def _can_change_to(self, target: ColumnType) -> bool:
        raise NotImplementedError

    def can_change_to_type(self, target: ColumnType) -> bool:
        if target is self.TYPE or not target.is_strict:
            return True
        return self._can_change_to(target)

    def has_blanks(self) -> bool:
        return is_blank(self._default_value) or any(is_blank(v) for v in self._values)

    def is_all_blank(self) -> bool:
        return is_blank(self._default_value) and all(is_blank(v) for v in self._values)

    # ---------- blank policy ----------
    @property
    def allows_blank(self) -> bool:
        return self._allows_blank

    def set_allows_blank(self, allows_blank: bool) -> bool:
        """Returns False, leaving the column untouched, when blanks block the change."""
        allows_blank = bool(allows_blank)
        if allows_blank == self._allows_blank:
            return True
        if not allows_blank and self.has_blanks():
            return False
        self._allows_blank = allows_blank
        return True

    def blank_allowance(self, restore_to: bool, relax: bool = True) -> "BlankAllowanceTransaction":
        return BlankAllowanceTransaction(self, restore_to, relax)

    # ---------- default value ----------
    @property
    def default_value(self):
        return self._default_value

    def change_default_value(self, value):
        value = None if is_blank(value) else value
        if not self.is_valid_value(value):
            if value is None:
                raise InvalidValueError(f"Column '{self._name}' does not allow a blank default")
            raise InvalidValueError(f"Invalid default value for column '{self._name}': {value!r}")
        self._default_value = value

    def change_default_value_from_string(self, text):
        self.change_default_value(self.parse_value(text))

    def default_value_as_string(self) -> str:
        return value_to_text(self._default_value) or ""

    def next_toggled_default(self):
        raise InvalidArgumentError("Only boolean columns can toggle their default value")

    def toggle_default_value(self):
        value = self.next_toggled_default()
        self.change_default_value(value)
        return value

    # ---------- values ----------
    @property
    def values(self) -> tuple:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def _check_index(self, index, upper: int | None = None):
        upper = len(self._values) if upper is None else upper
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < upper:
            raise IndexOutOfRangeError(f"Invalid row index: {index}")

    def get_value(self, index: int):
        self._check_index(index)
        return self._values[index]

    def set_value(self, index: int, value):
        if is_blank(value):
            if not self._allows_blank:
                raise InvalidValueError("Value cannot be blank")
            value = None
        elif not self.is_valid_value(value):
            raise InvalidValueError(f"Value is not valid: {value!r}")
        self._check_index(index)
        self._values[index] = value

    def set_value_from_string(self, index: int, text):
        self._check_index(index)
        self.set_value(index, self.parse_value(text))

    def add_default_value(self):
        self._values.append(self._default_value)

    def insert_default_value(self, index: int):
        self._check_index(index, upper=len(self._values) + 1)
        self._values.insert(index, self._default_value)

    def remove_value(self, index: int):
        self._check_index(index)
        del self._values[index]

    # ---------- copies ----------
    def copy(self) -> "Column":
        clone = copy.copy(self)
        clone._values = list(self._values)
        return clone

    def __repr__(self):
        return f"{type(self).__name__}(id={self._id}, name={self._name!r}, values={self._values!r})"


class BlankAllowanceTransaction:
    """Lets a column take a blank default for the span of a with-block.

    On exit the blank policy is set to ``restore_to``. If that would leave a
    blank behind a non-blank policy, or the block raised, the default and the
    policy are rolled back to what they were on entry.
    """

    def __init__(self, column: Column, restore_to: bool, relax: bool = True):
        self.column = column
        self.restore_to = bool(restore_to)
        self.relax = relax
        self._entry_default = None
        self._entry_allows_blank = None

    def __enter__(self) -> Column:
        self._entry_default = self.column._default_value
        self._entry_allows_blank = self.column._allows_blank
        if self.relax:
            self.column._allows_blank = True
        return self.column

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self._rollback()
            return False
        if not self.restore_to and self.column.has_blanks():
            self._rollback()
            raise InvalidValueError(f"Column '{self.column.name}' does not allow blanks")
        self.column._allows_blank = self.restore_to
        return False

    def _rollback(self):
        logger.debug("Rolling back default of column %s", self.column.id)
        self.column._default_value = self._entry_default
        self.column._allows_blank = self._entry_allows_blank


# ---------- variants ----------
@register_column
class TextColumn(Column):
    TYPE = ColumnType.TEXT

    _TARGET_CHECKS = {
        ColumnType.EMAIL: lambda text: "@" in text,
        ColumnType.INTEGER: is_integer_text,
        ColumnType.BOOLEAN: is_boolean_text,
    }

    def _accepts(self, value) -> bool:
        return isinstance(value, str)

    def _can_change_to(self, target: ColumnType) -> bool:
        check = self._TARGET_CHECKS[target]
        return all(is_blank(v) or check(v) for v in (self._default_value, *self._values))


class _StrictColumn(Column):
    def _can_change_to(self, target: ColumnType) -> bool:
        # strict kinds only convert into each other when empty
        return self.is_all_blank()


@register_column
class EmailColumn(_StrictColumn):
    TYPE = ColumnType.EMAIL

    def _accepts(self, value) -> bool:
        return (
            isinstance(value, str)
            and value.count("@") == 1
            and not any(ch.isspace() for ch in value)
        )


@register_column
class BooleanColumn(_StrictColumn):
    TYPE = ColumnType.BOOLEAN

    def _accepts(self, value) -> bool:
        return isinstance(value, bool)

    def next_toggled_default(self):
        """null -> true -> false -> null with blanks allowed, true <-> false otherwise."""
        if self._allows_blank:
            if self._default_value is None:
                return True
            return False if self._default_value else None
        return not self._default_value


@register_column
class IntegerColumn(_StrictColumn):
    TYPE = ColumnType.INTEGER

    def _accepts(self, value) -> bool:
        return isinstance(value, int) and not isinstance(value, bool) and is_integer_in_range(value)
