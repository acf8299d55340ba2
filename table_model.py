from allocation import smallest_free_id, smallest_free_name
from column_type import ColumnType
from table_columns import Column, TextColumn
from table_errors import (
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidValueError,
    NotFoundError,
)

COLUMN_NAME_PREFIX = "Column"


class Table:
    """Ordered, exclusively owned columns that all share one row count."""

    def __init__(self, name: str, table_id: int):
        self._name = self._checked_name(name)
        self._id = table_id
        self._columns: list[Column] = []

    @staticmethod
    def _checked_name(name) -> str:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("Table name cannot be empty")
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

    # ---------- read accessors ----------
    @property
    def columns(self) -> tuple:
        return tuple(self._columns)

    @property
    def column_ids(self) -> list[int]:
        return [c.id for c in self._columns]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self._columns]

    @property
    def column_types(self) -> list[ColumnType]:
        return [c.type for c in self._columns]

    @property
    def column_count(self) -> int:
        return len(self._columns)

    @property
    def row_count(self) -> int:
        return len(self._columns[0]) if self._columns else 0

    def has_column(self, name: str) -> bool:
        return any(c.name == name for c in self._columns)

    def has_column_id(self, column_id: int) -> bool:
        return any(c.id == column_id for c in self._columns)

    def column_index(self, column_id: int) -> int:
        for idx, column in enumerate(self._columns):
            if column.id == column_id:
                return idx
        raise NotFoundError(f"Column not found: {column_id}")

    def get_column(self, column_id: int) -> Column:
        return self._columns[self.column_index(column_id)]

    def get_column_by_index(self, index: int) -> Column:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._columns):
            raise IndexOutOfRangeError(f"Invalid column index: {index}")
        return self._columns[index]

    def get_row_values(self, index: int) -> list:
        self._check_row_index(index)
        return [c.get_value(index) for c in self._columns]

    def get_value(self, column_id: int, row_index: int):
        return self.get_column(column_id).get_value(row_index)

    def is_valid_column_value(self, column_id: int, value) -> bool:
        return self.get_column(column_id).is_valid_value(value)

    # ---------- allocation ----------
    def next_free_column_id(self) -> int:
        return smallest_free_id(self.column_ids)

    def next_free_column_name(self) -> str:
        return smallest_free_name(COLUMN_NAME_PREFIX, self.column_names)

    # ---------- column lifecycle ----------
    def create_column(self) -> Column:
        column = TextColumn(self.next_free_column_name(), self.next_free_column_id(), True, None)
        self.add_column(column)
        return column

    def _check_insertable(self, column: Column, replacing: Column | None = None):
        others = [c for c in self._columns if c is not replacing]
        if any(c.name == column.name for c in others):
            raise InvalidArgumentError(f"Column with name '{column.name}' already exists")
        if any(c.id == column.id for c in others):
            raise InvalidArgumentError(f"Column with id {column.id} already exists")
        if others and len(column) > len(others[0]):
            raise InvalidArgumentError(
                f"Column '{column.name}' holds {len(column)} values but the table has {len(others[0])} rows"
            )

    def _backfill(self, column: Column, row_count: int):
        while len(column) < row_count:
            column.add_default_value()

    def add_column(self, column: Column):
        self.insert_column_at(len(self._columns), column)

    def insert_column_at(self, index: int, column: Column):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= len(self._columns):
            raise IndexOutOfRangeError(f"Invalid column index: {index}")
        self._check_insertable(column)
        if self._columns:
            self._backfill(column, self.row_count)
        self._columns.insert(index, column)

    def remove_column(self, column_id: int) -> int:
        index = self.column_index(column_id)
        del self._columns[index]
        return index

    def replace_column_by_id(self, column_id: int, new_column: Column):
        index = self.column_index(column_id)
        old = self._columns[index]
        self._check_insertable(new_column, replacing=old)
        if len(self._columns) > 1 and len(new_column) != self.row_count:
            raise InvalidArgumentError(
                f"Replacement column holds {len(new_column)} values but the table has {self.row_count} rows"
            )
        self._columns[index] = new_column

    # ---------- rows ----------
    def _check_row_index(self, index: int, upper: int | None = None):
        upper = self.row_count if upper is None else upper
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < upper:
            raise IndexOutOfRangeError(f"Invalid row index: {index}")

    def create_row(self) -> int:
        index = self.row_count
        for column in self._columns:
            column.add_default_value()
        return index

    def insert_row_at(self, index: int):
        self._check_row_index(index, upper=self.row_count + 1)
        for column in self._columns:
            column.insert_default_value(index)

    def remove_row(self, index: int):
        self._check_row_index(index)
        for column in self._columns:
            column.remove_value(index)

    # ---------- cells ----------
    def set_value(self, column_id: int, row_index: int, value):
        column = self.get_column(column_id)
        try:
            column.set_value(row_index, value)
        except InvalidValueError as exc:
            raise InvalidValueError(f"Invalid value for column '{column.name}': {value!r} ({exc})") from exc
        except IndexOutOfRangeError as exc:
            raise IndexOutOfRangeError(f"Invalid row index for table '{self._name}': {row_index}") from exc

    def set_value_from_string(self, column_id: int, row_index: int, text):
        column = self.get_column(column_id)
        try:
            column.set_value_from_string(row_index, text)
        except InvalidValueError as exc:
            raise InvalidValueError(f"Invalid value for column '{column.name}': {text!r} ({exc})") from exc
        except IndexOutOfRangeError as exc:
            raise IndexOutOfRangeError(f"Invalid row index for table '{self._name}': {row_index}") from exc

    # ---------- copies ----------
    def deep_clone(self) -> "Table":
        clone = Table(self._name, self._id)
        clone._columns = [c.copy() for c in self._columns]
        return clone

    def __repr__(self):
        return f"Table(id={self._id}, name={self._name!r}, columns={self.column_names!r}, rows={self.row_count})"
