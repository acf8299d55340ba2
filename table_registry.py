import logging

from allocation import smallest_free_id, smallest_free_name
from cell_coercion import coerce_cell_value, value_to_text
from column_type import ColumnType
from table_columns import Column, column_class
from table_errors import IndexOutOfRangeError, InvalidArgumentError, NotFoundError
from table_model import Table

logger = logging.getLogger(__name__)

TABLE_NAME_PREFIX = "Table"


class TableRegistry:
    """Owns every table and routes structural and value operations to them."""

    def __init__(self):
        self._tables: list[Table] = []

    # ---------- allocation ----------
    def next_free_table_id(self) -> int:
        return smallest_free_id(t.id for t in self._tables)

    def next_free_table_name(self) -> str:
        return smallest_free_name(TABLE_NAME_PREFIX, (t.name for t in self._tables))

    def next_free_column_id(self, table_id: int) -> int:
        return self.get_table(table_id).next_free_column_id()

    def next_free_column_name(self, table_id: int) -> str:
        return self.get_table(table_id).next_free_column_name()

    # ---------- lookups ----------
    @property
    def tables(self) -> list[Table]:
        return list(self._tables)

    @property
    def table_ids(self) -> list[int]:
        return [t.id for t in self._tables]

    def has_table(self, table_id: int) -> bool:
        return any(t.id == table_id for t in self._tables)

    def has_table_named(self, name: str) -> bool:
        return any(t.name == name for t in self._tables)

    def table_index(self, table_id: int) -> int:
        for idx, table in enumerate(self._tables):
            if table.id == table_id:
                return idx
        raise NotFoundError(f"Table not found with id: {table_id}")

    def get_table(self, table_id: int) -> Table:
        return self._tables[self.table_index(table_id)]

    def clone_table(self, table_id: int) -> Table:
        return self.get_table(table_id).deep_clone()

    def clone_tables(self) -> list[Table]:
        return [t.deep_clone() for t in self._tables]

    def get_column(self, table_id: int, column_id: int) -> Column:
        return self.get_table(table_id).get_column(column_id)

    # ---------- name validation ----------
    def is_valid_table_name(self, name, table_id: int | None = None) -> bool:
        if not isinstance(name, str) or not name.strip():
            return False
        return not any(t.name == name and t.id != table_id for t in self._tables)

    def is_valid_column_name(self, table_id: int, name, column_id: int | None = None) -> bool:
        if not isinstance(name, str) or not name.strip():
            return False
        table = self.get_table(table_id)
        return not any(c.name == name and c.id != column_id for c in table.columns)

    # ---------- tables ----------
    def create_table(self) -> Table:
        table = Table(self.next_free_table_name(), self.next_free_table_id())
        self._tables.append(table)
        logger.debug("Created table %s (%s)", table.id, table.name)
        return table

    def add_table(self, table: Table):
        self.insert_table_at(len(self._tables), table)

    def insert_table_at(self, index: int, table: Table):
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index <= len(self._tables):
            raise IndexOutOfRangeError(f"Invalid table index: {index}")
        if self.has_table(table.id):
            raise InvalidArgumentError(f"Table with id {table.id} already exists")
        if self.has_table_named(table.name):
            raise InvalidArgumentError(f"Table name '{table.name}' already exists")
        self._tables.insert(index, table)

    def delete_table(self, table_id: int) -> int:
        index = self.table_index(table_id)
        del self._tables[index]
        logger.debug("Deleted table %s", table_id)
        return index

    def rename_table(self, table_id: int, new_name: str):
        table = self.get_table(table_id)
        if not isinstance(new_name, str) or not new_name.strip():
            raise InvalidArgumentError("Table name cannot be empty")
        if not self.is_valid_table_name(new_name, table_id):
            raise InvalidArgumentError(f"Table name '{new_name}' already exists")
        table.name = new_name

    # ---------- columns ----------
    def add_column(self, table_id: int) -> Column:
        column = self.get_table(table_id).create_column()
        logger.debug("Added column %s (%s) to table %s", column.id, column.name, table_id)
        return column

    def insert_column_at(self, table_id: int, index: int, column: Column):
        self.get_table(table_id).insert_column_at(index, column)

    def delete_column(self, table_id: int, column_id: int) -> int:
        index = self.get_table(table_id).remove_column(column_id)
        logger.debug("Deleted column %s from table %s", column_id, table_id)
        return index

    def replace_column(self, table_id: int, column_id: int, new_column: Column):
        self.get_table(table_id).replace_column_by_id(column_id, new_column)

    def rename_column(self, table_id: int, column_id: int, new_name: str):
        column = self.get_column(table_id, column_id)
        if not isinstance(new_name, str) or not new_name.strip():
            raise InvalidArgumentError("Column name cannot be blank")
        if not self.is_valid_column_name(table_id, new_name, column_id):
            raise InvalidArgumentError(f"Column name '{new_name}' already exists")
        column.name = new_name

    # ---------- rows and cells ----------
    def add_row(self, table_id: int) -> int:
        return self.get_table(table_id).create_row()

    def insert_row_at(self, table_id: int, row_index: int):
        self.get_table(table_id).insert_row_at(row_index)

    def remove_row(self, table_id: int, row_index: int):
        self.get_table(table_id).remove_row(row_index)

    def get_row_values(self, table_id: int, row_index: int) -> list:
        return self.get_table(table_id).get_row_values(row_index)

    def get_cell_value(self, table_id: int, column_id: int, row_index: int):
        return self.get_table(table_id).get_value(column_id, row_index)

    def set_cell_value(self, table_id: int, column_id: int, row_index: int, value):
        self.get_table(table_id).set_value(column_id, row_index, value)

    def set_cell_value_from_string(self, table_id: int, column_id: int, row_index: int, text):
        self.get_table(table_id).set_value_from_string(column_id, row_index, text)

    def is_valid_column_value(self, table_id: int, column_id: int, value) -> bool:
        return self.get_table(table_id).is_valid_column_value(column_id, value)

    # ---------- column settings ----------
    def change_default_value(self, table_id: int, column_id: int, text):
        self.get_column(table_id, column_id).change_default_value_from_string(text)

    def set_allows_blank(self, table_id: int, column_id: int, allows_blank: bool) -> bool:
        return self.get_column(table_id, column_id).set_allows_blank(allows_blank)

    # ---------- type conversion ----------
    def can_convert(self, table_id: int, column_id: int, target: ColumnType) -> bool:
        return self.get_column(table_id, column_id).can_change_to_type(target)

    def build_converted_column(self, table_id: int, column_id: int, target: ColumnType) -> Column:
        """Copy a column into ``target``'s kind by re-parsing every value's text.

        Nothing is installed; a value that does not parse raises before the
        table is touched.
        """
        table = self.get_table(table_id)
        old = table.get_column(column_id)
        # blank defaults are checked against allows_blank by the constructor
        default = coerce_cell_value(target, value_to_text(old.default_value))
        new = column_class(target)(old.name, old.id, old.allows_blank, default)
        for _ in range(table.row_count):
            new.add_default_value()
        for row in range(table.row_count):
            new.set_value_from_string(row, value_to_text(old.get_value(row)))
        return new

    def convert_column_type(self, table_id: int, column_id: int, target: ColumnType) -> tuple[Column, Column]:
        old = self.get_column(table_id, column_id)
        new = self.build_converted_column(table_id, column_id, target)
        self.replace_column(table_id, column_id, new)
        logger.debug(
            "Converted column %s of table %s from %s to %s",
            column_id, table_id, old.type.value, target.value,
        )
        return old, new
