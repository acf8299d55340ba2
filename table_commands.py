"""Reversible mutations of the table store.

Every command carries ids and plain values only and reaches the data through
the store handed to ``execute``/``undo``. What a command needs in order to undo
itself is either supplied by the caller at construction (old names, old cell
values, old default) or captured while it executes (created ids, deleted
tables/columns/rows, replaced column objects).
"""

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from cell_coercion import is_blank
from column_type import ColumnType
from frame_view import table_from_frame
from table_columns import Column
from table_errors import BlockedOperationError, InvalidArgumentError
from table_model import Table


class Command:
    def execute(self, store) -> None:
        raise NotImplementedError

    def undo(self, store) -> None:
        raise NotImplementedError


# ---------- tables ----------
@dataclass(eq=False)
class CreateTableCommand(Command):
    created_table_id: int | None = field(default=None, init=False)

    def execute(self, store):
        self.created_table_id = store.create_table().id

    def undo(self, store):
        if self.created_table_id is not None and store.has_table(self.created_table_id):
            store.delete_table(self.created_table_id)


@dataclass(eq=False)
class ImportTableCommand(Command):
    frame: pd.DataFrame = field(repr=False)
    name: str | None = None
    created_table_id: int | None = field(default=None, init=False)

    def __post_init__(self):
        self.frame = self.frame.copy(deep=True)

    def execute(self, store):
        name = self.name if self.name is not None else store.next_free_table_name()
        table = table_from_frame(self.frame, name, store.next_free_table_id())
        store.add_table(table)
        self.created_table_id = table.id

    def undo(self, store):
        if self.created_table_id is not None and store.has_table(self.created_table_id):
            store.delete_table(self.created_table_id)


@dataclass(eq=False)
class DeleteTableCommand(Command):
    table_id: int
    original_index: int | None = field(default=None, init=False)
    backup_table: Table | None = field(default=None, init=False, repr=False)

    def execute(self, store):
        index = store.table_index(self.table_id)
        backup = store.clone_table(self.table_id)
        store.delete_table(self.table_id)
        self.original_index, self.backup_table = index, backup

    def undo(self, store):
        if self.backup_table is not None:
            store.insert_table_at(self.original_index, self.backup_table.deep_clone())


@dataclass(eq=False)
class RenameTableCommand(Command):
    table_id: int
    old_name: str
    new_name: str

    def execute(self, store):
        store.rename_table(self.table_id, self.new_name)

    def undo(self, store):
        store.rename_table(self.table_id, self.old_name)


# ---------- columns ----------
@dataclass(eq=False)
class AddColumnCommand(Command):
    table_id: int
    added_column_id: int | None = field(default=None, init=False)

    def execute(self, store):
        self.added_column_id = store.add_column(self.table_id).id

    def undo(self, store):
        store.delete_column(self.table_id, self.added_column_id)


@dataclass(eq=False)
class DeleteColumnCommand(Command):
    table_id: int
    column_id: int
    original_index: int | None = field(default=None, init=False)
    backup_column: Column | None = field(default=None, init=False, repr=False)

    def execute(self, store):
        table = store.get_table(self.table_id)
        index = table.column_index(self.column_id)
        backup = table.get_column(self.column_id).copy()
        store.delete_column(self.table_id, self.column_id)
        self.original_index, self.backup_column = index, backup

    def undo(self, store):
        store.insert_column_at(self.table_id, self.original_index, self.backup_column.copy())


@dataclass(eq=False)
class RenameColumnCommand(Command):
    table_id: int
    column_id: int
    old_name: str
    new_name: str

    def execute(self, store):
        store.rename_column(self.table_id, self.column_id, self.new_name)

    def undo(self, store):
        store.rename_column(self.table_id, self.column_id, self.old_name)


@dataclass(eq=False)
class ChangeColumnTypeCommand(Command):
    table_id: int
    column_id: int
    new_type: ColumnType
    old_column: Column | None = field(default=None, init=False, repr=False)
    new_column: Column | None = field(default=None, init=False, repr=False)

    def execute(self, store):
        if self.new_column is None:
            if not store.can_convert(self.table_id, self.column_id, self.new_type):
                raise BlockedOperationError(
                    f"Column {self.column_id} cannot change to {self.new_type.value} with its current values"
                )
            self.old_column, self.new_column = store.convert_column_type(
                self.table_id, self.column_id, self.new_type
            )
            return
        store.replace_column(self.table_id, self.column_id, self.new_column)

    def undo(self, store):
        store.replace_column(self.table_id, self.column_id, self.old_column)


@dataclass(eq=False)
class ChangeDefaultValueCommand(Command):
    table_id: int
    column_id: int
    old_value: str | None
    new_value: str | None
    old_allows_blank: bool

    def execute(self, store):
        self._apply(store, self.new_value)

    def undo(self, store):
        self._apply(store, self.old_value)

    def _apply(self, store, text):
        column = store.get_column(self.table_id, self.column_id)
        blank = is_blank(text)
        with column.blank_allowance(self.old_allows_blank, relax=blank):
            store.change_default_value(self.table_id, self.column_id, None if blank else text)


@dataclass(eq=False)
class ToggleAllowsBlankCommand(Command):
    table_id: int
    column_id: int
    new_allows_blank: bool

    @property
    def old_allows_blank(self) -> bool:
        return not self.new_allows_blank

    def execute(self, store):
        self._apply(store, self.new_allows_blank)

    def undo(self, store):
        self._apply(store, self.old_allows_blank)

    def _apply(self, store, allows_blank: bool):
        if not store.set_allows_blank(self.table_id, self.column_id, allows_blank):
            raise BlockedOperationError(
                f"Column {self.column_id} holds blanks; blanks cannot be disallowed"
            )


# ---------- rows and cells ----------
@dataclass(eq=False)
class AddRowCommand(Command):
    table_id: int
    added_row_index: int | None = field(default=None, init=False)

    def execute(self, store):
        if store.get_table(self.table_id).column_count == 0:
            raise InvalidArgumentError(f"Table {self.table_id} has no columns to hold a row")
        self.added_row_index = store.add_row(self.table_id)

    def undo(self, store):
        store.remove_row(self.table_id, self.added_row_index)


@dataclass(eq=False)
class DeleteRowCommand(Command):
    table_id: int
    row_index: int
    backup_values: dict[int, Any] = field(default_factory=dict, init=False, repr=False)

    def execute(self, store):
        table = store.get_table(self.table_id)
        backup = {c.id: c.get_value(self.row_index) for c in table.columns}
        store.remove_row(self.table_id, self.row_index)
        self.backup_values = backup

    def undo(self, store):
        store.insert_row_at(self.table_id, self.row_index)
        for column_id, value in self.backup_values.items():
            store.set_cell_value(self.table_id, column_id, self.row_index, value)


@dataclass(eq=False)
class SetCellValueCommand(Command):
    table_id: int
    column_id: int
    row_index: int
    old_value: Any
    new_value: Any

    def execute(self, store):
        store.set_cell_value(self.table_id, self.column_id, self.row_index, self.new_value)

    def undo(self, store):
        store.set_cell_value(self.table_id, self.column_id, self.row_index, self.old_value)
