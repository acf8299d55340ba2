import logging

import pandas as pd

from cell_coercion import value_to_text
from column_type import ColumnType
from command_manager import CommandManager
from config_paths import load_config
from default_table_initializer import DefaultTableInitializer
from frame_view import table_to_frame
from table_columns import Column
from table_commands import (
    AddColumnCommand,
    AddRowCommand,
    ChangeColumnTypeCommand,
    ChangeDefaultValueCommand,
    CreateTableCommand,
    DeleteColumnCommand,
    DeleteRowCommand,
    DeleteTableCommand,
    ImportTableCommand,
    RenameColumnCommand,
    RenameTableCommand,
    SetCellValueCommand,
    ToggleAllowsBlankCommand,
)
from table_errors import BlockedOperationError
from table_model import Table
from table_registry import TableRegistry

logger = logging.getLogger(__name__)

_LIBRARY_LOGGERS = (
    "app_state",
    "command_manager",
    "config_paths",
    "table_columns",
    "table_registry",
)


class AppState:
    """Operation surface handed to the presentation layer.

    Every mutation is issued as a command through ``history`` so it can be
    undone; reads return clones, tuples or plain values, never live objects.
    """

    def __init__(self, config=None):
        self.config = config if config is not None else load_config()
        self._apply_log_level(self.config.get("LOG_LEVEL"))

        self.registry = TableRegistry()
        self.history = CommandManager(self.registry, max_depth=self.config.get("UNDO_MAX_DEPTH"))
        DefaultTableInitializer().create(self.registry, self.config.get("INITIAL_TABLES", 0))

    @staticmethod
    def _apply_log_level(level):
        if not level:
            return
        for name in _LIBRARY_LOGGERS:
            logging.getLogger(name).setLevel(level)

    # ---------- tables ----------
    def create_table(self) -> int:
        return self.history.execute(CreateTableCommand()).created_table_id

    def import_frame(self, frame: pd.DataFrame, name: str | None = None) -> int:
        return self.history.execute(ImportTableCommand(frame, name)).created_table_id

    def delete_table(self, table_id: int):
        self.history.execute(DeleteTableCommand(table_id))

    def rename_table(self, table_id: int, new_name: str):
        old_name = self.registry.get_table(table_id).name
        self.history.execute(RenameTableCommand(table_id, old_name, new_name))

    def get_tables(self) -> list[Table]:
        return self.registry.clone_tables()

    def get_table(self, table_id: int) -> Table:
        return self.registry.clone_table(table_id)

    def get_table_ids(self) -> list[int]:
        return self.registry.table_ids

    def get_table_name(self, table_id: int) -> str:
        return self.registry.get_table(table_id).name

    def get_table_frame(self, table_id: int) -> pd.DataFrame:
        return table_to_frame(self.registry.get_table(table_id))

    def table_exists(self, name: str) -> bool:
        return self.registry.has_table_named(name)

    def is_valid_table_name(self, name: str, table_id: int | None = None) -> bool:
        return self.registry.is_valid_table_name(name, table_id)

    # ---------- columns ----------
    def add_column(self, table_id: int) -> int:
        return self.history.execute(AddColumnCommand(table_id)).added_column_id

    def delete_column(self, table_id: int, column_id: int):
        self.history.execute(DeleteColumnCommand(table_id, column_id))

    def rename_column(self, table_id: int, column_id: int, new_name: str):
        old_name = self.registry.get_column(table_id, column_id).name
        self.history.execute(RenameColumnCommand(table_id, column_id, old_name, new_name))

    def get_column(self, table_id: int, column_id: int) -> Column:
        return self.registry.get_column(table_id, column_id).copy()

    def get_columns(self, table_id: int) -> list[Column]:
        return [c.copy() for c in self.registry.get_table(table_id).columns]

    def get_column_names(self, table_id: int) -> list[str]:
        return self.registry.get_table(table_id).column_names

    def get_column_ids(self, table_id: int) -> list[int]:
        return self.registry.get_table(table_id).column_ids

    def get_column_types(self, table_id: int) -> list[ColumnType]:
        return self.registry.get_table(table_id).column_types

    def get_column_type(self, table_id: int, column_id: int) -> ColumnType:
        return self.registry.get_column(table_id, column_id).type

    def get_column_count(self, table_id: int) -> int:
        return self.registry.get_table(table_id).column_count

    def get_column_id_at(self, table_id: int, index: int) -> int:
        return self.registry.get_table(table_id).get_column_by_index(index).id

    def is_valid_column_name(self, table_id: int, name: str, column_id: int | None = None) -> bool:
        return self.registry.is_valid_column_name(table_id, name, column_id)

    # ---------- values ----------
    def get_cell_value(self, table_id: int, column_id: int, row_index: int):
        return self.registry.get_cell_value(table_id, column_id, row_index)

    def set_cell_value(self, table_id: int, column_id: int, row_index: int, value):
        old_value = self.registry.get_cell_value(table_id, column_id, row_index)
        self.history.execute(SetCellValueCommand(table_id, column_id, row_index, old_value, value))

    def set_cell_value_from_string(self, table_id: int, column_id: int, row_index: int, text):
        value = self.registry.get_column(table_id, column_id).parse_value(text)
        self.set_cell_value(table_id, column_id, row_index, value)

    def is_valid_column_value(self, table_id: int, column_id: int, value) -> bool:
        return self.registry.is_valid_column_value(table_id, column_id, value)

    def get_default_value(self, table_id: int, column_id: int):
        return self.registry.get_column(table_id, column_id).default_value

    def get_default_value_as_string(self, table_id: int, column_id: int) -> str:
        return self.registry.get_column(table_id, column_id).default_value_as_string()

    def change_default_value(self, table_id: int, column_id: int, text):
        column = self.registry.get_column(table_id, column_id)
        command = ChangeDefaultValueCommand(
            table_id,
            column_id,
            column.default_value_as_string(),
            text,
            column.allows_blank,
        )
        self.history.execute(command)

    def toggle_default_value(self, table_id: int, column_id: int):
        new_value = self.registry.get_column(table_id, column_id).next_toggled_default()
        self.change_default_value(table_id, column_id, value_to_text(new_value) or "")
        return new_value

    def get_allows_blank(self, table_id: int, column_id: int) -> bool:
        return self.registry.get_column(table_id, column_id).allows_blank

    def set_allows_blank(self, table_id: int, column_id: int, allows_blank: bool) -> bool:
        column = self.registry.get_column(table_id, column_id)
        if column.allows_blank == bool(allows_blank):
            return True
        try:
            self.history.execute(ToggleAllowsBlankCommand(table_id, column_id, bool(allows_blank)))
        except BlockedOperationError as exc:
            logger.debug("Refused allows-blank change: %s", exc)
            return False
        return True

    # ---------- types ----------
    def can_convert(self, table_id: int, column_id: int, target) -> bool:
        return self.registry.can_convert(table_id, column_id, _as_column_type(target))

    def change_column_type(self, table_id: int, column_id: int, target):
        self.history.execute(ChangeColumnTypeCommand(table_id, column_id, _as_column_type(target)))

    def cycle_column_type(self, table_id: int, column_id: int) -> ColumnType:
        target = self.get_column_type(table_id, column_id).next()
        self.change_column_type(table_id, column_id, target)
        return target

    # ---------- rows ----------
    def add_row(self, table_id: int) -> int:
        return self.history.execute(AddRowCommand(table_id)).added_row_index

    def remove_row(self, table_id: int, row_index: int):
        self.history.execute(DeleteRowCommand(table_id, row_index))

    def get_row_values(self, table_id: int, row_index: int) -> list:
        return self.registry.get_row_values(table_id, row_index)

    def get_row_count(self, table_id: int) -> int:
        return self.registry.get_table(table_id).row_count

    # ---------- history ----------
    def undo(self) -> bool:
        return self.history.undo() is not None

    def redo(self) -> bool:
        return self.history.redo() is not None

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()


def _as_column_type(target) -> ColumnType:
    if isinstance(target, ColumnType):
        return target
    return ColumnType.parse(target)
