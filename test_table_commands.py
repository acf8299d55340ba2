import unittest

import pandas as pd

from column_type import ColumnType
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
from table_errors import BlockedOperationError, InvalidArgumentError, InvalidValueError
from table_registry import TableRegistry


def _snapshot(registry):
    tables = []
    for table in registry.tables:
        columns = [
            (c.id, c.name, c.type, c.allows_blank, c.default_value, c.values)
            for c in table.columns
        ]
        tables.append((table.id, table.name, columns))
    return tables


class CommandRoundTripTests(unittest.TestCase):
    def setUp(self):
        self.store = TableRegistry()
        table = self.store.create_table()
        self.store.create_table()
        self.table_id = table.id
        self.column_id = self.store.add_column(table.id).id
        self.store.add_column(table.id)
        for text in ("1", "2", None):
            row = self.store.add_row(table.id)
            self.store.set_cell_value(table.id, self.column_id, row, text)

    def _round_trip(self, command):
        before = _snapshot(self.store)
        command.execute(self.store)
        after = _snapshot(self.store)
        self.assertNotEqual(before, after)
        command.undo(self.store)
        self.assertEqual(_snapshot(self.store), before)
        command.execute(self.store)
        self.assertEqual(_snapshot(self.store), after)
        return command

    def test_create_table(self):
        command = self._round_trip(CreateTableCommand())
        self.assertEqual(command.created_table_id, 3)

    def test_delete_table_restores_position(self):
        self._round_trip(DeleteTableCommand(self.table_id))

    def test_rename_table(self):
        self._round_trip(RenameTableCommand(self.table_id, "Table1", "People"))

    def test_add_column(self):
        command = self._round_trip(AddColumnCommand(self.table_id))
        self.assertEqual(command.added_column_id, 3)

    def test_delete_column(self):
        self._round_trip(DeleteColumnCommand(self.table_id, self.column_id))

    def test_rename_column(self):
        self._round_trip(RenameColumnCommand(self.table_id, self.column_id, "Column1", "Age"))

    def test_change_column_type(self):
        command = self._round_trip(ChangeColumnTypeCommand(self.table_id, self.column_id, ColumnType.INTEGER))
        self.assertEqual(self.store.get_column(self.table_id, self.column_id).values, (1, 2, None))
        self.assertIs(self.store.get_column(self.table_id, self.column_id), command.new_column)

    def test_change_default_value(self):
        self._round_trip(ChangeDefaultValueCommand(self.table_id, self.column_id, "", "7", True))

    def test_toggle_allows_blank(self):
        other = self.store.get_table(self.table_id).column_ids[1]
        self.store.change_default_value(self.table_id, other, "x")
        for row in range(3):
            self.store.set_cell_value(self.table_id, other, row, "v")
        command = self._round_trip(ToggleAllowsBlankCommand(self.table_id, other, False))
        self.assertTrue(command.old_allows_blank)

    def test_add_row(self):
        command = self._round_trip(AddRowCommand(self.table_id))
        self.assertEqual(command.added_row_index, 3)

    def test_delete_row(self):
        self._round_trip(DeleteRowCommand(self.table_id, 0))

    def test_set_cell_value(self):
        self._round_trip(SetCellValueCommand(self.table_id, self.column_id, 2, None, "9"))

    def test_import_table(self):
        frame = pd.DataFrame({"n": [1, 2], "s": ["a", None]})
        command = self._round_trip(ImportTableCommand(frame, "Imported"))
        frame.loc[0, "n"] = 99
        command.undo(self.store)
        command.execute(self.store)
        table = self.store.get_table(command.created_table_id)
        self.assertEqual(table.get_column(1).values, (1, 2))


class CommandFailureTests(unittest.TestCase):
    def setUp(self):
        self.store = TableRegistry()
        self.table_id = self.store.create_table().id
        self.column_id = self.store.add_column(self.table_id).id
        self.store.add_row(self.table_id)

    def test_blocked_conversion(self):
        self.store.set_cell_value(self.table_id, self.column_id, 0, "x")
        before = _snapshot(self.store)
        with self.assertRaises(BlockedOperationError):
            ChangeColumnTypeCommand(self.table_id, self.column_id, ColumnType.INTEGER).execute(self.store)
        self.assertEqual(_snapshot(self.store), before)

    def test_blocked_allows_blank(self):
        with self.assertRaises(BlockedOperationError):
            ToggleAllowsBlankCommand(self.table_id, self.column_id, False).execute(self.store)
        self.assertTrue(self.store.get_column(self.table_id, self.column_id).allows_blank)

    def test_blank_default_refused_when_blanks_disallowed(self):
        self.store.change_default_value(self.table_id, self.column_id, "d")
        self.store.set_cell_value(self.table_id, self.column_id, 0, "v")
        self.store.set_allows_blank(self.table_id, self.column_id, False)
        command = ChangeDefaultValueCommand(self.table_id, self.column_id, "d", "", False)
        with self.assertRaises(InvalidValueError):
            command.execute(self.store)
        column = self.store.get_column(self.table_id, self.column_id)
        self.assertEqual(column.default_value, "d")
        self.assertFalse(column.allows_blank)

    def test_add_row_needs_a_column(self):
        empty = self.store.create_table().id
        with self.assertRaises(InvalidArgumentError):
            AddRowCommand(empty).execute(self.store)
