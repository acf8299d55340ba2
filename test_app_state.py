import logging
import unittest

import pandas as pd
import pytest

from app_state import AppState
from column_type import ColumnType
from table_errors import (
    BlockedOperationError,
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidValueError,
)


def _app(**overrides):
    config = {"INITIAL_TABLES": 0, "UNDO_MAX_DEPTH": None, "LOG_LEVEL": None}
    config.update(overrides)
    return AppState(config=config)


def _state(app):
    """Comparable picture of everything the app exposes."""
    out = []
    for table in app.get_tables():
        columns = [
            (c.id, c.name, c.type, c.allows_blank, c.default_value, c.values)
            for c in table.columns
        ]
        out.append((table.id, table.name, columns))
    return out


def _single_column_app(values):
    app = _app()
    table_id = app.create_table()
    column_id = app.add_column(table_id)
    for value in values:
        row = app.add_row(table_id)
        app.set_cell_value_from_string(table_id, column_id, row, value)
    return app, table_id, column_id


# ---------- startup ----------
def test_initial_tables_are_seeded_without_history():
    app = _app(INITIAL_TABLES=5)
    assert [t.name for t in app.get_tables()] == [f"Table{i}" for i in range(1, 6)]
    assert not app.can_undo()


def test_undo_depth_comes_from_config():
    app = _app(UNDO_MAX_DEPTH=1)
    app.create_table()
    app.create_table()
    assert app.undo()
    assert not app.undo()
    assert app.get_table_ids() == [1]


def test_log_level_applies_to_library_loggers():
    logger = logging.getLogger("command_manager")
    previous = logger.level
    try:
        _app(LOG_LEVEL="DEBUG")
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(previous)


# ---------- scenarios ----------
def test_blank_cell_blocks_disallowing_blanks():
    app, table_id, column_id = _single_column_app(["x"])
    app.change_default_value(table_id, column_id, "d")
    app.set_cell_value_from_string(table_id, column_id, 0, "   ")
    assert app.get_cell_value(table_id, column_id, 0) is None

    assert app.set_allows_blank(table_id, column_id, False) is False
    assert app.get_allows_blank(table_id, column_id)

    app.set_cell_value_from_string(table_id, column_id, 0, "y")
    assert app.set_allows_blank(table_id, column_id, False) is True
    with pytest.raises(InvalidValueError):
        app.set_cell_value(table_id, column_id, 0, None)


def test_text_to_integer_blocked_until_bad_row_deleted():
    app, table_id, column_id = _single_column_app(["1", "2", "x"])
    assert not app.can_convert(table_id, column_id, ColumnType.INTEGER)
    with pytest.raises(BlockedOperationError):
        app.change_column_type(table_id, column_id, ColumnType.INTEGER)

    app.remove_row(table_id, 2)
    app.change_column_type(table_id, column_id, "integer")
    assert app.get_column_type(table_id, column_id) is ColumnType.INTEGER
    assert app.get_column(table_id, column_id).values == (1, 2)


def test_deleted_table_name_is_reused():
    app = _app()
    for _ in range(5):
        app.create_table()
    app.delete_table(3)
    new_id = app.create_table()
    assert new_id == 3
    assert app.get_table_name(new_id) == "Table3"
    assert app.table_exists("Table3")


def test_email_column_accepts_and_rejects():
    app, table_id, column_id = _single_column_app([""])
    app.change_column_type(table_id, column_id, ColumnType.EMAIL)
    app.set_cell_value_from_string(table_id, column_id, 0, "hello@world")
    assert app.get_cell_value(table_id, column_id, 0) == "hello@world"
    for bad in ("a@@b", "a b@c"):
        with pytest.raises(InvalidValueError):
            app.set_cell_value_from_string(table_id, column_id, 0, bad)
    assert app.get_cell_value(table_id, column_id, 0) == "hello@world"


def test_text_integer_text_round_trip_preserves_display():
    texts = ["0", "-7", "2147483647", "-2147483648", ""]
    app, table_id, column_id = _single_column_app(texts)
    app.change_column_type(table_id, column_id, ColumnType.INTEGER)
    app.change_column_type(table_id, column_id, ColumnType.TEXT)
    assert app.get_column(table_id, column_id).values == ("0", "-7", "2147483647", "-2147483648", None)


def test_cycle_column_type():
    app, table_id, column_id = _single_column_app([])
    seen = [app.cycle_column_type(table_id, column_id) for _ in range(4)]
    assert seen == [ColumnType.EMAIL, ColumnType.BOOLEAN, ColumnType.INTEGER, ColumnType.TEXT]


# ---------- history ----------
def _mutations():
    """Each entry mutates an app given its table id and first column id."""
    return [
        lambda app, t, c: app.create_table(),
        lambda app, t, c: app.delete_table(t),
        lambda app, t, c: app.rename_table(t, "People"),
        lambda app, t, c: app.add_column(t),
        lambda app, t, c: app.delete_column(t, c),
        lambda app, t, c: app.rename_column(t, c, "Age"),
        lambda app, t, c: app.change_column_type(t, c, ColumnType.INTEGER),
        lambda app, t, c: app.change_default_value(t, c, "4"),
        lambda app, t, c: app.add_row(t),
        lambda app, t, c: app.remove_row(t, 0),
        lambda app, t, c: app.set_cell_value(t, c, 0, "9"),
        lambda app, t, c: app.set_cell_value_from_string(t, c, 1, ""),
        lambda app, t, c: app.import_frame(pd.DataFrame({"a": [1]})),
    ]


@pytest.mark.parametrize("mutate", _mutations())
def test_undo_and_redo_are_inverse(mutate):
    app, table_id, column_id = _single_column_app(["1", "2"])
    app.add_column(table_id)
    before = _state(app)

    mutate(app, table_id, column_id)
    after = _state(app)
    assert after != before

    assert app.undo()
    assert _state(app) == before
    assert app.redo()
    assert _state(app) == after


def test_toggle_allows_blank_is_undoable():
    app, table_id, column_id = _single_column_app(["a"])
    app.change_default_value(table_id, column_id, "d")
    assert app.set_allows_blank(table_id, column_id, False)
    assert not app.get_allows_blank(table_id, column_id)
    app.undo()
    assert app.get_allows_blank(table_id, column_id)
    app.redo()
    assert not app.get_allows_blank(table_id, column_id)


def test_unchanged_allows_blank_records_nothing():
    app, table_id, column_id = _single_column_app([])
    depth = app.history.undo_depth
    assert app.set_allows_blank(table_id, column_id, True)
    assert app.history.undo_depth == depth


def test_new_command_after_undo_discards_redo():
    app, table_id, column_id = _single_column_app(["a"])
    app.set_cell_value(table_id, column_id, 0, "b")
    app.undo()
    assert app.can_redo()
    app.set_cell_value(table_id, column_id, 0, "c")
    assert not app.can_redo()
    assert not app.redo()
    assert app.get_cell_value(table_id, column_id, 0) == "c"


def test_failed_command_keeps_redo():
    app, table_id, column_id = _single_column_app(["a"])
    app.set_cell_value(table_id, column_id, 0, "b")
    app.undo()
    with pytest.raises(InvalidArgumentError):
        app.rename_column(table_id, column_id, " ")
    assert app.can_redo()


def test_conversion_undo_restores_original_column():
    app, table_id, column_id = _single_column_app(["1", "2"])
    app.change_column_type(table_id, column_id, ColumnType.INTEGER)
    app.set_cell_value(table_id, column_id, 0, 10)
    app.undo()
    app.undo()
    assert app.get_column_type(table_id, column_id) is ColumnType.TEXT
    assert app.get_column(table_id, column_id).values == ("1", "2")
    app.redo()
    app.redo()
    assert app.get_column(table_id, column_id).values == (10, 2)


class ToggleDefaultTests(unittest.TestCase):
    def setUp(self):
        self.app, self.table_id, self.column_id = _single_column_app([])
        self.app.change_column_type(self.table_id, self.column_id, ColumnType.BOOLEAN)

    def test_toggle_cycles_and_undoes(self):
        seen = [self.app.toggle_default_value(self.table_id, self.column_id) for _ in range(3)]
        self.assertEqual(seen, [True, False, None])
        self.app.undo()
        self.assertIs(self.app.get_default_value(self.table_id, self.column_id), False)
        self.assertEqual(self.app.get_default_value_as_string(self.table_id, self.column_id), "false")

    def test_toggle_without_blanks_flips(self):
        self.app.toggle_default_value(self.table_id, self.column_id)
        self.assertTrue(self.app.set_allows_blank(self.table_id, self.column_id, False))
        self.assertIs(self.app.toggle_default_value(self.table_id, self.column_id), False)
        self.assertIs(self.app.toggle_default_value(self.table_id, self.column_id), True)

    def test_text_column_cannot_toggle(self):
        other = self.app.add_column(self.table_id)
        with self.assertRaises(InvalidArgumentError):
            self.app.toggle_default_value(self.table_id, other)


class ReadAccessorTests(unittest.TestCase):
    def setUp(self):
        self.app, self.table_id, self.column_id = _single_column_app(["a", "b"])
        self.second = self.app.add_column(self.table_id)

    def test_reads_are_detached(self):
        table = self.app.get_table(self.table_id)
        table.set_value(self.column_id, 0, "zzz")
        column = self.app.get_column(self.table_id, self.column_id)
        column.set_value(1, "yyy")
        self.assertEqual(self.app.get_row_values(self.table_id, 0), ["a", None])
        self.assertEqual(self.app.get_row_values(self.table_id, 1), ["b", None])

    def test_column_accessors(self):
        self.assertEqual(self.app.get_column_names(self.table_id), ["Column1", "Column2"])
        self.assertEqual(self.app.get_column_ids(self.table_id), [self.column_id, self.second])
        self.assertEqual(self.app.get_column_types(self.table_id), [ColumnType.TEXT, ColumnType.TEXT])
        self.assertEqual(self.app.get_column_count(self.table_id), 2)
        self.assertEqual(self.app.get_column_id_at(self.table_id, 1), self.second)
        self.assertEqual(len(self.app.get_columns(self.table_id)), 2)
        self.assertEqual(self.app.get_row_count(self.table_id), 2)

    def test_name_validation(self):
        self.assertFalse(self.app.is_valid_column_name(self.table_id, "Column2"))
        self.assertTrue(self.app.is_valid_column_name(self.table_id, "Column2", self.second))
        self.assertFalse(self.app.is_valid_table_name("Table1"))
        self.assertTrue(self.app.is_valid_table_name("Other"))

    def test_value_validation(self):
        self.assertTrue(self.app.is_valid_column_value(self.table_id, self.column_id, "x"))
        self.assertFalse(self.app.is_valid_column_value(self.table_id, self.column_id, 5))

    def test_row_index_errors(self):
        with self.assertRaises(IndexOutOfRangeError):
            self.app.remove_row(self.table_id, 2)
        with self.assertRaises(IndexOutOfRangeError):
            self.app.get_row_values(self.table_id, 5)

    def test_frame_round_trip(self):
        frame = self.app.get_table_frame(self.table_id)
        self.assertEqual(list(frame["Column1"]), ["a", "b"])
        new_id = self.app.import_frame(frame, "Copy")
        self.assertEqual(self.app.get_table_name(new_id), "Copy")
        self.assertEqual(self.app.get_column(new_id, 1).values, ("a", "b"))
        self.app.undo()
        self.assertNotIn(new_id, self.app.get_table_ids())


def test_integer_cells_are_bounded_to_32_bits():
    app, table_id, column_id = _single_column_app(["2147483647"])
    app.change_column_type(table_id, column_id, ColumnType.INTEGER)
    with pytest.raises(InvalidValueError):
        app.set_cell_value_from_string(table_id, column_id, 0, "100000000000000000000")
    with pytest.raises(InvalidValueError):
        app.set_cell_value(table_id, column_id, 0, 2**31)
    assert list(app.get_table_frame(table_id)["Column1"]) == [2147483647]
