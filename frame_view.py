import pandas as pd

from allocation import smallest_free_name
from cell_coercion import is_blank, is_integer_in_range, normalize_scalar, value_to_text
from column_type import ColumnType
from table_columns import create_column
from table_model import COLUMN_NAME_PREFIX, Table

FRAME_DTYPES = {
    ColumnType.TEXT: "object",
    ColumnType.EMAIL: "object",
    ColumnType.BOOLEAN: "boolean",
    ColumnType.INTEGER: "Int64",
}


def table_to_frame(table: Table) -> pd.DataFrame:
    """Detached DataFrame copy of a table, one nullable-dtype series per column."""
    data = {
        column.name: pd.Series(list(column.values), dtype=FRAME_DTYPES[column.type])
        for column in table.columns
    }
    return pd.DataFrame(data, columns=table.column_names)


def infer_column_type(series: pd.Series) -> ColumnType:
    dtype = series.dtype
    if pd.api.types.is_bool_dtype(dtype):
        return ColumnType.BOOLEAN
    if pd.api.types.is_integer_dtype(dtype):
        # wider integers stay readable as text
        if series.dropna().map(lambda v: is_integer_in_range(int(v))).all():
            return ColumnType.INTEGER
    return ColumnType.TEXT


def _cell_value(column_type: ColumnType, raw):
    value = normalize_scalar(raw)
    if value is None:
        return None
    if column_type is ColumnType.INTEGER:
        return int(value)
    if column_type is ColumnType.BOOLEAN:
        return bool(value)
    return value_to_text(value)


def table_from_frame(frame: pd.DataFrame, name: str, table_id: int) -> Table:
    """Build a table from a DataFrame; every column allows blanks and has a blank default."""
    table = Table(name, table_id)
    labels = [None if label is None or is_blank(str(label)) else str(label) for label in frame.columns]
    # explicit labels are reserved before unlabeled columns take default names
    taken = {label for label in labels if label is not None}
    for label, (_, series) in zip(labels, frame.items()):
        column_type = infer_column_type(series)
        column_name = label
        if column_name is None:
            column_name = smallest_free_name(COLUMN_NAME_PREFIX, taken)
            taken.add(column_name)
        column = create_column(column_type, column_name, table.next_free_column_id())
        for row, raw in enumerate(series.tolist()):
            column.add_default_value()
            column.set_value(row, _cell_value(column_type, raw))
        table.add_column(column)
    return table
