"""Utility functions for working with Polars DataFrames."""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl


def to_markdown_table(
    df: pl.DataFrame,
    columns: Sequence[str] | None = None,
    num_rows: int = 10,
) -> str:
    """Convert a Polars DataFrame to a markdown table string.

    This function temporarily modifies global ``pl.Config`` state to render
    the table and is therefore not thread-safe.

    Args:
        df (pl.DataFrame): The DataFrame to convert.
        columns (Sequence[str] | None): Optional list of column names to include.
            If None, all columns are included.
        num_rows (int): Maximum number of rows to display. Defaults to 10.

    Returns:
        str: Markdown-formatted table string.

    Raises:
        ValueError: If num_rows is less than 1, or columns is empty, contains
            duplicates, or names columns missing from the DataFrame.

    Examples:
        >>> df = pl.DataFrame({"actual": [0, 1], "predicted_0": [2, 0], "predicted_1": [0, 2]})
        >>> print(to_markdown_table(df))
        | actual | predicted_0 | predicted_1 |
        |--------|-------------|-------------|
        | 0      | 2           | 0           |
        | 1      | 0           | 2           |
    """
    if num_rows < 1:
        raise ValueError(f"num_rows must be at least 1, got {num_rows}")
    if columns is not None:
        _validate_columns(columns, df.columns)
        df = df.select(columns)

    with pl.Config(
        tbl_formatting="MARKDOWN",
        tbl_hide_column_data_types=True,
        tbl_hide_column_names=False,
        tbl_hide_dataframe_shape=True,
        tbl_rows=num_rows,
        tbl_cols=df.width,
    ):
        return str(df)


def _validate_columns(columns: Sequence[str], df_columns: Sequence[str]) -> None:
    """Validate that columns exist in the DataFrame and contain no duplicates.

    Args:
        columns (Sequence[str]): Column names to validate.
        df_columns (Sequence[str]): Column names present in the DataFrame.

    Raises:
        ValueError: If columns is empty, contains duplicates, or names a
            column that does not exist.
    """
    if len(columns) == 0:
        raise ValueError("columns list must not be empty; pass None to include all columns")
    if len(columns) != len(set(columns)):
        raise ValueError(f"Duplicate column names are not allowed: {list(columns)}")
    missing_columns = set(columns) - set(df_columns)
    if missing_columns:
        raise ValueError(f"Columns not found in DataFrame: {sorted(missing_columns)}")
