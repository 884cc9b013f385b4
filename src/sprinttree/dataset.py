"""Typed tabular storage: rows of numeric/categorical fields with a class label.

Fields are resolved once, at load time, into the type the schema declares:
numeric columns become `float64` numpy arrays and categorical columns become
`object` arrays of `str`. Column 0 always holds the integer class label.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from numbers import Integral, Real

import numpy as np
import polars as pl

from sprinttree.exceptions import InvalidSchemaError, UnparsableFieldError
from sprinttree.schema import CLASS_COLUMN, AttributeSchema

type FieldValue = float | str
type Row = tuple[int | float | str, ...]


@dataclass(frozen=True, eq=False)
class Dataset:
    """An ordered, column-oriented collection of typed rows.

    Attributes:
        schema (AttributeSchema): The schema the fields were resolved with.
        labels (np.ndarray): 1-D `int64` array of class labels (column 0).
        columns (dict[int, np.ndarray]): Attribute column index to 1-D array;
            `float64` for numeric columns, `object` (of `str`) for categorical.

    Examples:
        >>> schema = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "categorical"})
        >>> dataset = Dataset.from_rows([[0, "1.5", "A"], [1, 2, "B"]], schema)
        >>> len(dataset)
        2
        >>> dataset.row(0)
        (0, 1.5, 'A')
    """

    schema: AttributeSchema
    labels: np.ndarray
    columns: dict[int, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Check that every column has one entry per label."""
        self.schema.check_width(len(self.columns) + 1)
        if set(self.columns) != set(self.schema.attributes):
            raise InvalidSchemaError(
                "Dataset columns differ from the schema's attribute columns",
                columns=list(set(self.columns) ^ set(self.schema.attributes)),
            )
        n_rows = len(self.labels)
        for index, values in self.columns.items():
            if len(values) != n_rows:
                raise ValueError(f"Column {index} has {len(values)} values, expected {n_rows}")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[object]], schema: AttributeSchema) -> Dataset:
        """Resolve raw rows (text or Python scalars) into a typed dataset.

        Args:
            rows (Sequence[Sequence[object]]): Rows whose first field is the
                class label and whose remaining fields follow `schema`.
            schema (AttributeSchema): Declares each column's kind and the
                class count.

        Returns:
            Dataset: The typed dataset. May be empty.

        Raises:
            InvalidSchemaError: If a row's width does not match the schema.
            UnparsableFieldError: If a label or numeric field cannot be
                resolved, or a field is missing.
        """
        schema.check_width(schema.width)
        labels = np.empty(len(rows), dtype=np.int64)
        columns = {
            index: np.empty(len(rows), dtype=np.float64 if schema.is_numeric(index) else object)
            for index in schema.columns
        }

        for row_index, row in enumerate(rows):
            if len(row) != schema.width:
                raise InvalidSchemaError(f"Row {row_index} has {len(row)} fields, schema describes {schema.width}")
            labels[row_index] = _resolve_label(row[CLASS_COLUMN], row=row_index, n_classes=schema.n_classes)
            for index, values in columns.items():
                if schema.is_numeric(index):
                    values[row_index] = _resolve_numeric(row[index], row=row_index, column=index)
                else:
                    values[row_index] = _resolve_categorical(row[index], row=row_index, column=index)

        return cls(schema=schema, labels=labels, columns=columns)

    @classmethod
    def from_polars(cls, df: pl.DataFrame, schema: AttributeSchema) -> Dataset:
        """Resolve a Polars DataFrame into a typed dataset, by column position.

        The first DataFrame column is the class label; column `j` of the
        DataFrame is attribute column `j` of the schema. String columns
        declared numeric are parsed; nulls are rejected.

        Args:
            df (pl.DataFrame): Source frame, one column per schema column.
            schema (AttributeSchema): Declares each column's kind and the
                class count.

        Returns:
            Dataset: The typed dataset. May be empty.

        Raises:
            InvalidSchemaError: If the frame width does not match the schema.
            UnparsableFieldError: If a label or numeric field cannot be
                resolved, or a field is null.
        """
        schema.check_width(df.width)
        label_series = df.to_series(CLASS_COLUMN)
        labels = np.fromiter(
            (
                _resolve_label(value, row=row_index, n_classes=schema.n_classes)
                for row_index, value in enumerate(label_series.to_list())
            ),
            dtype=np.int64,
            count=df.height,
        )
        columns = {
            index: (
                _numeric_series_to_array(df.to_series(index), column=index)
                if schema.is_numeric(index)
                else _categorical_series_to_array(df.to_series(index), column=index)
            )
            for index in schema.columns
        }
        return cls(schema=schema, labels=labels, columns=columns)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        """Return the row count."""
        return len(self.labels)

    def __iter__(self) -> Iterator[Row]:
        """Iterate over rows in dataset order."""
        for row_index in range(len(self)):
            yield self.row(row_index)

    @property
    def width(self) -> int:
        """Number of fields per row, class label included."""
        return len(self.columns) + 1

    @property
    def n_classes(self) -> int:
        """Class count declared by the schema."""
        return self.schema.n_classes

    def column(self, index: int) -> np.ndarray:
        """Return the values of column `index`; column 0 returns the labels."""
        if index == CLASS_COLUMN:
            return self.labels
        return self.columns[index]

    def row(self, row_index: int) -> Row:
        """Return one row as a tuple of Python scalars.

        Args:
            row_index (int): Zero-based row position.

        Returns:
            Row: `(label, field_1, ..., field_k)`.
        """
        fields: list[int | float | str] = [int(self.labels[row_index])]
        for index in self.schema.columns:
            value = self.columns[index][row_index]
            fields.append(float(value) if self.schema.is_numeric(index) else str(value))
        return tuple(fields)

    def take(self, indices: np.ndarray | Sequence[int]) -> Dataset:
        """Materialize the rows at `indices`, in that order, as a new dataset.

        The returned dataset owns copies of the selected values, so partitions
        taken from the same parent never share storage.

        Args:
            indices (np.ndarray | Sequence[int]): Row positions to select.

        Returns:
            Dataset: The selected rows.
        """
        positions = np.asarray(indices, dtype=np.intp)
        return Dataset(
            schema=self.schema,
            labels=self.labels[positions],
            columns={index: values[positions] for index, values in self.columns.items()},
        )

    # ------------------------------------------------------------------
    # Class statistics
    # ------------------------------------------------------------------

    def class_counts(self) -> np.ndarray:
        """Return per-class row counts, shape `(n_classes,)`."""
        return np.bincount(self.labels, minlength=self.n_classes)

    def majority_class(self) -> int:
        """Return the most frequent class; ties go to the lowest class index.

        Returns:
            int: The majority class. An empty dataset yields class 0.
        """
        best_class = 0
        best_count = -1
        for class_index, count in enumerate(self.class_counts()):
            if count > best_count:
                best_class, best_count = class_index, int(count)
        return best_class

    def check_schema(self, schema: AttributeSchema) -> None:
        """Verify that `schema` describes this dataset.

        Args:
            schema (AttributeSchema): Schema supplied to build or classify.

        Raises:
            InvalidSchemaError: If the schema's columns or kinds differ from
                the ones the dataset was resolved with, or it declares fewer
                classes than the labels require.
        """
        schema.check_width(self.width)
        mismatched = [index for index in schema.columns if schema.kind(index) != self.schema.kind(index)]
        if mismatched:
            raise InvalidSchemaError(
                f"Schema kinds for columns {mismatched} differ from the kinds the dataset was loaded with",
                columns=mismatched,
            )
        if len(self) and int(self.labels.max()) >= schema.n_classes:
            raise InvalidSchemaError(
                f"Schema declares {schema.n_classes} classes but the dataset has label {int(self.labels.max())}",
                columns=[CLASS_COLUMN],
            )


# ---------------------------------------------------------------------------
# Private helpers -- Field resolution
# ---------------------------------------------------------------------------


def _resolve_label(value: object, *, row: int, n_classes: int) -> int:
    """Resolve a class label to an int in `[0, n_classes)`."""
    if isinstance(value, bool):
        raise UnparsableFieldError(row=row, column=CLASS_COLUMN, value=value, reason="class label must be an integer")
    if isinstance(value, Integral):
        label = int(value)
    elif isinstance(value, Real) and float(value).is_integer():
        label = int(value)
    elif isinstance(value, str):
        try:
            label = int(value.strip())
        except ValueError:
            raise UnparsableFieldError(
                row=row, column=CLASS_COLUMN, value=value, reason="class label must be an integer"
            ) from None
    else:
        raise UnparsableFieldError(row=row, column=CLASS_COLUMN, value=value, reason="class label must be an integer")

    if not 0 <= label < n_classes:
        raise UnparsableFieldError(
            row=row, column=CLASS_COLUMN, value=value, reason=f"class label must lie in [0, {n_classes})"
        )
    return label


def _resolve_numeric(value: object, *, row: int, column: int) -> float:
    """Resolve a numeric field to a finite float."""
    if value is None:
        raise UnparsableFieldError(row=row, column=column, value=value, reason="missing value")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise UnparsableFieldError(row=row, column=column, value=value, reason="not a number") from None
    if not math.isfinite(number):
        raise UnparsableFieldError(row=row, column=column, value=value, reason="not a finite number")
    return number


def _resolve_categorical(value: object, *, row: int, column: int) -> str:
    """Resolve a categorical field to its text form."""
    if value is None:
        raise UnparsableFieldError(row=row, column=column, value=value, reason="missing value")
    return str(value)


def _numeric_series_to_array(series: pl.Series, *, column: int) -> np.ndarray:
    """Parse a Polars Series into a finite `float64` array."""
    _raise_on_first_null(series, series, column=column, reason="missing value")
    source = series.str.strip_chars() if series.dtype == pl.String else series
    parsed = source.cast(pl.Float64, strict=False)
    _raise_on_first_null(series, parsed, column=column, reason="not a number")
    non_finite = (~parsed.is_finite()).arg_true()
    if len(non_finite):
        row = int(non_finite[0])
        raise UnparsableFieldError(row=row, column=column, value=series[row], reason="not a finite number")
    return parsed.to_numpy(allow_copy=True).astype(np.float64)


def _categorical_series_to_array(series: pl.Series, *, column: int) -> np.ndarray:
    """Convert a Polars Series into an `object` array of `str`."""
    _raise_on_first_null(series, series, column=column, reason="missing value")
    return np.array([str(value) for value in series.to_list()], dtype=object)


def _raise_on_first_null(original: pl.Series, resolved: pl.Series, *, column: int, reason: str) -> None:
    """Raise `UnparsableFieldError` for the first null in `resolved`."""
    failures = resolved.is_null().arg_true()
    if len(failures):
        row = int(failures[0])
        raise UnparsableFieldError(row=row, column=column, value=original[row], reason=reason)
