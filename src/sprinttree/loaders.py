"""Read delimited files into typed datasets."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
import polars as pl
from loguru import logger

from sprinttree.dataset import Dataset
from sprinttree.exceptions import InvalidSchemaError, UnparsableFieldError
from sprinttree.schema import AttributeSchema

ABALONE_SCHEMA: AttributeSchema = AttributeSchema.from_kinds(
    ["categorical", "numeric", "numeric", "numeric", "numeric", "numeric", "numeric", "numeric"],
    n_classes=3,
)
"""Sex, then length, diameter, height and four weights; classes are binned ring counts."""

ABALONE_RING_EDGES: tuple[float, ...] = (9.0, 15.0)
"""Ring counts below 9 are class 0, below 15 class 1, the rest class 2."""

_ABALONE_RAW_WIDTH: int = 9


def read_csv(
    path: str | Path,
    schema: AttributeSchema,
    *,
    has_header: bool = False,
    separator: str = ",",
) -> Dataset:
    """Read a delimited file whose first column is the class label.

    Every column is read as text and then resolved according to `schema`,
    so malformed numbers surface as `UnparsableFieldError` with their row and
    column rather than as a Polars parse error.

    Args:
        path (str | Path): File to read.
        schema (AttributeSchema): Kinds of the attribute columns.
        has_header (bool): Whether the first line is a header. Defaults to False.
        separator (str): Field separator. Defaults to ",".

    Returns:
        Dataset: The typed dataset.

    Raises:
        InvalidSchemaError: If the file width does not match the schema.
        UnparsableFieldError: If a label or numeric field cannot be resolved.
    """
    frame = _read_text_frame(path, has_header=has_header, separator=separator)
    dataset = Dataset.from_polars(frame, schema)
    logger.debug("Dataset read", path=str(path), rows=len(dataset), width=dataset.width)
    return dataset


def bin_labels(values: Sequence[float] | np.ndarray, edges: Sequence[float]) -> np.ndarray:
    """Map continuous measurements to ordinal classes.

    A value below `edges[0]` is class 0, a value in `[edges[i-1], edges[i])`
    is class `i`, and a value at or above the last edge is class `len(edges)`.

    Args:
        values (Sequence[float] | np.ndarray): Measurements to bin.
        edges (Sequence[float]): Strictly increasing class boundaries.

    Returns:
        np.ndarray: `int64` class per value.

    Raises:
        ValueError: If `edges` is empty or not strictly increasing.

    Examples:
        >>> bin_labels([3, 9, 14, 20], (9, 15)).tolist()
        [0, 1, 1, 2]
    """
    boundaries = np.asarray(edges, dtype=np.float64)
    if boundaries.size == 0:
        raise ValueError("edges must contain at least one boundary")
    if np.any(np.diff(boundaries) <= 0):
        raise ValueError(f"edges must be strictly increasing, got {list(edges)}")
    return np.searchsorted(boundaries, np.asarray(values, dtype=np.float64), side="right").astype(np.int64)


def load_abalone(path: str | Path, *, has_header: bool = False) -> Dataset:
    """Load the UCI abalone file with ring counts binned into three classes.

    The raw file has nine columns: sex, seven measurements and the ring
    count. The ring count is binned with `ABALONE_RING_EDGES` and moved to
    column 0.

    Args:
        path (str | Path): Path to `abalone.data`.
        has_header (bool): Whether the first line is a header. Defaults to False.

    Returns:
        Dataset: Rows typed per `ABALONE_SCHEMA`.

    Raises:
        InvalidSchemaError: If the file does not have nine columns.
        UnparsableFieldError: If a ring count or measurement is not a number.
    """
    raw = _read_text_frame(path, has_header=has_header, separator=",")
    if raw.width != _ABALONE_RAW_WIDTH:
        raise InvalidSchemaError(f"Abalone data has {_ABALONE_RAW_WIDTH} columns, file has {raw.width}")

    rings_position = _ABALONE_RAW_WIDTH - 1
    rings = raw.to_series(rings_position)
    parsed = rings.str.strip_chars().cast(pl.Float64, strict=False)
    failures = parsed.is_null().arg_true()
    if len(failures):
        row = int(failures[0])
        raise UnparsableFieldError(row=row, column=rings_position, value=rings[row], reason="ring count is not a number")

    labels = pl.Series("class", bin_labels(parsed.to_numpy(), ABALONE_RING_EDGES))
    frame = raw.drop(rings.name).insert_column(0, labels)
    dataset = Dataset.from_polars(frame, ABALONE_SCHEMA)
    logger.debug("Abalone loaded", path=str(path), rows=len(dataset), class_counts=dataset.class_counts().tolist())
    return dataset


def _read_text_frame(path: str | Path, *, has_header: bool, separator: str) -> pl.DataFrame:
    """Read every column of a delimited file as `String`."""
    return pl.read_csv(path, has_header=has_header, separator=separator, infer_schema=False)
