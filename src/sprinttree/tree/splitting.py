"""Weighted Gini split evaluation and best-split search.

A candidate split is anchored at one row of one attribute column. For a
numeric column the partition is first put in stable ascending order of that
column; the anchor row and every row before it form the matching side. For a
categorical column the matching side is every row whose value equals the
anchor row's value. The weighted Gini impurity of the two sides is the
quantity the search minimizes.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from loguru import logger

from sprinttree.dataset import Dataset
from sprinttree.schema import AttributeKind

# ---------------------------------------------------------------------------
# Public types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=False)
class SplitCandidate:
    """The best split found for one partition.

    Attributes:
        column (int): Split column.
        kind (AttributeKind): Kind of the split column.
        impurity (float): Weighted Gini impurity of the split.
        pivot (int): Position of the anchor row within `order`.
        value (float | str): Numeric threshold (midpoint between the anchor
            value and the next value in sort order) or the anchor category.
        order (np.ndarray): Row positions of the partition in scan order:
            the stable ascending sort by `column` for numeric splits, the
            partition order for categorical ones.
    """

    column: int
    kind: AttributeKind
    impurity: float
    pivot: int
    value: float | str
    order: np.ndarray

    @property
    def is_numeric(self) -> bool:
        """Whether the split is on a numeric column."""
        return self.kind == "numeric"

    def partition(self, dataset: Dataset) -> tuple[np.ndarray, np.ndarray]:
        """Return the row positions of the `(left, right)` sides of the split.

        Numeric splits reuse the sort order of the search: positions up to and
        including the pivot go left. Categorical splits send rows equal to the
        category left. Every row lands on exactly one side.

        Args:
            dataset (Dataset): The partition the candidate was found on.

        Returns:
            tuple[np.ndarray, np.ndarray]: Left and right row positions.
        """
        if self.is_numeric:
            return self.order[: self.pivot + 1], self.order[self.pivot + 1 :]
        matches = dataset.column(self.column) == self.value
        return np.flatnonzero(matches), np.flatnonzero(~matches)


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def split_impurity(dataset: Dataset, anchor_row: int, column: int) -> float:
    """Compute the weighted Gini impurity of the split anchored at `anchor_row`.

    For a numeric column the dataset must already be sorted ascending by that
    column: rows at positions `0..anchor_row` form the matching side. For a
    categorical column the matching side is every row equal to the anchor
    row's value. A side with no rows contributes 0.

    Args:
        dataset (Dataset): The partition to evaluate.
        anchor_row (int): Position of the anchor row.
        column (int): Attribute column to split on.

    Returns:
        float: Weighted impurity in `[0, 1]`.

    Examples:
        >>> schema = AttributeSchema(n_classes=2, attributes={1: "categorical"})  # doctest: +SKIP
        >>> dataset = Dataset.from_rows([[0, "A"], [0, "A"], [1, "B"]], schema)  # doctest: +SKIP
        >>> split_impurity(dataset, 0, 1)  # doctest: +SKIP
        0.0
    """
    values = dataset.column(column)
    if dataset.schema.is_numeric(column):
        matches = np.arange(len(dataset)) <= anchor_row
    else:
        matches = values == values[anchor_row]

    n_classes = dataset.n_classes
    match_counts = np.bincount(dataset.labels[matches], minlength=n_classes).astype(np.float64)
    other_counts = np.bincount(dataset.labels[~matches], minlength=n_classes).astype(np.float64)
    return float(_weighted_gini(match_counts[np.newaxis, :], other_counts[np.newaxis, :])[0])


def find_best_split(dataset: Dataset) -> SplitCandidate | None:
    """Scan every attribute column and anchor row for the lowest-impurity split.

    Columns are scanned in ascending index order and anchors in ascending
    scan order. A candidate replaces the current best only when its impurity
    is strictly lower, so ties go to the lowest column, then the earliest
    anchor.

    Args:
        dataset (Dataset): The partition to search. It is not reordered.

    Returns:
        SplitCandidate | None: The best split, or `None` when the partition
            has fewer than two rows.
    """
    if len(dataset) < 2:
        return None

    best: SplitCandidate | None = None
    for column in dataset.schema.columns:
        kind = dataset.schema.kind(column)
        if kind == "numeric":
            order, impurities = _numeric_impurities(dataset, column)
        else:
            order, impurities = _categorical_impurities(dataset, column)

        # argmin returns the first occurrence of the minimum
        pivot = int(np.argmin(impurities))
        impurity = float(impurities[pivot])
        logger.trace("Column scanned", column=column, kind=kind, impurity=impurity, pivot=pivot)
        if best is None or impurity < best.impurity:
            best = SplitCandidate(
                column=column,
                kind=kind,
                impurity=impurity,
                pivot=pivot,
                value=_split_value(dataset, column, kind, order, pivot),
                order=order,
            )
    return best


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _numeric_impurities(dataset: Dataset, column: int) -> tuple[np.ndarray, np.ndarray]:
    """Impurity of every anchor of a numeric column, in stable sort order."""
    order = np.argsort(dataset.column(column), kind="stable")
    one_hot = _one_hot(dataset.labels[order], dataset.n_classes)
    match_counts = np.cumsum(one_hot, axis=0)
    other_counts = one_hot.sum(axis=0) - match_counts
    return order, _weighted_gini(match_counts, other_counts)


def _categorical_impurities(dataset: Dataset, column: int) -> tuple[np.ndarray, np.ndarray]:
    """Impurity of every anchor of a categorical column, in partition order."""
    _, codes = np.unique(dataset.column(column), return_inverse=True)
    codes = codes.reshape(-1)
    one_hot = _one_hot(dataset.labels, dataset.n_classes)
    per_category = np.zeros((int(codes.max()) + 1, dataset.n_classes), dtype=np.float64)
    np.add.at(per_category, codes, one_hot)
    match_counts = per_category[codes]
    other_counts = one_hot.sum(axis=0) - match_counts
    return np.arange(len(dataset)), _weighted_gini(match_counts, other_counts)


def _split_value(dataset: Dataset, column: int, kind: AttributeKind, order: np.ndarray, pivot: int) -> float | str:
    """Threshold (numeric) or category (categorical) recorded for a split."""
    values = dataset.column(column)
    if kind == "categorical":
        return str(values[order[pivot]])
    if pivot < len(order) - 1:
        return (float(values[order[pivot]]) + float(values[order[pivot + 1]])) / 2
    return float(values[order[pivot]])


def _one_hot(labels: np.ndarray, n_classes: int) -> np.ndarray:
    """Encode labels as a `(n_rows, n_classes)` float indicator matrix."""
    one_hot = np.zeros((len(labels), n_classes), dtype=np.float64)
    one_hot[np.arange(len(labels)), labels] = 1.0
    return one_hot


def _weighted_gini(match_counts: np.ndarray, other_counts: np.ndarray) -> np.ndarray:
    """Weighted Gini impurity for each row of two `(m, n_classes)` count matrices."""
    match_sizes = match_counts.sum(axis=1)
    other_sizes = other_counts.sum(axis=1)
    total_sizes = match_sizes + other_sizes
    return _side_impurity(match_counts, match_sizes, total_sizes) + _side_impurity(
        other_counts, other_sizes, total_sizes
    )


def _side_impurity(counts: np.ndarray, sizes: np.ndarray, total_sizes: np.ndarray) -> np.ndarray:
    """Gini impurity of one side weighted by its share of rows; 0 for empty sides."""
    safe_sizes = np.where(sizes > 0, sizes, 1.0)
    # Classes are accumulated one at a time so a single evaluation and a
    # whole-column evaluation add in the same order.
    sum_of_squares = np.zeros(len(sizes), dtype=np.float64)
    for class_index in range(counts.shape[1]):
        proportion = counts[:, class_index] / safe_sizes
        sum_of_squares += proportion * proportion
    weighted = np.maximum(1.0 - sum_of_squares, 0.0) * (sizes / np.where(total_sizes > 0, total_sizes, 1.0))
    return np.where(sizes > 0, weighted, 0.0)
