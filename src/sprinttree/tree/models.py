"""Pydantic models for built trees, predicates, rules and confusion matrices."""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterator, Sequence
from typing import Any, Literal

import numpy as np
import polars as pl
from pydantic import BaseModel, ConfigDict, Field, field_validator

from sprinttree.polars_utils import to_markdown_table
from sprinttree.schema import AttributeKind, AttributeSchema

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type PredicateOp = Literal["<=", ">", "==", "!="]

# ---------------------------------------------------------------------------
# Public models -- Predicates and rules
# ---------------------------------------------------------------------------


class Predicate(BaseModel):
    """A single boolean condition on one attribute column.

    Numeric splits produce `<=` (left branch) and `>` (right branch)
    predicates; categorical splits produce `==` and `!=`.

    Attributes:
        column (int): Attribute column index the condition applies to.
        operator (PredicateOp): Comparison operator.
        value (float | str): Threshold or category compared against.

    Examples:
        >>> p = Predicate(column=2, operator="<=", value=3.5)
        >>> str(p)
        'col[2] <= 3.5'
        >>> p.eval(1.0)
        True
    """

    model_config = ConfigDict(frozen=True)

    column: int = Field(ge=1, description="Attribute column index the condition applies to.")
    operator: PredicateOp = Field(description="Comparison operator.")
    value: float | str = Field(description="Threshold (numeric splits) or category (categorical splits).")

    def __str__(self) -> str:
        """Return the predicate as `"col[<column>] <operator> <value>"`."""
        return f"col[{self.column}] {self.operator} {self.value}"

    def eval(self, x: float | str) -> bool:
        """Evaluate this predicate against a field value.

        Args:
            x (float | str): The field value to test.

        Returns:
            bool: `True` if the predicate holds for `x`.
        """
        return _OPERATORS[self.operator](x, self.value)


class ClassificationRule(BaseModel):
    """The path from the root to one leaf, with the leaf's prediction.

    Attributes:
        predicates (list[Predicate]): Conditions along the path, root first.
            Empty for a single-leaf tree.
        prediction (int): Class predicted at the leaf.
        samples (int): Training rows that reached the leaf.

    Examples:
        >>> rule = ClassificationRule(
        ...     predicates=[Predicate(column=1, operator="<=", value=3.5)],
        ...     prediction=0,
        ...     samples=2,
        ... )
        >>> str(rule)
        'IF col[1] <= 3.5 THEN class 0 (samples=2)'
    """

    predicates: list[Predicate] = Field(description="Conditions along the root-to-leaf path, root first.")
    prediction: int = Field(ge=0, description="Class predicted at the leaf.")
    samples: int = Field(ge=0, description="Training rows that reached the leaf.")

    def __str__(self) -> str:
        """Return the rule as an `IF ... THEN ...` sentence."""
        condition = " AND ".join(str(predicate) for predicate in self.predicates) or "TRUE"
        return f"IF {condition} THEN class {self.prediction} (samples={self.samples})"

    def matches(self, row: Sequence[Any]) -> bool:
        """Return whether every predicate holds for `row`."""
        return all(predicate.eval(row[predicate.column]) for predicate in self.predicates)


# ---------------------------------------------------------------------------
# Public models -- Tree nodes
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """Terminal node predicting a single class.

    Attributes:
        node_type (Literal["leaf"]): Discriminator; always `"leaf"`.
        predicted_class (int): Majority class of the rows the leaf was built from.
        samples (int): Number of those rows.
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["leaf"] = "leaf"
    predicted_class: int = Field(ge=0)
    samples: int = Field(ge=0)


class InternalNode(BaseModel):
    """Binary split on one attribute column.

    Rows satisfying the split predicate go to `left`, all others to `right`:
    numeric splits send `value <= threshold` left, categorical splits send
    `value == category` left.

    Attributes:
        node_type (Literal["internal"]): Discriminator; always `"internal"`.
        column (int): Split column.
        kind (AttributeKind): Kind of the split column.
        value (float | str): Threshold (numeric) or category (categorical).
        impurity (float): Weighted Gini impurity of the split, in `[0, 1]`.
        samples (int): Rows in the partition that was split.
        left (LeafNode | InternalNode): Child for rows matching the predicate.
        right (LeafNode | InternalNode): Child for all other rows.
    """

    model_config = ConfigDict(frozen=True)

    node_type: Literal["internal"] = "internal"
    column: int = Field(ge=1)
    kind: AttributeKind
    value: float | str
    impurity: float = Field(ge=0.0, le=1.0)
    samples: int = Field(ge=1)
    left: LeafNode | InternalNode = Field(discriminator="node_type")
    right: LeafNode | InternalNode = Field(discriminator="node_type")

    @property
    def is_numeric(self) -> bool:
        """Whether the node splits on a numeric threshold."""
        return self.kind == "numeric"

    def goes_left(self, x: float | str) -> bool:
        """Return whether a row whose split-column value is `x` descends left."""
        if self.is_numeric:
            return float(x) <= float(self.value)
        return x == self.value

    def predicates(self) -> tuple[Predicate, Predicate]:
        """Return the `(left, right)` branch predicates of this split."""
        if self.is_numeric:
            return (
                Predicate(column=self.column, operator="<=", value=self.value),
                Predicate(column=self.column, operator=">", value=self.value),
            )
        return (
            Predicate(column=self.column, operator="==", value=self.value),
            Predicate(column=self.column, operator="!=", value=self.value),
        )


type TreeNode = LeafNode | InternalNode

InternalNode.model_rebuild()


class DecisionTree(BaseModel):
    """A binary decision tree produced by one `build_tree` call.

    Attributes:
        root (LeafNode | InternalNode): Root node. A leaf only when the tree
            was built from a single row.
        attribute_schema (AttributeSchema): Schema the tree was built with.
        threshold (float): Impurity threshold used while building.

    Note:
        JSON dumps recurse through the nested nodes, so `model_dump_json`
        raises `PydanticSerializationError` once the tree is deeper than
        pydantic's recursion limit. Traversal methods here are iterative and
        work at any depth.
    """

    model_config = ConfigDict(frozen=True)

    root: LeafNode | InternalNode = Field(discriminator="node_type")
    attribute_schema: AttributeSchema
    threshold: float = Field(ge=0.0)

    def iter_nodes(self) -> Iterator[tuple[TreeNode, int]]:
        """Yield `(node, depth)` pairs in pre-order, left before right.

        Yields:
            tuple[TreeNode, int]: Each node with its depth (root is 0).
        """
        stack: list[tuple[TreeNode, int]] = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if isinstance(node, InternalNode):
                stack.append((node.right, depth + 1))
                stack.append((node.left, depth + 1))

    def iter_leaves(self) -> Iterator[LeafNode]:
        """Yield leaves left to right."""
        for node, _ in self.iter_nodes():
            if isinstance(node, LeafNode):
                yield node

    @property
    def depth(self) -> int:
        """Length of the longest root-to-leaf path (0 for a single leaf)."""
        return max(depth for _, depth in self.iter_nodes())

    @property
    def node_count(self) -> int:
        """Total number of nodes."""
        return sum(1 for _ in self.iter_nodes())

    @property
    def leaf_count(self) -> int:
        """Number of leaves."""
        return sum(1 for _ in self.iter_leaves())

    def route(self, row: Sequence[Any]) -> LeafNode:
        """Descend from the root to the leaf that `row` reaches.

        Args:
            row (Sequence[Any]): A full row; `row[column]` is read at each split.

        Returns:
            LeafNode: The leaf reached.
        """
        node: TreeNode = self.root
        while isinstance(node, InternalNode):
            node = node.left if node.goes_left(row[node.column]) else node.right
        return node


# ---------------------------------------------------------------------------
# Public models -- Evaluation
# ---------------------------------------------------------------------------


class ConfusionMatrix(BaseModel):
    """Actual-versus-predicted class counts.

    Attributes:
        counts (list[list[int]]): `n_classes × n_classes` grid; `counts[a][p]`
            is the number of rows of actual class `a` predicted as `p`.

    Examples:
        >>> matrix = ConfusionMatrix(counts=[[2, 0], [1, 1]])
        >>> matrix.accuracy
        0.75
    """

    model_config = ConfigDict(frozen=True)

    counts: list[list[int]] = Field(description="Grid of counts indexed [actual][predicted].")

    @field_validator("counts", mode="after")
    @classmethod
    def _validate_square_non_negative(cls, value: list[list[int]]) -> list[list[int]]:
        """Validate that the grid is square, non-empty and non-negative.

        Args:
            value (list[list[int]]): The grid to validate.

        Returns:
            list[list[int]]: The validated grid, unchanged.

        Raises:
            ValueError: If the grid is empty, not square, or has a negative cell.
        """
        size = len(value)
        if size == 0:
            raise ValueError("counts must have at least one class")
        if any(len(row) != size for row in value):
            raise ValueError(f"counts must be a square {size}x{size} grid")
        if any(cell < 0 for row in value for cell in row):
            raise ValueError("counts must be non-negative")
        return value

    @classmethod
    def from_array(cls, array: np.ndarray) -> ConfusionMatrix:
        """Build a confusion matrix from a 2-D integer array."""
        return cls(counts=np.asarray(array, dtype=np.int64).tolist())

    @property
    def n_classes(self) -> int:
        """Number of classes."""
        return len(self.counts)

    @property
    def total(self) -> int:
        """Number of rows counted."""
        return sum(sum(row) for row in self.counts)

    @property
    def correct(self) -> int:
        """Number of rows on the diagonal."""
        return sum(self.counts[index][index] for index in range(self.n_classes))

    @property
    def accuracy(self) -> float:
        """Fraction of rows predicted correctly; 0.0 when nothing was counted."""
        total = self.total
        return self.correct / total if total else 0.0

    @property
    def error(self) -> float:
        """Fraction of rows predicted incorrectly."""
        return 1.0 - self.accuracy if self.total else 0.0

    def to_array(self) -> np.ndarray:
        """Return the grid as an `int64` array."""
        return np.array(self.counts, dtype=np.int64)

    def to_frame(self) -> pl.DataFrame:
        """Return the grid as a DataFrame with one row per actual class."""
        data: dict[str, list[int]] = {"actual": list(range(self.n_classes))}
        for predicted in range(self.n_classes):
            data[f"predicted_{predicted}"] = [row[predicted] for row in self.counts]
        return pl.DataFrame(data)

    def to_markdown(self) -> str:
        """Render the grid as a Markdown table."""
        return to_markdown_table(self.to_frame(), num_rows=self.n_classes)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "<=": operator.le,
    ">": operator.gt,
    "==": operator.eq,
    "!=": operator.ne,
}
