"""SPRINT tree induction: grow a binary tree until splits are pure enough.

Each partition is searched for its best split. While the split's impurity is
at or above the threshold both sides are grown further, left subtree first.
Once it drops below the threshold the two sides become leaves predicting their
majority class. Growth runs off an explicit work list, so tree depth is not
bounded by the interpreter's recursion limit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from loguru import logger

from sprinttree.dataset import Dataset
from sprinttree.exceptions import EmptyDatasetError
from sprinttree.logging import BUILD_LEVEL
from sprinttree.schema import AttributeSchema
from sprinttree.settings import get_settings
from sprinttree.tree.models import DecisionTree, InternalNode, LeafNode, TreeNode
from sprinttree.tree.splitting import SplitCandidate, find_best_split

# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def build_tree(
    dataset: Dataset,
    schema: AttributeSchema,
    threshold: float | None = None,
) -> DecisionTree:
    """Grow a decision tree over `dataset` with the SPRINT procedure.

    Args:
        dataset (Dataset): Training rows. Not modified.
        schema (AttributeSchema): Kinds of the attribute columns; must match
            the schema the dataset was loaded with.
        threshold (float | None): Stop-splitting impurity cutoff. `None` uses
            `SprintSettings.impurity_threshold` (0.4 unless configured).

    Returns:
        DecisionTree: The built tree. Its root is a leaf only when `dataset`
            has a single row.

    Raises:
        EmptyDatasetError: If `dataset` has no rows.
        InvalidSchemaError: If `schema` does not describe `dataset`.
        ValueError: If `threshold` is negative or NaN.
    """
    resolved_threshold = _resolve_threshold(threshold)
    if len(dataset) == 0:
        raise EmptyDatasetError("build_tree")
    dataset.check_schema(schema)

    logger.log(
        BUILD_LEVEL,
        "Building tree",
        rows=len(dataset),
        columns=len(schema.columns),
        n_classes=schema.n_classes,
        threshold=resolved_threshold,
    )
    root = _grow(dataset, resolved_threshold)
    tree = DecisionTree(root=root, attribute_schema=schema, threshold=resolved_threshold)
    logger.log(BUILD_LEVEL, "Tree built", depth=tree.depth, nodes=tree.node_count, leaves=tree.leaf_count)
    return tree


def majority_leaf(partition: Dataset) -> LeafNode:
    """Return a leaf predicting the majority class of `partition`.

    Args:
        partition (Dataset): Rows the leaf stands for.

    Returns:
        LeafNode: Leaf whose class is the most frequent one, ties going to the
            lowest class index.
    """
    leaf = LeafNode(predicted_class=partition.majority_class(), samples=len(partition))
    logger.debug("Leaf created", predicted_class=leaf.predicted_class, rows=leaf.samples)
    return leaf


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class _PendingSplit:
    """An internal node whose two children are still being grown."""

    candidate: SplitCandidate
    samples: int
    children: list[TreeNode | _PendingSplit | None] = field(default_factory=lambda: [None, None])

    def to_node(self, left: TreeNode, right: TreeNode) -> InternalNode:
        return InternalNode(
            column=self.candidate.column,
            kind=self.candidate.kind,
            value=self.candidate.value,
            impurity=self.candidate.impurity,
            samples=self.samples,
            left=left,
            right=right,
        )


type _Slot = tuple[_PendingSplit, int] | None


def _grow(dataset: Dataset, threshold: float) -> TreeNode:
    """Grow the tree for `dataset` and return its root."""
    root: list[TreeNode | _PendingSplit] = []
    # LIFO: the right side is pushed first so the left subtree finishes first.
    work: list[tuple[Dataset, _Slot]] = [(dataset, None)]

    while work:
        partition, slot = work.pop()
        candidate = find_best_split(partition)
        if candidate is None:
            _attach(majority_leaf(partition), slot, root)
            continue

        left_rows, right_rows = candidate.partition(partition)
        left, right = partition.take(left_rows), partition.take(right_rows)
        pending = _PendingSplit(candidate=candidate, samples=len(partition))
        _attach(pending, slot, root)
        logger.debug(
            "Split found",
            column=candidate.column,
            kind=candidate.kind,
            value=candidate.value,
            impurity=candidate.impurity,
            rows=len(partition),
            left_rows=len(left),
            right_rows=len(right),
        )

        if candidate.impurity >= threshold and len(right):
            work.append((right, (pending, 1)))
            work.append((left, (pending, 0)))
            continue

        if candidate.impurity >= threshold:
            # No split separates any row; growing `left` would revisit this partition.
            logger.warning(
                "No separating split, stopping early",
                column=candidate.column,
                impurity=candidate.impurity,
                rows=len(partition),
            )
        left_leaf = majority_leaf(left)
        pending.children = [left_leaf, majority_leaf(right) if len(right) else left_leaf]

    return _freeze(root[0])


def _attach(node: TreeNode | _PendingSplit, slot: _Slot, root: list[TreeNode | _PendingSplit]) -> None:
    """Place `node` in its parent's child slot, or make it the root."""
    if slot is None:
        root.append(node)
        return
    parent, side = slot
    parent.children[side] = node


def _freeze(root: TreeNode | _PendingSplit) -> TreeNode:
    """Convert pending splits into immutable nodes, children before parents."""
    if not isinstance(root, _PendingSplit):
        return root

    built: dict[int, TreeNode] = {}
    stack: list[tuple[_PendingSplit, bool]] = [(root, False)]
    while stack:
        pending, children_done = stack.pop()
        if not children_done:
            stack.append((pending, True))
            stack.extend((child, False) for child in pending.children if isinstance(child, _PendingSplit))
            continue
        left, right = (
            built.pop(id(child)) if isinstance(child, _PendingSplit) else child for child in pending.children
        )
        if left is None or right is None:
            raise RuntimeError("Internal node finished with an empty child slot")
        built[id(pending)] = pending.to_node(left, right)
    return built[id(root)]


def _resolve_threshold(threshold: float | None) -> float:
    """Return the configured threshold when none is given; reject invalid values."""
    if threshold is None:
        return get_settings().impurity_threshold
    if math.isnan(threshold) or threshold < 0.0:
        raise ValueError(f"threshold must be a non-negative number, got {threshold}")
    return float(threshold)
