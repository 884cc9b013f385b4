"""Evaluate a built tree over a dataset."""

from __future__ import annotations

import numpy as np
from loguru import logger

from sprinttree.dataset import Dataset
from sprinttree.exceptions import EmptyDatasetError, InvalidSchemaError
from sprinttree.logging import BUILD_LEVEL
from sprinttree.schema import AttributeSchema
from sprinttree.tree.models import ConfusionMatrix, DecisionTree, InternalNode, TreeNode


def predict(dataset: Dataset, tree: DecisionTree) -> np.ndarray:
    """Return the class the tree predicts for every row of `dataset`.

    Row positions are routed down the tree together: at each internal node
    the positions satisfying its predicate continue left, the rest right.

    Args:
        dataset (Dataset): Rows to classify.
        tree (DecisionTree): A built tree. Not modified.

    Returns:
        np.ndarray: 1-D `int64` array of predicted classes, in row order.
    """
    predictions = np.empty(len(dataset), dtype=np.int64)
    stack: list[tuple[TreeNode, np.ndarray]] = [(tree.root, np.arange(len(dataset)))]
    while stack:
        node, positions = stack.pop()
        if not isinstance(node, InternalNode):
            predictions[positions] = node.predicted_class
            continue
        values = dataset.column(node.column)[positions]
        goes_left = values <= float(node.value) if node.is_numeric else values == node.value
        goes_left = np.asarray(goes_left, dtype=bool)
        stack.append((node.right, positions[~goes_left]))
        stack.append((node.left, positions[goes_left]))
    return predictions


def classify(
    dataset: Dataset,
    tree: DecisionTree,
    schema: AttributeSchema | None = None,
) -> ConfusionMatrix:
    """Classify every row and tabulate actual against predicted classes.

    Args:
        dataset (Dataset): Rows to evaluate, e.g. a held-out split.
        tree (DecisionTree): A built tree. Not modified.
        schema (AttributeSchema | None): Schema of `dataset`. `None` uses the
            schema the tree was built with.

    Returns:
        ConfusionMatrix: `n_classes × n_classes` counts indexed
            `[actual][predicted]`.

    Raises:
        EmptyDatasetError: If `dataset` has no rows.
        InvalidSchemaError: If the schema does not describe `dataset`, or the
            tree splits on a column the schema omits or declares with another kind.
    """
    resolved_schema = schema if schema is not None else tree.attribute_schema
    if len(dataset) == 0:
        raise EmptyDatasetError("classify")
    dataset.check_schema(resolved_schema)
    _check_tree_columns(tree, resolved_schema)

    logger.log(BUILD_LEVEL, "Classifying rows", rows=len(dataset), leaves=tree.leaf_count)
    n_classes = max(resolved_schema.n_classes, tree.attribute_schema.n_classes)
    counts = np.zeros((n_classes, n_classes), dtype=np.int64)
    np.add.at(counts, (dataset.labels, predict(dataset, tree)), 1)

    matrix = ConfusionMatrix.from_array(counts)
    logger.debug("Rows classified", accuracy=matrix.accuracy, error=matrix.error)
    return matrix


def _check_tree_columns(tree: DecisionTree, schema: AttributeSchema) -> None:
    """Require every split column of `tree` to be declared in `schema` with the same kind."""
    mismatched = sorted(
        {
            node.column
            for node, _ in tree.iter_nodes()
            if isinstance(node, InternalNode) and schema.attributes.get(node.column) != node.kind
        }
    )
    if mismatched:
        raise InvalidSchemaError(
            f"Tree splits on columns {mismatched} that the schema omits or declares with a different kind",
            columns=mismatched,
        )
