"""sprinttree: SPRINT decision-tree induction with Gini impurity."""

from loguru import logger

from sprinttree.dataset import Dataset
from sprinttree.exceptions import EmptyDatasetError, InvalidSchemaError, SprintTreeError, UnparsableFieldError
from sprinttree.loaders import ABALONE_SCHEMA, bin_labels, load_abalone, read_csv
from sprinttree.logging import PACKAGE_NAME, enable_logging
from sprinttree.schema import AttributeSchema
from sprinttree.settings import SprintSettings, get_settings
from sprinttree.tree import (
    ConfusionMatrix,
    DecisionTree,
    build_tree,
    classify,
    extract_rules,
    find_best_split,
    predict,
    render_tree,
    split_impurity,
)

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the sprinttree module by default

__all__ = [
    "ABALONE_SCHEMA",
    "AttributeSchema",
    "ConfusionMatrix",
    "Dataset",
    "DecisionTree",
    "EmptyDatasetError",
    "InvalidSchemaError",
    "SprintSettings",
    "SprintTreeError",
    "UnparsableFieldError",
    "bin_labels",
    "build_tree",
    "classify",
    "enable_logging",
    "extract_rules",
    "find_best_split",
    "get_settings",
    "load_abalone",
    "predict",
    "read_csv",
    "render_tree",
    "split_impurity",
]
