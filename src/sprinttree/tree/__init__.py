"""Decision tree sub-package: split search, building, classification and rules."""

from __future__ import annotations

from sprinttree.tree.building import build_tree, majority_leaf
from sprinttree.tree.classification import classify, predict
from sprinttree.tree.models import (
    ClassificationRule,
    ConfusionMatrix,
    DecisionTree,
    InternalNode,
    LeafNode,
    Predicate,
    PredicateOp,
    TreeNode,
)
from sprinttree.tree.rules import extract_rules, render_tree
from sprinttree.tree.splitting import SplitCandidate, find_best_split, split_impurity

__all__ = [
    "ClassificationRule",
    "ConfusionMatrix",
    "DecisionTree",
    "InternalNode",
    "LeafNode",
    "Predicate",
    "PredicateOp",
    "SplitCandidate",
    "TreeNode",
    "build_tree",
    "classify",
    "extract_rules",
    "find_best_split",
    "majority_leaf",
    "predict",
    "render_tree",
    "split_impurity",
]
