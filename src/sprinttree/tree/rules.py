"""Rule extraction and human-readable dumps of built trees."""

from __future__ import annotations

from sprinttree.tree.models import ClassificationRule, DecisionTree, InternalNode, Predicate, TreeNode

_INDENT: str = "    "


def extract_rules(tree: DecisionTree) -> list[ClassificationRule]:
    """Return one rule per leaf, ordered left to right.

    Each rule lists the branch predicates from the root down to its leaf:
    `<=` / `>` for numeric splits and `==` / `!=` for categorical ones.

    Args:
        tree (DecisionTree): A built tree.

    Returns:
        list[ClassificationRule]: Rules in the same order as `tree.iter_leaves()`.
    """
    rules: list[ClassificationRule] = []
    stack: list[tuple[TreeNode, list[Predicate]]] = [(tree.root, [])]
    while stack:
        node, path = stack.pop()
        if not isinstance(node, InternalNode):
            rules.append(ClassificationRule(predicates=path, prediction=node.predicted_class, samples=node.samples))
            continue
        left_predicate, right_predicate = node.predicates()
        stack.append((node.right, [*path, right_predicate]))
        stack.append((node.left, [*path, left_predicate]))
    return rules


def render_tree(tree: DecisionTree) -> str:
    """Render the tree as indented text, one node per line.

    Splits print as `col[<c>] <= <threshold>` or `col[<c>] == <category>`
    followed by the left (`yes`) and right (`no`) branches one level deeper.

    Args:
        tree (DecisionTree): A built tree.

    Returns:
        str: The rendered tree.

    Examples:
        >>> print(render_tree(tree))  # doctest: +SKIP
        col[1] <= 3.5 (impurity=0.0000, samples=4)
            yes: class 0 (samples=2)
            no: class 1 (samples=2)
    """
    lines: list[str] = []
    stack: list[tuple[TreeNode, int, str]] = [(tree.root, 0, "")]
    while stack:
        node, depth, branch = stack.pop()
        prefix = f"{_INDENT * depth}{branch}"
        if not isinstance(node, InternalNode):
            lines.append(f"{prefix}class {node.predicted_class} (samples={node.samples})")
            continue
        operator = "<=" if node.is_numeric else "=="
        lines.append(f"{prefix}col[{node.column}] {operator} {node.value} (impurity={node.impurity:.4f}, samples={node.samples})")
        stack.append((node.right, depth + 1, "no: "))
        stack.append((node.left, depth + 1, "yes: "))
    return "\n".join(lines)
