"""
Tree Utility Functions

Navigation helpers over postfix node sequences. Every function takes the node
tuple together with the subtree lengths computed by validate_postfix, so no
pointers between nodes are ever needed.
"""

from collections import Counter
from typing import Dict, List, Sequence, Tuple

from ..core.node import Node


def subtree_bounds(lengths: Sequence[int], index: int) -> Tuple[int, int]:
    """
    Half-open slice [start, end) covering the subtree rooted at ``index``.
    """
    return index - lengths[index] + 1, index + 1


def child_indices(nodes: Sequence[Node], lengths: Sequence[int], index: int) -> List[int]:
    """
    Positions of the children of ``index`` in argument order.

    In postfix order the last argument ends right before its parent, and each
    earlier argument ends right before the start of the one after it.
    """
    children = []
    child = index - 1
    for _ in range(nodes[index].arity):
        children.append(child)
        child -= lengths[child]
    children.reverse()
    return children


def calculate_tree_depth(nodes: Sequence[Node], lengths: Sequence[int]) -> int:
    """
    Maximum depth of the tree (a single leaf has depth 1).
    """
    depths: List[int] = []
    for i, node in enumerate(nodes):
        if node.arity == 0:
            depths.append(1)
        else:
            depths.append(1 + max(depths[c] for c in child_indices(nodes, lengths, i)))
    return depths[-1]


def replace_subtree(nodes: Sequence[Node], lengths: Sequence[int], index: int,
                    replacement: Sequence[Node]) -> Tuple[Node, ...]:
    """
    New node tuple with the subtree at ``index`` swapped for ``replacement``.

    The input sequence is never modified, so trees sharing it stay valid.
    """
    start, end = subtree_bounds(lengths, index)
    return tuple(nodes[:start]) + tuple(replacement) + tuple(nodes[end:])


def get_variable_usage_counts(nodes: Sequence[Node]) -> Dict[int, int]:
    """
    Count how often each variable hash appears in the tree.
    """
    return dict(Counter(n.variable_hash for n in nodes if n.is_variable))


def get_constants(nodes: Sequence[Node]) -> List[float]:
    """
    Constant leaf values in postfix order.
    """
    return [n.value for n in nodes if n.is_constant]
