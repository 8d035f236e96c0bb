"""Utilities for expression trees."""

from .validator import ExpressionValidator, validate_postfix
from .sympy_utils import nodes_to_sympy
from .tree_utils import (
    subtree_bounds, child_indices, calculate_tree_depth, replace_subtree,
    get_variable_usage_counts, get_constants
)

__all__ = [
    'ExpressionValidator', 'validate_postfix', 'nodes_to_sympy',
    'subtree_bounds', 'child_indices', 'calculate_tree_depth', 'replace_subtree',
    'get_variable_usage_counts', 'get_constants'
]
