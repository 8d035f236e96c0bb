"""Core expression tree components."""

from .node import Node
from .operators import (
    NodeType, NodeKind, OperatorInfo, OPERATORS, INFIX_OPERATORS, FUNCTIONS,
    UNARY_MINUS_PRECEDENCE, arity_accepted,
    evaluate_binary_op, evaluate_unary_op
)

__all__ = [
    'Node',
    'NodeType', 'NodeKind', 'OperatorInfo', 'OPERATORS', 'INFIX_OPERATORS', 'FUNCTIONS',
    'UNARY_MINUS_PRECEDENCE', 'arity_accepted',
    'evaluate_binary_op', 'evaluate_unary_op'
]
