"""Expression Tree Module

Postfix expression trees whose variable leaves reference dataset columns by
hash, together with infix/prefix formatting and infix parsing.
"""

from .expression import ExpressionTree, resolve_variable_names
from .core.node import Node
from .core.operators import (
    NodeType,
    NodeKind,
    OperatorInfo,
    OPERATORS,
    INFIX_OPERATORS,
    FUNCTIONS,
    evaluate_binary_op,
    evaluate_unary_op
)
from .formatter import InfixFormatter, TreeFormatter
from .parser import InfixParser, Token, tokenize
from .utils import ExpressionValidator, validate_postfix

__all__ = [
    "ExpressionTree", "resolve_variable_names",
    "Node", "NodeType", "NodeKind", "OperatorInfo",
    "OPERATORS", "INFIX_OPERATORS", "FUNCTIONS",
    "evaluate_binary_op", "evaluate_unary_op",
    "InfixFormatter", "TreeFormatter",
    "InfixParser", "Token", "tokenize",
    "ExpressionValidator", "validate_postfix"
]
