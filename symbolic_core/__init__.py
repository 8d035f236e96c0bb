"""symbolic_core

Typed columnar datasets and postfix expression trees for genetic-programming
symbolic regression.
"""

from .errors import (
  SymbolicCoreError, ShapeError, FormatError, NotFoundError, ExpressionSyntaxError
)
from .variables import Variable, VariableRegistry, Range, variable_hash, default_variable_names
from .dataset import Dataset
from .config import GeneticAlgorithmConfig
from .expression_tree import (
  ExpressionTree, Node, NodeType, NodeKind,
  InfixFormatter, TreeFormatter, InfixParser
)
from .logging_system import LogLevel, configure_logging, get_logger, set_log_level

__version__ = "0.1.0"
__all__ = [
  "SymbolicCoreError", "ShapeError", "FormatError", "NotFoundError", "ExpressionSyntaxError",
  "Variable", "VariableRegistry", "Range", "variable_hash", "default_variable_names",
  "Dataset", "GeneticAlgorithmConfig",
  "ExpressionTree", "Node", "NodeType", "NodeKind",
  "InfixFormatter", "TreeFormatter", "InfixParser",
  "LogLevel", "configure_logging", "get_logger", "set_log_level"
]
