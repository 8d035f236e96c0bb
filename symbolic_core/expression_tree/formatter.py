"""
Text rendering of expression trees.

InfixFormatter output is accepted by InfixParser and re-parses to the same
node sequence, provided every constant is exactly representable with the
requested number of decimal digits. Variable names that are not plain
identifiers are written between backticks. Binary operators are always fully
parenthesized so no precedence knowledge is needed to read the output back.
"""

from typing import Dict, List

from ..errors import FormatError
from ..variables import is_bare_identifier
from .core.node import Node
from .core.operators import NodeKind, NodeType, OPERATORS
from .expression import ExpressionTree, NameSource, resolve_variable_names


def _format_constant(value: float, precision: int) -> str:
  text = f"{value:.{precision}f}"
  # negative literals are wrapped so a leading '-' is never read as NEG
  return f"({text})" if text.startswith('-') else text


def _format_name(name: str) -> str:
  if is_bare_identifier(name):
    return name
  if not name or '`' in name:
    raise FormatError(f"variable name {name!r} cannot be written in infix text")
  return f"`{name}`"


def _check_precision(precision: int):
  if precision < 0:
    raise ValueError(f"precision must be non-negative, got {precision}")


class InfixFormatter:

  @staticmethod
  def format(tree: ExpressionTree, names: NameSource, precision: int = 6) -> str:
    """
    Render ``tree`` in infix notation.

    Args:
        tree: Expression to render
        names: Dataset or mapping from variable hash to name
        precision: Decimal digits for constant leaves

    Raises:
        NotFoundError if a variable leaf cannot be named
        FormatError if a name contains a backtick and so cannot be quoted
    """
    _check_precision(precision)
    resolved = resolve_variable_names(tree.nodes, names)

    stack: List[str] = []
    for node in tree.nodes:
      stack.append(InfixFormatter._format_node(node, stack, resolved, precision))
    return stack[-1]

  @staticmethod
  def _format_node(node: Node, stack: List[str], names: Dict[int, str], precision: int) -> str:
    if node.is_constant:
      return _format_constant(node.value, precision)
    if node.is_variable:
      return _format_name(names[node.variable_hash])

    args = stack[len(stack) - node.arity:]
    del stack[len(stack) - node.arity:]
    info = OPERATORS[node.type]
    if node.type == NodeType.NEG:
      # wrapped whole so a following '^' cannot bind to the operand alone
      operand = args[0] if args[0].startswith('(') else f"({args[0]})"
      return f"(-{operand})"
    if info.kind == NodeKind.BINARY and info.precedence > 0:
      return f"({args[0]} {info.symbol} {args[1]})"
    return f"{info.symbol}({', '.join(args)})"


class TreeFormatter:
  """Prefix (S-expression) rendering, e.g. ``(+ x (* y 2.000))``"""

  @staticmethod
  def format(tree: ExpressionTree, names: NameSource, precision: int = 6) -> str:
    _check_precision(precision)
    resolved = resolve_variable_names(tree.nodes, names)

    stack: List[str] = []
    for node in tree.nodes:
      if node.is_constant:
        stack.append(f"{node.value:.{precision}f}")
      elif node.is_variable:
        stack.append(_format_name(resolved[node.variable_hash]))
      else:
        args = stack[len(stack) - node.arity:]
        del stack[len(stack) - node.arity:]
        symbol = 'neg' if node.type == NodeType.NEG else OPERATORS[node.type].symbol
        stack.append(f"({symbol} {' '.join(args)})")
    return stack[-1]
