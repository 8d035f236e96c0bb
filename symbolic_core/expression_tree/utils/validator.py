import numpy as np
from typing import Sequence, Tuple

from ...errors import ShapeError
from ..core.node import Node
from ..core.operators import NodeKind, arity_accepted


def validate_postfix(nodes: Sequence[Node]) -> Tuple[int, ...]:
  """
  Check that ``nodes`` encode exactly one well-formed postfix expression.

  Each node consumes ``arity`` complete subtrees immediately preceding it.

  Returns:
      Subtree length for every position (1 for leaves)

  Raises:
      ShapeError on dangling operands, missing operands or bad arity
  """
  if len(nodes) == 0:
    raise ShapeError("an expression tree needs at least one node")

  lengths = []
  stack = []   # lengths of the complete subtrees not yet consumed
  for i, node in enumerate(nodes):
    if not isinstance(node, Node):
      raise ShapeError(f"position {i} holds {type(node).__name__}, not a Node")
    if not arity_accepted(node.type, node.arity):
      raise ShapeError(f"position {i}: {node.type.name} does not accept arity {node.arity}")
    if node.arity > len(stack):
      raise ShapeError(
        f"position {i}: {node.type.name} needs {node.arity} operands, only {len(stack)} available")

    length = 1
    for _ in range(node.arity):
      length += stack.pop()
    stack.append(length)
    lengths.append(length)

  if len(stack) != 1:
    raise ShapeError(f"nodes encode {len(stack)} separate expressions, expected exactly one")
  return tuple(lengths)


class ExpressionValidator:

  @staticmethod
  def is_valid_expression(nodes: Sequence[Node], require_finite: bool = True) -> bool:
    try:
      validate_postfix(nodes)
    except ShapeError:
      return False

    if require_finite:
      return all(np.isfinite(n.value) for n in nodes if n.kind == NodeKind.CONSTANT)
    return True
