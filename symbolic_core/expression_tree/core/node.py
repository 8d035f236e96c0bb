from dataclasses import dataclass
from typing import Optional

from ...errors import ShapeError
from .operators import NodeType, NodeKind, OPERATORS, arity_accepted


@dataclass(frozen=True)
class Node:
  """
  One element of a postfix-encoded expression.

  Tagged by ``type``; ``variable_hash`` is meaningful only for variable leaves
  and ``value`` only for constant leaves. Variable leaves refer to dataset
  columns by hash, never by reference.
  """

  type: NodeType
  arity: int = 0
  variable_hash: int = 0
  value: float = 0.0

  def __post_init__(self):
    object.__setattr__(self, 'type', NodeType(self.type))
    if not arity_accepted(self.type, self.arity):
      raise ShapeError(f"{self.type.name} does not accept arity {self.arity}")

  @classmethod
  def constant(cls, value: float) -> 'Node':
    return cls(NodeType.CONSTANT, 0, 0, float(value))

  @classmethod
  def variable(cls, variable_hash: int) -> 'Node':
    return cls(NodeType.VARIABLE, 0, int(variable_hash), 0.0)

  @classmethod
  def operator(cls, node_type: NodeType, arity: Optional[int] = None) -> 'Node':
    if arity is None:
      arity = OPERATORS[node_type].min_arity
    return cls(NodeType(node_type), arity)

  @property
  def kind(self) -> NodeKind:
    return OPERATORS[self.type].kind

  @property
  def is_leaf(self) -> bool:
    return self.arity == 0

  @property
  def is_constant(self) -> bool:
    return self.type == NodeType.CONSTANT

  @property
  def is_variable(self) -> bool:
    return self.type == NodeType.VARIABLE

  def __repr__(self) -> str:
    if self.is_constant:
      return f"Node(CONSTANT, {self.value!r})"
    if self.is_variable:
      return f"Node(VARIABLE, {self.variable_hash})"
    return f"Node({self.type.name}, arity={self.arity})"
