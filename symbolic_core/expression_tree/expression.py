import numpy as np
import sympy as sp
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from ..dataset import Dataset
from ..errors import NotFoundError
from ..variables import Range
from .core.node import Node
from .core.operators import NodeKind, evaluate_binary_op, evaluate_unary_op
from .utils.sympy_utils import nodes_to_sympy
from .utils.tree_utils import (
  calculate_tree_depth, child_indices, get_constants, get_variable_usage_counts,
  replace_subtree, subtree_bounds
)
from .utils.validator import validate_postfix

NameSource = Union[Dataset, Mapping[int, str]]


def resolve_variable_names(nodes: Iterable[Node], names: NameSource) -> Dict[int, str]:
  """
  Map every variable hash used by ``nodes`` to its name.

  Raises:
      NotFoundError if a hash is not defined by ``names``
  """
  resolved: Dict[int, str] = {}
  for node in nodes:
    if not node.is_variable or node.variable_hash in resolved:
      continue
    if isinstance(names, Dataset):
      resolved[node.variable_hash] = names.get_variable(node.variable_hash).name
    else:
      try:
        resolved[node.variable_hash] = names[node.variable_hash]
      except KeyError:
        raise NotFoundError(f"no name for variable hash {node.variable_hash}") from None
  return resolved


class ExpressionTree:
  """
  Postfix-encoded expression with an immutable shape.

  Children precede their parent in argument order. Operations that change the
  structure return new trees, so an existing tree can be read concurrently
  while variations of it are produced.
  """

  __slots__ = ('_nodes', '_lengths', '_hash_cache')

  def __init__(self, nodes: Iterable[Node]):
    nodes = tuple(nodes)
    self._lengths: Tuple[int, ...] = validate_postfix(nodes)
    self._nodes: Tuple[Node, ...] = nodes
    self._hash_cache: Optional[int] = None

  @property
  def nodes(self) -> Tuple[Node, ...]:
    return self._nodes

  @property
  def root(self) -> Node:
    return self._nodes[-1]

  def __len__(self) -> int:
    return len(self._nodes)

  def __iter__(self) -> Iterator[Node]:
    return iter(self._nodes)

  def __getitem__(self, index: int) -> Node:
    return self._nodes[index]

  def subtree_length(self, index: int) -> int:
    return self._lengths[index]

  def children(self, index: int) -> List[int]:
    return child_indices(self._nodes, self._lengths, index)

  def subtree(self, index: int) -> 'ExpressionTree':
    start, end = subtree_bounds(self._lengths, index)
    return ExpressionTree(self._nodes[start:end])

  def depth(self) -> int:
    return calculate_tree_depth(self._nodes, self._lengths)

  def variable_hashes(self) -> FrozenSet[int]:
    return frozenset(n.variable_hash for n in self._nodes if n.is_variable)

  def variable_usage(self) -> Dict[int, int]:
    return get_variable_usage_counts(self._nodes)

  def constants(self) -> Tuple[float, ...]:
    return tuple(get_constants(self._nodes))

  def with_constants(self, values: Sequence[float]) -> 'ExpressionTree':
    """Same shape with constant leaves replaced, in postfix order"""
    values = list(values)
    if len(values) != len(self.constants()):
      raise ValueError(f"expected {len(self.constants())} constants, got {len(values)}")
    it = iter(values)
    return ExpressionTree(Node.constant(next(it)) if n.is_constant else n for n in self._nodes)

  def replace_subtree(self, index: int,
                      replacement: Union['ExpressionTree', Sequence[Node]]) -> 'ExpressionTree':
    if isinstance(replacement, ExpressionTree):
      replacement = replacement.nodes
    return ExpressionTree(replace_subtree(self._nodes, self._lengths, index, replacement))

  def evaluate(self, dataset: Dataset, rng: Optional[Range] = None) -> np.ndarray:
    """
    Evaluate over the rows of ``rng`` (all rows by default).

    Variable leaves are resolved by hash against ``dataset``; no protection
    against domain errors is applied, so results may hold nan or inf.
    """
    rng = dataset.resolve_range(rng)
    stack: List[np.ndarray] = []
    for node in self._nodes:
      kind = node.kind
      if kind == NodeKind.CONSTANT:
        stack.append(np.full(rng.size, node.value, dtype=np.float64))
      elif kind == NodeKind.VARIABLE:
        var = dataset.get_variable(node.variable_hash)
        stack.append(np.array(dataset.get_values(var, rng), dtype=np.float64))
      elif kind == NodeKind.UNARY:
        stack.append(evaluate_unary_op(stack.pop(), node.type))
      else:
        args = stack[len(stack) - node.arity:]
        del stack[len(stack) - node.arity:]
        result = args[0]
        for arg in args[1:]:
          result = evaluate_binary_op(result, arg, node.type)
        stack.append(result)
    return stack[-1]

  def to_sympy(self, names: NameSource) -> sp.Expr:
    return nodes_to_sympy(self._nodes, resolve_variable_names(self._nodes, names))

  def __eq__(self, other) -> bool:
    if not isinstance(other, ExpressionTree):
      return NotImplemented
    return self._nodes == other._nodes

  def __hash__(self) -> int:
    if self._hash_cache is None:
      self._hash_cache = hash(self._nodes)
    return self._hash_cache

  def __repr__(self) -> str:
    return f"ExpressionTree({list(self._nodes)!r})"
