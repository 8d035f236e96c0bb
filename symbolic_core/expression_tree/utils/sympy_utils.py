import sympy as sp
from typing import Callable, Dict, Mapping, Sequence

from ..core.node import Node
from ..core.operators import NodeType

_UNARY_SYMPY: Dict[NodeType, Callable[[sp.Expr], sp.Expr]] = {
  NodeType.NEG: lambda a: -a,
  NodeType.ABS: sp.Abs,
  NodeType.ACOS: sp.acos,
  NodeType.ASIN: sp.asin,
  NodeType.ATAN: sp.atan,
  NodeType.CBRT: lambda a: sp.sign(a) * sp.Abs(a) ** sp.Rational(1, 3),
  NodeType.CEIL: sp.ceiling,
  NodeType.COS: sp.cos,
  NodeType.COSH: sp.cosh,
  NodeType.EXP: sp.exp,
  NodeType.FLOOR: sp.floor,
  NodeType.LOG: sp.log,
  NodeType.LOGABS: lambda a: sp.log(sp.Abs(a)),
  NodeType.LOG1P: lambda a: sp.log(1 + a),
  NodeType.SIN: sp.sin,
  NodeType.SINH: sp.sinh,
  NodeType.SQRT: sp.sqrt,
  NodeType.SQRTABS: lambda a: sp.sqrt(sp.Abs(a)),
  NodeType.SQUARE: lambda a: a ** 2,
  NodeType.TAN: sp.tan,
  NodeType.TANH: sp.tanh,
}

_BINARY_SYMPY: Dict[NodeType, Callable[[sp.Expr, sp.Expr], sp.Expr]] = {
  NodeType.ADD: lambda a, b: sp.Add(a, b),
  NodeType.SUB: lambda a, b: sp.Add(a, sp.Mul(-1, b)),
  NodeType.MUL: lambda a, b: sp.Mul(a, b),
  NodeType.DIV: lambda a, b: sp.Mul(a, sp.Pow(b, -1)),
  NodeType.POW: lambda a, b: sp.Pow(a, b),
  NodeType.AQ: lambda a, b: a / sp.sqrt(1 + b ** 2),
}


def nodes_to_sympy(nodes: Sequence[Node], names: Mapping[int, str]) -> sp.Expr:
  """
  Convert a postfix node sequence to a SymPy expression.

  Args:
      nodes: Well-formed postfix nodes
      names: Variable hash -> symbol name for every variable leaf
  """
  stack = []
  for node in nodes:
    if node.is_constant:
      stack.append(sp.Float(node.value))
    elif node.is_variable:
      stack.append(sp.Symbol(names[node.variable_hash]))
    else:
      args = stack[len(stack) - node.arity:]
      del stack[len(stack) - node.arity:]
      if node.type in _UNARY_SYMPY:
        stack.append(_UNARY_SYMPY[node.type](args[0]))
      elif node.type in _BINARY_SYMPY:
        stack.append(_BINARY_SYMPY[node.type](args[0], args[1]))
      elif node.type == NodeType.FMIN:
        stack.append(sp.Min(*args))
      elif node.type == NodeType.FMAX:
        stack.append(sp.Max(*args))
      else:
        raise RuntimeWarning(f"nodes_to_sympy reached unexpected node type {node.type.name}")
  return stack[-1]
