import numpy as np
import numba
from enum import IntEnum
from typing import Dict, NamedTuple, Optional


class NodeType(IntEnum):
  # Binary ops
  ADD = 0
  SUB = 1
  MUL = 2
  DIV = 3
  POW = 4
  AQ = 5
  # N-ary ops
  FMIN = 6
  FMAX = 7
  # Unary ops
  NEG = 8
  ABS = 9
  ACOS = 10
  ASIN = 11
  ATAN = 12
  CBRT = 13
  CEIL = 14
  COS = 15
  COSH = 16
  EXP = 17
  FLOOR = 18
  LOG = 19
  LOGABS = 20
  LOG1P = 21
  SIN = 22
  SINH = 23
  SQRT = 24
  SQRTABS = 25
  SQUARE = 26
  TAN = 27
  TANH = 28
  # Leaves
  CONSTANT = 29
  VARIABLE = 30


class NodeKind(IntEnum):
  BINARY = 0
  UNARY = 1
  NARY = 2
  CONSTANT = 3
  VARIABLE = 4


class OperatorInfo(NamedTuple):
  symbol: str
  kind: NodeKind
  min_arity: int
  max_arity: Optional[int]   # None means unbounded
  precedence: int = 0        # 0 for call-syntax functions and leaves
  right_assoc: bool = False


def _unary(name: str) -> OperatorInfo:
  return OperatorInfo(name, NodeKind.UNARY, 1, 1)


# Static grammar table. Infix operators carry a precedence; everything else is
# written with call syntax name(arg, ...).
OPERATORS: Dict[NodeType, OperatorInfo] = {
  NodeType.ADD: OperatorInfo('+', NodeKind.BINARY, 2, 2, 1),
  NodeType.SUB: OperatorInfo('-', NodeKind.BINARY, 2, 2, 1),
  NodeType.MUL: OperatorInfo('*', NodeKind.BINARY, 2, 2, 2),
  NodeType.DIV: OperatorInfo('/', NodeKind.BINARY, 2, 2, 2),
  NodeType.POW: OperatorInfo('^', NodeKind.BINARY, 2, 2, 4, right_assoc=True),
  NodeType.AQ: OperatorInfo('aq', NodeKind.BINARY, 2, 2),
  NodeType.FMIN: OperatorInfo('fmin', NodeKind.NARY, 2, None),
  NodeType.FMAX: OperatorInfo('fmax', NodeKind.NARY, 2, None),
  NodeType.NEG: OperatorInfo('-', NodeKind.UNARY, 1, 1, 3),
  NodeType.ABS: _unary('abs'),
  NodeType.ACOS: _unary('acos'),
  NodeType.ASIN: _unary('asin'),
  NodeType.ATAN: _unary('atan'),
  NodeType.CBRT: _unary('cbrt'),
  NodeType.CEIL: _unary('ceil'),
  NodeType.COS: _unary('cos'),
  NodeType.COSH: _unary('cosh'),
  NodeType.EXP: _unary('exp'),
  NodeType.FLOOR: _unary('floor'),
  NodeType.LOG: _unary('log'),
  NodeType.LOGABS: _unary('logabs'),
  NodeType.LOG1P: _unary('log1p'),
  NodeType.SIN: _unary('sin'),
  NodeType.SINH: _unary('sinh'),
  NodeType.SQRT: _unary('sqrt'),
  NodeType.SQRTABS: _unary('sqrtabs'),
  NodeType.SQUARE: _unary('square'),
  NodeType.TAN: _unary('tan'),
  NodeType.TANH: _unary('tanh'),
  NodeType.CONSTANT: OperatorInfo('', NodeKind.CONSTANT, 0, 0),
  NodeType.VARIABLE: OperatorInfo('', NodeKind.VARIABLE, 0, 0),
}

# Infix binary operators by symbol
INFIX_OPERATORS: Dict[str, NodeType] = {
  info.symbol: t for t, info in OPERATORS.items()
  if info.kind == NodeKind.BINARY and info.precedence > 0
}

# Call-syntax operators by name
FUNCTIONS: Dict[str, NodeType] = {
  info.symbol: t for t, info in OPERATORS.items()
  if info.symbol.isidentifier()
}

UNARY_MINUS_PRECEDENCE = OPERATORS[NodeType.NEG].precedence


def arity_accepted(node_type: NodeType, arity: int) -> bool:
  info = OPERATORS[node_type]
  if arity < info.min_arity:
    return False
  return info.max_arity is None or arity <= info.max_arity


@numba.njit(cache=True)
def evaluate_binary_op(left_val, right_val, op):
  if op == NodeType.ADD:
    return left_val + right_val
  elif op == NodeType.SUB:
    return left_val - right_val
  elif op == NodeType.MUL:
    return left_val * right_val
  elif op == NodeType.DIV:
    return left_val / right_val
  elif op == NodeType.POW:
    return np.power(left_val, right_val)
  elif op == NodeType.AQ:
    # analytic quotient: division without the pole at zero
    return left_val / np.sqrt(1.0 + right_val * right_val)
  elif op == NodeType.FMIN:
    return np.fmin(left_val, right_val)
  elif op == NodeType.FMAX:
    return np.fmax(left_val, right_val)
  return np.full_like(left_val, np.nan)


@numba.njit(cache=True)
def evaluate_unary_op(operand_val, op):
  if op == NodeType.NEG:
    return -operand_val
  elif op == NodeType.ABS:
    return np.abs(operand_val)
  elif op == NodeType.ACOS:
    return np.arccos(operand_val)
  elif op == NodeType.ASIN:
    return np.arcsin(operand_val)
  elif op == NodeType.ATAN:
    return np.arctan(operand_val)
  elif op == NodeType.CBRT:
    # sign-preserving cube root
    return np.sign(operand_val) * np.power(np.abs(operand_val), 1.0 / 3.0)
  elif op == NodeType.CEIL:
    return np.ceil(operand_val)
  elif op == NodeType.COS:
    return np.cos(operand_val)
  elif op == NodeType.COSH:
    return np.cosh(operand_val)
  elif op == NodeType.EXP:
    return np.exp(operand_val)
  elif op == NodeType.FLOOR:
    return np.floor(operand_val)
  elif op == NodeType.LOG:
    return np.log(operand_val)
  elif op == NodeType.LOGABS:
    return np.log(np.abs(operand_val))
  elif op == NodeType.LOG1P:
    return np.log1p(operand_val)
  elif op == NodeType.SIN:
    return np.sin(operand_val)
  elif op == NodeType.SINH:
    return np.sinh(operand_val)
  elif op == NodeType.SQRT:
    return np.sqrt(operand_val)
  elif op == NodeType.SQRTABS:
    return np.sqrt(np.abs(operand_val))
  elif op == NodeType.SQUARE:
    return operand_val * operand_val
  elif op == NodeType.TAN:
    return np.tan(operand_val)
  elif op == NodeType.TANH:
    return np.tanh(operand_val)
  return np.full_like(operand_val, np.nan)
