"""
Infix expression parser.

Grammar (precedence climbing over the static tables in core.operators):

    expression := unary (BINOP expression)*
    unary      := '-' NUMBER            -> negative constant, unless followed by '^'
                | '-' expression@3      -> NEG
                | '+' unary
                | primary
    primary    := NUMBER | NAME | IDENT '(' args ')' | '(' expression ')'
    args       := expression (',' expression)*
    NAME       := IDENT | '`' any text without backticks '`'

    operator   precedence  associativity
    + -        1           left
    * /        2           left
    unary -    3           prefix
    ^          4           right

Function names and arities come from core.operators.FUNCTIONS / OPERATORS.
Bare or backtick-quoted names are variables and are resolved to hashes through
the caller's mapping.

Pending operators are kept on an explicit stack rather than the call stack, so
nesting depth is limited by memory only.
"""

import re
from typing import List, Mapping, NamedTuple, Optional, Union

from ..dataset import Dataset
from ..errors import ExpressionSyntaxError, NotFoundError
from ..logging_system import log_debug
from ..variables import IDENTIFIER_PATTERN
from .core.node import Node
from .core.operators import (
  FUNCTIONS, INFIX_OPERATORS, OPERATORS, UNARY_MINUS_PRECEDENCE, NodeType, arity_accepted
)
from .expression import ExpressionTree

_TOKEN_RE = re.compile(r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<ident>""" + IDENTIFIER_PATTERN + r""")
  | (?P<quoted>`[^`]+`)
  | (?P<op>[-+*/^])
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
""", re.VERBOSE)


class Token(NamedTuple):
  kind: str       # number, ident, quoted, op, lparen, rparen, comma, end
  text: str
  position: int


def tokenize(expression: str) -> List[Token]:
  tokens = []
  pos = 0
  while pos < len(expression):
    match = _TOKEN_RE.match(expression, pos)
    if match is None:
      raise ExpressionSyntaxError(f"unexpected character '{expression[pos]}'", pos)
    if match.lastgroup == 'quoted':
      tokens.append(Token('quoted', match.group()[1:-1], pos))
    elif match.lastgroup != 'ws':
      tokens.append(Token(match.lastgroup, match.group(), pos))
    pos = match.end()
  tokens.append(Token('end', '', len(expression)))
  return tokens


NameToHash = Union[Mapping[str, int], Dataset]


class _Pending(NamedTuple):
  kind: str                  # binary, neg, group, call
  node_type: Optional[NodeType]
  token: Token
  precedence: int = 0
  right_assoc: bool = False


class InfixParser:
  """Operator-stack precedence parser producing postfix node sequences"""

  def __init__(self, name_to_hash: NameToHash):
    self.name_to_hash = name_to_hash
    self._tokens: List[Token] = []
    self._pos = 0
    self._output: List[Node] = []
    self._pending: List[_Pending] = []
    self._arg_counts: List[int] = []   # one entry per open call

  @staticmethod
  def parse(expression: str, name_to_hash: NameToHash) -> ExpressionTree:
    """
    Parse an infix expression.

    Args:
        expression: Text such as ``"x + sin(y) * 2"``
        name_to_hash: Variable name -> hash mapping, or a Dataset

    Raises:
        ExpressionSyntaxError for malformed text
        NotFoundError for identifiers missing from ``name_to_hash``
    """
    parser = InfixParser(name_to_hash)
    return ExpressionTree(parser._parse(expression))

  def _parse(self, expression: str) -> List[Node]:
    self._tokens = tokenize(expression)
    self._pos = 0
    self._output = []
    self._pending = []
    self._arg_counts = []

    expect_operand = True
    while True:
      tok = self._advance()
      if expect_operand:
        expect_operand = self._read_operand(tok)
        continue
      if tok.kind == 'end':
        break
      if tok.kind == 'op' and tok.text in INFIX_OPERATORS:
        self._push_binary(tok)
        expect_operand = True
      elif tok.kind == 'rparen':
        self._close(tok)
      elif tok.kind == 'comma':
        self._next_argument(tok)
        expect_operand = True
      else:
        raise ExpressionSyntaxError(f"unexpected token '{tok.text}'", tok.position)

    while self._pending:
      pending = self._pending.pop()
      if pending.kind in ('group', 'call'):
        raise ExpressionSyntaxError("unbalanced parenthesis: expected ')'",
                                    self._tokens[-1].position)
      self._emit(pending)

    log_debug(f"Parsed '{expression}' into {len(self._output)} nodes")
    return self._output

  # ------------------------------------------------------------------
  def _peek(self, offset: int = 0) -> Token:
    index = min(self._pos + offset, len(self._tokens) - 1)
    return self._tokens[index]

  def _advance(self) -> Token:
    tok = self._tokens[self._pos]
    if tok.kind != 'end':
      self._pos += 1
    return tok

  # ------------------------------------------------------------------
  def _read_operand(self, tok: Token) -> bool:
    """Consume a token in operand position; returns whether an operand is still expected"""
    if tok.kind == 'op' and tok.text == '-':
      nxt, after = self._peek(), self._peek(1)
      if nxt.kind == 'number' and not (after.kind == 'op' and after.text == '^'):
        self._advance()
        self._output.append(Node.constant(-float(nxt.text)))
        return False
      self._pending.append(_Pending('neg', NodeType.NEG, tok, UNARY_MINUS_PRECEDENCE))
      return True
    if tok.kind == 'op' and tok.text == '+':
      return True
    if tok.kind == 'number':
      self._output.append(Node.constant(float(tok.text)))
      return False
    if tok.kind == 'ident' and self._peek().kind == 'lparen':
      return self._open_call(tok)
    if tok.kind in ('ident', 'quoted'):
      self._output.append(Node.variable(self._lookup(tok)))
      return False
    if tok.kind == 'lparen':
      self._pending.append(_Pending('group', None, tok))
      return True
    if tok.kind == 'end':
      raise ExpressionSyntaxError("unexpected end of expression", tok.position)
    raise ExpressionSyntaxError(f"unexpected token '{tok.text}'", tok.position)

  def _open_call(self, name: Token) -> bool:
    node_type = FUNCTIONS.get(name.text)
    if node_type is None:
      raise ExpressionSyntaxError(f"unknown function '{name.text}'", name.position)
    self._advance()  # '('
    self._pending.append(_Pending('call', node_type, name))
    if self._peek().kind == 'rparen':
      self._arg_counts.append(0)
      self._close(self._advance())
      return False
    self._arg_counts.append(1)
    return True

  def _push_binary(self, tok: Token):
    node_type = INFIX_OPERATORS[tok.text]
    info = OPERATORS[node_type]
    self._reduce(info.precedence, info.right_assoc)
    self._pending.append(_Pending('binary', node_type, tok, info.precedence, info.right_assoc))

  def _reduce(self, precedence: int, right_assoc: bool):
    """Emit stacked operators that bind tighter than an incoming one"""
    while self._pending:
      top = self._pending[-1]
      if top.kind in ('group', 'call'):
        break
      if top.precedence < precedence or (top.precedence == precedence and right_assoc):
        break
      self._emit(self._pending.pop())

  def _reduce_to_bracket(self, tok: Token) -> _Pending:
    while self._pending and self._pending[-1].kind not in ('group', 'call'):
      self._emit(self._pending.pop())
    if not self._pending:
      if tok.kind == 'rparen':
        raise ExpressionSyntaxError("unbalanced parenthesis: unexpected ')'", tok.position)
      raise ExpressionSyntaxError(f"unexpected token '{tok.text}'", tok.position)
    return self._pending[-1]

  def _close(self, tok: Token):
    bracket = self._reduce_to_bracket(tok)
    self._pending.pop()
    if bracket.kind == 'call':
      self._finish_call(bracket, self._arg_counts.pop())

  def _next_argument(self, tok: Token):
    bracket = self._reduce_to_bracket(tok)
    if bracket.kind != 'call':
      raise ExpressionSyntaxError("unexpected token ','", tok.position)
    self._arg_counts[-1] += 1

  def _finish_call(self, call: _Pending, n_args: int):
    if not arity_accepted(call.node_type, n_args):
      info = OPERATORS[call.node_type]
      expected = (f"at least {info.min_arity}" if info.max_arity is None
                  else f"{info.min_arity}" if info.min_arity == info.max_arity
                  else f"{info.min_arity}-{info.max_arity}")
      raise ExpressionSyntaxError(
        f"'{call.token.text}' takes {expected} argument(s), got {n_args}", call.token.position)
    self._output.append(Node.operator(call.node_type, n_args))

  def _emit(self, pending: _Pending):
    arity = 2 if pending.kind == 'binary' else 1
    self._output.append(Node.operator(pending.node_type, arity))

  def _lookup(self, tok: Token) -> int:
    if isinstance(self.name_to_hash, Dataset):
      return self.name_to_hash.get_variable(tok.text).hash
    h: Optional[int] = self.name_to_hash.get(tok.text)
    if h is None:
      raise NotFoundError(f"unknown identifier '{tok.text}' at position {tok.position}")
    return h
