"""
Variable identity for dataset columns.

A column is identified portably by a 64-bit content hash of its name, and
locally by its zero-based index in the owning Dataset. Expression trees store
only the hash, so they can be resolved against any dataset that defines a
column of that name.
"""

import hashlib
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple, Union

from .errors import FormatError, NotFoundError, ShapeError

# Names matching this are written bare in infix text; any other name is written
# between backticks, so it may hold anything except a backtick.
IDENTIFIER_PATTERN = r"[A-Za-z_][A-Za-z0-9_]*"
_IDENTIFIER_RE = re.compile(IDENTIFIER_PATTERN + r"\Z")


def is_bare_identifier(name: str) -> bool:
    return _IDENTIFIER_RE.match(name) is not None


def variable_hash(name: str) -> int:
    """Deterministic 64-bit unsigned hash of a variable name.

    Unlike the builtin ``hash`` this does not depend on PYTHONHASHSEED, so the
    value is stable across processes and runs.
    """
    digest = hashlib.blake2b(name.encode('utf-8'), digest_size=8).digest()
    return int.from_bytes(digest, 'little')


def default_variable_names(count: int) -> List[str]:
    """Names given to unnamed columns: X1, X2, ..., Xn"""
    return [f"X{i + 1}" for i in range(count)]


@dataclass(frozen=True)
class Variable:
    name: str
    hash: int
    index: int


@dataclass(frozen=True)
class Range:
    """Half-open row interval [start, end)"""
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid range [{self.start}, {self.end})")

    @classmethod
    def from_pair(cls, pair: Tuple[int, int]) -> 'Range':
        start, end = pair
        return cls(int(start), int(end))

    @property
    def size(self) -> int:
        return self.end - self.start


class VariableRegistry:
    """
    Ordered, immutable set of variables with name and hash lookup.

    Index values are the contiguous range [0, len). Duplicate names and hash
    collisions between distinct names are rejected with FormatError.
    """

    __slots__ = ('_variables', '_by_name', '_by_hash')

    def __init__(self, names: Iterable[str]):
        variables: List[Variable] = []
        by_name: Dict[str, Variable] = {}
        by_hash: Dict[int, Variable] = {}

        for index, name in enumerate(names):
            if not isinstance(name, str):
                raise FormatError(f"variable name must be a string, got {type(name).__name__}")
            if not name or '`' in name:
                raise FormatError(f"variable name {name!r} must be non-empty and free of backticks")
            if name in by_name:
                raise FormatError(f"duplicate variable name '{name}'")
            h = variable_hash(name)
            if h in by_hash:
                raise FormatError(
                    f"variable names '{by_hash[h].name}' and '{name}' hash to the same value {h}")
            var = Variable(name=name, hash=h, index=index)
            variables.append(var)
            by_name[name] = var
            by_hash[h] = var

        self._variables: Tuple[Variable, ...] = tuple(variables)
        self._by_name = by_name
        self._by_hash = by_hash

    def renamed(self, names: Sequence[str]) -> 'VariableRegistry':
        """Registry over the same columns under new names"""
        if len(names) != len(self):
            raise ShapeError(f"expected {len(self)} names, got {len(names)}")
        return VariableRegistry(names)

    def by_name(self, name: str) -> Variable:
        try:
            return self._by_name[name]
        except KeyError:
            raise NotFoundError(f"no variable named '{name}'") from None

    def by_hash(self, h: int) -> Variable:
        try:
            return self._by_hash[h]
        except KeyError:
            raise NotFoundError(f"no variable with hash {h}") from None

    def by_index(self, index: int) -> Variable:
        if not 0 <= index < len(self._variables):
            raise NotFoundError(f"variable index {index} out of range [0, {len(self._variables)})")
        return self._variables[index]

    def lookup(self, key: Union[str, int, Variable]) -> Variable:
        """Resolve a name, a Variable, a hash or (failing that) an index"""
        if isinstance(key, str):
            return self.by_name(key)
        if isinstance(key, Variable):
            return self.by_hash(key.hash)
        # numpy integers are accepted as well as int; bool is not a key
        if isinstance(key, bool) or not hasattr(key, '__index__'):
            raise NotFoundError(f"cannot resolve variable key {key!r}")
        key = key.__index__()
        if key in self._by_hash:
            return self._by_hash[key]
        return self.by_index(key)

    @property
    def names(self) -> List[str]:
        return [v.name for v in self._variables]

    @property
    def hashes(self) -> List[int]:
        return [v.hash for v in self._variables]

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._variables

    def __contains__(self, key) -> bool:
        if isinstance(key, str):
            return key in self._by_name
        return key in self._by_hash

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"VariableRegistry({self.names!r})"
