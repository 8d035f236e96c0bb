"""
Columnar dataset with zero-copy ingestion.

Every supported source (delimited file, another Dataset, numpy array, buffer
protocol object, nested column sequences) is first reduced to a single
_SourceDescription. One decision then either wraps the source array as-is or
materializes an owned copy:

    wrap  - exactly 2-D, native-endian float64, Fortran (column-major) contiguous
    copy  - anything else, converted to float64 in Fortran order

A wrapped source must outlive the Dataset; mutations of either are visible
through the other. Datasets perform no internal locking: concurrent readers
are fine, but shuffle/normalize/standardize/variable renames need exclusive
access.
"""

import os
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .data_loading import read_delimited
from .data_scaling import min_max_rescale, standardize
from .errors import FormatError, ShapeError
from .logging_system import log_debug, log_info, log_warning
from .variables import Range, Variable, VariableRegistry, default_variable_names

SCALAR = np.float64

VariableKey = Union[str, int, Variable]


class _SourceDescription(NamedTuple):
    array: np.ndarray
    owned: bool        # freshly materialized by us, never aliased elsewhere
    origin: str


class Dataset:
    """
    Column-major numeric matrix plus the registry of its named variables.

    Args:
        source: Path to a delimited file, a Dataset, a 2-D array or buffer,
            or a sequence of equal-length columns
        has_header: For file sources, whether the first line holds names
        variable_names: Explicit column names (overrides any header)
        delimiter: For file sources, the field separator
    """

    __slots__ = ('_values', '_registry', '_owns_data')

    def __init__(self, source, has_header: bool = False, *,
                 variable_names: Optional[Sequence[str]] = None,
                 delimiter: str = ','):
        description, names = self._describe(source, has_header, delimiter)
        values, owns = self._adopt(description)

        if variable_names is not None:
            names = list(variable_names)
        if names is None:
            names = default_variable_names(values.shape[1])
        if len(names) != values.shape[1]:
            raise ShapeError(
                f"got {len(names)} variable names for {values.shape[1]} columns")

        self._registry = VariableRegistry(names)
        self._values = values
        self._owns_data = owns

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    @staticmethod
    def _describe(source, has_header: bool,
                  delimiter: str) -> Tuple[_SourceDescription, Optional[list]]:
        """Reduce any supported source to an array description and optional names"""
        if isinstance(source, (str, os.PathLike)):
            header, values = read_delimited(source, has_header, delimiter)
            log_info(f"Loaded {values.shape[0]}x{values.shape[1]} dataset from {source}")
            return _SourceDescription(values, True, 'file'), header

        if isinstance(source, Dataset):
            values = np.array(source._values, dtype=SCALAR, order='F', copy=True)
            return _SourceDescription(values, True, 'dataset'), source.variable_names

        if isinstance(source, np.ndarray):
            return _SourceDescription(source, False, 'ndarray'), None

        try:
            view = memoryview(source)
        except TypeError:
            view = None
        if view is not None:
            return _SourceDescription(np.asarray(view), False, 'buffer'), None

        if isinstance(source, Sequence) and not isinstance(source, (bytes, bytearray)):
            return _SourceDescription(Dataset._from_columns(source), True, 'columns'), None

        raise TypeError(f"cannot build a Dataset from {type(source).__name__}")

    @staticmethod
    def _from_columns(columns: Sequence) -> np.ndarray:
        if len(columns) == 0:
            raise ShapeError("column sequence is empty")
        lengths = set()
        for col in columns:
            if isinstance(col, (str, bytes)) or not hasattr(col, '__len__'):
                raise ShapeError("each column must be a sequence of numbers")
            lengths.add(len(col))
        if len(lengths) != 1:
            raise ShapeError(f"columns have unequal lengths {sorted(lengths)}")
        try:
            stacked = np.array(columns, dtype=SCALAR)
        except (TypeError, ValueError) as e:
            raise FormatError(f"non-numeric column data: {e}") from None
        if stacked.ndim != 2:
            raise ShapeError(f"expected columns of scalars, got {stacked.ndim}-D data")
        # rows x cols; the transpose of a fresh C-ordered array is Fortran-ordered
        return stacked.T

    @staticmethod
    def _adopt(description: _SourceDescription) -> Tuple[np.ndarray, bool]:
        array = description.array
        if array.ndim != 2:
            raise ShapeError(f"expected exactly two dimensions, got {array.ndim}")

        if array.dtype == SCALAR and array.flags.f_contiguous:
            return array, description.owned

        log_debug(f"{description.origin} source (dtype={array.dtype}, "
                  f"f_contiguous={array.flags.f_contiguous}) does not satisfy "
                  "contiguity or storage-order requirements; data will be copied")
        try:
            values = np.array(array, dtype=SCALAR, order='F', copy=True)
        except (TypeError, ValueError) as e:
            raise FormatError(f"non-numeric {description.origin} data: {e}") from None
        return values, True

    def copy(self) -> 'Dataset':
        return Dataset(self)

    # ------------------------------------------------------------------
    # shape and variables
    # ------------------------------------------------------------------
    @property
    def rows(self) -> int:
        return self._values.shape[0]

    @property
    def cols(self) -> int:
        return self._values.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self._values.shape

    @property
    def owns_data(self) -> bool:
        """False when the dataset wraps an externally owned buffer"""
        return self._owns_data

    @property
    def values(self) -> np.ndarray:
        view = self._values.view()
        view.flags.writeable = False
        return view

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._registry.variables

    @property
    def variable_names(self):
        return self._registry.names

    @variable_names.setter
    def variable_names(self, names: Sequence[str]):
        # builds the new registry fully before swapping, so failures change nothing
        self._registry = self._registry.renamed(list(names))
        log_debug(f"Renamed dataset variables to {self._registry.names}")

    @property
    def variable_hashes(self):
        return self._registry.hashes

    def get_variable(self, key: Union[str, int, Variable]) -> Variable:
        """Look up a variable by name or hash"""
        if isinstance(key, str):
            return self._registry.by_name(key)
        if isinstance(key, Variable):
            return self._registry.by_hash(key.hash)
        return self._registry.by_hash(int(key))

    def get_values(self, key: VariableKey, rng: Optional[Range] = None) -> np.ndarray:
        """
        Read-only zero-copy view over one column.

        Args:
            key: Variable name, Variable, hash, or column index (hashes are
                matched before indices)
            rng: Optional row range; defaults to all rows
        """
        var = self._registry.lookup(key)
        start, end = self._bounds(rng)
        view = self._values[start:end, var.index]
        view.flags.writeable = False
        return view

    # ------------------------------------------------------------------
    # in-place mutation
    # ------------------------------------------------------------------
    def shuffle(self, rng: Union[np.random.Generator, int]):
        """Permute rows in place; deterministic for a given generator state"""
        self._require_writeable('shuffle')
        if not isinstance(rng, np.random.Generator):
            rng = np.random.default_rng(rng)
        permutation = rng.permutation(self.rows)
        self._values[:, :] = self._values[permutation, :]
        log_debug(f"Shuffled {self.rows} rows")

    def normalize(self, column: VariableKey, rng: Optional[Range] = None):
        """Min-max rescale one column to [0, 1] over the rows of rng, in place"""
        self._require_writeable('normalize')
        var = self._registry.lookup(column)
        start, end = self._bounds(rng)
        if not min_max_rescale(self._values[:, var.index], start, end):
            log_warning(f"normalize: column '{var.name}' is constant over "
                        f"[{start}, {end}); values set to 0")
        log_debug(f"Normalized column '{var.name}' over [{start}, {end})")

    def standardize(self, column: VariableKey, rng: Optional[Range] = None):
        """Z-score one column over the rows of rng, in place"""
        self._require_writeable('standardize')
        var = self._registry.lookup(column)
        start, end = self._bounds(rng)
        if not standardize(self._values[:, var.index], start, end):
            log_warning(f"standardize: column '{var.name}' has zero variance over "
                        f"[{start}, {end}); values centred to 0")
        log_debug(f"Standardized column '{var.name}' over [{start}, {end})")

    def resolve_range(self, rng: Optional[Range] = None) -> Range:
        """Validate a row range against this dataset; None means all rows"""
        if rng is None:
            return Range(0, self.rows)
        if isinstance(rng, tuple):
            rng = Range.from_pair(rng)
        if rng.end > self.rows:
            raise ShapeError(f"range [{rng.start}, {rng.end}) exceeds {self.rows} rows")
        return rng

    def _bounds(self, rng: Optional[Range]) -> Tuple[int, int]:
        rng = self.resolve_range(rng)
        return rng.start, rng.end

    def _require_writeable(self, operation: str):
        if not self._values.flags.writeable:
            raise ValueError(f"cannot {operation}: dataset wraps a read-only buffer")

    def __len__(self) -> int:
        return self.rows

    def __repr__(self) -> str:
        return (f"Dataset(rows={self.rows}, cols={self.cols}, "
                f"variables={self.variable_names!r}, owns_data={self._owns_data})")
