"""
Delimited text ingestion for Dataset.

The first non-header row fixes the column count; every later row must match.
Blank lines are skipped and cells are whitespace-stripped. Any violation is
reported as a FormatError naming the offending line.
"""

import csv
import os
from typing import List, Optional, Tuple, Union

import numpy as np

from .errors import FormatError


def read_delimited(path: Union[str, os.PathLike], has_header: bool = False,
                   delimiter: str = ',') -> Tuple[Optional[List[str]], np.ndarray]:
    """
    Read a delimited numeric table.

    Args:
        path: File to read
        has_header: Whether the first non-blank line holds column names
        delimiter: Single-character field separator

    Returns:
        (header names or None, owned column-major float64 matrix)
    """
    header: Optional[List[str]] = None
    rows: List[List[float]] = []
    n_cols: Optional[int] = None

    with open(path, 'r', newline='', encoding='utf-8') as fh:
        reader = csv.reader(fh, delimiter=delimiter)
        for record in reader:
            line_no = reader.line_num
            cells = [c.strip() for c in record]
            if not cells or all(c == '' for c in cells):
                continue

            if has_header and header is None:
                header = cells
                continue

            if n_cols is None:
                n_cols = len(cells)
            elif len(cells) != n_cols:
                raise FormatError(
                    f"{path}:{line_no}: expected {n_cols} columns, found {len(cells)}")

            try:
                rows.append([float(c) for c in cells])
            except ValueError:
                bad = next(c for c in cells if not _is_number(c))
                raise FormatError(f"{path}:{line_no}: non-numeric cell '{bad}'") from None

    if not rows:
        raise FormatError(f"{path}: no data rows")

    if header is not None and len(header) != n_cols:
        raise FormatError(
            f"{path}: header has {len(header)} names but data has {n_cols} columns")

    values = np.array(rows, dtype=np.float64, order='F')
    return header, values


def _is_number(cell: str) -> bool:
    try:
        float(cell)
        return True
    except ValueError:
        return False
