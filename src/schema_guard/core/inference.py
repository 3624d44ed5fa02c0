"""
Schema inference for CSV datasets.

Only the header row and the first ``sample_rows`` data rows are read from the
handle; the rest of the stream is left untouched. Each sampled value is
classified with :func:`detect_type` and every column takes the most common tag
among its non-empty sampled values. Ties go to the tag that comes first in the
detection precedence (integer, float, boolean, string). A column with no
non-empty sampled value is a string column.
"""
import csv
import math
import re
from itertools import chain, islice
from typing import IO, Iterator, List, Optional, Union

import pandas as pd

from schema_guard.models import ColumnSchema, Schema, TypeTag
from schema_guard.utils.exceptions import (
    EmptyDatasetError,
    NoDataRowError,
    UnsupportedFormatError,
)

# Detection precedence, also used to break ties in the per-column vote
TYPE_PRECEDENCE = (TypeTag.INTEGER, TypeTag.FLOAT, TypeTag.BOOLEAN, TypeTag.STRING)

BOOLEAN_TOKENS = frozenset({"true", "false", "True", "False", "TRUE", "FALSE"})

SNIFF_DELIMITERS = ",;\t|"

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _is_integer(value: str) -> bool:
    return _INTEGER_RE.fullmatch(value) is not None


def _is_float(value: str) -> bool:
    # float() also accepts "nan", "inf" and "1_0"; none of those count
    if "_" in value:
        return False
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def detect_type(value: str) -> TypeTag:
    """
    Classifies a single cell. Precedence is fixed:
    integer, then float, then boolean (exact token match), then string.
    """
    value = value.strip()
    if _is_integer(value):
        return TypeTag.INTEGER
    if _is_float(value):
        return TypeTag.FLOAT
    if value in BOOLEAN_TOKENS:
        return TypeTag.BOOLEAN
    return TypeTag.STRING


def _iter_text_lines(handle: Union[IO[str], IO[bytes]]) -> Iterator[str]:
    """Yields decoded lines lazily. Binary handles are decoded as UTF-8."""
    first = True
    for line in handle:
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as e:
                raise UnsupportedFormatError(f"Dataset is not UTF-8 text: {e}")
        if first:
            line = line.lstrip("\ufeff")
            first = False
        yield line


def _sniff_delimiter(header_line: str) -> str:
    try:
        return csv.Sniffer().sniff(header_line, delimiters=SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _read_header(lines: Iterator[str]) -> str:
    for line in lines:
        if line.strip():
            return line
    raise EmptyDatasetError()


def _is_blank_row(row: List[str]) -> bool:
    # a whitespace-only line parses as one blank cell; "," and ",," are real rows
    return not row or (len(row) == 1 and not row[0].strip())


def _validate_header(header: List[str]) -> List[str]:
    names = [name.strip() for name in header]
    if any(not name for name in names):
        raise UnsupportedFormatError("Header row contains a blank column name.")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise UnsupportedFormatError(f"Header row has duplicate column names: {', '.join(duplicates)}")
    return names


def _vote(values: pd.Series) -> TypeTag:
    values = values.str.strip()
    tags = values[values != ""].map(detect_type)
    if tags.empty:
        return TypeTag.STRING
    counts = tags.value_counts()
    return max(counts.index, key=lambda tag: (counts[tag], -TYPE_PRECEDENCE.index(tag)))


def infer_schema(
    handle: Union[IO[str], IO[bytes]],
    sample_rows: int = 1,
    delimiter: Optional[str] = None,
) -> Schema:
    """
    Infers a Schema from a CSV stream.

    Args:
        handle: Text or binary stream positioned at the header row. It is read
            but never closed; the caller owns it.
        sample_rows (int): Number of data rows to sample (1 = first-row inference).
        delimiter (str): Field delimiter. Sniffed from the header line when None.

    Returns:
        Schema: Columns in header order with their inferred type tags.

    Raises:
        EmptyDatasetError: No header row.
        NoDataRowError: Header row but no data row.
        UnsupportedFormatError: Not UTF-8, malformed header, or ragged rows.
    """
    if sample_rows < 1:
        raise ValueError("sample_rows must be at least 1")

    lines = _iter_text_lines(handle)
    header_line = _read_header(lines)
    if delimiter is None:
        delimiter = _sniff_delimiter(header_line)

    reader = csv.reader(chain([header_line], lines), delimiter=delimiter)
    try:
        names = _validate_header(next(reader))
        rows = list(islice((row for row in reader if not _is_blank_row(row)), sample_rows))
    except csv.Error as e:
        raise UnsupportedFormatError(f"Could not parse dataset as CSV: {e}")

    if not rows:
        raise NoDataRowError()

    for number, row in enumerate(rows, start=1):
        if len(row) != len(names):
            raise UnsupportedFormatError(
                f"Data row {number} has {len(row)} fields, header has {len(names)}."
            )

    sample = pd.DataFrame(rows, columns=names, dtype=object)
    return Schema(columns=[
        ColumnSchema(name=name, dtype=_vote(sample[name].astype(str)))
        for name in names
    ])
