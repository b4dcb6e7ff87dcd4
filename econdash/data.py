from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import IO, Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd


logger = logging.getLogger(__name__)

Row = Mapping[str, Any]
CsvSource = Union[str, Path, bytes, IO[str], IO[bytes]]

# Same shape of number the browser parser accepted: optional minus sign, no
# leading plus, optional exponent.
FLOAT_RE = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
# Numbers outside the exactly representable double range stay strings.
MAX_SAFE_FLOAT = 2**53
BOOL_VALUES = {"true": True, "TRUE": True, "false": False, "FALSE": False}


class DatasetLoadError(Exception):
    """Raised when a CSV source cannot be read or parsed."""


@dataclass(frozen=True)
class Dataset:
    rows: Tuple[Row, ...] = ()
    columns: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def empty(self) -> bool:
        return not self.rows

    def first_row(self) -> Row:
        return self.rows[0] if self.rows else MappingProxyType({})

    def to_frame(self) -> pd.DataFrame:
        """Object-dtype frame so ints, strings and None survive untouched."""
        if not self.rows:
            return pd.DataFrame(columns=list(self.columns), dtype=object)
        records = [[row.get(c) for c in self.columns] for row in self.rows]
        return pd.DataFrame(records, columns=list(self.columns), dtype=object)

    @classmethod
    def from_records(cls, rows: Iterable[Mapping[str, Any]], columns: Optional[Sequence[str]] = None) -> "Dataset":
        frozen = tuple(MappingProxyType(dict(r)) for r in rows)
        if columns is None:
            seen: List[str] = []
            for r in frozen:
                for key in r:
                    if key not in seen:
                        seen.append(key)
            columns = seen
        return cls(rows=frozen, columns=tuple(str(c) for c in columns))


def convert_cell(value: object) -> object:
    """Auto-type one CSV cell: numbers, booleans, empty -> None, else the string."""
    if not isinstance(value, str):
        return None if value is None or pd.isna(value) else value
    if value == "":
        return None
    if value in BOOL_VALUES:
        return BOOL_VALUES[value]
    if FLOAT_RE.match(value):
        stripped = value.strip()
        number = float(stripped)
        if not -MAX_SAFE_FLOAT < number < MAX_SAFE_FLOAT:
            return value
        if "." in stripped or "e" in stripped or "E" in stripped:
            return number
        return int(stripped)
    return value


def frame_to_dataset(df: pd.DataFrame) -> Dataset:
    columns = [str(c) for c in df.columns]
    rows = [
        {col: convert_cell(val) for col, val in zip(columns, values)}
        for values in df.itertuples(index=False, name=None)
    ]
    return Dataset.from_records(rows, columns)


def _read_frame(source: Union[str, Path, IO[str], IO[bytes]]) -> pd.DataFrame:
    return pd.read_csv(
        source,
        dtype=str,
        keep_default_na=False,
        na_filter=False,
        skip_blank_lines=True,
    )


def read_dataset(source: CsvSource) -> Dataset:
    """Parse a CSV path, raw bytes or file-like object into a Dataset."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    try:
        df = _read_frame(source)
    except pd.errors.EmptyDataError:
        return Dataset()
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, ValueError) as exc:
        raise DatasetLoadError(f"Could not parse CSV: {exc}") from exc
    dataset = frame_to_dataset(df)
    logger.info("Parsed CSV: %d rows, %d columns", len(dataset), len(dataset.columns))
    return dataset


def parse_csv_text(text: str) -> Dataset:
    return read_dataset(io.StringIO(text))


def file_signature(path: Union[str, Path]) -> Tuple[str, float]:
    p = Path(path)
    try:
        return str(p.resolve()), p.stat().st_mtime
    except OSError as exc:
        raise DatasetLoadError(f"File {p} not found") from exc


@lru_cache(maxsize=4)
def _load_dataset_cached(file_sig: Tuple[str, float]) -> Dataset:
    path, _ = file_sig
    return read_dataset(Path(path))


def load_dataset(path: Union[str, Path]) -> Dataset:
    """Load a CSV file, reusing the parsed Dataset while the file is unchanged."""
    return _load_dataset_cached(file_signature(path))


def clear_dataset_cache() -> None:
    _load_dataset_cached.cache_clear()
