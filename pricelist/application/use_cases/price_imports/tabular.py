"""Decode uploaded CSV and Excel price lists into a uniform text grid."""

from __future__ import annotations

import importlib
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pricelist.domain.exceptions import ParseError

from .columns import column_letter

SUPPORTED_EXTENSIONS = (".csv", ".xls", ".xlsx")

if TYPE_CHECKING:
    from pandas import DataFrame  # pragma: no cover
else:  # pragma: no cover
    DataFrame = Any


@lru_cache(maxsize=1)
def _get_pandas_module() -> Any:
    """Load :mod:`pandas` lazily so importing the API stays cheap."""

    return importlib.import_module("pandas")


@dataclass(frozen=True)
class TabularData:
    """Header row plus data rows of a decoded file.

    ``row_numbers`` holds the 1-based line of each data row in the original
    file; ``header_row_number`` the line the header came from.
    """

    headers: list[str]
    rows: list[list[str]]
    column_letters: list[str]
    row_numbers: list[int] = field(default_factory=list)
    header_row_number: int = 1

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def records(self, skip_rows: int = 1) -> list[tuple[int, list[str]]]:
        """Return ``(row_number, cells)`` pairs after skipping ``skip_rows``.

        The header line counts as the first skipped row, so ``skip_rows=1``
        yields exactly the data rows and ``skip_rows=0`` treats the header as
        data.
        """

        numbered = [(self.header_row_number, self.headers), *zip(self.row_numbers, self.rows)]
        return [(number, list(cells)) for number, cells in numbered[max(skip_rows, 0):]]

    def sample(self, count: int) -> list[tuple[int, dict[str, str]]]:
        return [
            (number, dict(zip(self.column_letters, cells)))
            for number, cells in zip(self.row_numbers[:count], self.rows[:count])
        ]


def supported_extension(filename: str) -> str | None:
    suffix = Path(filename or "").suffix.lower()
    return suffix if suffix in SUPPORTED_EXTENSIONS else None


def parse_tabular_file(path: str | Path) -> TabularData:
    """Read ``path`` and return its header and non-blank data rows.

    Raises :class:`ParseError` when the file cannot be decoded or contains no
    data row beneath the header.
    """

    source = Path(path)
    suffix = supported_extension(source.name)
    if suffix is None:
        raise ParseError(f"Unsupported file type: {source.suffix or source.name}")
    try:
        payload = source.read_bytes()
    except OSError as exc:
        raise ParseError(f"Uploaded file is not readable: {exc}") from exc
    return parse_tabular_bytes(payload, suffix)


def parse_tabular_bytes(payload: bytes, suffix: str) -> TabularData:
    if not payload:
        raise ParseError("File is empty or contains only headers")
    try:
        grid = _read_csv(payload) if suffix == ".csv" else _read_spreadsheet(payload)
    except ParseError:
        raise
    except Exception as exc:  # pragma: no cover - pandas raises multiple exceptions
        raise ParseError(f"File parse error: {exc}") from exc

    numbered = [
        (index + 1, cells)
        for index, cells in enumerate(grid)
        if any(cell.strip() for cell in cells)
    ]
    if len(numbered) < 2:
        raise ParseError("File is empty or contains only headers")

    width = _used_width(cells for _, cells in numbered)
    (header_number, header_cells), *data = numbered
    return TabularData(
        headers=[cell.strip() for cell in _fit(header_cells, width)],
        rows=[_fit(cells, width) for _, cells in data],
        column_letters=[column_letter(index) for index in range(width)],
        row_numbers=[number for number, _ in data],
        header_row_number=header_number,
    )


_CSV_ENCODINGS = ("utf-8-sig", "latin-1")


def _csv_width(payload: bytes) -> int:
    """Upper bound on the fields of any record; quoted commas only inflate it."""

    width = pending = 0
    quoted = False
    for line in payload.splitlines():
        pending += line.count(b",")
        if line.count(b'"') % 2:
            quoted = not quoted
        if not quoted:
            width = max(width, pending + 1)
            pending = 0
    return max(width, pending + 1)


def _read_csv(payload: bytes) -> list[list[str]]:
    pd = _get_pandas_module()
    # Rows may differ in width; title lines are often narrower than the header.
    width = _csv_width(payload)
    last_error: UnicodeDecodeError | None = None
    for encoding in _CSV_ENCODINGS:
        try:
            dataframe: DataFrame = pd.read_csv(
                BytesIO(payload),
                header=None,
                names=list(range(width)),
                index_col=False,
                dtype=object,
                keep_default_na=False,
                skip_blank_lines=False,
                engine="python",
                encoding=encoding,
            )
        except UnicodeDecodeError as exc:
            last_error = exc
            continue
        return _dataframe_cells(dataframe)
    raise ParseError(f"File parse error: {last_error}")


def _read_spreadsheet(payload: bytes) -> list[list[str]]:
    pd = _get_pandas_module()
    dataframe: DataFrame = pd.read_excel(
        BytesIO(payload), header=None, dtype=object, sheet_name=0
    )
    return _dataframe_cells(dataframe)


def _dataframe_cells(dataframe: DataFrame) -> list[list[str]]:
    return [
        [_cell_text(value) for value in record]
        for record in dataframe.itertuples(index=False, name=None)
    ]


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    pd = _get_pandas_module()
    if pd.isna(value):
        return ""
    return str(value)


def _used_width(rows) -> int:
    width = 0
    for cells in rows:
        for index in range(len(cells) - 1, -1, -1):
            if cells[index].strip():
                width = max(width, index + 1)
                break
    return width


def _fit(cells: list[str], width: int) -> list[str]:
    return (cells + [""] * width)[:width]


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "TabularData",
    "parse_tabular_bytes",
    "parse_tabular_file",
    "supported_extension",
]
