# -*- coding: utf-8 -*-

"""
Tabular stores holding the configuration, the audience log and the
destination catalog.

All stores share the same spreadsheet-like interface (sheets addressed by
A1 ranges plus named ranges) so the audience manager does not depend on
where the data actually lives:

    InMemoryStore     - plain python grids, used for tests and dry runs
    CsvWorkbookStore  - a local folder with one CSV file per sheet
    GoogleSheetsStore - a Google Sheets spreadsheet through gspread
"""

import re
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import polars as pl
from gspread.utils import ValueRenderOption

from .misc import display_path, read_yaml, write_yaml


Row = List[Any]

_A1_CELL_PATTERN = re.compile(r'^([A-Za-z]+)?(\d+)?$')


class A1Range(NamedTuple):
    """Zero based, end-inclusive bounds of an A1 range. None means unbounded."""
    first_row: int
    last_row: Optional[int]
    first_col: int
    last_col: Optional[int]


def column_index(letters: str) -> int:
    """Convert column letters to a zero based index (A -> 0, Z -> 25, AA -> 26)."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord('A') + 1)
    return index - 1


def parse_a1_range(a1_range: str) -> A1Range:
    """
    Parse an A1 range such as 'A2:Z', 'B2:C10' or 'A:A'.

    Open ended bounds (no row number on the end cell, no column on
    either side) are returned as None.

    Raises:
        ValueError: If the range is not valid A1 notation.
    """
    start, _, end = a1_range.partition(':')
    start_match = _A1_CELL_PATTERN.match(start)
    end_match = _A1_CELL_PATTERN.match(end or start)
    if not start_match or not end_match or not start:
        raise ValueError(f"Invalid A1 range: {a1_range!r}")

    start_col, start_row = start_match.groups()
    end_col, end_row = end_match.groups()
    return A1Range(
        first_row=int(start_row) - 1 if start_row else 0,
        last_row=int(end_row) - 1 if end_row else None,
        first_col=column_index(start_col) if start_col else 0,
        last_col=column_index(end_col) if end_col else None,
    )


def _trim_trailing_blank_rows(rows: List[Row]) -> List[Row]:
    while rows and all(cell in (None, '') for cell in rows[-1]):
        rows = rows[:-1]
    return rows


class TabularStore(ABC):
    """Spreadsheet-like store interface."""

    @abstractmethod
    def get_named_value(self, name: str) -> Any:
        """Value of the top-left cell of a named range, None if empty."""

    @abstractmethod
    def read(self, sheet: str, a1_range: str, formulas: bool = False) -> List[Row]:
        """
        Rows of a range, trailing empty rows excluded.

        With `formulas`, formula cells are returned as their formula rather
        than their displayed value.
        """

    @abstractmethod
    def write(self, sheet: str, a1_range: str, rows: Sequence[Sequence]) -> None:
        """Write rows starting at the top-left cell of a range."""

    @abstractmethod
    def append_row(self, sheet: str, row: Sequence) -> None:
        """Append a row after the last non-empty row of a sheet."""

    @abstractmethod
    def clear(self, sheet: str, a1_range: str) -> None:
        """Clear every cell of a range."""

    @abstractmethod
    def activate(self, sheet: str) -> None:
        """Point the user to a sheet, e.g. the log once audiences are created."""


class GridStore(TabularStore):
    """Store keeping every sheet as a list of rows. Subclasses decide where grids live."""

    @abstractmethod
    def _load_grid(self, sheet: str) -> List[Row]:
        ...

    @abstractmethod
    def _save_grid(self, sheet: str, grid: List[Row]) -> None:
        ...

    def read(self, sheet: str, a1_range: str, formulas: bool = False) -> List[Row]:
        # Grids hold raw cell text, so formulas are always returned as written
        bounds = parse_a1_range(a1_range)
        grid = self._load_grid(sheet)
        last_row = len(grid) - 1 if bounds.last_row is None else bounds.last_row
        stop = None if bounds.last_col is None else bounds.last_col + 1
        rows = []
        for row in grid[bounds.first_row:last_row + 1]:
            cells = list(row[bounds.first_col:stop])
            # Like the Sheets API, trailing empty cells are not returned
            while cells and cells[-1] in (None, ''):
                cells.pop()
            rows.append(cells)
        return _trim_trailing_blank_rows(rows)

    def write(self, sheet: str, a1_range: str, rows: Sequence[Sequence]) -> None:
        bounds = parse_a1_range(a1_range)
        grid = self._load_grid(sheet)
        for offset, values in enumerate(rows):
            row_index = bounds.first_row + offset
            while len(grid) <= row_index:
                grid.append([])
            row = grid[row_index]
            needed = bounds.first_col + len(values)
            row.extend([''] * (needed - len(row)))
            row[bounds.first_col:needed] = list(values)
        self._save_grid(sheet, grid)

    def append_row(self, sheet: str, row: Sequence) -> None:
        grid = _trim_trailing_blank_rows(self._load_grid(sheet))
        grid.append(list(row))
        self._save_grid(sheet, grid)

    def clear(self, sheet: str, a1_range: str) -> None:
        bounds = parse_a1_range(a1_range)
        grid = self._load_grid(sheet)
        last_row = len(grid) - 1 if bounds.last_row is None else bounds.last_row
        for row in grid[bounds.first_row:last_row + 1]:
            stop = len(row) if bounds.last_col is None else min(len(row), bounds.last_col + 1)
            for col in range(bounds.first_col, stop):
                row[col] = ''
        self._save_grid(sheet, _trim_trailing_blank_rows(grid))


class InMemoryStore(GridStore):
    """Store keeping all sheets in memory."""

    def __init__(self, sheets: Optional[Dict[str, List[Row]]] = None,
                 named_ranges: Optional[Dict[str, Any]] = None):
        self.sheets = {name: [list(row) for row in rows] for name, rows in (sheets or {}).items()}
        self.named_ranges = dict(named_ranges or {})
        self.active_sheet = None

    def _load_grid(self, sheet: str) -> List[Row]:
        if sheet not in self.sheets:
            raise KeyError(f"Sheet not found: {sheet}")
        return [list(row) for row in self.sheets[sheet]]

    def _save_grid(self, sheet: str, grid: List[Row]) -> None:
        self.sheets[sheet] = grid

    def get_named_value(self, name: str) -> Any:
        if name not in self.named_ranges:
            raise KeyError(f"Named range not found: {name}")
        return self.named_ranges[name]

    def activate(self, sheet: str) -> None:
        if sheet not in self.sheets:
            raise KeyError(f"Sheet not found: {sheet}")
        self.active_sheet = sheet


class CsvWorkbookStore(GridStore):
    """
    Store backed by a folder of headerless CSV files, one per sheet.

    Named ranges are kept in a `named_ranges.yaml` file in the same folder.
    Values are always read back as strings.
    """

    NAMED_RANGES_FILE = "named_ranges.yaml"

    def __init__(self, folder: str | Path):
        self.folder = Path(folder).resolve()
        self.active_sheet = None

    def _sheet_path(self, sheet: str) -> Path:
        return self.folder / f"{sheet}.csv"

    def _load_grid(self, sheet: str) -> List[Row]:
        path = self._sheet_path(sheet)
        if not path.exists():
            raise FileNotFoundError(f"Sheet not found: {display_path(path)}")
        text = path.read_text(encoding='utf-8')
        if not text.strip():
            return []
        # Rows may be ragged when edited by hand. Every column is declared
        # up front, using the widest line, so no row gets truncated.
        width = max(line.count(',') for line in text.splitlines()) + 1
        df = pl.read_csv(
            text.encode('utf-8'),
            has_header=False,
            schema={f"column_{i + 1}": pl.String for i in range(width)},
        )
        return [
            ['' if cell is None else cell for cell in row]
            for row in df.rows()
        ]

    def _save_grid(self, sheet: str, grid: List[Row]) -> None:
        path = self._sheet_path(sheet)
        width = max((len(row) for row in grid), default=0)
        if width == 0:
            path.write_text('', encoding='utf-8')
            return
        padded = [
            ['' if cell is None else str(cell) for cell in row] + [''] * (width - len(row))
            for row in grid
        ]
        df = pl.DataFrame(
            padded,
            schema=[f"column_{i + 1}" for i in range(width)],
            orient='row'
        )
        df.write_csv(path, include_header=False)

    def _load_named_ranges(self) -> dict:
        return read_yaml(self.folder / self.NAMED_RANGES_FILE, default={})

    def get_named_value(self, name: str) -> Any:
        named_ranges = self._load_named_ranges()
        if name not in named_ranges:
            raise KeyError(f"Named range '{name}' not found in {display_path(self.folder)}")
        return named_ranges[name]

    def set_named_value(self, name: str, value: Any) -> None:
        named_ranges = self._load_named_ranges()
        named_ranges[name] = value
        write_yaml(named_ranges, self.folder / self.NAMED_RANGES_FILE)

    def activate(self, sheet: str) -> None:
        path = self._sheet_path(sheet)
        if not path.exists():
            raise FileNotFoundError(f"Sheet not found: {display_path(path)}")
        self.active_sheet = sheet
        logging.info(f"Results available at {display_path(path)}")

    def init_workbook(self, headers: Dict[str, Sequence[str]],
                      named_ranges: Optional[Dict[str, Any]] = None) -> None:
        """
        Create the workbook folder and any missing sheet with its header row.
        Existing sheets and named ranges are left untouched.
        """
        self.folder.mkdir(parents=True, exist_ok=True)
        for sheet, header in headers.items():
            if not self._sheet_path(sheet).exists():
                self._save_grid(sheet, [list(header)])
                logging.info(f"Created sheet {display_path(self._sheet_path(sheet))}")
        existing = self._load_named_ranges()
        for name, value in (named_ranges or {}).items():
            if name not in existing:
                self.set_named_value(name, value)


class GoogleSheetsStore(TabularStore):
    """Store backed by a Google Sheets spreadsheet."""

    def __init__(self, spreadsheet):
        """
        Args:
            spreadsheet: gspread Spreadsheet, e.g. ``client.open_by_key(spreadsheet_id)``.
        """
        self.spreadsheet = spreadsheet

    @classmethod
    def open(cls, client, spreadsheet_id: str) -> 'GoogleSheetsStore':
        return cls(client.open_by_key(spreadsheet_id))

    def _worksheet(self, sheet: str):
        return self.spreadsheet.worksheet(sheet)

    def get_named_value(self, name: str) -> Any:
        response = self.spreadsheet.values_get(name)
        values = response.get('values') or [[]]
        return values[0][0] if values[0] else None

    def read(self, sheet: str, a1_range: str, formulas: bool = False) -> List[Row]:
        render = ValueRenderOption.formula if formulas else ValueRenderOption.formatted
        rows = self._worksheet(sheet).get(a1_range, value_render_option=render)
        return _trim_trailing_blank_rows([list(row) for row in rows])

    def write(self, sheet: str, a1_range: str, rows: Sequence[Sequence]) -> None:
        start = a1_range.partition(':')[0]
        self._worksheet(sheet).update(
            [list(row) for row in rows], start, value_input_option='USER_ENTERED'
        )

    def append_row(self, sheet: str, row: Sequence) -> None:
        self._worksheet(sheet).append_row(list(row), value_input_option='USER_ENTERED')

    def clear(self, sheet: str, a1_range: str) -> None:
        self._worksheet(sheet).batch_clear([a1_range])

    def activate(self, sheet: str) -> None:
        # The API has no notion of a selected tab
        logging.info(f"Results available at {self._worksheet(sheet).url}")
