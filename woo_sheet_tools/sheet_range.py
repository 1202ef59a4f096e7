"""
Read and write a rectangular cell range of an .xlsx workbook.

Values and fills for the whole range are applied in one pass and the
workbook is saved once, so an error part-way through a command leaves the
file on disk untouched.
"""

import logging
import os
from typing import List

import pandas as pd
from openpyxl import load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.styles import PatternFill
from openpyxl.utils.cell import get_column_letter, range_boundaries

from .errors import SelectionError, SheetToolsError

logger = logging.getLogger(__name__)


class SheetRange:
    def __init__(self, workbook_path, range_ref, sheet_name=None):
        if not range_ref or not str(range_ref).strip():
            raise SelectionError("No cell range selected.")
        if not os.path.exists(workbook_path):
            raise SheetToolsError(f"Workbook not found: {workbook_path}")

        self.workbook_path = workbook_path
        self.workbook = load_workbook(workbook_path)

        if sheet_name:
            if sheet_name not in self.workbook.sheetnames:
                raise SelectionError(
                    f"Sheet {sheet_name!r} not found; available: {', '.join(self.workbook.sheetnames)}"
                )
            self.worksheet = self.workbook[sheet_name]
        else:
            self.worksheet = self.workbook.active

        try:
            min_col, min_row, max_col, max_row = range_boundaries(str(range_ref).strip())
        except (ValueError, TypeError):
            raise SelectionError(f"Invalid cell range: {range_ref!r}")

        # Whole-column ("B:B") and whole-row ("2:4") references have open bounds
        if min_row is None:
            min_row, max_row = 1, self.worksheet.max_row
        if min_col is None:
            min_col, max_col = 1, self.worksheet.max_column

        self.min_col = min_col
        self.min_row = min_row
        self.max_col = max_col
        self.max_row = max_row

    @property
    def num_rows(self) -> int:
        return max(self.max_row - self.min_row + 1, 0)

    @property
    def num_columns(self) -> int:
        return max(self.max_col - self.min_col + 1, 0)

    @property
    def ref(self) -> str:
        return (
            f"{get_column_letter(self.min_col)}{self.min_row}:"
            f"{get_column_letter(self.max_col)}{self.max_row}"
        )

    def _rows(self):
        return self.worksheet.iter_rows(
            min_row=self.min_row,
            max_row=self.max_row,
            min_col=self.min_col,
            max_col=self.max_col,
        )

    def get_values(self) -> List[list]:
        return [[cell.value for cell in row] for row in self._rows()]

    def read_column(self) -> list:
        """Return the values of a single-column selection, top to bottom."""
        if self.num_columns != 1:
            raise SelectionError(
                "Please select only ONE column at a time. "
                f"You currently have {self.num_columns} columns selected."
            )
        values = [row[0] for row in self.get_values()]
        if not values:
            raise SelectionError("No data found in the selected column.")
        return values

    def _check_shape(self, grid):
        if len(grid) != self.num_rows or any(len(row) != self.num_columns for row in grid):
            raise ValueError(
                f"Grid shape does not match range {self.ref} "
                f"({self.num_rows} x {self.num_columns})"
            )

    def set_values(self, grid):
        self._check_shape(grid)
        for cells, values in zip(self._rows(), grid):
            for cell, value in zip(cells, values):
                if isinstance(cell, MergedCell):
                    continue
                cell.value = value

    def set_backgrounds(self, grid):
        """Apply a solid fill per cell from hex colors; None clears the fill."""
        self._check_shape(grid)
        for cells, colors in zip(self._rows(), grid):
            for cell, color in zip(cells, colors):
                if isinstance(cell, MergedCell):
                    continue
                if color:
                    cell.fill = PatternFill(
                        fill_type="solid", start_color=color, end_color=color
                    )
                else:
                    cell.fill = PatternFill(fill_type=None)

    def save(self, path=None) -> str:
        target = path or self.workbook_path
        self.workbook.save(target)
        logger.info(f"Saved {self.worksheet.title}!{self.ref} to {target}")
        return target


def write_report(sheet: SheetRange, originals, results, path):
    """Write one row per reconciled cell to a CSV or XLSX report."""
    column = get_column_letter(sheet.min_col)
    rows = []
    for offset, (original, result) in enumerate(zip(originals, results)):
        rows.append(
            {
                "Cell": f"{column}{sheet.min_row + offset}",
                "Original": "" if original is None else original,
                "Output": "" if result.value is None else result.value,
                "Status": result.classification.value,
                "Found": result.found,
                "Not Found": result.not_found,
            }
        )
    df = pd.DataFrame(
        rows, columns=["Cell", "Original", "Output", "Status", "Found", "Not Found"]
    )
    if str(path).lower().endswith(".xlsx"):
        df.to_excel(path, index=False, engine="openpyxl")
    else:
        df.to_csv(path, index=False)
    logger.info(f"Wrote reconciliation report with {len(df)} row(s) to {path}")
    return df
