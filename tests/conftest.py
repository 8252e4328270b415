"""Shared fixtures for the Excel table tests."""

import pytest
from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table

from excel_data.settings import Settings


def build_workbook(
    headers: list[str],
    rows: list[list] = (),
    *,
    table_name: str = "Customers",
    sheet_title: str = "Data",
) -> Workbook:
    """Workbook with one table starting at A1; an empty table keeps its insert row."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet_title
    worksheet.append(list(headers))
    for row in rows:
        worksheet.append(list(row))
    last_row = max(len(rows) + 1, 2)
    worksheet.add_table(Table(displayName=table_name, ref=f"A1:{get_column_letter(len(headers))}{last_row}"))
    return workbook


@pytest.fixture
def make_workbook():
    return build_workbook


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        interaction_timeout_seconds=0.2,
        interaction_backoff_initial_seconds=0.001,
        interaction_backoff_max_seconds=0.01,
    )
