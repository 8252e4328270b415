"""Tests for the openpyxl table backend."""

from datetime import datetime

import pytest
from openpyxl import Workbook
from openpyxl.worksheet.filters import AutoFilter
from openpyxl.worksheet.table import Table

from excel_data.db.workbook import SheetTable, WorkbookHost, find_table, open_workbook
from excel_data.errors import MissingColumnError, MissingRowError, MissingTableError

HEADERS = ["Id", "Name"]


def test_find_table_across_worksheets(make_workbook):
    workbook = make_workbook(HEADERS, [[1, "Ann"]])
    workbook.create_sheet("Other")
    workbook.move_sheet("Other", offset=-1)

    table = find_table(workbook, "Customers")

    assert isinstance(table, SheetTable)
    assert table.name == "Customers"
    assert table.worksheet.title == "Data"


def test_find_table_on_worksheet_only(make_workbook):
    workbook = make_workbook(HEADERS)
    other = workbook.create_sheet("Other")

    assert find_table(workbook["Data"], "Customers").name == "Customers"
    with pytest.raises(MissingTableError, match="Customers"):
        find_table(other, "Customers")


def test_missing_table(make_workbook):
    with pytest.raises(MissingTableError):
        find_table(make_workbook(HEADERS), "Orders")


def test_columns_come_from_header_row(make_workbook):
    table = find_table(make_workbook(["Id", "Name", None]), "Customers")
    assert table.columns == ["Id", "Name", "Column3"]


def test_insert_row_counts_as_empty(make_workbook):
    table = find_table(make_workbook(HEADERS), "Customers")

    assert table.table.ref == "A1:B2"
    assert table.row_count() == 0
    assert table.read_body() == []
    assert table.read_column(1) == []


def test_read_rows(make_workbook):
    table = find_table(make_workbook(HEADERS, [[1, "Ann"], [2, "Bob"]]), "Customers")

    assert table.row_count() == 2
    assert table.read_body() == [(1, "Ann"), (2, "Bob")]
    assert table.read_row(2) == (2, "Bob")
    assert table.read_column(2) == ["Ann", "Bob"]


def test_read_out_of_bounds(make_workbook):
    table = find_table(make_workbook(HEADERS, [[1, "Ann"]]), "Customers")

    with pytest.raises(MissingRowError):
        table.read_row(2)
    with pytest.raises(MissingRowError):
        table.read_row(0)
    with pytest.raises(MissingColumnError):
        table.read_column(3)


def test_append_reuses_insert_row(make_workbook):
    table = find_table(make_workbook(HEADERS), "Customers")

    position = table.append_row()
    table.write_cell(position, 1, 1)

    assert position == 1
    assert table.table.ref == "A1:B2"
    assert table.read_body() == [(1, None)]


def test_append_grows_table_and_pushes_cells_down(make_workbook):
    workbook = make_workbook(HEADERS, [[1, "Ann"]])
    worksheet = workbook["Data"]
    worksheet["A4"] = "below"
    worksheet["D2"] = "beside"
    table = find_table(workbook, "Customers")

    position = table.append_row()
    table.write_cell(position, 1, 2)
    table.write_cell(position, 2, "Bob")

    assert position == 2
    assert table.table.ref == "A1:B3"
    assert table.read_body() == [(1, "Ann"), (2, "Bob")]
    assert worksheet["A5"].value == "below"
    assert worksheet["D2"].value == "beside"


def test_append_to_header_only_table():
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.append(HEADERS)
    worksheet.add_table(Table(displayName="Customers", ref="A1:B1"))
    table = find_table(workbook, "Customers")

    position = table.append_row()
    table.write_cell(position, 2, "Ann")

    assert position == 1
    assert table.table.ref == "A1:B2"
    assert table.read_body() == [(None, "Ann")]


def test_totals_row_stays_below_body():
    workbook = Workbook()
    worksheet = workbook.active
    for row in (HEADERS, [1, "Ann"], [2, "Bob"], ["Total", None]):
        worksheet.append(row)
    worksheet.add_table(
        Table(
            displayName="Customers",
            ref="A1:B4",
            totalsRowCount=1,
            autoFilter=AutoFilter(ref="A1:B3"),
        )
    )
    table = find_table(workbook, "Customers")

    assert table.row_count() == 2
    position = table.append_row()
    table.write_cell(position, 1, 3)

    assert position == 3
    assert table.table.ref == "A1:B5"
    assert table.table.autoFilter.ref == "A1:B4"
    assert worksheet["A5"].value == "Total"
    assert table.read_column(1) == [1, 2, 3]

    table.delete_row(1)

    assert table.table.ref == "A1:B4"
    assert table.table.autoFilter.ref == "A1:B3"
    assert table.read_body() == [(2, "Bob"), (3, None)]
    assert worksheet["A4"].value == "Total"


def test_delete_moves_rows_up(make_workbook):
    workbook = make_workbook(HEADERS, [[1, "Ann"], [2, "Bob"], [3, "Cid"]])
    worksheet = workbook["Data"]
    worksheet["B6"] = "below"
    table = find_table(workbook, "Customers")

    table.delete_row(2)

    assert table.table.ref == "A1:B3"
    assert table.read_body() == [(1, "Ann"), (3, "Cid")]
    assert worksheet["A4"].value is None
    assert worksheet["B5"].value == "below"


def test_delete_last_row_leaves_insert_row(make_workbook):
    table = find_table(make_workbook(HEADERS, [[1, "Ann"]]), "Customers")

    table.delete_row(1)

    assert table.table.ref == "A1:B2"
    assert table.row_count() == 0
    with pytest.raises(MissingRowError):
        table.delete_row(1)


def test_write_cell_can_clear(make_workbook):
    table = find_table(make_workbook(HEADERS, [[1, "Ann"]]), "Customers")

    table.write_cell(1, 2, None)

    assert table.read_row(1) == (1, None)


def test_write_cell_stores_nul_char_as_empty(make_workbook, tmp_path):
    workbook = make_workbook(HEADERS, [[1, "Ann"]])
    table = find_table(workbook, "Customers")

    table.write_cell(1, 2, "\0")
    workbook.save(tmp_path / "customers.xlsx")

    assert table.read_row(1) == (1, None)


def test_changes_survive_save_and_reload(make_workbook, tmp_path):
    workbook = make_workbook(HEADERS, [[1, "Ann"]])
    table = find_table(workbook, "Customers")
    position = table.append_row()
    table.write_cell(position, 1, 2)
    table.write_cell(position, 2, datetime(2024, 1, 2))
    path = tmp_path / "customers.xlsx"
    workbook.save(path)

    reloaded = find_table(open_workbook(path), "Customers")

    assert reloaded.table.ref == "A1:B3"
    assert reloaded.columns == HEADERS
    assert reloaded.read_body() == [(1, "Ann"), (2, datetime(2024, 1, 2))]


def test_open_workbook_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError, match="Workbook not found"):
        open_workbook(tmp_path / "missing.xlsx")


def test_open_workbook_rejects_other_formats(tmp_path):
    path = tmp_path / "customers.csv"
    path.write_text("Id,Name\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported file extension"):
        open_workbook(path)


def test_host_interactive_flag():
    host = WorkbookHost()
    assert host.get_interactive()
    host.set_interactive(False)
    assert not host.get_interactive()


def test_host_max_matches_excel():
    host = WorkbookHost()
    assert host.max([3, 7.5, None, "12", True]) == 7.5
    assert host.max([None, "x"]) == 0
    assert host.max([]) == 0
