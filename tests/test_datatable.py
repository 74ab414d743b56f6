import pytest

from datautils.core.datatable import Column, DataTable


@pytest.fixture
def table():
    table = DataTable()
    table.add_column("WhseID", str, 10, "varchar")
    table.add_column("Capacity", int, 0, "int")
    table.add_values(("W01", 120))
    table.add_values(("W02", None))
    return table


def test_lookup_by_name_is_case_insensitive(table):
    row = table.rows[0]

    assert row.value("whseid") == "W01"
    assert row["CAPACITY"] == 120
    assert row[0] == "W01"


def test_typed_accessors_handle_null(table):
    row = table.rows[1]

    assert row.value_int64("Capacity") == 0
    assert row.value_int64_ord(1) == 0
    assert row.value_string_ord(0) == "W02"
    assert table.rows[0].value_string("Capacity") == "120"


def test_unknown_column_and_bad_ordinal(table):
    row = table.rows[0]

    with pytest.raises(KeyError):
        row.value("missing")
    with pytest.raises(IndexError):
        row.value_by_ord(2)
    with pytest.raises(IndexError):
        row.set_value_by_ord("x", -1)


def test_new_row_is_shaped_by_columns(table):
    row = table.new_row()
    row.set_value_by_ord("W03", 0)
    table.add_row(row)

    assert table.row_count == 3
    assert row.values == ["W03", None]
    assert row.to_dict() == {"whseid": "W03", "capacity": None}


def test_add_row_rejects_wrong_width(table):
    with pytest.raises(ValueError):
        table.add_values(("W04",))


def test_columns_are_fixed_once_rows_exist(table):
    with pytest.raises(ValueError):
        table.add_column("Region")


def test_duplicate_column_name_rejected():
    table = DataTable([Column("id")])

    with pytest.raises(ValueError):
        table.add_column("ID")


def test_from_cursor_result_keeps_duplicate_names():
    table = DataTable.from_cursor_result([("id",), ("id",)], [(1, 2)])

    assert len(table.columns) == 2
    assert table.rows[0].value("id") == 1
    assert table.rows[0].value_by_ord(1) == 2
