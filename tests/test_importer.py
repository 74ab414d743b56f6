import pytest

from datautils.core.exceptions import ConfigurationError, DatabaseQueryError
from datautils.core.importer import DataConfiguration, DataQuery, Importer, ImportResult
from tests.fakes import FakeDestinationHelper, FakeSourceHelper

SOURCE_QUERY = "SELECT id, name FROM items WHERE active = %s"
INSERT_QUERY = "INSERT INTO items (id, name) VALUES (%s, %s)"
CHECK_QUERY = "SELECT 1 FROM items WHERE id = %s"


def _importer(source, destination, check_query="", log=False):
    importer = Importer(
        id="items",
        source=DataConfiguration(prepared_query=SOURCE_QUERY, helper=source),
        destination=DataConfiguration(prepared_query=INSERT_QUERY, helper=destination),
        destination_check=DataQuery(prepared_query=check_query),
        log=log,
    )
    importer.source.set_args(True)
    return importer


def test_copies_all_rows(five_rows):
    source = FakeSourceHelper(five_rows)
    destination = FakeDestinationHelper()

    selected, inserted, error = _importer(source, destination).run()

    assert (selected, inserted, error) == (5, 5, None)
    assert destination.inserted == [tuple(row) for row in five_rows]
    assert source.queries == [(SOURCE_QUERY, (True,))]
    assert source.reader.closed


def test_inserted_sums_affected_rows(five_rows):
    destination = FakeDestinationHelper(affected=2)

    result = _importer(FakeSourceHelper(five_rows), destination).run()

    assert result.ok
    assert result.selected == 5
    assert result.inserted == 10


def test_existing_rows_are_skipped(five_rows):
    source = FakeSourceHelper(five_rows)
    destination = FakeDestinationHelper(existing={(2,), (4,)})
    importer = _importer(source, destination, check_query=CHECK_QUERY)
    importer.set_checker_index(0)

    result = importer.run()

    assert result == ImportResult(3, 3, None)
    assert destination.checked == [(1,), (2,), (3,), (4,), (5,)]
    assert [row[0] for row in destination.inserted] == [1, 3, 5]


def test_checker_index_order_defines_check_args(five_rows):
    destination = FakeDestinationHelper()
    importer = _importer(FakeSourceHelper(five_rows[:1]), destination, check_query=CHECK_QUERY)
    importer.set_checker_index(1, 0)

    importer.run()

    assert destination.checked == [("name-1", 1)]
    assert importer.checker_index == [1, 0]


def test_check_is_skipped_without_checker_index(five_rows):
    destination = FakeDestinationHelper(existing={(1,)})

    result = _importer(FakeSourceHelper(five_rows), destination, check_query=CHECK_QUERY).run()

    assert destination.checked == []
    assert result.selected == 5


def test_insert_failure_returns_partial_counts(five_rows):
    source = FakeSourceHelper(five_rows)
    destination = FakeDestinationHelper(fail_insert_on=3)

    selected, inserted, error = _importer(source, destination).run()

    assert selected == 2
    assert inserted == 2
    assert isinstance(error, DatabaseQueryError)
    assert str(error) == "insert failed"
    # строки 4 и 5 не читаются
    assert source.reader.fetched == 3
    assert source.reader.closed


def test_check_failure_halts_import(five_rows):
    source = FakeSourceHelper(five_rows)
    destination = FakeDestinationHelper(fail_check_on=2)
    importer = _importer(source, destination, check_query=CHECK_QUERY)
    importer.set_checker_index(0)

    result = importer.run()

    assert not result.ok
    assert (result.selected, result.inserted) == (1, 1)
    assert source.reader.fetched == 2
    assert source.reader.closed


def test_negative_checker_index_stops_import():
    source = FakeSourceHelper([[1, "a"], [2, "b"]])
    destination = FakeDestinationHelper()
    importer = _importer(source, destination, check_query=CHECK_QUERY)
    importer.set_checker_index(-1)

    result = importer.run()

    assert result.selected == 0 and result.inserted == 0
    assert isinstance(result.error, ConfigurationError)
    assert "[-1]" in str(result.error)
    assert destination.checked == []
    assert destination.inserted == []
    assert source.reader.closed


def test_checker_index_past_row_end_stops_import():
    source = FakeSourceHelper([[1, "a"], [2, "b"]])
    destination = FakeDestinationHelper()
    importer = _importer(source, destination, check_query=CHECK_QUERY)
    importer.set_checker_index(0, 5)

    result = importer.run()

    assert (result.selected, result.inserted) == (0, 0)
    assert isinstance(result.error, ConfigurationError)
    assert "[5]" in str(result.error)
    assert destination.checked == []
    assert source.reader.closed


def test_source_open_failure(five_rows):
    source = FakeSourceHelper(five_rows, open_error=DatabaseQueryError("relation does not exist"))
    destination = FakeDestinationHelper()

    result = _importer(source, destination, log=True).run()

    assert result.selected == 0 and result.inserted == 0
    assert str(result.error) == "relation does not exist"
    assert destination.inserted == []


def test_source_read_failure_closes_reader(five_rows):
    source = FakeSourceHelper(five_rows, fail_at=3)
    destination = FakeDestinationHelper()

    result = _importer(source, destination).run()

    assert (result.selected, result.inserted) == (3, 3)
    assert str(result.error) == "cursor broken"
    assert source.reader.closed


def test_empty_source():
    result = _importer(FakeSourceHelper([]), FakeDestinationHelper()).run()

    assert result == ImportResult(0, 0, None)


def test_set_args_replaces_previous_args():
    config = DataConfiguration(prepared_query=SOURCE_QUERY)
    config.set_args(1, 2)
    config.set_args("x")

    assert config.args == ["x"]


def test_logging_reports_job_and_counts(five_rows):
    from loguru import logger

    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    try:
        _importer(FakeSourceHelper(five_rows), FakeDestinationHelper(fail_insert_on=2), log=True).run()
    finally:
        logger.remove(sink_id)

    assert any("DESTINATION: items" in message and "insert failed" in message for message in messages)


@pytest.mark.parametrize("log", [False, True])
def test_completion_log_is_gated(five_rows, log):
    from loguru import logger

    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    try:
        _importer(FakeSourceHelper(five_rows), FakeDestinationHelper(), log=log).run()
    finally:
        logger.remove(sink_id)

    assert any("items: 5" in message for message in messages) is log
