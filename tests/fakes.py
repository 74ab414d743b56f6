"""Заглушки помощников доступа к данным для тестов."""
from typing import Any, Dict, List, Optional

from datautils.core.datatable import DataTable
from datautils.core.exceptions import DatabaseQueryError
from datautils.core.interfaces import ExecResult


class FakeBatchHelper:
    """Помощник для BatchQuery: записывает вызовы и отдаёт заготовленные ответы."""

    def __init__(self) -> None:
        self.settings = {"name": "fake"}
        self.calls: List[tuple] = []
        self.connected = False
        self.connect_error: Optional[Exception] = None
        self.tables: Dict[str, DataTable] = {}
        self.exec_results: Dict[str, ExecResult] = {}
        self.failing: Dict[str, Exception] = {}

    def connect(self, connection_id: str) -> bool:
        self.calls.append(("connect", connection_id))
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True
        return True

    def disconnect(self) -> None:
        self.calls.append(("disconnect",))
        self.connected = False

    def _maybe_fail(self, key: str) -> None:
        if key in self.failing:
            raise self.failing[key]

    def get_data(self, query: str, *args: Any) -> DataTable:
        self.calls.append(("get_data", query, args))
        self._maybe_fail(query)
        return self.tables.get(query, DataTable())

    def exec(self, query: str, *args: Any) -> ExecResult:
        self.calls.append(("exec", query, args))
        self._maybe_fail(query)
        return self.exec_results.get(query, ExecResult(1, 0))

    def begin(self) -> None:
        self.calls.append(("begin",))
        self._maybe_fail("begin")

    def commit(self) -> None:
        self.calls.append(("commit",))
        self._maybe_fail("commit")

    def rollback(self) -> None:
        self.calls.append(("rollback",))
        self._maybe_fail("rollback")

    def io_calls(self) -> List[tuple]:
        return [call for call in self.calls if call[0] in ("get_data", "exec")]


class FakeReader:
    def __init__(self, rows: List[List[Any]], fail_at: Optional[int] = None) -> None:
        self._rows = rows
        self._position = -1
        self._fail_at = fail_at
        self.fetched = 0
        self.closed = False

    @property
    def result_rows(self) -> List[Any]:
        return list(self._rows[self._position])

    def next(self) -> bool:
        if self._position + 1 == self._fail_at:
            raise DatabaseQueryError("cursor broken")
        if self._position + 1 >= len(self._rows):
            return False
        self._position += 1
        self.fetched += 1
        return True

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class FakeSourceHelper:
    def __init__(self, rows: List[List[Any]], open_error: Optional[Exception] = None,
                 fail_at: Optional[int] = None) -> None:
        self.reader = FakeReader(rows, fail_at=fail_at)
        self.open_error = open_error
        self.queries: List[tuple] = []

    def get_data_reader(self, query: str, *args: Any) -> FakeReader:
        self.queries.append((query, args))
        if self.open_error is not None:
            raise self.open_error
        return self.reader


class FakeDestinationHelper:
    def __init__(self, existing=(), affected: int = 1, fail_insert_on: Optional[int] = None,
                 fail_check_on: Optional[int] = None) -> None:
        self.existing = set(existing)
        self.affected = affected
        self.fail_insert_on = fail_insert_on
        self.fail_check_on = fail_check_on
        self.inserted: List[tuple] = []
        self.checked: List[tuple] = []

    def exists(self, query: str, *args: Any) -> bool:
        self.checked.append(args)
        if self.fail_check_on is not None and len(self.checked) == self.fail_check_on:
            raise DatabaseQueryError("check failed")
        return args in self.existing

    def exec(self, query: str, *args: Any) -> ExecResult:
        if self.fail_insert_on is not None and len(self.inserted) + 1 == self.fail_insert_on:
            raise DatabaseQueryError("insert failed")
        self.inserted.append(args)
        return ExecResult(self.affected, 0)
