"""
MODULE: datautils.core.interfaces
RESPONSIBILITY: Define Protocols for the data access collaborators.
ALLOWED: Typing imports, Protocol.
FORBIDDEN: Implementation details, concrete classes (except data structures).
ERRORS: None.

Интерфейсы (Protocol) помощника доступа к данным

BatchQuery и Importer зависят только от этих контрактов, поэтому в тестах
вместо DataHelper можно передать любую реализацию с теми же методами.
"""

from typing import Any, List, NamedTuple, Protocol

from datautils.core.datatable import DataTable


class ExecResult(NamedTuple):
    """Результат выполнения изменяющего запроса"""
    rows_affected: int
    last_insert_id: int


class IRowReader(Protocol):
    """Курсор для построчного чтения результата"""

    @property
    def result_rows(self) -> List[Any]:
        """Значения текущей строки в порядке колонок"""
        ...

    def next(self) -> bool:
        """Переход к следующей строке, False в конце результата"""
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> "IRowReader":
        ...

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...


class IBatchDataHelper(Protocol):
    """Интерфейс помощника, необходимый BatchQuery"""

    @property
    def settings(self) -> Any:
        ...

    def connect(self, connection_id: str) -> bool:
        ...

    def disconnect(self) -> None:
        ...

    def get_data(self, query: str, *args: Any) -> DataTable:
        ...

    def exec(self, query: str, *args: Any) -> ExecResult:
        ...

    def begin(self) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


class IImportDataHelper(Protocol):
    """Интерфейс помощника, необходимый Importer"""

    def get_data_reader(self, query: str, *args: Any) -> IRowReader:
        ...

    def exists(self, query: str, *args: Any) -> bool:
        ...

    def exec(self, query: str, *args: Any) -> ExecResult:
        ...
