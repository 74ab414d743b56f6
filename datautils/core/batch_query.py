"""
MODULE: datautils.core.batch_query
RESPONSIBILITY: Fail-fast sequential command execution over one data helper session.
ALLOWED: Data helper protocols, loguru.
FORBIDDEN: Direct psycopg2 usage, retries, connection pooling.
ERRORS: None raised to callers; failures are kept as sticky error text.

Пакетное выполнение запросов с "липкой" ошибкой

BatchQuery выполняет цепочку Get/Set/Do. Первая же ошибка запоминается,
и все последующие команды возвращают пустой результат, не обращаясь
к базе данных, пока ошибка не будет сброшена (waive) или не выполнено
новое подключение (connect). Begin/Commit/Rollback выполняются всегда,
чтобы транзакцию можно было закрыть и после ошибки.

Счётчики действий (общий и в пределах области) нужны только для отладки:
по ним видно, на каком шаге длинной цепочки произошла ошибка.

Экземпляр не потокобезопасен: на каждый поток нужен свой BatchQuery.

Пример:

    bq = BatchQuery(config)
    if bq.connect("APPSDB"):
        bq.begin()
        bq.set("INSERT INTO groups (id, name) VALUES (%s, %s)", 100, "TEST")
        qr = bq.get("SELECT * FROM groups ORDER BY id")
        if bq.ok():
            bq.commit()
        else:
            bq.rollback()
        bq.disconnect()
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from loguru import logger

from datautils.config.settings import Config
from datautils.core.data_helper import DataHelper
from datautils.core.datatable import DataTable, Row
from datautils.core.exceptions import DataUtilsError
from datautils.core.interfaces import IBatchDataHelper

NOT_CONNECTED = "Not connected"
DEFAULT_SCOPE_NAME = "main"
PROCEDURE_KEYWORDS = ("exec", "execute")


@dataclass(frozen=True)
class QueryResult:
    """
    Результат одной команды BatchQuery

    Attributes:
        ok: Команда выполнена успешно
        has_data: Результат содержит строки
        has_affected_rows: Изменяющий запрос затронул хотя бы одну строку
        data: Строки результата только для чтения (пусто при ok=False)
    """
    ok: bool = False
    has_data: bool = False
    has_affected_rows: bool = False
    data: Tuple[Row, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "data", tuple(row.frozen() for row in self.data))

    @property
    def row_count(self) -> int:
        return len(self.data)

    def get(self, index: int) -> Optional[Row]:
        """Строка по индексу или None, если такой строки нет"""
        if not self.data:
            return None
        if index < 0 or index >= len(self.data):
            return None
        return self.data[index]

    def first(self) -> Optional[Row]:
        """Первая строка или None для пустого результата"""
        if not self.data:
            return None
        return self.data[0]


EMPTY_RESULT = QueryResult()


def normalize_procedure_call(query: str) -> str:
    """Добавление EXECUTE к вызову процедуры, если ключевое слово не указано"""
    words = query.strip().lower().split(None, 1)
    if words and words[0] in PROCEDURE_KEYWORDS:
        return query
    return "EXECUTE " + query


class BatchQuery:
    """
    Последовательное выполнение команд в одной сессии

    Attributes:
        error: Текст "липкой" ошибки (пустая строка, если ошибок нет)
        action_number: Общий счётчик действий
        scope_action_number: Счётчик действий в текущей области
    """

    def __init__(self, config: Optional[Config] = None, *, helper: Optional[IBatchDataHelper] = None):
        """
        Args:
            config: Конфигурация для создания DataHelper
            helper: Готовый помощник доступа к данным (вместо config)
        """
        if helper is None:
            if config is None:
                raise ValueError("Нужно передать config или helper")
            helper = DataHelper(config)
        self._helper = helper
        self._connected = False
        self.error = ""
        self.action_number = 0
        self.scope_action_number = 0
        self._scope_name = DEFAULT_SCOPE_NAME
        self._last_query = ""

    def connect(self, connection_id: str) -> bool:
        """
        Подключение к базе данных

        Состояние сбрасывается до вызова помощника, поэтому сброс
        происходит и при неудачном подключении.
        """
        self.error = ""
        self._last_query = ""
        self.action_number = 1
        self.scope_action_number = 1

        try:
            self._connected = bool(self._helper.connect(connection_id))
        except DataUtilsError as e:
            self._connected = False
            self.error = str(e)
            return False
        return self._connected

    def disconnect(self) -> None:
        """Отключение от базы данных (повторный вызов безопасен)"""
        self.action_number = 0
        self.scope_action_number = 0
        self.error = ""
        self._last_query = ""
        self._connected = False
        self._helper.disconnect()

    def _guard(self, query: str) -> bool:
        """
        Проверка перед выполнением Get/Set/Do

        Returns:
            True, если команду можно выполнять
        """
        if self.error:
            return False

        if not self._connected:
            self.error = NOT_CONNECTED
            return False

        self.action_number += 1
        self.scope_action_number += 1
        self._last_query = query
        return True

    def _fail(self, error: Exception) -> QueryResult:
        self.error = str(error)
        logger.debug(
            f"[{self._scope_name}] действие {self.action_number} "
            f"({self.scope_action_number} в области) завершилось ошибкой: {self.error}"
        )
        return EMPTY_RESULT

    def _read(self, query: str, args: Tuple[Any, ...]) -> QueryResult:
        try:
            table = self._helper.get_data(query, *args)
        except DataUtilsError as e:
            return self._fail(e)

        return QueryResult(
            ok=True,
            has_data=table.row_count > 0,
            data=tuple(table.rows),
        )

    def get(self, query: str, *args: Any) -> QueryResult:
        """Выполнение запроса на чтение"""
        if not self._guard(query):
            return EMPTY_RESULT
        return self._read(query, args)

    def set(self, query: str, *args: Any) -> QueryResult:
        """
        Выполнение изменяющего запроса

        Результат содержит одну синтетическую строку с колонками
        Affected и LastInsertId.
        """
        if not self._guard(query):
            return EMPTY_RESULT

        try:
            result = self._helper.exec(query, *args)
        except DataUtilsError as e:
            return self._fail(e)

        table = DataTable()
        table.add_column("Affected", int, 0, "int")
        table.add_column("LastInsertId", int, 0, "int")

        row = table.new_row()
        row.set_value_by_ord(result.rows_affected, 0)
        row.set_value_by_ord(result.last_insert_id, 1)
        table.add_row(row)

        return QueryResult(
            ok=True,
            has_data=table.row_count > 0,
            has_affected_rows=result.rows_affected != 0,
            data=tuple(table.rows),
        )

    def do(self, query: str, *args: Any) -> QueryResult:
        """Вызов хранимой процедуры (процедура может вернуть строки)"""
        if not self._guard(query):
            return EMPTY_RESULT
        return self._read(normalize_procedure_call(query), args)

    def _transaction(self, action: Callable[[], None]) -> None:
        # выполняется и в состоянии ошибки: открытую транзакцию нужно закрыть
        self.action_number += 1
        self.scope_action_number += 1
        try:
            action()
        except DataUtilsError as e:
            self.error = str(e)

    def begin(self) -> None:
        """Начало транзакции"""
        self._transaction(self._helper.begin)

    def commit(self) -> None:
        """Фиксация транзакции"""
        self._transaction(self._helper.commit)

    def rollback(self) -> None:
        """Откат транзакции"""
        self._transaction(self._helper.rollback)

    def ok(self) -> bool:
        """True, если все выполненные команды прошли без ошибок"""
        return self.error == ""

    def waive(self) -> None:
        """Сброс "липкой" ошибки; счётчики и последний запрос не меняются"""
        self.error = ""

    def settings(self) -> Config:
        """Настройки помощника доступа к данным"""
        return self._helper.settings

    def scope_name(self, scope_name: str) -> None:
        """
        Имя области (обычно функции), в которой выполняются запросы.

        Только для отладки. Сбрасывает счётчик действий области, общий
        счётчик и ошибка не меняются. Имя по умолчанию: 'main'.
        """
        self.scope_action_number = 0
        self._scope_name = scope_name

    def last_scope_name(self) -> str:
        return self._scope_name

    def last_scope_action_number(self) -> int:
        return self.scope_action_number

    def last_action_number(self) -> int:
        return self.action_number

    def last_error_text(self) -> str:
        return self.error

    def last_query(self) -> str:
        return self._last_query

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
