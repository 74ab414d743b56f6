"""
MODULE: datautils.core.data_helper
RESPONSIBILITY: Low-level PostgreSQL session management for one named connection.
ALLOWED: psycopg2, loguru, datautils.config.
FORBIDDEN: Sticky-error bookkeeping (BatchQuery), copy logic (Importer).
ERRORS: DatabaseConnectionError, NotConnectedError, DatabaseQueryError, TransactionError.

Помощник доступа к данным поверх psycopg2

Модуль предоставляет:
- DataHelper: одно подключение к PostgreSQL, чтение, изменение, транзакции
- RowReader: построчное чтение большого результата через серверный курсор
"""

import itertools
from typing import Any, Iterator, List, Optional

import psycopg2
from loguru import logger

from datautils.config.settings import Config
from datautils.core.datatable import DataTable
from datautils.core.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseQueryError,
    NotConnectedError,
    TransactionError,
)
from datautils.core.interfaces import ExecResult


def _error_text(error: Exception) -> str:
    return str(error).strip()


class RowReader:
    """
    Построчное чтение результата запроса

    Оборачивает именованный (серверный) курсор psycopg2 и итерирует по нему,
    поэтому строки подгружаются порциями по cursor.itersize, а не целиком
    в память.
    Курсор обязательно закрывается: close() или выход из блока with.
    """

    def __init__(self, cursor, query: str):
        self._cursor = cursor
        self._query = query
        self._current: List[Any] = []
        self._records: Optional[Iterator[Any]] = None
        self._closed = False

    @property
    def result_rows(self) -> List[Any]:
        """Значения текущей строки"""
        return self._current

    @property
    def columns(self) -> List[str]:
        if self._cursor.description is None:
            return []
        return [item[0] for item in self._cursor.description]

    @property
    def closed(self) -> bool:
        return self._closed

    def next(self) -> bool:
        """
        Переход к следующей строке

        Returns:
            False, если строк больше нет

        Raises:
            DatabaseQueryError: При ошибке чтения из курсора
        """
        if self._closed:
            return False
        try:
            # itersize применяется только при итерации по самому курсору,
            # fetchone() у серверного курсора забирает по одной строке
            if self._records is None:
                self._records = iter(self._cursor)
            record = next(self._records, None)
        except psycopg2.Error as e:
            error_msg = f"Ошибка чтения строки: {_error_text(e)}"
            logger.error(error_msg)
            raise DatabaseQueryError(error_msg, query=self._query, original_error=e) from e
        if record is None:
            self._current = []
            return False
        self._current = list(record)
        return True

    def close(self) -> None:
        """Закрытие курсора (повторный вызов безопасен)"""
        if self._closed:
            return
        self._closed = True
        try:
            self._cursor.close()
        except psycopg2.Error as e:
            logger.warning(f"Ошибка при закрытии курсора: {_error_text(e)}")

    def __iter__(self):
        while self.next():
            yield self._current

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class DataHelper:
    """
    Помощник для работы с одной базой данных PostgreSQL

    Соединение работает в режиме autocommit; транзакция открывается явно
    через begin() и завершается commit() или rollback().

    Attributes:
        connection_id: Идентификатор текущего подключения
        connect_timeout: Таймаут подключения в секундах
        itersize: Размер порции строк для RowReader
    """

    _reader_counter = itertools.count(1)

    def __init__(self, config: Config, connect_timeout: int = 10, itersize: int = 2000):
        """
        Инициализация помощника

        Args:
            config: Конфигурация приложения с описанием подключений
            connect_timeout: Таймаут подключения в секундах
            itersize: Размер порции строк серверного курсора
        """
        self._config = config
        self.connect_timeout = connect_timeout
        self.itersize = itersize
        self.connection_id: Optional[str] = None
        self._connection: Optional[psycopg2.extensions.connection] = None
        self._in_transaction = False

    @property
    def settings(self) -> Config:
        """Конфигурация, с которой создан помощник (только чтение)"""
        return self._config

    @property
    def connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def connect(self, connection_id: str) -> bool:
        """
        Установка соединения с базой данных

        Предыдущее соединение, если оно было, закрывается.

        Args:
            connection_id: Идентификатор подключения из конфигурации

        Returns:
            True при успешном подключении

        Raises:
            DatabaseConnectionError: При ошибке подключения или неверной конфигурации
        """
        self.disconnect()

        try:
            db_config = self._config.get_connection(connection_id)
        except ConfigurationError as e:
            error_msg = f"Подключение '{connection_id}' не настроено: {e}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg, original_error=e) from e

        try:
            connection = psycopg2.connect(
                host=db_config.host,
                database=db_config.database,
                user=db_config.user,
                password=db_config.password,
                port=db_config.port,
                connect_timeout=self.connect_timeout
            )
            connection.autocommit = True
        except psycopg2.Error as e:
            error_msg = f"Ошибка подключения к БД {db_config.database}: {_error_text(e)}"
            logger.error(error_msg)
            raise DatabaseConnectionError(error_msg, original_error=e) from e

        self._connection = connection
        self.connection_id = connection_id
        self._in_transaction = False
        logger.info(f"Успешное подключение к БД: {db_config.database} ({connection_id})")
        return True

    def disconnect(self) -> None:
        """Закрытие соединения (безопасно при отсутствии подключения)"""
        connection = self._connection
        self._connection = None
        self._in_transaction = False
        if connection is None or connection.closed:
            return
        try:
            connection.close()
            logger.info(f"Соединение с БД закрыто ({self.connection_id})")
        except psycopg2.Error as e:
            logger.warning(f"Ошибка при закрытии соединения с БД: {_error_text(e)}")

    def _require_connection(self) -> "psycopg2.extensions.connection":
        if not self.connected:
            raise NotConnectedError()
        return self._connection

    def _query_error(self, error: psycopg2.Error, query: str) -> DatabaseQueryError:
        error_msg = f"Ошибка выполнения запроса: {_error_text(error)}"
        logger.error(f"{error_msg}\nЗапрос: {query}")
        return DatabaseQueryError(error_msg, query=query, original_error=error)

    def get_data(self, query: str, *args: Any) -> DataTable:
        """
        Выполнение запроса, возвращающего строки

        Args:
            query: SQL запрос с позиционными параметрами (%s)
            *args: Значения параметров

        Returns:
            Таблица результата (пустая, если запрос не возвращает строк)

        Raises:
            NotConnectedError: Нет активного подключения
            DatabaseQueryError: При ошибке выполнения запроса
        """
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, args or None)
                if cursor.description is None:
                    return DataTable()
                table = DataTable.from_cursor_result(cursor.description, cursor.fetchall())
        except psycopg2.Error as e:
            raise self._query_error(e, query) from e

        logger.debug(f"Выполнен запрос, возвращено {table.row_count} строк")
        return table

    def exec(self, query: str, *args: Any) -> ExecResult:
        """
        Выполнение изменяющего запроса (INSERT/UPDATE/DELETE)

        Идентификатор вставленной записи берётся из первой колонки
        RETURNING, если она есть; иначе используется cursor.lastrowid.

        Args:
            query: SQL запрос с позиционными параметрами (%s)
            *args: Значения параметров

        Returns:
            Количество затронутых строк и идентификатор последней вставки

        Raises:
            NotConnectedError: Нет активного подключения
            DatabaseQueryError: При ошибке выполнения запроса
        """
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, args or None)
                rows_affected = max(cursor.rowcount, 0)
                last_insert_id = 0
                if cursor.description is not None:
                    record = cursor.fetchone()
                    if record and record[0] is not None:
                        last_insert_id = int(record[0])
                elif cursor.lastrowid:
                    last_insert_id = int(cursor.lastrowid)
        except psycopg2.Error as e:
            raise self._query_error(e, query) from e

        logger.debug(f"Выполнен DML запрос, затронуто строк: {rows_affected}")
        return ExecResult(rows_affected=rows_affected, last_insert_id=last_insert_id)

    def exists(self, query: str, *args: Any) -> bool:
        """Проверка, возвращает ли запрос хотя бы одну строку"""
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, args or None)
                return cursor.description is not None and cursor.fetchone() is not None
        except psycopg2.Error as e:
            raise self._query_error(e, query) from e

    def get_data_reader(self, query: str, *args: Any) -> RowReader:
        """
        Открытие серверного курсора для построчного чтения

        Вне транзакции курсор объявляется WITH HOLD, иначе PostgreSQL
        закрыл бы его сразу после выполнения запроса.

        Raises:
            NotConnectedError: Нет активного подключения
            DatabaseQueryError: При ошибке выполнения запроса
        """
        connection = self._require_connection()
        name = f"datautils_reader_{next(self._reader_counter)}"
        cursor = connection.cursor(name=name, withhold=connection.autocommit)
        cursor.itersize = self.itersize
        try:
            cursor.execute(query, args or None)
        except psycopg2.Error as e:
            try:
                cursor.close()
            except psycopg2.Error:
                logger.debug(f"Курсор {name} не был открыт на сервере")
            raise self._query_error(e, query) from e
        return RowReader(cursor, query)

    def begin(self) -> None:
        """
        Начало транзакции

        Raises:
            NotConnectedError: Нет активного подключения
            TransactionError: Транзакция уже открыта
        """
        connection = self._require_connection()
        if self._in_transaction:
            raise TransactionError("Транзакция уже открыта")
        try:
            connection.autocommit = False
        except psycopg2.Error as e:
            raise TransactionError(f"Не удалось начать транзакцию: {_error_text(e)}", original_error=e) from e
        self._in_transaction = True
        logger.debug("Транзакция начата")

    def commit(self) -> None:
        """Фиксация транзакции"""
        self._finish_transaction("commit")

    def rollback(self) -> None:
        """Откат транзакции"""
        self._finish_transaction("rollback")

    def _finish_transaction(self, action: str) -> None:
        connection = self._require_connection()
        if not self._in_transaction:
            raise TransactionError(f"Нет открытой транзакции для {action}")
        try:
            getattr(connection, action)()
        except psycopg2.Error as e:
            error_msg = f"Ошибка {action} транзакции: {_error_text(e)}"
            logger.error(error_msg)
            if action == "commit":
                self._safe_rollback(connection)
            raise TransactionError(error_msg, original_error=e) from e
        finally:
            self._in_transaction = False
            self._restore_autocommit(connection)
        logger.debug(f"Транзакция завершена: {action}")

    @staticmethod
    def _safe_rollback(connection) -> None:
        try:
            connection.rollback()
        except psycopg2.Error as e:
            logger.warning(f"Ошибка при откате транзакции: {_error_text(e)}")

    @staticmethod
    def _restore_autocommit(connection) -> None:
        if connection.closed:
            return
        try:
            connection.autocommit = True
        except psycopg2.Error as e:
            logger.warning(f"Не удалось вернуть режим autocommit: {_error_text(e)}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
