"""
MODULE: datautils.core.importer
RESPONSIBILITY: Stream rows from a source query into a destination statement.
ALLOWED: Data helper protocols, loguru.
FORBIDDEN: Transaction control (caller decides), retries, direct psycopg2 usage.
ERRORS: Returned in ImportResult.error, never raised from run().

Импорт данных из источника в приёмник

Строки источника читаются курсором по одной и вставляются в приёмник
тем же порядком значений. Если задан проверочный запрос, перед вставкой
выполняется проверка существования записи в приёмнике, и уже существующие
записи пропускаются.
Номера проверочных колонок должны указывать внутрь строки источника,
иначе импорт останавливается с ConfigurationError.

При ошибке проверки или вставки импорт останавливается и возвращает
накопленные счётчики вместе с ошибкой. Отката импорт не делает: границы
транзакции задаёт вызывающий код.
"""

from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional

from loguru import logger

from datautils.core.exceptions import ConfigurationError, DataUtilsError
from datautils.core.interfaces import IImportDataHelper


@dataclass
class DataQuery:
    """
    Набор параметров запроса

    Attributes:
        prepared_query: SQL запрос с позиционными параметрами
        args: Значения параметров
    """
    prepared_query: str = ""
    args: List[Any] = field(default_factory=list)


@dataclass
class DataConfiguration(DataQuery):
    """Запрос вместе с помощником доступа к данным, через который он выполняется"""
    helper: Optional[IImportDataHelper] = None

    def set_args(self, *args: Any) -> None:
        self.args = list(args)


class ImportResult(NamedTuple):
    """
    Итог импорта

    Attributes:
        selected: Количество строк, отправленных на вставку
        inserted: Сумма затронутых строк по всем вставкам
        error: Ошибка, остановившая импорт (None при успехе)
    """
    selected: int
    inserted: int
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Importer:
    """
    Импортёр данных из источника в приёмник

    Attributes:
        id: Идентификатор импорта (используется в логах)
        source: Запрос к источнику
        destination: Запрос вставки в приёмник
        destination_check: Запрос проверки существования записи в приёмнике
        log: Писать ли сообщения в лог
    """

    def __init__(
        self,
        id: str,
        source: DataConfiguration,
        destination: DataConfiguration,
        destination_check: Optional[DataQuery] = None,
        log: bool = False,
    ) -> None:
        self.id = id
        self.source = source
        self.destination = destination
        self.destination_check = destination_check or DataQuery()
        self.log = log
        self._checker_index: List[int] = []

    @property
    def checker_index(self) -> List[int]:
        return list(self._checker_index)

    def set_checker_index(self, *arg_index: int) -> None:
        """
        Номера колонок строки источника, значения которых передаются
        в проверочный запрос (в указанном порядке, с нуля)
        """
        self._checker_index = list(arg_index)

    def _check_enabled(self) -> bool:
        return bool(self.destination_check.prepared_query) and bool(self._checker_index)

    def _checker_error(self, width: int) -> Optional[ConfigurationError]:
        bad = [i for i in self._checker_index if i < 0 or i >= width]
        if not bad:
            return None
        return ConfigurationError(
            f"Неверные номера проверочных колонок {bad}: в строке источника {width} колонок"
        )

    def run(self) -> ImportResult:
        """
        Запуск импорта

        Returns:
            ImportResult(selected, inserted, error); при ошибке счётчики
            содержат результат до момента остановки

        Ошибки не пробрасываются: ошибка сессии (DataUtilsError) или номер
        проверочной колонки вне строки источника (ConfigurationError)
        возвращаются в ImportResult.error
        """
        selected = 0
        inserted = 0

        try:
            reader = self.source.helper.get_data_reader(self.source.prepared_query, *self.source.args)
        except DataUtilsError as e:
            if self.log:
                logger.error(f"SOURCE: {self.id} -> {e}")
            return ImportResult(0, 0, e)

        check_enabled = self._check_enabled()

        with reader:
            try:
                while reader.next():
                    values = reader.result_rows

                    if check_enabled:
                        bad_index = self._checker_error(len(values))
                        if bad_index is not None:
                            if self.log:
                                logger.error(f"DESTINATION CHECK: {self.id} -> {bad_index}")
                            return ImportResult(selected, inserted, bad_index)

                        check_args = [values[i] for i in self._checker_index]
                        try:
                            exists = self.destination.helper.exists(
                                self.destination_check.prepared_query, *check_args
                            )
                        except DataUtilsError as e:
                            if self.log:
                                logger.error(f"DESTINATION CHECK: {self.id} -> Ошибка проверки записи: {e}")
                            return ImportResult(selected, inserted, e)

                        if exists:
                            if self.log:
                                logger.info(f"DESTINATION CHECK: {self.id} -> Запись уже существует")
                            continue

                    try:
                        result = self.destination.helper.exec(self.destination.prepared_query, *values)
                    except DataUtilsError as e:
                        if self.log:
                            logger.error(f"DESTINATION: {self.id} -> Ошибка вставки записи: {e}")
                        return ImportResult(selected, inserted, e)

                    inserted += result.rows_affected
                    selected += 1
            except DataUtilsError as e:
                # ошибка чтения курсора источника
                if self.log:
                    logger.error(f"SOURCE: {self.id} -> {e}")
                return ImportResult(selected, inserted, e)

        if self.log:
            logger.info(f"{self.id}: {selected} строк обработано, {inserted} вставлено")

        return ImportResult(selected, inserted, None)
