"""
MODULE: datautils.services.import_jobs
RESPONSIBILITY: Run configured import jobs between named connections.
ALLOWED: datautils.core, datautils.config, datautils.utils, loguru.
FORBIDDEN: Direct psycopg2 usage, CLI argument parsing.
ERRORS: ConfigurationError (bad job definition).

Запуск заданий импорта

Задание описывает источник, приёмник и необязательную проверку
существования записи. Для каждого задания открываются отдельные
подключения к источнику и приёмнику, после выполнения они закрываются.
Если включён use_transaction, вставка в приёмник выполняется в одной
транзакции и откатывается при частичной ошибке.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from loguru import logger

from datautils.config.settings import Config
from datautils.core.data_helper import DataHelper
from datautils.core.exceptions import ConfigurationError, DataUtilsError
from datautils.core.importer import DataConfiguration, DataQuery, Importer, ImportResult
from datautils.utils.config_manager import ConfigManager

JOB_SECTION_PREFIX = "job:"


@dataclass
class ImportJobSpec:
    """Описание одного задания импорта."""

    id: str
    source_connection: str
    source_query: str
    destination_connection: str
    destination_query: str
    source_args: List[Any] = field(default_factory=list)
    check_query: str = ""
    check_index: List[int] = field(default_factory=list)
    log: bool = True
    use_transaction: bool = False


def load_job_specs(manager: ConfigManager) -> List[ImportJobSpec]:
    """
    Чтение заданий из секций [job:<id>] ini-файла.

    :param manager: Загруженный ConfigManager
    :return: Задания в порядке следования в файле
    :raises ConfigurationError: Если в задании нет обязательных параметров
    """
    specs = []
    for section in manager.sections(JOB_SECTION_PREFIX):
        job_id = section[len(JOB_SECTION_PREFIX):].strip()
        if not job_id:
            raise ConfigurationError(f"Пустой идентификатор задания в секции '{section}'")

        check_query = manager.get(section, "check_query", fallback="")
        check_index = manager.get_int_list(section, "check_index")
        if check_query and not check_index:
            raise ConfigurationError(f"Задание '{job_id}': check_query задан без check_index")

        specs.append(ImportJobSpec(
            id=job_id,
            source_connection=manager.get(section, "source_connection"),
            source_query=manager.get(section, "source_query"),
            destination_connection=manager.get(section, "destination_connection"),
            destination_query=manager.get(section, "destination_query"),
            source_args=manager.get_list(section, "source_args"),
            check_query=check_query,
            check_index=check_index,
            log=manager.get_bool(section, "log", fallback=True),
            use_transaction=manager.get_bool(section, "use_transaction", fallback=False),
        ))
    return specs


class ImportJobRunner:
    """
    Выполнение заданий импорта.

    Помощники доступа к данным создаются фабрикой, чтобы в тестах
    можно было подставить заглушки.
    """

    def __init__(self, config: Config, helper_factory: Optional[Callable[[Config], Any]] = None) -> None:
        self._config = config
        self._helper_factory = helper_factory or DataHelper

    def run_job(self, spec: ImportJobSpec) -> ImportResult:
        """
        Выполнение одного задания.

        Ошибки подключения и управления транзакцией возвращаются
        в ImportResult так же, как ошибки самого импорта.
        """
        source_helper = self._helper_factory(self._config)
        destination_helper = self._helper_factory(self._config)

        try:
            try:
                source_helper.connect(spec.source_connection)
                destination_helper.connect(spec.destination_connection)
            except DataUtilsError as e:
                logger.error(f"{spec.id}: не удалось подключиться: {e}")
                return ImportResult(0, 0, e)

            importer = Importer(
                id=spec.id,
                source=DataConfiguration(prepared_query=spec.source_query, helper=source_helper),
                destination=DataConfiguration(prepared_query=spec.destination_query, helper=destination_helper),
                destination_check=DataQuery(prepared_query=spec.check_query),
                log=spec.log,
            )
            importer.source.set_args(*spec.source_args)
            importer.set_checker_index(*spec.check_index)

            if not spec.use_transaction:
                return importer.run()
            return self._run_in_transaction(importer, destination_helper)
        finally:
            source_helper.disconnect()
            destination_helper.disconnect()

    @staticmethod
    def _run_in_transaction(importer: Importer, helper) -> ImportResult:
        try:
            helper.begin()
        except DataUtilsError as e:
            logger.error(f"{importer.id}: не удалось начать транзакцию: {e}")
            return ImportResult(0, 0, e)

        result = importer.run()
        if not result.ok:
            try:
                helper.rollback()
            except DataUtilsError as e:
                logger.error(f"{importer.id}: ошибка отката: {e}")
            logger.warning(f"{importer.id}: транзакция откатана, {result.selected} строк не сохранено")
            return result

        try:
            helper.commit()
        except DataUtilsError as e:
            logger.error(f"{importer.id}: ошибка фиксации: {e}")
            return ImportResult(result.selected, result.inserted, e)
        return result

    def run_all(self, specs: Iterable[ImportJobSpec]) -> Dict[str, ImportResult]:
        """Последовательное выполнение заданий, результат по идентификатору задания."""
        results: Dict[str, ImportResult] = {}
        for spec in specs:
            logger.info(f"Запуск задания импорта: {spec.id}")
            results[spec.id] = self.run_job(spec)
        return results
