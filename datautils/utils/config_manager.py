"""
Доступ к ini-файлу заданий импорта.

Каждое задание описывается своей секцией ([job:<id>]). Значения
читаются как строки и при необходимости приводятся к спискам, числам
и флагам.
"""
import configparser
from pathlib import Path
from typing import Dict, List, Optional, Union

from datautils.core.exceptions import ConfigurationError
from datautils.utils.logger_config import get_logger

logger = get_logger()

TRUE_VALUES = ('true', '1', 'yes', 'y', 'on')


class ConfigManager:
    """Ini-файл заданий, открытый только для чтения."""

    def __init__(self, config_path: Union[str, Path] = "jobs.ini"):
        """
        :param config_path: Путь к ini-файлу (допускается ~)
        :raises ConfigurationError: Файл отсутствует или не разбирается
        """
        self.config_path = Path(config_path).expanduser()
        # в запросах встречается %s, интерполяция configparser её бы съела
        self.config = configparser.ConfigParser(interpolation=None)
        self._load_config()

    def _load_config(self):
        if not self.config_path.is_file():
            raise ConfigurationError(f"Файл заданий не найден: {self.config_path}")

        try:
            with self.config_path.open(encoding="utf-8") as stream:
                self.config.read_file(stream)
        except configparser.Error as e:
            error_msg = f"Файл заданий {self.config_path} не разобран: {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg, original_error=e) from e

        logger.debug(f"Файл заданий {self.config_path}: секций {len(self.config.sections())}")

    def _option(self, section: str, option: str) -> Optional[str]:
        """Сырое значение опции или None, если секции или опции нет."""
        if not self.config.has_option(section, option):
            return None
        return self.config[section][option]

    def sections(self, prefix: str = "") -> List[str]:
        """Секции с заданным префиксом в порядке их следования в файле."""
        return [name for name in self.config.sections() if name.startswith(prefix)]

    def get(self, section: str, option: str, fallback: Optional[str] = None) -> str:
        """
        Строковое значение опции.

        :param fallback: Возвращается, если опции нет; None делает опцию обязательной
        :raises ConfigurationError: Обязательная опция отсутствует
        """
        value = self._option(section, option)
        if value is not None:
            return value
        if fallback is None:
            error_msg = f"[{section}] нет обязательной опции '{option}'"
            logger.error(error_msg)
            raise ConfigurationError(error_msg)
        return fallback

    def get_section(self, section: str) -> Dict[str, str]:
        """Все опции секции словарём."""
        try:
            return dict(self.config.items(section))
        except configparser.NoSectionError as e:
            raise ConfigurationError(f"Нет секции [{section}]", original_error=e) from e

    def get_list(self, section: str, option: str, separator: str = ",") -> List[str]:
        """Непустые элементы значения, разделённого separator (пустой список без опции)."""
        raw = self._option(section, option) or ""
        items = (part.strip() for part in raw.split(separator))
        return [item for item in items if item]

    def get_int_list(self, section: str, option: str, separator: str = ",") -> List[int]:
        """Список целых чисел, например номера колонок."""
        numbers = []
        for item in self.get_list(section, option, separator):
            try:
                numbers.append(int(item))
            except ValueError as e:
                raise ConfigurationError(
                    f"[{section}] {option}: '{item}' не целое число", original_error=e
                ) from e
        return numbers

    def get_bool(self, section: str, option: str, fallback: bool = False) -> bool:
        raw = self._option(section, option)
        if raw is None or not raw.strip():
            return fallback
        return raw.strip().lower() in TRUE_VALUES
