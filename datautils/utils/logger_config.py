"""
MODULE: datautils.utils.logger_config
RESPONSIBILITY: Centralized Loguru configuration and logger instance provision.
ALLOWED: Configuring loguru, exporting `logger` object.
FORBIDDEN: Business logic, re-configuring logger in other modules.
ERRORS: OSError (if log directory creation fails).

Централизованная настройка логирования через Loguru.
Модули библиотеки только пишут в logger; обработчики настраивает
точка входа приложения вызовом configure_logging().
"""
import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[Union[str, Path]] = "logs",
    rotation: str = "10 MB",
    retention: str = "30 days",
) -> None:
    """
    Настройка обработчиков loguru

    Args:
        level: Уровень вывода в консоль
        log_dir: Директория для файлов логов (None: только консоль)
        rotation: Условие ротации файлов
        retention: Срок хранения файлов
    """
    # Удаляем стандартный handler
    logger.remove()

    # Консольный вывод
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if log_dir is None:
        return

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Файл приложения (DEBUG и выше)
    logger.add(
        log_path / "app.log",
        format=FILE_FORMAT,
        level="DEBUG",
        rotation=rotation,
        retention=retention,
        compression="zip",
    )

    # Файл ошибок (ERROR и выше)
    logger.add(
        log_path / "errors.log",
        format=FILE_FORMAT,
        level="ERROR",
        rotation=rotation,
        retention=retention,
        compression="zip",
        backtrace=True,
    )


def get_logger():
    """Возвращает настроенный logger."""
    return logger
