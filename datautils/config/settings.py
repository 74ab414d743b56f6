"""
MODULE: datautils.config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, database connections (only config).
ERRORS: ConfigurationError (validation).

Настройки datautils загружаются из переменных окружения (.env).

Именованные подключения описываются группой переменных с префиксом
идентификатора подключения, например для "ZX_APPSDB":

    ZX_APPSDB_DB_HOST=localhost
    ZX_APPSDB_DB_DATABASE=apps
    ZX_APPSDB_DB_USER=postgres
    ZX_APPSDB_DB_PASSWORD=secret
    ZX_APPSDB_DB_PORT=5432
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
import os
import re

from dotenv import load_dotenv
from loguru import logger

from datautils.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class DatabaseConfig:
    """Конфигурация подключения к базе данных"""
    host: str
    database: str
    user: str
    password: str
    port: int

    def get_connection_string(self) -> str:
        """Получить строку подключения для psycopg2"""
        return f"host={self.host} dbname={self.database} user={self.user} password={self.password} port={self.port}"


@dataclass(frozen=True)
class AppConfig:
    """Основная конфигурация приложения"""
    app_name: str
    app_version: str
    log_level: str
    log_dir: str
    log_rotation: str
    log_retention: str


class Config:
    """
    Главный класс конфигурации, загружающий настройки из .env файла

    Параметры подключений читаются по запросу (get_connection), поэтому
    один экземпляр Config обслуживает любое количество баз данных.
    """

    _CONNECTION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

    def __init__(self, env_file: Optional[str] = None):
        """
        Инициализация конфигурации

        Args:
            env_file: Путь к .env файлу (опционально)
        """
        self._load_environment(env_file)
        self.app = self._load_app_config()
        self._connections: Dict[str, DatabaseConfig] = {}

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Загрузка переменных окружения"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except Exception as e:
            logger.warning(f"Не удалось загрузить .env файл: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> str:
        """
        Получение переменной окружения с валидацией

        Args:
            key: Ключ переменной
            default: Значение по умолчанию
            required: Обязательная ли переменная

        Returns:
            Значение переменной

        Raises:
            ConfigurationError: Если обязательная переменная не найдена
        """
        value = os.getenv(key)

        if value is None or (required and value == ""):
            if required:
                raise ConfigurationError(f"Обязательная переменная окружения {key} не найдена")
            return default

        return value

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Получение int переменной из окружения"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Неверный формат int для {key}: {e}, используется значение по умолчанию: {default}")
            return default

    def _load_app_config(self) -> AppConfig:
        """Загрузка основной конфигурации приложения"""
        return AppConfig(
            app_name=self._get_env_var("APP_NAME", "datautils"),
            app_version=self._get_env_var("APP_VERSION", "1.0.0"),
            log_level=self._get_env_var("LOG_LEVEL", "INFO"),
            log_dir=self._get_env_var("LOG_DIR", "logs"),
            log_rotation=self._get_env_var("LOG_ROTATION", "10 MB"),
            log_retention=self._get_env_var("LOG_RETENTION", "30 days")
        )

    def get_connection(self, connection_id: str) -> DatabaseConfig:
        """
        Получение параметров именованного подключения

        Args:
            connection_id: Идентификатор подключения (префикс переменных окружения)

        Returns:
            Конфигурация подключения

        Raises:
            ConfigurationError: Если идентификатор некорректен или не заданы обязательные параметры
        """
        if not connection_id or not self._CONNECTION_ID_PATTERN.match(connection_id):
            raise ConfigurationError(f"Некорректный идентификатор подключения: '{connection_id}'")

        key = connection_id.upper()
        if key not in self._connections:
            prefix = f"{key}_DB_"
            self._connections[key] = DatabaseConfig(
                host=self._get_env_var(prefix + "HOST", "localhost"),
                database=self._get_env_var(prefix + "DATABASE", required=True),
                user=self._get_env_var(prefix + "USER", required=True),
                password=self._get_env_var(prefix + "PASSWORD", ""),
                port=self._get_env_int(prefix + "PORT", 5432)
            )
        return self._connections[key]

    def has_connection(self, connection_id: str) -> bool:
        """Проверка, описано ли подключение в окружении"""
        try:
            self.get_connection(connection_id)
            return True
        except ConfigurationError:
            return False

    def validate(self, connection_ids: Optional[list] = None) -> bool:
        """
        Валидация конфигурации

        Args:
            connection_ids: Подключения, которые должны быть описаны

        Returns:
            True если конфигурация валидна
        """
        try:
            if self.app.log_level.upper() not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
                raise ConfigurationError(f"Неизвестный уровень логирования: {self.app.log_level}")

            for connection_id in connection_ids or []:
                self.get_connection(connection_id)

            logger.info("Конфигурация прошла валидацию")
            return True

        except ConfigurationError as e:
            logger.error(f"Ошибка валидации конфигурации: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование конфигурации в словарь (без паролей)"""
        return {
            "app": {
                "app_name": self.app.app_name,
                "app_version": self.app.app_version,
                "log_level": self.app.log_level,
                "log_dir": self.app.log_dir,
            },
            "connections": {
                connection_id: {
                    "host": db.host,
                    "database": db.database,
                    "user": db.user,
                    "port": db.port,
                }
                for connection_id, db in self._connections.items()
            },
        }
