"""
MODULE: datautils.core.exceptions
RESPONSIBILITY: Define the project-wide exception hierarchy.
ALLOWED: Inheriting from DataUtilsError.
FORBIDDEN: Business logic, external imports (except standard library).
ERRORS: None (defines errors).

Пользовательские исключения datautils
"""
from typing import Optional


class DataUtilsError(Exception):
    """Базовое исключение библиотеки"""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(DataUtilsError):
    """Ошибка конфигурации (отсутствующие или неверные настройки)"""
    pass


class DatabaseConnectionError(DataUtilsError):
    """Ошибка подключения к базе данных"""
    pass


class NotConnectedError(DatabaseConnectionError):
    """Операция вызвана без активного подключения"""

    def __init__(self, message: str = "Not connected"):
        super().__init__(message)


class DatabaseQueryError(DataUtilsError):
    """Ошибка выполнения запроса к базе данных"""

    def __init__(self, message: str, query: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, original_error=original_error)
        self.query = query


class TransactionError(DataUtilsError):
    """Ошибка управления транзакцией (BEGIN/COMMIT/ROLLBACK)"""
    pass
