"""
datautils: пакетные запросы и перенос данных между базами PostgreSQL.

Основные точки входа:
- BatchQuery: последовательное выполнение команд с "липкой" ошибкой
- Importer: потоковое копирование строк из источника в приёмник
"""

from datautils.core.batch_query import BatchQuery, QueryResult
from datautils.core.importer import DataConfiguration, DataQuery, Importer, ImportResult

__version__ = "1.0.0"

__all__ = [
    'BatchQuery',
    'QueryResult',
    'DataConfiguration',
    'DataQuery',
    'Importer',
    'ImportResult',
]
