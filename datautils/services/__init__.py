"""
Сервисный слой datautils: сборка импортёров из конфигурации и их запуск.
"""
from .import_jobs import ImportJobRunner, ImportJobSpec, load_job_specs

__all__ = ['ImportJobRunner', 'ImportJobSpec', 'load_job_specs']
