from pathlib import Path

from datautils.config.settings import AppConfig, Config, DatabaseConfig

BASE_DIR = Path(__file__).resolve().parent.parent.parent
DEFAULT_JOBS_PATH = BASE_DIR / "jobs.ini"

__all__ = ['AppConfig', 'Config', 'DatabaseConfig', 'BASE_DIR', 'DEFAULT_JOBS_PATH']
