"""
Точка входа: запуск заданий импорта из ini-файла.

Пример:
    python -m datautils.main --jobs jobs.ini --env .env
    python -m datautils.main --jobs jobs.ini --job warehouses --job items
"""

import argparse
import sys
from typing import List, Optional

from datautils.config import DEFAULT_JOBS_PATH
from datautils.config.settings import Config
from datautils.core.exceptions import ConfigurationError
from datautils.services.import_jobs import ImportJobRunner, load_job_specs
from datautils.utils.config_manager import ConfigManager
from datautils.utils.logger_config import configure_logging, get_logger

logger = get_logger()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Перенос данных между базами PostgreSQL")
    parser.add_argument("--jobs", default=str(DEFAULT_JOBS_PATH), help="ini-файл с заданиями импорта")
    parser.add_argument("--env", default=None, help="Путь к .env файлу")
    parser.add_argument(
        "--job",
        action="append",
        dest="job_ids",
        default=None,
        help="Запустить только указанное задание (можно повторять)",
    )
    parser.add_argument("--no-file-logs", action="store_true", help="Не писать логи в файлы")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    config = Config(args.env)
    configure_logging(
        level=config.app.log_level,
        log_dir=None if args.no_file_logs else config.app.log_dir,
        rotation=config.app.log_rotation,
        retention=config.app.log_retention,
    )

    try:
        specs = load_job_specs(ConfigManager(args.jobs))
    except ConfigurationError as e:
        logger.error(f"Ошибка загрузки заданий: {e}")
        print(f"❌ {e}", file=sys.stderr)
        return 2

    if args.job_ids:
        unknown = set(args.job_ids) - {spec.id for spec in specs}
        if unknown:
            print(f"❌ Неизвестные задания: {', '.join(sorted(unknown))}", file=sys.stderr)
            return 2
        specs = [spec for spec in specs if spec.id in args.job_ids]

    if not specs:
        print("⚠️  Нет заданий для выполнения")
        return 0

    results = ImportJobRunner(config).run_all(specs)

    failed = 0
    print(f"\n{'=' * 60}")
    for job_id, result in results.items():
        if result.ok:
            print(f"✅ {job_id}: выбрано {result.selected}, вставлено {result.inserted}")
        else:
            failed += 1
            print(f"❌ {job_id}: выбрано {result.selected}, вставлено {result.inserted}, ошибка: {result.error}")
    print(f"{'=' * 60}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
