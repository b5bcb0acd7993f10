"""
일일 급여 배치 실행 스크립트 (cron / 외부 스케줄러용)

사용법:
    python scripts/run_salary_batch.py
    python scripts/run_salary_batch.py --user-id 42
"""

import argparse
import logging
import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from earnapi.config import settings
from earnapi.containers import Container
from earnapi.logging_config import setup_logging

logger = logging.getLogger("earnapi.scripts.run_salary_batch")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Process monthly salaries")
    parser.add_argument("--user-id", type=int, default=None, help="단일 사용자만 처리")
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL)
    container = Container()
    try:
        salary_service = container.services.salary_service()
        if args.user_id is not None:
            result = salary_service.process_salary_for_user_id(args.user_id)
            logger.info(f"User {args.user_id}: {result.message}")
            return 0

        result = salary_service.process_all_salaries()
        return 1 if result.failed_user_ids else 0
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    sys.exit(main())
