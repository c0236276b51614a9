#!/usr/bin/env python3
"""
Run one generation job inline, without going through the Celery queue.

Usage:
    python scripts/run_job.py <job_id> [--create-tables]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add the server directory to the Python path
sys.path.append(str(Path(__file__).parent.parent))

from covergen.core.logging import configure_logging
from covergen.db.session import create_db_and_tables
from covergen.workers.generation import run_job

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a queued cover generation job")
    parser.add_argument("job_id", help="ID of the generation job to run")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing database tables before running the job",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()

    if args.create_tables:
        create_db_and_tables()
        logger.info("Database tables created")

    status = run_job(args.job_id)
    if status is None:
        logger.error(f"Job {args.job_id} not found")
        return 1

    logger.info(f"Job {args.job_id} finished with status {status}")
    return 0 if status == "succeeded" else 2


if __name__ == "__main__":
    sys.exit(main())
