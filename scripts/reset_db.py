import argparse
import asyncio
import logging
import subprocess
import sys
from pathlib import Path

from sqlalchemy import text

from mutuals.core.log_config import configure_logging
from mutuals.db.postgres.session import close_db_session, get_engine

logger = logging.getLogger("reset_db")

project_root = Path(__file__).resolve().parent.parent


async def reset_database() -> None:
    """
    Drop the matches and users tables and the Alembic version table,
    then rebuild the schema by applying migrations.
    """
    engine = get_engine()

    try:
        async with engine.begin() as conn:
            # matches references users, so it goes first
            for table in ("matches", "users", "alembic_version"):
                logger.info("Dropping table %s", table)
                await conn.execute(text(f'DROP TABLE IF EXISTS "{table}"'))
        logger.info("Database reset successfully.")
    except Exception:
        logger.exception("Error resetting database")
        sys.exit(1)
    finally:
        await close_db_session()

    apply_migrations()


def apply_migrations() -> None:
    """
    Apply migrations to the database.
    """
    logger.info("Applying migrations...")
    try:
        subprocess.run(["alembic", "upgrade", "head"], cwd=project_root, check=True)
        logger.info("Migrations applied successfully.")
    except subprocess.CalledProcessError as e:
        logger.error("Error applying migrations: %s", e)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Drop all users and matches and rebuild the schema."
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt.",
    )

    args = parser.parse_args()
    configure_logging()

    if not args.yes:
        print("WARNING: This will DELETE ALL users and matches in the database.")
        confirm = input("Are you sure you want to continue? (y/N): ")
        if confirm.lower() != "y":
            print("Operation cancelled.")
            sys.exit(0)

    asyncio.run(reset_database())


if __name__ == "__main__":
    main()
