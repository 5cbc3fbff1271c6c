#!/usr/bin/env python3
"""
Database management script.
Creates tables, seeds the default accounts and resets development databases.
"""

import asyncio
import argparse
import logging
import sys

from marketplace.config import settings
from marketplace.database import AsyncSessionLocal, create_tables, drop_tables, close_db_connection
from marketplace.models.user import UserRole
from marketplace.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def seed_accounts():
    """Default accounts as (email, password, first name, role)."""
    return [
        (settings.seed_admin_email, settings.seed_admin_password, "Admin", UserRole.ADMIN),
        (settings.seed_client_email, settings.seed_client_password, "Client", UserRole.CLIENT),
        (settings.seed_agent_email, settings.seed_agent_password, "Agent", UserRole.AGENT),
    ]


async def seed_database() -> int:
    """
    Create the default Admin, Client and Agent accounts.

    Accounts that already exist are left untouched, so seeding can run on
    every deploy.

    Returns:
        Number of accounts created
    """
    logger.info("Seeding database with default accounts")
    created = 0

    async with AsyncSessionLocal() as session:
        user_repo = UserRepository(session)
        for email, password, first_name, role in seed_accounts():
            if await user_repo.get_by_email(email):
                logger.info(f"{role.value} account {email} already exists, skipping")
                continue

            await user_repo.create_user(
                {"email": email, "password": password, "first_name": first_name, "last_name": "User"},
                roles=[role],
            )
            logger.info(f"Created {role.value} account {email}")
            created += 1

    if created and settings.is_production:
        logger.warning("Default accounts were created in production; change their passwords")
    return created


async def reset_database() -> None:
    """Drop and recreate every table, then seed. Refused in production."""
    if settings.is_production:
        raise RuntimeError("Database reset is not allowed in production")

    logger.warning("Resetting database - all data will be lost!")
    await drop_tables()
    await create_tables()
    await seed_database()
    logger.info("Database reset completed")


async def run(command: str) -> None:
    try:
        if command == "init-db":
            await create_tables()
        elif command == "seed":
            await seed_database()
        elif command == "reset":
            await reset_database()
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Marketplace database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create all tables")
    subparsers.add_parser("seed", help="Create the default Admin, Client and Agent accounts")

    reset_parser = subparsers.add_parser("reset", help="Drop, recreate and seed the database (not in production)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    if args.command == "reset" and not args.confirm:
        print("Database reset requires --confirm flag")
        sys.exit(2)

    try:
        asyncio.run(run(args.command))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
