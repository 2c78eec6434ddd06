#!/usr/bin/env python3
"""Create user accounts and issue import API keys.

Accounts are only ever created here; there is no self sign-up.

Usage:
    # Interactive mode
    python scripts/seed_user.py

    # Command line mode, issuing an API key for Health Auto Export
    python scripts/seed_user.py --email user@example.com --password secret123 --issue-key

    # Issue another key for an existing account
    python scripts/seed_user.py --email user@example.com --issue-key --key-name "Shortcuts"

    # List accounts
    python scripts/seed_user.py --list
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from fittrack.core.config import get_settings
from fittrack.core.database import async_session_maker
from fittrack.core.security import get_password_hash
from fittrack.models.user import User
from fittrack.services.api_keys import ApiKeyService

logger = logging.getLogger("seed_user")

MIN_PASSWORD_LENGTH = 8


async def find_user(email: str) -> User | None:
    async with async_session_maker() as session:
        return await session.scalar(select(User).where(User.email == email))


async def create_user(
    email: str,
    password: str,
    display_name: str | None = None,
    timezone: str | None = None,
) -> User:
    """Create a new user.

    Raises:
        ValueError: If a user with this email already exists.
    """
    async with async_session_maker() as session:
        existing = await session.scalar(select(User).where(User.email == email))
        if existing:
            raise ValueError(f"User with email '{email}' already exists")

        user = User(
            email=email,
            password_hash=get_password_hash(password),
            display_name=display_name,
            timezone=timezone or get_settings().default_timezone,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)

        logger.info(f"Created user {user.id} ({email})")
        return user


async def issue_key(user_id: int, name: str | None = None) -> str:
    """Issue an API key and return the plaintext."""
    async with async_session_maker() as session:
        _, plaintext = await ApiKeyService(session).issue_key(user_id, name)
        return plaintext


async def list_users() -> list[User]:
    async with async_session_maker() as session:
        result = await session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())


def get_password_interactive() -> str:
    """Prompt for a password twice.

    Raises:
        ValueError: If the entries differ or the password is too short.
    """
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm password: ")

    if password != confirm:
        raise ValueError("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create FitTrack accounts and API keys")
    parser.add_argument("--email", default=os.environ.get("SEED_EMAIL"), help="User email address")
    parser.add_argument(
        "--password",
        default=os.environ.get("SEED_PASSWORD"),
        help="User password (or use SEED_PASSWORD env var)",
    )
    parser.add_argument("--name", default=os.environ.get("SEED_NAME"), help="Display name")
    parser.add_argument(
        "--timezone",
        default=os.environ.get("SEED_TIMEZONE"),
        help="IANA timezone (default: DEFAULT_TIMEZONE setting)",
    )
    parser.add_argument("--issue-key", action="store_true", help="Issue an API key for the user")
    parser.add_argument("--key-name", default=None, help="Label for the issued API key")
    parser.add_argument("--list", action="store_true", help="List existing users")
    return parser


def print_users(users: list[User]) -> None:
    print("\nExisting users:")
    print("-" * 50)
    if not users:
        print("No users found")
    for user in users:
        print(f"  ID: {user.id}")
        print(f"  Email: {user.email}")
        print(f"  Name: {user.display_name or '(not set)'}")
        print(f"  Timezone: {user.timezone}")
        print(f"  Created: {user.created_at}")
        print("-" * 50)


async def run(args: argparse.Namespace) -> int:
    if args.list:
        print_users(await list_users())
        return 0

    if not args.email:
        args.email = input("Email: ").strip()
        if not args.email:
            print("Error: Email is required")
            return 1

    user = await find_user(args.email)

    if user is None:
        if not args.password:
            try:
                args.password = get_password_interactive()
            except ValueError as e:
                print(f"Error: {e}")
                return 1
        if args.name is None:
            args.name = input("Display name (optional): ").strip() or None

        user = await create_user(args.email, args.password, args.name, args.timezone)
        print("\nUser created")
        print(f"   ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Timezone: {user.timezone}")
    elif not args.issue_key:
        print(f"Error: User with email '{args.email}' already exists")
        return 1

    if args.issue_key:
        plaintext = await issue_key(user.id, args.key_name)
        print("\nAPI key (shown once, store it now):")
        print(f"   {plaintext}")

    return 0


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = build_parser().parse_args()
    try:
        sys.exit(asyncio.run(run(args)))
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        print("\nMake sure the database is running and migrations are applied.")
        sys.exit(1)


if __name__ == "__main__":
    main()
