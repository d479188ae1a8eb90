#!/usr/bin/env python3
"""
Database Initialization Script

This script:
1. Tests database connectivity
2. Creates any missing tables
3. Optionally creates the first admin account (public registration cannot be
   trusted to bootstrap one)

Usage:
    python scripts/init_db.py                    # Check + create tables
    python scripts/init_db.py --check            # Only check connectivity
    python scripts/init_db.py --status           # Show table status
    python scripts/init_db.py --admin 2020000001 --email admin@uni.ac.zm --password s3cret
"""

import asyncio
import sys
import argparse
from pathlib import Path

# Add backend directory to path so "app" imports when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import inspect, select  # noqa: E402

from app.core.database import (  # noqa: E402
    AsyncSessionLocal,
    check_database_connection,
    close_db,
    get_engine,
    init_db,
)
from app.core.security import get_password_hash  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402


async def create_tables() -> bool:
    """Create database tables using SQLAlchemy"""
    print("\n[InitDB] Creating/verifying database tables...")
    try:
        await init_db()
    except Exception as e:
        print(f"[InitDB] ERROR: Table creation failed: {e}")
        return False
    print("[InitDB] Database tables created/verified!")
    return True


async def create_admin(computer_number: str, email: str, password: str,
                       first_name: str, last_name: str) -> bool:
    """Create an admin account, or promote the existing user with that computer number"""
    print(f"\n[InitDB] Ensuring admin account {computer_number}...")

    async with AsyncSessionLocal() as session:
        user = await session.get(User, computer_number)
        if user:
            user.role = UserRole.ADMIN
            print(f"[InitDB] Existing user {computer_number} promoted to admin")
        else:
            taken = await session.scalar(select(User.computer_number).where(User.email == email.lower()))
            if taken:
                print(f"[InitDB] ERROR: Email {email} already belongs to {taken}")
                return False
            session.add(User(
                computer_number=computer_number,
                email=email.lower(),
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMIN,
                password_hash=get_password_hash(password),
            ))
            print(f"[InitDB] Admin user created ({computer_number})")
        await session.commit()
    return True


async def show_table_status():
    """Show current table status"""
    print("\n[InitDB] Database Table Status:")
    print("-" * 50)

    def describe(conn):
        inspector = inspect(conn)
        return {table: len(inspector.get_columns(table)) for table in inspector.get_table_names()}

    async with get_engine().connect() as conn:
        tables = await conn.run_sync(describe)

    print(f"Total tables: {len(tables)}")
    for table, columns in sorted(tables.items()):
        print(f"  - {table} ({columns} columns)")


async def main() -> int:
    parser = argparse.ArgumentParser(description="Complaint system database initialization")
    parser.add_argument("--check", action="store_true", help="Only check connectivity")
    parser.add_argument("--status", action="store_true", help="Show table status")
    parser.add_argument("--admin", metavar="COMPUTER_NUMBER", help="Create or promote an admin")
    parser.add_argument("--email", help="Admin email (new admin only)")
    parser.add_argument("--password", help="Admin password (new admin only)")
    parser.add_argument("--first-name", default="System")
    parser.add_argument("--last-name", default="Administrator")
    args = parser.parse_args()

    print("=" * 50)
    print("  Database Initialization")
    print("=" * 50)

    try:
        if not await check_database_connection():
            print("\n[InitDB] FAILED: Cannot connect to database")
            return 1

        if args.check:
            print("\n[InitDB] Connection check completed!")
            return 0

        if args.status:
            await show_table_status()
            return 0

        if not await create_tables():
            return 1

        if args.admin:
            if len(args.admin) != 10 or not args.admin.isdigit():
                print("[InitDB] ERROR: Computer number must be exactly 10 digits")
                return 1
            if not (args.email and args.password):
                async with AsyncSessionLocal() as session:
                    exists = await session.get(User, args.admin)
                if not exists:
                    print("[InitDB] ERROR: --email and --password are required for a new admin")
                    return 1
            if not await create_admin(args.admin, args.email or "", args.password or "",
                                      args.first_name, args.last_name):
                return 1

        await show_table_status()
    finally:
        await close_db()

    print("\n" + "=" * 50)
    print("  Database Initialization Complete!")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
