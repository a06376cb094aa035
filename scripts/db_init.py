#!/usr/bin/env python3
"""
Database initialization script
"""
import asyncio
import os
import sys
from pathlib import Path

# Add the project root to the Python path
current_dir = Path(__file__).parent
root_dir = current_dir.parent
sys.path.insert(0, str(root_dir))

async def init_database() -> None:
    """Initialize database with tables"""
    from app.db.session import init_db
    from app.config import settings

    print(f"🚀 Initializing database: {settings.database_url}")

    try:
        await init_db()
        print("✅ Database initialized successfully")

        # Create the support account if needed
        await create_initial_data()

    except Exception as e:
        print(f"❌ Error initializing database: {e}")
        sys.exit(1)

async def create_initial_data() -> None:
    """Create the administrator account and a few development users"""
    from app.db.session import AsyncSessionLocal
    from app.schemas.user_schema import UserCreate
    from app.services.auth_service import AuthService

    print("👤 Creating initial data...")

    async with AsyncSessionLocal() as db:
        auth_service = AuthService(db)
        try:
            # Administrators are flagged by is_admin; the username carries no meaning
            admin_username = os.getenv("ADMIN_USERNAME", "support")
            if not await auth_service.get_user_by_username(admin_username):
                admin = await auth_service.create_user(
                    UserCreate(
                        username=admin_username,
                        nickname="Loopedia Support",
                        password=os.getenv("ADMIN_PASSWORD", "Admin123!")
                    ),
                    is_admin=True
                )
                print(f"✅ Created admin user: {admin.username}")

            # Create test users for development
            test_users = [
                {"username": "loop_maker", "nickname": "Loop Maker"},
                {"username": "beat_boxer", "nickname": "Beat Boxer"},
                {"username": "fx_tinkerer", "nickname": "FX Tinkerer"},
            ]

            created_count = 0
            for user_data in test_users:
                if await auth_service.get_user_by_username(user_data["username"]):
                    continue
                await auth_service.create_user(UserCreate(password="Password123!", **user_data))
                created_count += 1

            if created_count > 0:
                print(f"✅ Created {created_count} test users")

        except Exception as e:
            await db.rollback()
            print(f"⚠️  Error creating initial data: {e}")

async def check_database_connection() -> bool:
    """Check if database is accessible"""
    from app.db.session import engine
    from sqlalchemy import text

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print("✅ Database connection successful")
        return True
    except Exception as e:
        print(f"❌ Database connection failed: {e}")
        return False

async def drop_database(confirm: bool = False) -> None:
    """Drop all database tables"""
    if not confirm:
        print("⚠️  WARNING: This will drop ALL tables and data!")
        print("   Use --confirm flag to proceed")
        return

    from app.db.session import engine
    from app.models import Base

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        print("✅ Database dropped successfully")
    except Exception as e:
        print(f"❌ Error dropping database: {e}")

def main() -> None:
    """Main entry point"""
    import argparse

    parser = argparse.ArgumentParser(description="Loopedia database initialization")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Init command
    subparsers.add_parser("init", help="Initialize database")

    # Check command
    subparsers.add_parser("check", help="Check database connection")

    # Drop command
    drop_parser = subparsers.add_parser("drop", help="Drop database (DANGEROUS!)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm drop")

    # Seed command
    subparsers.add_parser("seed", help="Seed initial data")

    # Reset command
    reset_parser = subparsers.add_parser("reset", help="Drop and reinitialize")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm reset")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "init":
            asyncio.run(init_database())

        elif args.command == "check":
            success = asyncio.run(check_database_connection())
            sys.exit(0 if success else 1)

        elif args.command == "drop":
            asyncio.run(drop_database(args.confirm))

        elif args.command == "seed":
            asyncio.run(create_initial_data())

        elif args.command == "reset":
            if not args.confirm:
                print("⚠️  WARNING: This will drop ALL tables and data!")
                print("   Use --confirm flag to proceed")
                return

            asyncio.run(drop_database(True))
            asyncio.run(init_database())

    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
