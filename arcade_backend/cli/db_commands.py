"""
Database CLI Commands

Score database operations: init
"""
import asyncio


class DbCommand:
    """Database CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        """Execute database command."""
        if args.db_action == "init":
            return self._init(args)
        else:
            print("Error: Unknown database action")
            return 1

    def _init(self, args) -> int:
        """Create tables for the SQL score store."""
        from arcade_backend.config import settings

        print("=== Database Init ===")
        print(f"Database: {settings.DATABASE_URL}")

        if self.dry_run:
            print("[DRY RUN] Would create score_records and player_profiles tables")
            return 0

        try:
            asyncio.run(self._async_init())
            print("✓ Tables created")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1

    async def _async_init(self) -> None:
        from arcade_backend.database import close_db, init_db

        try:
            await init_db()
        finally:
            await close_db()
