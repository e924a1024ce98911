"""
Rooted Database Migration Runner

Handles database schema migrations with:
- Version tracking in migrations table
- Checksum validation
- Migration history
- Dry-run support

Usage:
    python -m utils.run_migrations [--dry-run] [--validate] [--status] [--db PATH]
"""

import hashlib
import logging
import os
import sys
from datetime import datetime, timezone

from core.config import MIGRATIONS_DIR
from utils.db import Database

logger = logging.getLogger(__name__)


def get_file_checksum(filepath: str) -> str:
    """Calculate MD5 checksum of a migration file."""
    with open(filepath, "rb") as f:
        return hashlib.md5(f.read()).hexdigest()


def ensure_migrations_table(conn):
    """Create the migrations tracking table if it doesn't exist."""
    conn.execute("""
        CREATE TABLE IF NOT EXISTS migrations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            version INTEGER NOT NULL,
            name TEXT NOT NULL,
            checksum TEXT,
            applied_at TEXT NOT NULL,
            UNIQUE(version)
        )
    """)
    conn.commit()


def get_applied_migrations(conn) -> dict:
    """Get all applied migrations as {version: {name, checksum, applied_at}}."""
    ensure_migrations_table(conn)
    cur = conn.execute(
        "SELECT version, name, checksum, applied_at FROM migrations ORDER BY version"
    )
    return {
        row["version"]: {
            "name": row["name"],
            "checksum": row["checksum"],
            "applied_at": row["applied_at"]
        }
        for row in cur.fetchall()
    }


def get_pending_migrations(migrations_dir: str = MIGRATIONS_DIR) -> list:
    """Get list of migration files sorted by version."""
    if not os.path.isdir(migrations_dir):
        return []

    migrations = []
    for filename in os.listdir(migrations_dir):
        if not filename.endswith(".sql"):
            continue

        try:
            version = int(filename.split("_")[0])
        except (ValueError, IndexError):
            logger.warning(f"Skipping invalid migration filename: {filename}")
            continue

        filepath = os.path.join(migrations_dir, filename)
        migrations.append({
            "version": version,
            "name": filename,
            "path": filepath,
            "checksum": get_file_checksum(filepath)
        })

    return sorted(migrations, key=lambda m: m["version"])


def run(dry_run: bool = False, db: Database = None, quiet: bool = False) -> bool:
    """
    Run pending migrations.

    Args:
        dry_run: If True, only show what would be done without applying.
        db: Store to migrate (defaults to the configured database).
        quiet: Log instead of printing progress.

    Returns:
        True if successful, False if errors occurred.
    """
    say = logger.info if quiet else print
    conn = (db or Database()).connect()

    try:
        applied = get_applied_migrations(conn)
        all_migrations = get_pending_migrations()

        pending = [m for m in all_migrations if m["version"] not in applied]

        if not pending:
            if not quiet:
                print("No pending migrations.")
            return True

        say(f"Found {len(pending)} pending migration(s): "
            f"{', '.join(m['name'] for m in pending)}")

        if dry_run:
            say("Dry run - no changes applied.")
            return True

        for migration in pending:
            say(f"Applying: {migration['name']}...")

            try:
                with open(migration["path"], "r") as f:
                    sql = f.read()

                conn.executescript(sql)

                conn.execute(
                    """
                    INSERT INTO migrations (version, name, checksum, applied_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        migration["version"],
                        migration["name"],
                        migration["checksum"],
                        datetime.now(timezone.utc).isoformat()
                    )
                )
                conn.commit()

            except Exception as e:
                logger.error(f"Migration {migration['name']} failed: {e}")
                conn.rollback()
                return False

        say("All migrations applied successfully.")
        return True

    finally:
        conn.close()


def validate(db: Database = None) -> bool:
    """
    Validate migration state and checksums.

    Returns:
        True if valid, False if issues found.
    """
    conn = (db or Database()).connect()

    try:
        applied = get_applied_migrations(conn)
        all_migrations = get_pending_migrations()

        issues = []

        # Check for missing migration files
        migration_versions = {m["version"] for m in all_migrations}
        for version, info in applied.items():
            if version not in migration_versions:
                issues.append(
                    f"Missing file: Migration v{version} ({info['name']}) "
                    f"was applied but file not found"
                )

        # Check checksums
        for migration in all_migrations:
            if migration["version"] in applied:
                recorded = applied[migration["version"]]["checksum"]
                if recorded and recorded != migration["checksum"]:
                    issues.append(
                        f"Checksum mismatch: {migration['name']} "
                        f"(recorded: {recorded[:8]}..., current: {migration['checksum'][:8]}...)"
                    )

        if issues:
            print("Validation issues found:")
            for issue in issues:
                print(f"  - {issue}")
            return False

        print("Validation passed: All migrations are consistent.")
        return True

    finally:
        conn.close()


def status(db: Database = None):
    """Print current migration status."""
    conn = (db or Database()).connect()

    try:
        applied = get_applied_migrations(conn)
        all_migrations = get_pending_migrations()

        print("Migration Status")
        print("=" * 60)

        if not all_migrations:
            print("No migration files found.")
            return

        for migration in all_migrations:
            version = migration["version"]
            name = migration["name"]

            if version in applied:
                info = applied[version]
                applied_at = info["applied_at"][:19] if info["applied_at"] else "unknown"
                checksum_ok = (
                    info["checksum"] == migration["checksum"]
                    if info["checksum"] else True
                )
                status_icon = "x" if checksum_ok else "!"
                print(f"  [{status_icon}] v{version:03d} {name}")
                print(f"        Applied: {applied_at}")
                if not checksum_ok:
                    print("        WARNING: Checksum mismatch")
            else:
                print(f"  [ ] v{version:03d} {name}")
                print("        Pending")

        pending_count = len([m for m in all_migrations if m["version"] not in applied])
        print()
        print(f"Total: {len(all_migrations)} migrations, {pending_count} pending")

    finally:
        conn.close()


def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Rooted Database Migration Runner"
    )
    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Show what would be done without applying"
    )
    parser.add_argument(
        "--validate", "-v",
        action="store_true",
        help="Validate migration state and checksums"
    )
    parser.add_argument(
        "--status", "-s",
        action="store_true",
        help="Show current migration status"
    )
    parser.add_argument(
        "--db",
        default=None,
        help="Path to the SQLite database (default: ROOTED_DB_PATH)"
    )

    args = parser.parse_args()
    db = Database(args.db)

    if args.status:
        status(db)
    elif args.validate:
        success = validate(db)
        sys.exit(0 if success else 1)
    else:
        success = run(dry_run=args.dry_run, db=db)
        sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
