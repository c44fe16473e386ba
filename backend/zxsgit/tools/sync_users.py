"""Merge an exported users backup into the REST service's users.json."""
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from zxsgit.config import settings
from zxsgit.database import JsonDocumentStore
from zxsgit.models import User
from zxsgit.services.merger import upsert_users
from zxsgit.utils.logger import logger

BACKUP_FILE = "users-backup.json"


def load_backup(path: Path) -> List[User]:
    """Read a backup of cached users; unreadable files and records are skipped."""
    if not path.exists():
        logger.info(f"No backup at {path}")
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"Error reading backup file {path}: {e}")
        return []
    if not isinstance(raw, list):
        logger.error(f"Backup file {path} is not a user array")
        return []

    users = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("email"):
            continue
        try:
            users.append(User(**entry))
        except SchemaError as e:
            logger.warning(f"Skipping unreadable backup record: {e}")
    return users


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="zxsgit-sync-users",
        description="Merge users-backup.json into users.json (stored users keep their ids).",
    )
    ap.add_argument("--data-dir", default=settings.data_dir, help="Directory holding users.json")
    ap.add_argument("--backup", default=None, help=f"Backup file (default: <data-dir>/{BACKUP_FILE})")
    args = ap.parse_args(argv)

    store = JsonDocumentStore(args.data_dir)
    backup = Path(args.backup) if args.backup else Path(args.data_dir) / BACKUP_FILE
    incoming = load_backup(backup)

    with store.users() as users:
        users[:] = upsert_users(users, incoming)
        merged = list(users)

    print(f"Synced {len(merged)} user(s) to {store.users_path}")
    print("Users:")
    for u in merged:
        print(f"  - {u.name} ({u.email}) [{u.role}]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
