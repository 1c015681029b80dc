"""
Назначение владельца записям без userId.

Скрипт:
1. Считает клиентов, товары и документы без userId
2. Сохраняет резервную копию файла данных рядом с ним
3. Назначает такие записи пользователю --user-id (по умолчанию - первому
   пользователю без роли администратора)

Запуск: python -m crm.scripts.migrate_ownership [--user-id ID] [--dry-run]
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from crm.core.config import settings
from crm.core.exceptions import StorageError
from crm.db.datastore import JsonDocumentStore
from crm.domains.identity.entities import ADMIN_ROLE

OWNED_COLLECTIONS = ("clients", "products", "documents")


def backup_path_for(data_file: Path) -> Path:
    return data_file.with_name(f"{data_file.stem}.backup{data_file.suffix or '.json'}")


async def migrate_ownership(
    store: JsonDocumentStore,
    user_id: Optional[str] = None,
    dry_run: bool = False
) -> Dict[str, Any]:
    """Назначение записей без владельца; возвращает сводку миграции"""
    result = await store.read_result()
    if result.is_corrupt:
        raise StorageError(f"Data file is unreadable: {result.error}")
    data = result.data

    orphaned = {
        name: sum(1 for record in data[name] if not record.get("userId"))
        for name in OWNED_COLLECTIONS
    }
    summary: Dict[str, Any] = {"orphaned": orphaned, "assigned": 0, "userId": None, "backup": None}
    if not any(orphaned.values()):
        return summary

    users = data["users"]
    if user_id:
        target = next((u for u in users if u.get("id") == user_id), None)
        if not target:
            raise ValueError(f"User {user_id} not found")
    else:
        target = next((u for u in users if u.get("role") != ADMIN_ROLE), None)
        if not target:
            raise ValueError("No regular users found, create a user first")
    summary["userId"] = target["id"]

    if dry_run:
        return summary

    backup = backup_path_for(store.path)
    await asyncio.to_thread(
        backup.write_text, json.dumps(data, indent=2, ensure_ascii=False), "utf-8"
    )
    summary["backup"] = str(backup)

    assigned = 0
    async with store.transaction() as current:
        for name in OWNED_COLLECTIONS:
            for record in current[name]:
                if not record.get("userId"):
                    record["userId"] = target["id"]
                    assigned += 1
    summary["assigned"] = assigned
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Assign an owner to records without userId")
    parser.add_argument("--user-id", help="owner for orphaned records (default: first non-admin user)")
    parser.add_argument("--dry-run", action="store_true", help="only report what would change")
    parser.add_argument("--data-file", default=settings.data_file, help="path to the JSON data file")
    args = parser.parse_args(argv)

    store = JsonDocumentStore(args.data_file)
    print("Starting ownership migration...")
    try:
        summary = asyncio.run(migrate_ownership(store, user_id=args.user_id, dry_run=args.dry_run))
    except (ValueError, StorageError) as e:
        print(f"✗ Migration failed: {e}")
        return 1

    orphaned = summary["orphaned"]
    print("Found items without userId:")
    for name in OWNED_COLLECTIONS:
        print(f"- {name.capitalize()}: {orphaned[name]}")

    if not any(orphaned.values()):
        print("✓ All items already have userId assigned!")
    elif args.dry_run:
        print(f"Dry run: items would be assigned to user {summary['userId']}")
    else:
        print(f"✓ Assigned {summary['assigned']} items to user {summary['userId']}")
        print(f"  Backup saved at: {summary['backup']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
