"""Register or list user accounts against the configured store.

Usage:
    uv run python bin/manage-users.py register <username> <password>
    uv run python bin/manage-users.py list

The store is chosen from ACCOUNTS_* environment variables (see
accounts.settings.AccountsSettings).
"""

import asyncio
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from accounts.errors import AccountsError
from accounts.startup import start_user_service

USAGE = f"Usage: {sys.argv[0]} register <username> <password> | list"


async def main() -> None:
    args = sys.argv[1:]
    if not args or args[0] not in ("register", "list"):
        print(USAGE)
        sys.exit(1)
    if (args[0] == "register" and len(args) != 3) or (args[0] == "list" and len(args) != 1):
        print(USAGE)
        sys.exit(1)

    try:
        service = await start_user_service()
    except AccountsError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        if args[0] == "register":
            try:
                user = await service.register(args[1], args[2])
            except AccountsError as e:
                print(f"Error: {e}")
                sys.exit(1)
            print(f"User registered: {user.username} (id: {user.id})")
        else:
            users = await service.get_all_users()
            for user in users:
                print(f"{user.id}\t{user.username}")
            print(f"{len(users)} user(s)")
    finally:
        await service.close()


if __name__ == "__main__":
    asyncio.run(main())
