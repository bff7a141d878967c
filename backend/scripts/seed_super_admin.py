import argparse
import asyncio
import getpass
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    current = Path(__file__).resolve()
    backend_root = current.parent.parent
    sys.path.append(str(backend_root))


async def _seed(username: str, password: str, generate_schemas: bool) -> bool:
    from app.core.bootstrap import seed_super_admin
    from app.core.db import close_db, init_db

    await init_db(generate_schemas=generate_schemas)
    try:
        _, created = await seed_super_admin(username, password)
    finally:
        await close_db()
    return created


def main() -> int:
    _add_backend_to_path()

    parser = argparse.ArgumentParser(description="Create or reset a super admin account")
    parser.add_argument("--username", default="superadmin", help="Admin username (default: superadmin)")
    parser.add_argument("--password", default=None, help="Password (prompted for when omitted)")
    parser.add_argument("--generate-schemas", action="store_true", help="Create missing tables first")
    args = parser.parse_args()

    username = args.username.strip()
    password = args.password or getpass.getpass(f"Password for {username}: ")
    if not username or not password:
        print("username and password are required", file=sys.stderr)
        return 2

    created = asyncio.run(_seed(username, password, args.generate_schemas))
    print(f"super admin {username}: {'created' if created else 'updated'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
