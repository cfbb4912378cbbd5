"""
Create the first SuperAdmin account.

Example:
    python scripts/init_admin.py --username admin --email admin@example.org
"""
import argparse
import asyncio
import getpass
import sys

from academy_cms.core.container import get_container
from academy_cms.infrastructure.database import dispose_engine, get_session, init_db
from academy_cms.infrastructure.database.repositories import SqlAccountRepository
from academy_cms.modules.accounts import AccountAlreadyExistsError, AccountCreateInput, AccountService, Role
from academy_cms.schemas import normalize_email


async def create_super_admin(username: str, email: str, password: str) -> int:
    container = get_container()
    await init_db()

    try:
        async for db in get_session():
            service = AccountService(SqlAccountRepository(db), container.hasher)
            try:
                account = await service.register(
                    AccountCreateInput(
                        username=username,
                        email=email,
                        password=password,
                        role=Role.SUPER_ADMIN,
                    )
                )
            except AccountAlreadyExistsError:
                print(f"An account with username {username!r} or email {email!r} already exists")
                return 1

            print(f"SuperAdmin {account.username} created (id {account.id})")
    finally:
        await dispose_engine()
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the first SuperAdmin account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="prompted for when omitted")
    args = parser.parse_args()

    try:
        email = normalize_email(args.email)
    except ValueError as exc:
        print(f"Invalid email address: {exc}")
        return 1

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("Password must be at least 6 characters")
        return 1
    return asyncio.run(create_super_admin(args.username, email, password))


if __name__ == "__main__":
    sys.exit(main())
