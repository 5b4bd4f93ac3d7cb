#!/usr/bin/env python3
"""
Provision a diary account on this node's store.

Run it on both nodes with the same --user-id so replicated sessions and
entries point at the same account.
"""

import argparse
import asyncio
import getpass
import sys

from privatediary.core.config import settings
from privatediary.node import DiaryNode


async def create_user(args) -> bool:
    node = DiaryNode(settings)
    await node.start(run_jobs=False)
    try:
        user = await node.credential_gate.register_user(
            username=args.username,
            password=args.password,
            backup_password=args.backup_password,
            user_id=args.user_id,
            telegram_chat_id=args.telegram_chat_id
        )
    except ValueError as e:
        print(f"❌ {e}")
        return False
    finally:
        await node.stop()

    print(f"✅ Created user {user.username} (id {user.id}) in {settings.database_path}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Create a diary user")
    parser.add_argument("username")
    parser.add_argument("--user-id", help="Stable id shared by both nodes")
    parser.add_argument("--telegram-chat-id")
    args = parser.parse_args()

    args.password = getpass.getpass("Password: ")
    args.backup_password = getpass.getpass("Backup password (empty for none): ") or None

    if not asyncio.run(create_user(args)):
        sys.exit(1)


if __name__ == "__main__":
    main()
