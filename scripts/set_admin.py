"""Grant or revoke the stored admin flag for a user.

Usage:
    python scripts/set_admin.py <user_id> [--revoke]
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
BACKEND_DIR = os.path.join(ROOT_DIR, "backend")
if BACKEND_DIR not in sys.path:
    sys.path.append(BACKEND_DIR)

from sayitloud.domain.feed.repo import FeedRepository
from sayitloud.infra.redis import redis_client


async def set_admin(user_id: str, is_admin: bool) -> None:
    repo = FeedRepository()
    try:
        await repo.set_admin(user_id, is_admin)
    finally:
        await redis_client.client.aclose()
    state = "granted" if is_admin else "revoked"
    print(f"Admin {state} for {user_id}.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Toggle the stored admin flag for a user")
    parser.add_argument("user_id")
    parser.add_argument("--revoke", action="store_true", help="remove admin instead of granting it")
    args = parser.parse_args()
    asyncio.run(set_admin(args.user_id, not args.revoke))


if __name__ == "__main__":
    main()
