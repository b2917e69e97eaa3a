"""Release pending earnings from online payments so they can be paid out.

Card, GCash and Maya payments are collected up front, so their earnings
skip the post-checkout hold.

Usage:
    cd backend
    python -m openspace.scripts.release_earnings
"""

import asyncio

from openspace.db.session import AsyncSessionLocal, engine
from openspace.services.earnings import release_online_earnings


async def main() -> None:
    async with AsyncSessionLocal() as db:
        released = await release_online_earnings(db)
    await engine.dispose()
    print(f"Released {released} earnings to available status.")


if __name__ == "__main__":
    asyncio.run(main())
