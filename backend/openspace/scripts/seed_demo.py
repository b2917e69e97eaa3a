"""Seed demo hosts, guests, bookings and earnings.

Usage:
    cd backend
    python -m openspace.scripts.seed_demo
"""

import asyncio

from openspace.db.session import AsyncSessionLocal, engine
from openspace.services.seed_earnings import seed_earnings


async def main() -> None:
    """Run the demo seeder."""
    print("=" * 50)
    print("OpenSpace Earnings Seeder")
    print("=" * 50)

    async with AsyncSessionLocal() as db:
        result = await seed_earnings(db)
    await engine.dispose()

    if not result.get("seeded"):
        print("Demo data already present - nothing to do")
        return

    for key, value in result.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    asyncio.run(main())
