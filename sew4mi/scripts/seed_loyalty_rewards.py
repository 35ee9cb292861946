from sew4mi.core.db import AsyncSessionLocal
from sew4mi.services.loyalty.loyalty_service import seed_default_rewards
import asyncio


async def seed_rewards():
    async with AsyncSessionLocal() as session:
        created = await seed_default_rewards(session)
        print(f"Loyalty rewards seeded: {created} new")


if __name__ == "__main__":
    asyncio.run(seed_rewards())
