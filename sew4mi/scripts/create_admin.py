from sqlalchemy import select

from sew4mi.models.users.user_models import User
from sew4mi.core.db import AsyncSessionLocal
import asyncio
import os


async def create_admin():
    subject = os.getenv("ADMIN_AUTH_SUBJECT", "admin")
    email = os.getenv("ADMIN_EMAIL", "admin@sew4mi.com")

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.auth_subject == subject))
        admin = result.scalars().first()

        if admin:
            admin.role = "admin"
            admin.is_active = True
        else:
            admin = User(
                auth_subject=subject,
                email=email,
                full_name=os.getenv("ADMIN_NAME", "Sew4Mi Admin"),
                role="admin",
                is_active=True,
            )
            session.add(admin)

        await session.commit()
        print(f"Admin user ready: {admin.email}")


if __name__ == "__main__":
    asyncio.run(create_admin())
