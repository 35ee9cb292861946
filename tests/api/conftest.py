import asyncio

import pytest
from fastapi.testclient import TestClient

from sew4mi.core.db import Base, engine, AsyncSessionLocal
from sew4mi.core.security import create_access_token
from sew4mi.models.users.user_models import User

SEED_USERS = {
    "customer": ("customer-ama", "ama@example.com"),
    "tailor": ("tailor-kofi", "kofi@example.com"),
    "admin": ("admin-root", "admin@example.com"),
    "other_customer": ("customer-yaw", "yaw@example.com"),
}


async def _seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    ids = {}
    async with AsyncSessionLocal() as db:
        for key, (subject, email) in SEED_USERS.items():
            user = User(
                auth_subject=subject,
                email=email,
                full_name=email.split("@")[0].title(),
                role="customer" if key == "other_customer" else key,
                is_active=True,
            )
            db.add(user)
            await db.flush()
            ids[key] = user.id
        await db.commit()
    return ids


@pytest.fixture
def user_ids():
    return asyncio.run(_seed())


@pytest.fixture
def auth(user_ids):
    """Authorization headers per seeded user."""
    return {
        key: {"Authorization": f"Bearer {create_access_token(subject)}"}
        for key, (subject, _) in SEED_USERS.items()
    }


@pytest.fixture
def client(user_ids):
    from main import app

    with TestClient(app) as c:
        yield c
