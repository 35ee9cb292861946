import os
import tempfile

os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(tempfile.mkdtemp(), "sew4mi_test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ["ENABLE_SCHEDULER"] = "false"

import pytest

from sew4mi.core.db import Base, engine, AsyncSessionLocal
from sew4mi.models.users.user_models import User


async def reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def insert_user(db, *, role: str, subject: str, email: str, **extra) -> User:
    user = User(
        auth_subject=subject,
        email=email,
        full_name=extra.pop("full_name", email.split("@")[0].title()),
        role=role,
        is_active=True,
        **extra,
    )
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def db():
    """Fresh schema and a session for service-level tests."""
    await reset_schema()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def make_user(db):
    async def _make(role: str = "customer", subject: str | None = None, email: str | None = None, **extra):
        subject = subject or f"{role}-{os.urandom(4).hex()}"
        email = email or f"{subject}@example.com"
        return await insert_user(db, role=role, subject=subject, email=email, **extra)
    return _make


@pytest.fixture
async def customer(make_user):
    return await make_user("customer", subject="customer-ama", email="ama@example.com")


@pytest.fixture
async def tailor(make_user):
    return await make_user("tailor", subject="tailor-kofi", email="kofi@example.com")


@pytest.fixture
async def admin(make_user):
    return await make_user("admin", subject="admin-root", email="admin@example.com")
