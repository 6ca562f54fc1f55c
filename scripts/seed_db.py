"""Create tables and seed the initial super-administrator.

Usage:
    python scripts/seed_db.py [--email admin@jurist.kz] [--session]

With --session a development session token is minted in Redis for the
seeded administrator and printed.
"""

import argparse
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from jurist.auth.sessions import create_session
from jurist.config import settings
from jurist.models import AdminUser, Base
from jurist.models.enums import AdminRole
from jurist.redis_client import close_redis_client, get_redis_client

DEFAULT_ADMIN_EMAIL = "admin@jurist.kz"
DEFAULT_ADMIN_NAME = "System Administrator"


async def seed(email: str, full_name: str, mint_session: bool) -> None:
    """Create the schema and make sure a super-admin exists."""
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        result = await session.execute(select(AdminUser).where(AdminUser.email == email))
        admin = result.scalar_one_or_none()

        if admin is None:
            admin = AdminUser(
                email=email,
                full_name=full_name,
                role=AdminRole.SUPER_ADMIN.value,
                is_active=True,
            )
            session.add(admin)
            await session.commit()
            print(f"  + Admin: {email}")
        else:
            print(f"  = Admin already exists: {email}")

    await engine.dispose()

    if mint_session:
        redis = get_redis_client()
        token = await create_session(redis, "admin", str(admin.id))
        await close_redis_client()
        print(f"\nAdmin session token: {token}")

    print("\nSeed completed!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", default=DEFAULT_ADMIN_EMAIL)
    parser.add_argument("--name", default=DEFAULT_ADMIN_NAME)
    parser.add_argument("--session", action="store_true", help="Mint a dev session token")
    args = parser.parse_args()

    asyncio.run(seed(args.email, args.name, args.session))
