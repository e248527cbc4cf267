"""
Seed script to create the first admin user. Accounts can only be created by an
admin or teacher, so a fresh database needs one to start with.

Run once (after init_db) with env set:
  ADMIN_EMAIL=admin@school.example
  ADMIN_PASSWORD=YourSecurePassword
"""
import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.auth.security import hash_password
from app.core.config import settings
from app.core.enums import UserRole
from app.db.session import AsyncSessionLocal


async def seed_admin(db: AsyncSession) -> None:
    if not settings.admin_email or not settings.admin_password:
        print("ADMIN_EMAIL / ADMIN_PASSWORD not set; skipping admin user.")
        return

    email = settings.admin_email.strip().lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    user = result.scalar_one_or_none()
    if not user:
        db.add(
            User(
                name=settings.admin_name,
                email=email,
                password_hash=hash_password(settings.admin_password),
                role=UserRole.ADMIN.value,
                is_active=True,
            )
        )
        print("Created admin user:", email)
    else:
        user.role = UserRole.ADMIN.value
        user.password_hash = hash_password(settings.admin_password)
        print("Updated existing user to admin:", email)

    await db.commit()


async def main() -> None:
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception as e:
            await db.rollback()
            print("Error:", e)
            raise


if __name__ == "__main__":
    asyncio.run(main())
