"""
Seed the first school and the first Administrator account.

Run once (e.g. after init_db) with env set:
  ADMIN_USERNAME=admin
  ADMIN_PASSWORD=YourSecurePassword
  ADMIN_SCHOOL_ID=EC001            (optional)
  ADMIN_SCHOOL_NAME="Main School"  (optional)

  python -m scolarix.db.seed_admin
"""
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scolarix.auth.models import User
from scolarix.auth.security import hash_password
from scolarix.core.config import settings
from scolarix.core.enums import UserRole
from scolarix.core.logging import get_logger, setup_logging
from scolarix.core.models import School
from scolarix.db.session import AsyncSessionLocal, engine

logger = get_logger("seed")


async def seed_admin(db: AsyncSession) -> None:
    # 1. Ensure the school exists
    school = await db.get(School, settings.admin_school_id)
    if school is None:
        school = School(school_id=settings.admin_school_id, name=settings.admin_school_name)
        db.add(school)
        await db.flush()
        logger.info("created school %s", school.school_id)
    else:
        logger.info("school %s already exists", school.school_id)

    if not settings.admin_username or not settings.admin_password:
        await db.commit()
        logger.warning("ADMIN_USERNAME / ADMIN_PASSWORD not set; skipping administrator account")
        return

    # 2. Create or restore the administrator
    result = await db.execute(
        select(User).where(User.username == settings.admin_username).execution_options(include_deleted=True)
    )
    admin = result.scalar_one_or_none()
    if admin is None:
        admin = User(
            username=settings.admin_username,
            password_hash=hash_password(settings.admin_password),
            role=UserRole.ADMINISTRATOR,
            school_id=school.school_id,
        )
        db.add(admin)
        logger.info("created administrator %s", settings.admin_username)
    else:
        admin.role = UserRole.ADMINISTRATOR
        admin.password_hash = hash_password(settings.admin_password)
        admin.deleted_at = None
        logger.info("updated existing user %s to Administrator", settings.admin_username)

    await db.commit()


async def main() -> None:
    setup_logging(settings.log_level)
    async with AsyncSessionLocal() as db:
        try:
            await seed_admin(db)
        except Exception:
            await db.rollback()
            logger.exception("administrator seed failed")
            raise
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
