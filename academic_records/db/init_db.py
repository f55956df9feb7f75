"""
Create the academic records tables and optionally seed a starter subject catalogue.

Idempotent: tables are created only if missing; seeded subjects are matched by code.
Usage: python -m academic_records.db.init_db [--seed-subjects]
"""

import argparse
import asyncio
import logging
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Import models so they register on Base.metadata
from academic_records.core.models import Enrollment, Marks, Student, Subject  # noqa: F401
from academic_records.core.config import settings
from academic_records.core.logging import configure_logging
from academic_records.db.session import AsyncSessionLocal, Base, engine

logger = logging.getLogger(__name__)

# (code, name)
DEFAULT_SUBJECTS: List[Tuple[str, str]] = [
    ("MATH101", "Mathematics"),
    ("PHY101", "Physics"),
    ("CHEM101", "Chemistry"),
    ("ENG101", "English"),
    ("CS101", "Computer Science"),
]


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))


async def seed_subjects(db: AsyncSession) -> int:
    """Insert the default subjects whose code is not taken yet. Returns how many were created."""
    result = await db.execute(select(Subject.code))
    existing = set(result.scalars().all())
    created = 0
    for code, name in DEFAULT_SUBJECTS:
        if code in existing:
            continue
        db.add(Subject(code=code, name=name))
        created += 1
    await db.commit()
    logger.info("Seeded %s subject(s), %s already present", created, len(DEFAULT_SUBJECTS) - created)
    return created


async def main(seed: bool = False) -> None:
    await create_tables()
    if seed:
        async with AsyncSessionLocal() as db:
            try:
                await seed_subjects(db)
            except Exception:
                logger.exception("Error seeding subjects")
                await db.rollback()
                raise
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create academic records tables")
    parser.add_argument("--seed-subjects", action="store_true", help="Insert a default subject catalogue")
    args = parser.parse_args()
    configure_logging(settings.log_level)
    asyncio.run(main(seed=args.seed_subjects))
