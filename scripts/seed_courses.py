#!/usr/bin/env python3
"""
Seed the course catalog and, optionally, a persisted administrator.

Run after ``alembic upgrade head``:
    python scripts/seed_courses.py
    python scripts/seed_courses.py --admin-email ops@example.com --admin-password secret

Courses are matched by name, so running the script twice inserts nothing new.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import insert, select
from src.core.config import get_settings
from src.core.logging import setup_logging
from src.domain.errors import AlreadyExistsError
from src.domain.services.auth_service import hash_password
from src.infrastructure.db.gateway import Database, build_database
from src.infrastructure.db.models import CourseModel, UserModel, UserRole

COURSES = [
    {
        "name": "Python for beginners",
        "price": Decimal("15000.00"),
        "description": "Syntax, data structures and writing your first scripts",
        "duration_hours": 72,
    },
    {
        "name": "Web development with FastAPI",
        "price": Decimal("24000.00"),
        "description": "HTTP APIs, validation, authentication and deployment",
        "duration_hours": 96,
    },
    {
        "name": "SQL and relational databases",
        "price": Decimal("18000.00"),
        "description": "Schema design, joins, transactions and indexes",
        "duration_hours": 64,
    },
    {
        "name": "Data analysis with pandas",
        "price": Decimal("21000.00"),
        "description": "Cleaning, aggregating and visualising tabular data",
        "duration_hours": 80,
    },
]


async def seed_courses(db: Database) -> int:
    existing = {row["name"] for row in await db.query(select(CourseModel.name))}
    created = 0
    async with db.transaction() as tx:
        for course in COURSES:
            if course["name"] in existing:
                continue
            await tx.execute(insert(CourseModel).values(is_active=True, **course))
            created += 1
    return created


async def create_admin(db: Database, email: str, password: str) -> None:
    handle = email.split("@", 1)[0]
    try:
        await db.execute(
            insert(UserModel).values(
                name="Administrator",
                surname="Staff",
                handle=handle,
                email=email.lower(),
                phone=f"admin-{handle}",
                password_hash=hash_password(password),
                role=UserRole.ADMIN,
            )
        )
    except AlreadyExistsError as exc:
        print(f"Administrator not created: {exc.message}")
        return
    print(f"Administrator {email} created (login with email or handle '{handle}')")


async def main(args: argparse.Namespace) -> None:
    setup_logging()
    db = build_database(get_settings())
    await db.connect()
    try:
        created = await seed_courses(db)
        print(f"Courses inserted: {created}")
        if args.admin_email and args.admin_password:
            await create_admin(db, args.admin_email, args.admin_password)
    finally:
        await db.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    asyncio.run(main(parser.parse_args()))
