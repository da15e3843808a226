"""
seed_campuses.py
────────────────
Creates (or refreshes) the partner campuses and their accepted email domains.
Run after the migration, and again whenever the list below changes:

    python seed_campuses.py

Idempotent: existing campuses are updated in place, never duplicated.
"""
import asyncio
import os
from dotenv import load_dotenv

load_dotenv()

CAMPUSES = [
    {
        "id": "christ-bangalore",
        "name": "Christ University",
        "location": "Bangalore",
        "allowed_domains": [
            "christuniversity.in",
            "christcollege.edu",
            "res.christuniversity.in",
            "mba.christuniversity.in",
        ],
    },
    {
        "id": "ashoka-sonipat",
        "name": "Ashoka University",
        "location": "Sonipat",
        "allowed_domains": ["ashoka.edu.in"],
    },
    {
        "id": "jindal-sonipat",
        "name": "OP Jindal University",
        "location": "Sonipat",
        "allowed_domains": ["jgu.edu.in"],
    },
    {
        "id": "northwestern-evanston",
        "name": "Northwestern University",
        "location": "Evanston",
        "allowed_domains": ["northwestern.edu", "u.northwestern.edu"],
    },
]


async def upsert_campuses(db, campuses=CAMPUSES) -> tuple[int, int]:
    """Returns (created, updated)."""
    from justone.models.campus import Campus

    created = updated = 0
    for data in campuses:
        campus = await db.get(Campus, data["id"])
        if campus is None:
            db.add(Campus(**data))
            created += 1
        else:
            campus.name = data["name"]
            campus.location = data["location"]
            campus.allowed_domains = list(data["allowed_domains"])
            updated += 1
    await db.commit()
    return created, updated


async def seed():
    from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

    engine  = create_async_engine(os.environ["DATABASE_URL"], echo=False)
    Session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async with Session() as db:
        created, updated = await upsert_campuses(db)

    await engine.dispose()

    print(f"\nCampuses seeded: {created} created, {updated} updated")
    for c in CAMPUSES:
        print(f"    {c['id']:<24} {', '.join(c['allowed_domains'])}")


if __name__ == "__main__":
    asyncio.run(seed())
