"""Maintenance CLI for the fluency store.

Non-destructive: creating a local admin only writes a profile that does not
exist yet, and the fluency backfill skips profiles that already have a level.
"""
import argparse
import asyncio
import uuid

from database import init_db, async_session
from services.auth import TEACHER_ROLE
from services.fluency import FluencyLevelManager
from services.kv_store import KVStore


async def seed(
    *,
    create_admin: str | None = None,
    admin_email: str | None = None,
    migrate_fluency: bool = False,
    admin_id: str | None = None,
):
    await init_db()
    async with async_session() as session:
        manager = FluencyLevelManager(KVStore(session))

        if create_admin:
            admin_id = admin_id or str(uuid.uuid4())
            profile = await manager.register(admin_id, admin_email, create_admin, TEACHER_ROLE)
            print(f"Admin profile ready: {profile.id} ({profile.name})")

        if migrate_fluency:
            if not admin_id:
                raise SystemExit("--migrate-fluency needs --admin-id (or --create-admin)")
            result = await manager.bulk_migrate(admin_id)
            print(result.message)
    print("Seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Fluency store maintenance.")
    parser.add_argument(
        "--create-admin",
        metavar="NAME",
        help="Store a teacher profile with this display name (for local development).",
    )
    parser.add_argument("--admin-email", help="Email for --create-admin.")
    parser.add_argument(
        "--admin-id",
        help="Existing teacher id to act as; also the id used by --create-admin.",
    )
    parser.add_argument(
        "--migrate-fluency",
        action="store_true",
        help="Assign A1 to every profile without a fluency level.",
    )
    args = parser.parse_args()
    asyncio.run(
        seed(
            create_admin=args.create_admin,
            admin_email=args.admin_email,
            migrate_fluency=args.migrate_fluency,
            admin_id=args.admin_id,
        )
    )
