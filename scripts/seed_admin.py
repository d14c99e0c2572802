"""
Grant or revoke the administrator role for a profile.

Creates the profile first when --create is given and it does not exist yet.
This replaces any HTTP endpoint for changing roles: role changes are an
operator task, run against the database directly.

    python scripts/seed_admin.py <profile-id> --create --company-name "Head Office"
    python scripts/seed_admin.py <profile-id> --revoke
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from billing.logging_config import setup_logging
from billing.exceptions import ProfileNotFoundError
from billing.models.database import AsyncSessionLocal, engine, init_models
from billing.models.db_models import Profile as ProfileDB
from billing.models.job import ProfileRole
from billing.services.db_service import DatabaseService


async def seed_admin(profile_id: str, create: bool = False, company_name: str = None,
                     revoke: bool = False) -> bool:
    role = ProfileRole.SUBCONTRACTOR if revoke else ProfileRole.ADMIN

    await init_models()
    async with AsyncSessionLocal() as session:
        if create and not await DatabaseService.get_profile(profile_id, session):
            session.add(ProfileDB(id=profile_id, company_name=company_name or "Administrator", role=role.value))
            await session.commit()
            print(f"Created profile {profile_id} with role {role.value}")
            return True

        try:
            profile = await DatabaseService.set_profile_role(profile_id, role, session)
        except ProfileNotFoundError:
            print(f"ERROR: Profile {profile_id} not found (use --create to add it)")
            return False

    print(f"Profile {profile.id} ({profile.company_name}) now has role {profile.role.value}")
    return True


async def main():
    """Main function"""
    import argparse

    parser = argparse.ArgumentParser(description="Grant or revoke administrator access")
    parser.add_argument("profile_id", help="Profile ID (the authenticated user id)")
    parser.add_argument(
        "--create",
        action="store_true",
        help="Create the profile if it does not exist"
    )
    parser.add_argument(
        "--company-name",
        type=str,
        help="Company name for a newly created profile"
    )
    parser.add_argument(
        "--revoke",
        action="store_true",
        help="Demote the profile back to subcontractor"
    )

    args = parser.parse_args()
    setup_logging()

    try:
        ok = await seed_admin(args.profile_id, args.create, args.company_name, args.revoke)
    finally:
        await engine.dispose()
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    asyncio.run(main())
