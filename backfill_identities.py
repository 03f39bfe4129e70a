"""Backfill script: copy legacy user records into the current users collection."""
import sys
import os
sys.path.append(os.path.join(os.path.dirname(os.path.abspath(__file__)), "server"))

from onboarding.services.identity.identity_migration_service import IdentityMigrationService

def backfill_identities(dry_run=False):
    """Run the backfill, then list the legacy users still lacking a current record."""
    service = IdentityMigrationService()

    print(f"Starting identity backfill{' (dry run)' if dry_run else ''}...")
    counts = service.backfill(dry_run=dry_run)
    print(f"Inserted: {counts['inserted']}  Merged: {counts['merged']}  Skipped: {counts['skipped']}")

    if dry_run:
        return counts

    orphans = service.verify()
    if orphans:
        print(f"{len(orphans)} legacy users have no current record:")
        for orphan in orphans:
            print(f"  {orphan['_id']}  author_id={orphan['author_id']}  email={orphan['email']}")
    else:
        print("Every legacy user has a current record. LEGACY_USERS_RETIRED can be enabled.")
    return counts

if __name__ == "__main__":
    backfill_identities(dry_run="--dry-run" in sys.argv)
