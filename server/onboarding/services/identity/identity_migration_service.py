"""Backfill legacy user records into the current collection"""
from typing import Dict, List
from onboarding.logging_logs.log_config import get_logger
from onboarding.repositories.core.repository_factory import RepositoryFactory
from onboarding.repositories.users.identity_repo import CURRENT, LEGACY
from onboarding.utils.time.timeutils import utc_now

logger = get_logger("services.identity_migration")

# Bookkeeping fields never copied across collections
SKIPPED_FIELDS = {"_id", "migratedAt", "migratedTo"}

class IdentityMigrationService:
    def __init__(self, identity_repo=None):
        self.identity_repo = identity_repo or RepositoryFactory.get_identity_repo()

    def backfill(self, dry_run: bool = False) -> Dict[str, int]:
        """
        Copy every legacy user into the current collection.

        No current record with the same lowercase email: insert a copy.
        Otherwise set only the fields the current record is missing.
        Legacy documents are stamped with migratedAt / migratedTo.
        """
        counts = {"inserted": 0, "merged": 0, "skipped": 0}

        for legacy in self.identity_repo.iter_legacy():
            email = (legacy.get("email") or "").strip()
            if not email:
                counts["skipped"] += 1
                logger.warning(f"Skipping legacy user {legacy.get('_id')}: no email")
                continue

            current = self.identity_repo.find_by_email(CURRENT, email, projection=None)
            if current is None:
                document = {k: v for k, v in legacy.items() if k not in SKIPPED_FIELDS}
                target_id = None
                if not dry_run:
                    target_id = self.identity_repo.insert(CURRENT, document)
                counts["inserted"] += 1
            else:
                missing = {
                    k: v for k, v in legacy.items()
                    if k not in SKIPPED_FIELDS and current.get(k) is None and v is not None
                }
                target_id = current["_id"]
                if not missing:
                    counts["skipped"] += 1
                else:
                    if not dry_run:
                        self.identity_repo.update_by_id(CURRENT, current["_id"], missing)
                    counts["merged"] += 1

            if not dry_run and target_id is not None:
                self.identity_repo.update_by_id(
                    LEGACY, legacy["_id"], {"migratedAt": utc_now(), "migratedTo": target_id}
                )

        logger.info(f"Identity backfill {'(dry run) ' if dry_run else ''}finished: {counts}")
        return counts

    def verify(self) -> List[Dict]:
        """Legacy users that still have no current counterpart"""
        orphans = []
        for legacy in self.identity_repo.iter_legacy():
            email = legacy.get("email")
            if not email or self.identity_repo.find_by_email(CURRENT, email) is None:
                orphans.append({
                    "_id": str(legacy.get("_id")),
                    "author_id": legacy.get("author_id"),
                    "email": email,
                })
        return orphans
