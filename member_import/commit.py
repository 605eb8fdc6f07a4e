"""
Batch membership commit

One bulk insert first. If the bulk path raises, insert intents one at a time
so every row gets its own tagged outcome; a single bad row never aborts the
batch and nothing is retried beyond that second pass.
"""

from typing import Sequence

from loguru import logger

from .schemas import CommitOutcome, CommitReport, MembershipIntent
from .stores import MembershipStore


class BatchCommitCoordinator:
    """Persists approved membership intents"""

    def __init__(self, store: MembershipStore):
        self.store = store

    def commit(self, intents: Sequence[MembershipIntent]) -> CommitReport:
        report = CommitReport()
        if not intents:
            logger.info("No new memberships to commit")
            return report

        try:
            inserted = self.store.bulk_insert(intents)
        except Exception as e:
            logger.warning(f"Bulk insert failed ({e}); falling back to per-row inserts")
        else:
            report.succeeded = list(intents)
            if inserted < len(intents):
                logger.warning(
                    f"Bulk insert wrote {inserted}/{len(intents)} rows; "
                    f"{len(intents) - inserted} (club, student) pairs already existed"
                )
            else:
                logger.info(f"Bulk insert committed {inserted} memberships")
            return report

        report.used_fallback = True
        for intent in intents:
            outcome = self._insert_one(intent)
            if outcome == CommitOutcome.COMMITTED:
                report.succeeded.append(intent)
            elif outcome == CommitOutcome.CATEGORY_CONFLICT:
                report.category_conflicts.append(intent)
                logger.info(f"Category conflict at commit for student {intent.student_id}")
            else:
                report.failures.append(intent)
                logger.error(f"Failed to add student {intent.student_id} to club {intent.club_id}")

        logger.info(
            f"Per-row commit: {len(report.succeeded)} added, "
            f"{len(report.category_conflicts)} category conflicts, {len(report.failures)} failed"
        )
        return report

    def _insert_one(self, intent: MembershipIntent) -> CommitOutcome:
        """Stores tag their own outcomes; anything they raise counts as a failed row"""
        try:
            return self.store.insert_one(intent)
        except Exception as e:
            logger.error(f"Unexpected error inserting student {intent.student_id}: {e}")
            return CommitOutcome.FAILED
