"""SQLAlchemy-backed store for crime reports and their votes."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from streetsafety.core.exceptions import StoreError
from streetsafety.models.crime_report import CrimeReport
from streetsafety.models.crime_vote import CrimeVote

logger = logging.getLogger(__name__)


class CrimeStore:
    """
    Keyed storage for crime reports.

    Only find-by-id, find-all, insert and the conditional vote swap are
    offered; reports are never deleted or edited otherwise.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, crime_id: UUID) -> Optional[CrimeReport]:
        try:
            return self.db.query(CrimeReport).filter(CrimeReport.id == crime_id).one_or_none()
        except SQLAlchemyError as e:
            self._fail("Error loading crime report", e)

    def list_all(self) -> List[CrimeReport]:
        """All reports in insertion order."""
        try:
            return (
                self.db.query(CrimeReport)
                .order_by(CrimeReport.created_at.asc(), CrimeReport.seq.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self._fail("Error fetching crime reports", e)

    def insert(self, crime: CrimeReport) -> CrimeReport:
        try:
            self.db.add(crime)
            self.db.commit()
            self.db.refresh(crime)
            return crime
        except SQLAlchemyError as e:
            self._fail("Error saving crime report", e)

    def get_vote_direction(self, crime_id: UUID, voter_id: str) -> Optional[str]:
        """Current direction of a voter's vote, or None if they have not voted."""
        try:
            return (
                self.db.query(CrimeVote.direction)
                .filter(CrimeVote.crime_id == crime_id, CrimeVote.voter_id == voter_id)
                .scalar()
            )
        except SQLAlchemyError as e:
            self._fail("Error loading vote", e)

    def swap_vote(
        self,
        crime_id: UUID,
        voter_id: str,
        expected: Optional[str],
        target: str,
        upvotes_delta: int,
        downvotes_delta: int,
    ) -> bool:
        """
        Move a voter from `expected` to `target` and adjust the counters.

        The vote row change is conditional on the voter still being in the
        `expected` state: a fresh insert relies on the unique
        (crime_id, voter_id) constraint, a switch on
        `UPDATE ... WHERE direction = :expected`. Counters are incremented
        in SQL within the same transaction.

        Returns:
            True if the swap was applied, False if the voter's state changed
            in the meantime (nothing is written in that case).
        """
        try:
            if expected is None:
                self.db.add(CrimeVote(crime_id=crime_id, voter_id=voter_id, direction=target))
                self.db.flush()
            else:
                result = self.db.execute(
                    update(CrimeVote)
                    .where(
                        CrimeVote.crime_id == crime_id,
                        CrimeVote.voter_id == voter_id,
                        CrimeVote.direction == expected,
                    )
                    .values(direction=target)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    self.db.rollback()
                    return False

            self.db.execute(
                update(CrimeReport)
                .where(CrimeReport.id == crime_id)
                .values(
                    upvotes=CrimeReport.upvotes + upvotes_delta,
                    downvotes=CrimeReport.downvotes + downvotes_delta,
                )
                .execution_options(synchronize_session=False)
            )
            self.db.commit()
            return True
        except IntegrityError:
            # Another request inserted this voter's row first
            self.db.rollback()
            logger.debug(f"Concurrent vote detected for crime {crime_id} by {voter_id}")
            return False
        except SQLAlchemyError as e:
            self._fail("Error saving vote", e)

    def refresh(self, crime: CrimeReport) -> CrimeReport:
        try:
            self.db.refresh(crime)
            return crime
        except SQLAlchemyError as e:
            self._fail("Error loading crime report", e)

    def _fail(self, message: str, error: Exception):
        self.db.rollback()
        logger.error(f"{message}: {str(error)}", exc_info=True)
        raise StoreError(f"{message}: {str(error)}") from error
