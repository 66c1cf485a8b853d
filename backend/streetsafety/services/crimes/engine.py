"""Crime record engine: submission, feed ordering and vote transitions."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
from uuid import UUID

from streetsafety.core.exceptions import NotFoundError, StoreError, ValidationError
from streetsafety.models.crime_report import CrimeReport
from streetsafety.services.crimes.severity import SeverityClassifier, get_severity_classifier
from streetsafety.services.crimes.store import CrimeStore

logger = logging.getLogger(__name__)


class VoteDirection(str, Enum):
    UP = "up"
    DOWN = "down"


class VoteState(str, Enum):
    NONE = "none"
    UPVOTED = "upvoted"
    DOWNVOTED = "downvoted"


_STATE_BY_DIRECTION = {
    None: VoteState.NONE,
    VoteDirection.UP.value: VoteState.UPVOTED,
    VoteDirection.DOWN.value: VoteState.DOWNVOTED,
}

_DIRECTION_BY_STATE = {
    VoteState.NONE: None,
    VoteState.UPVOTED: VoteDirection.UP.value,
    VoteState.DOWNVOTED: VoteDirection.DOWN.value,
}


@dataclass(frozen=True)
class VoteTransition:
    """Target state of a voter and the counter changes it implies."""

    current: VoteState
    target: VoteState
    upvotes_delta: int
    downvotes_delta: int

    @property
    def changed(self) -> bool:
        return self.current != self.target


@dataclass
class VoteOutcome:
    crime: CrimeReport
    changed: bool


def next_vote_state(current: VoteState, direction: VoteDirection) -> VoteTransition:
    """
    Per-voter vote state machine.

    Voting the same way twice is a no-op; voting the other way moves the
    voter across and adjusts both counters.
    """
    target = VoteState.UPVOTED if direction == VoteDirection.UP else VoteState.DOWNVOTED
    if current == target:
        return VoteTransition(current, target, 0, 0)

    upvotes_delta = 0
    downvotes_delta = 0
    if current == VoteState.UPVOTED:
        upvotes_delta -= 1
    elif current == VoteState.DOWNVOTED:
        downvotes_delta -= 1

    if target == VoteState.UPVOTED:
        upvotes_delta += 1
    else:
        downvotes_delta += 1

    return VoteTransition(current, target, upvotes_delta, downvotes_delta)


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"'{field}' is required", field=field)
    return value.strip()


class CrimeRecordEngine:
    """Owns severity classification, vote state and feed order of crime reports."""

    def __init__(
        self,
        store: CrimeStore,
        classifier: Optional[SeverityClassifier] = None,
        vote_max_retries: int = 3,
    ):
        self.store = store
        self.classifier = classifier or get_severity_classifier()
        self.vote_max_retries = vote_max_retries

    def submit(
        self,
        crime_type: str,
        location: str,
        address: str,
        details: Optional[str],
        coordinates: Optional[Tuple[float, float]],
    ) -> CrimeReport:
        """
        Classify and persist a new crime report.

        Args:
            crime_type: Free-text category, e.g. "Theft"
            location: Human-entered place name
            address: Street address
            details: Optional free text
            coordinates: Resolved (latitude, longitude)

        Returns:
            The stored report with its assigned id

        Raises:
            ValidationError: A required field is empty or coordinates are missing
            StoreError: Persisting failed
        """
        crime_type = _require(crime_type, "type")
        location = _require(location, "location")
        address = _require(address, "address")
        if coordinates is None or None in coordinates:
            raise ValidationError("Coordinates must be resolved before submission", field="coordinates")

        latitude, longitude = coordinates
        severity = self.classifier.classify(crime_type)

        crime = CrimeReport(
            type=crime_type,
            location=location,
            address=address,
            details=details,
            latitude=latitude,
            longitude=longitude,
            severity=severity.value,
            upvotes=0,
            downvotes=0,
        )
        crime = self.store.insert(crime)
        logger.info(f"Crime report {crime.id} submitted ({crime_type}, severity={severity.value})")
        return crime

    def get(self, crime_id: UUID) -> CrimeReport:
        crime = self.store.get(crime_id)
        if crime is None:
            raise NotFoundError("Crime", crime_id)
        return crime

    def list_sorted(self) -> List[CrimeReport]:
        """All reports, most upvoted first; ties keep insertion order."""
        return sorted(self.store.list_all(), key=lambda crime: crime.upvotes, reverse=True)

    def vote(self, crime_id: UUID, voter_id: str, direction: VoteDirection) -> VoteOutcome:
        """
        Apply one voter's vote to a report.

        Raises:
            NotFoundError: Unknown crime id
            ValidationError: Empty voter id
            StoreError: The vote could not be applied
        """
        voter_id = _require(voter_id, "userEmail")
        direction = VoteDirection(direction)
        crime = self.get(crime_id)

        for attempt in range(self.vote_max_retries + 1):
            current = _STATE_BY_DIRECTION[self.store.get_vote_direction(crime_id, voter_id)]
            transition = next_vote_state(current, direction)
            if not transition.changed:
                return VoteOutcome(crime=crime, changed=False)

            applied = self.store.swap_vote(
                crime_id,
                voter_id,
                expected=_DIRECTION_BY_STATE[transition.current],
                target=_DIRECTION_BY_STATE[transition.target],
                upvotes_delta=transition.upvotes_delta,
                downvotes_delta=transition.downvotes_delta,
            )
            if applied:
                logger.info(
                    f"Vote on crime {crime_id}: {transition.current.value} -> {transition.target.value}"
                )
                return VoteOutcome(crime=self.store.refresh(crime), changed=True)

            logger.warning(f"Vote swap on crime {crime_id} lost a race (attempt {attempt + 1}), retrying")

        raise StoreError(f"Could not apply vote on crime {crime_id} after {self.vote_max_retries + 1} attempts")
