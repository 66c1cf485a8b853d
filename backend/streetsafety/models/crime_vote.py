from sqlalchemy import Column, String, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from streetsafety.db.base import Base


class CrimeVote(Base):
    """
    One voter's current vote on one crime report.

    The unique (crime_id, voter_id) pair keeps a voter in at most one of
    the upvoted/downvoted sets of a report.
    """

    __tablename__ = "crime_vote"

    id = Column(Integer, primary_key=True, autoincrement=True)
    crime_id = Column(Uuid(as_uuid=True), ForeignKey("crime_report.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(255), nullable=False)
    direction = Column(String(4), nullable=False)  # "up" or "down"
    created_at = Column(TIMESTAMP(timezone=False), server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=False), server_default=func.now(), onupdate=func.now(), nullable=False)

    crime = relationship("CrimeReport", back_populates="votes")

    __table_args__ = (
        UniqueConstraint("crime_id", "voter_id", name="uq_crime_vote_crime_voter"),
    )
