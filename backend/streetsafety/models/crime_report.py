from sqlalchemy import Column, String, Integer, TIMESTAMP, Float, Text, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from datetime import datetime, timezone
from typing import List

from streetsafety.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CrimeReport(Base):
    __tablename__ = "crime_report"

    # Insertion sequence; the public identifier is `id`
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Uuid(as_uuid=True), unique=True, nullable=False, default=uuid.uuid4)
    type = Column(String(100), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    address = Column(String(255), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    severity = Column(String(10), nullable=False, index=True)
    details = Column(Text, nullable=True)
    upvotes = Column(Integer, nullable=False, default=0, index=True)
    downvotes = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=False), default=_utcnow, server_default=func.now(), nullable=False)

    votes = relationship(
        "CrimeVote",
        back_populates="crime",
        lazy="selectin",
        order_by="CrimeVote.id",
    )

    @property
    def upvoted_by(self) -> List[str]:
        return [vote.voter_id for vote in self.votes if vote.direction == "up"]

    @property
    def downvoted_by(self) -> List[str]:
        return [vote.voter_id for vote in self.votes if vote.direction == "down"]
