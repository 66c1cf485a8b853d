from sqlalchemy import Column, String, TIMESTAMP, Uuid
from sqlalchemy.sql import func
import uuid

from streetsafety.db.base import Base


class UserAccount(Base):
    __tablename__ = "user_account"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP(timezone=False), server_default=func.now(), nullable=False)
