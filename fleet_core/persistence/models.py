"""
Fleet core database models
"""

import datetime
from typing import Dict, Optional, Tuple

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from .database import Base


DEFAULT_HOMEBASE: str = "Unknown"
DEFAULT_DESCRIPTION: str = "No description available yet."


def utcnow() -> datetime.datetime:
    """
    Return the current UTC time as naive datetime, as stored in the database
    """

    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def as_utc(timestamp: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    """
    Attach the UTC timezone to naive timestamps loaded from the database
    """

    if timestamp is None:
        return None
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=datetime.timezone.utc)
    return timestamp.astimezone(datetime.timezone.utc)


class Aircraft(Base):
    """
    Model representing one aircraft of the fleet
    """

    __tablename__ = "aircraft"

    REQUIRED_FIELDS: Tuple[str, ...] = ("model", "registration", "airline", "status")
    OPTIONAL_FIELDS: Dict[str, str] = {
        "homebase": DEFAULT_HOMEBASE,
        "description": DEFAULT_DESCRIPTION
    }

    id: int = Column(Integer, nullable=False, primary_key=True, autoincrement=True, unique=True)
    model: str = Column(String(255), nullable=False)
    registration: str = Column(String(255), nullable=False)
    airline: str = Column(String(255), nullable=False)
    status: str = Column(String(255), nullable=False)
    homebase: str = Column(String(1024), nullable=False, default=DEFAULT_HOMEBASE)
    description: str = Column(String(1024), nullable=False, default=DEFAULT_DESCRIPTION)
    created_at: datetime.datetime = Column(DateTime, nullable=False, default=utcnow)
    updated_at: datetime.datetime = Column(DateTime, nullable=False, default=utcnow)
    """UTC timestamp of the last successful mutation (never touched by reads)"""

    __table_args__ = (
        CheckConstraint("model != ''", name="non_empty_model"),
        CheckConstraint("registration != ''", name="non_empty_registration"),
        CheckConstraint("airline != ''", name="non_empty_airline"),
        CheckConstraint("status != ''", name="non_empty_status"),
    )

    @property
    def last_modified(self) -> Optional[datetime.datetime]:
        """
        Timezone-aware UTC timestamp of the last modification, if tracked
        """

        return as_utc(self.updated_at)

    def __repr__(self) -> str:
        return f"Aircraft(id={self.id}, registration={self.registration!r}, status={self.status!r})"
