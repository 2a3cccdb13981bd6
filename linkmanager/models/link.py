from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from ..database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp with microsecond resolution"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Link(Base):
    """Saved bookmark model"""
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(512), nullable=False)
    url = Column(String(2048), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(255), nullable=True, index=True)
    tags = Column(Text, nullable=False, default="")  # comma-joined
    domain = Column(String(255), nullable=True)
    favicon = Column(String(2048), nullable=True)
    is_starred = Column(Boolean, nullable=False, default=False)
    date_added = Column(DateTime, nullable=False, default=utcnow)
    date_modified = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<Link {self.id} {self.url}>"
