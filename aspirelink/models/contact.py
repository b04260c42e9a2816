"""Contact form model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from aspirelink.database import Base
from aspirelink.models.user import utcnow


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
