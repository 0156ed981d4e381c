from sqlalchemy import Column, DateTime, Integer, Text, func

from .database import Base


class FeedbackCollection(Base):
    """The whole session collection, stored as one JSON document in a single row."""

    __tablename__ = "feedback_collection"

    id = Column(Integer, primary_key=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
