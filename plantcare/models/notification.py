"""Notification model: audit log of sent watering reminders."""
from sqlalchemy import Column, Integer, BigInteger, Text, ForeignKey
from plantcare.core.database import Base, AwareDateTime, utcnow


class Notification(Base):
    """A watering reminder that was delivered to the scenario owner."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    message_id = Column(BigInteger, nullable=False)
    text = Column(Text, nullable=False)
    sent_at = Column(AwareDateTime, default=utcnow, nullable=False)
