"""User model."""
from sqlalchemy import Column, Integer, BigInteger, String, Boolean
from plantcare.core.database import Base, AwareDateTime, utcnow


class User(Base):
    """User model representing a Telegram user."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String, nullable=True)
    firstname = Column(String, nullable=True)
    lastname = Column(String, nullable=True)
    is_bot = Column(Boolean, default=False, nullable=False)
    created_at = Column(AwareDateTime, default=utcnow, nullable=False)
    updated_at = Column(AwareDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} telegram_id={self.telegram_id}>"
