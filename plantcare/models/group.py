"""Group model: a watering scenario owned by a user."""
from sqlalchemy import Column, Integer, String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import validates
from plantcare.core.database import Base, AwareDateTime, utcnow


class Group(Base):
    """Watering scenario with a last watering date and a fixed interval in days."""

    __tablename__ = "groups"
    __table_args__ = (
        UniqueConstraint("user_id", "title", name="uq_groups_user_title"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="", nullable=False)
    last_watering_date = Column(AwareDateTime, nullable=False)
    next_watering_date = Column(AwareDateTime, nullable=False, index=True)
    watering_interval = Column(Integer, nullable=False)  # days
    created_at = Column(AwareDateTime, default=utcnow, nullable=False)
    updated_at = Column(AwareDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @validates('watering_interval')
    def validate_watering_interval(self, key, value):
        """Watering interval is a whole number of days, at least one."""
        if value is not None and value < 1:
            raise ValueError(f"watering_interval must be at least 1, got {value}")
        return value

    def __repr__(self) -> str:
        return f"<Group id={self.id} user_id={self.user_id} title={self.title!r}>"
