"""Plant model."""
from sqlalchemy import Column, Integer, String, Text, LargeBinary, ForeignKey, UniqueConstraint
from plantcare.core.database import Base, AwareDateTime, utcnow


class Plant(Base):
    """Plant attached to a watering scenario; the photo is stored inline."""

    __tablename__ = "plants"
    __table_args__ = (
        UniqueConstraint("group_id", "title", name="uq_plants_group_title"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, default="", nullable=False)
    photo = Column(LargeBinary, nullable=True)
    created_at = Column(AwareDateTime, default=utcnow, nullable=False)
    updated_at = Column(AwareDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Plant id={self.id} group_id={self.group_id} title={self.title!r}>"
