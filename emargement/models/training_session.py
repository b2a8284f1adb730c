"""Training session model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from emargement.database import Base


class TrainingSession(Base):
    """Represents a dated training session run by a trainer."""
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    formateur_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    attendances = relationship(
        "Attendance",
        back_populates="session",
        cascade="all, delete-orphan",
    )
