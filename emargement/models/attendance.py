"""Attendance (emargement) model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from emargement.database import Base

PRESENT_STATUS = "1"


class Attendance(Base):
    """Records that a trainee was present at a session."""
    __tablename__ = "emargements"
    __table_args__ = (
        UniqueConstraint("session_id", "etudiant_id", name="uq_emargements_session_etudiant"),
    )

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    etudiant_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(String(1), nullable=False, default=PRESENT_STATUS)

    session = relationship("TrainingSession", back_populates="attendances")
