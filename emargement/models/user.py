"""User model definitions."""

from enum import Enum

from sqlalchemy import Column, Integer, String
from emargement.database import Base


class Role(str, Enum):
    TRAINER = "formateur"
    TRAINEE = "etudiant"


class User(Base):
    """Represents an account, either a trainer or a trainee."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
