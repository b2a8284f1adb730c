"""Thin adapter over the users table."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from emargement.core.errors import ConflictError
from emargement.models.user import Role, User


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def add(self, name: str, email: str, hashed_password: str, role: Role) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password, role=Role(role).value)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError("Email already registered") from exc
        self.db.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_name(self, name: str) -> User | None:
        return self.db.query(User).filter(User.name == name).order_by(User.id.asc()).first()
