import logging

from sqlalchemy.orm import Session

from emargement.auth.jwt_handler import TokenService
from emargement.auth.passwords import hash_password, verify_password
from emargement.core.errors import AuthError, AuthErrorReason
from emargement.models.user import Role, User
from emargement.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


def create_user(db: Session, name: str, email: str, password: str, role: Role) -> User:
    """Register an account; only the bcrypt hash of the password is stored."""
    hashed_password = hash_password(password)
    user = CredentialStore(db).add(name, email, hashed_password, role)
    logger.info("Registered user %s with role %s", user.id, user.role)
    return user


def login(db: Session, token_service: TokenService, email: str, password: str) -> str:
    user = CredentialStore(db).find_by_email(email)
    if user is None:
        raise AuthError(AuthErrorReason.UNAUTHENTICATED, "User not found")

    if not verify_password(password, user.hashed_password):
        raise AuthError(AuthErrorReason.UNAUTHENTICATED, "Unauthorized")

    return token_service.issue(user.id, Role(user.role))
