from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache

import jwt

from emargement.core import config
from emargement.core.errors import AuthError, AuthErrorReason
from emargement.models.user import Role


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: Role


class TokenService:
    """Issues and verifies the stateless bearer tokens.

    Tokens carry the user id, the role and the issue time. No expiry is set:
    a token stays valid until the signing secret changes.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        if not secret_key:
            raise ValueError("A signing secret is required.")
        self._secret_key = secret_key
        self._algorithm = algorithm

    def issue(self, user_id: int, role: Role | str) -> str:
        payload = {
            "id": user_id,
            "role": Role(role).value,
            "iat": datetime.now(timezone.utc),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except jwt.InvalidSignatureError as exc:
            raise AuthError(AuthErrorReason.INVALID_SIGNATURE, "Invalid token signature") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthError(AuthErrorReason.MALFORMED, "Malformed token") from exc

        user_id = payload.get("id")
        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise AuthError(AuthErrorReason.MALFORMED, "Unknown role in token") from exc
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthError(AuthErrorReason.MALFORMED, "Invalid token subject")

        return Principal(user_id=user_id, role=role)


@lru_cache
def get_token_service() -> TokenService:
    return TokenService(config.JWT_SECRET_KEY, config.JWT_ALGORITHM)
