import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from emargement.auth.jwt_handler import Principal, TokenService, get_token_service
from emargement.core.errors import AuthError, AuthErrorReason
from emargement.models.user import Role

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> Principal:
    if credentials is None or not credentials.credentials:
        logger.warning("Rejected %s %s: no bearer token", request.method, request.url.path)
        raise AuthError(AuthErrorReason.UNAUTHENTICATED, "Not authenticated")

    try:
        principal = token_service.verify(credentials.credentials)
    except AuthError as exc:
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.reason.value)
        raise AuthError(AuthErrorReason.UNAUTHENTICATED, "Invalid token") from exc

    request.state.principal = principal
    return principal


def require_role(role: Role):
    """Build a dependency that lets the request through only for `role`.

    Declared as a route dependency it is resolved before the request body is
    validated, so callers without the right role never see body errors.
    """

    def dependency(
        request: Request,
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role is not role:
            logger.warning(
                "Forbidden %s %s for user %s with role %s",
                request.method,
                request.url.path,
                principal.user_id,
                principal.role.value,
            )
            raise AuthError(AuthErrorReason.FORBIDDEN, "Forbidden")
        return principal

    return dependency


require_trainer = require_role(Role.TRAINER)
require_trainee = require_role(Role.TRAINEE)
