import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from showcase.auth.jwt_handler import InvalidToken, TokenService
from showcase.database import get_db
from showcase.errors import Forbidden, Unauthenticated, internal_fault
from showcase.models.user import Role, User, is_admin

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("No token, authorization denied")

    try:
        user_id = tokens.decode_access_token(credentials.credentials)
    except InvalidToken as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise Unauthenticated("Token is not valid") from exc

    try:
        user = db.get(User, user_id)
    except SQLAlchemyError as exc:
        logger.exception("User lookup failed during authentication")
        raise internal_fault("Server error during authentication", exc) from exc

    if user is None:
        raise Unauthenticated("Token is not valid")
    return user


def require_admin(current_user: User | None = Depends(get_current_user)) -> User:
    if current_user is None:
        raise Unauthenticated()

    try:
        allowed = is_admin(Role(current_user.role))
    except ValueError as exc:
        logger.exception("User %s has unrecognised role %r", current_user.id, current_user.role)
        raise internal_fault("Server error in admin authentication", exc) from exc

    if not allowed:
        raise Forbidden(
            {
                "message": "Access denied. Admin privileges required.",
                "userRole": current_user.role,
            }
        )
    return current_user
