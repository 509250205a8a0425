from datetime import datetime, timedelta, timezone

import jwt

from showcase.core import config


class InvalidToken(Exception):
    """Raised when a token is expired, tampered with, or malformed."""


class TokenService:
    def __init__(
        self,
        secret_key: str | None = None,
        algorithm: str | None = None,
        expires_minutes: int | None = None,
    ) -> None:
        self.secret_key = secret_key or config.JWT_SECRET_KEY
        self.algorithm = algorithm or config.JWT_ALGORITHM
        self.expires_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES

    def create_access_token(self, subject: int, expires_minutes: int | None = None) -> str:
        expire_minutes = expires_minutes or self.expires_minutes
        now = datetime.now(timezone.utc)
        payload = {"sub": str(subject), "exp": now + timedelta(minutes=expire_minutes), "iat": now}
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> int:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidToken(str(exc)) from exc

        try:
            return int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidToken("Invalid token subject") from exc
