import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES, SECRET_KEY
from ..errors import ExpiredTokenError, InvalidTokenError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class SessionIssuer:
    """Issues and checks signed bearer tokens.

    Tokens are stateless: whoever holds one is the user named in ``sub``
    until ``exp``. Logging out means the client throws its copy away.
    """

    def __init__(
        self,
        secret_key: str = SECRET_KEY,
        expires_delta: Optional[timedelta] = None,
        algorithm: str = ALGORITHM,
    ):
        self.secret_key = secret_key
        self.expires_delta = expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        self.algorithm = algorithm

    def issue(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: Optional[str]) -> dict:
        if not token:
            raise InvalidTokenError()
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.info("Rejected expired session token")
            raise ExpiredTokenError() from None
        except JWTError:
            logger.info("Rejected malformed or tampered session token")
            raise InvalidTokenError() from None

    def authenticate(self, token: Optional[str]) -> str:
        """Return the user id the token was issued for."""
        payload = self._decode(token)
        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise InvalidTokenError()
        return user_id

    def expires_at(self, token: str) -> datetime:
        payload = self._decode(token)
        return datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
