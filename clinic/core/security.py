from datetime import timedelta
from enum import Enum
from typing import Callable, Optional
from uuid import UUID
import time

from fastapi.security import HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from .config import Settings
from .errors import AuthenticationError

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer extraction; a missing header is reported as 401 by the dependency
security = HTTPBearer(auto_error=False)

INVALID_TOKEN_DETAIL = "Invalid or expired token"


class UserRole(str, Enum):
    PATIENT = "PATIENT"
    DOCTOR = "DOCTOR"
    ADMIN = "ADMIN"


class TokenPayload(BaseModel):
    sub: str
    exp: float


# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate a salted bcrypt hash."""
    return pwd_context.hash(password)


class TokenAuthority:
    """Issues and verifies HMAC-signed bearer tokens.

    Tokens carry only the subject identity and an absolute expiry. They are
    not stored anywhere, so they cannot be revoked before they expire, and
    issuing a new token leaves older ones valid.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], float]] = None,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock or time.time

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenAuthority":
        return cls(settings.JWT_SECRET, settings.JWT_ALGORITHM)

    def now(self) -> float:
        return self._clock()

    def issue(self, identity: UUID, ttl: timedelta) -> str:
        """Sign a token for identity that expires ttl from now."""
        payload = TokenPayload(
            sub=str(identity),
            exp=self.now() + ttl.total_seconds(),
        )
        return jwt.encode(payload.model_dump(), self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> UUID:
        """Return the token's subject or raise AuthenticationError.

        Malformed, badly signed and expired tokens are indistinguishable
        to the caller. A token is expired from the instant exp is reached.
        """
        try:
            # Expiry is checked below against our own clock; jose's require_*
            # options would turn its wall-clock exp check back on.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False},
            )
            # Rejects tokens without sub or exp
            payload = TokenPayload(**claims)
            identity = UUID(payload.sub)
        except (JWTError, ValueError, TypeError):
            raise AuthenticationError(INVALID_TOKEN_DETAIL)

        if payload.exp <= self.now():
            raise AuthenticationError(INVALID_TOKEN_DETAIL)

        return identity
