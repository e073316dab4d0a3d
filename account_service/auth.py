"""
Contains authentication-related helper functions, such as password hashing
and JWT creation/validation.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import settings
from .exceptions import InvalidCredential
from .models import Role
from .schemas import TokenClaims

# We use bcrypt as the hashing algorithm
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

REQUIRED_CLAIMS = ("sub", "role", "iat", "exp")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plain-text password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hashes a plain-text password using bcrypt."""
    return pwd_context.hash(password)


class TokenIssuer:
    """
    Issues and verifies signed, time-bounded access tokens.

    The claims are {sub, role, iat, exp} with exp = iat + lifetime. Tokens are
    never stored; validity depends only on the signature and the expiry.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", lifetime: timedelta = timedelta(days=7)):
        if not secret_key:
            raise ValueError("A secret key is required to sign tokens.")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.lifetime = lifetime

    def issue(self, subject_id: int, role: Role | str, now: datetime | None = None) -> str:
        """
        Creates a new JWT access token.

        Args:
            subject_id (int): The ID of the user the token identifies.
            role (Role | str): The user's role at issuance.
            now (datetime | None): Issuance time, defaults to the current UTC time.

        Returns:
            str: The encoded JWT token.
        """
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(subject_id),
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decodes and validates a token.

        Raises:
            InvalidCredential: If the signature does not match, the token is
                malformed or missing a claim, or it has expired.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={f"require_{claim}": True for claim in ("sub", "iat", "exp")},
            )
        except JWTError as e:
            raise InvalidCredential(f"Invalid token: {e}") from e

        if any(claim not in payload for claim in REQUIRED_CLAIMS):
            raise InvalidCredential("Token is missing required claims")
        try:
            return TokenClaims(
                subject_id=int(payload["sub"]),
                role=payload["role"],
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (TypeError, ValueError) as e:
            raise InvalidCredential("Token claims are malformed") from e


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Returns the process-wide token issuer built from the startup settings."""
    return TokenIssuer(
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        lifetime=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )
