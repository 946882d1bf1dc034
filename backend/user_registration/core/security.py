# user_registration/core/security.py
"""
Security module for authentication and authorization.
Handles password hashing, password policy, and JWT token creation/validation.

Both services are plain objects built once at startup (see
``services.build_services``) and passed to whatever needs them.
"""
import datetime as dt
import re
from dataclasses import dataclass
from typing import FrozenSet, Iterable

import jwt  # PyJWT
from passlib.context import CryptContext

from user_registration.core.errors import AuthenticationError

# Symbols accepted (and required at least once) in a password
PASSWORD_SPECIALS = "@$!%*?&_#"
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100
PASSWORD_POLICY_MESSAGE = (
    "Password must be between 8 and 100 characters and contain at least one uppercase letter, "
    "one lowercase letter, one number, and one special character (@$!%*?&_#)"
)

_ALLOWED_PASSWORD_RE = re.compile(r"^[A-Za-z\d" + re.escape(PASSWORD_SPECIALS) + r"]+$")


class CredentialService:
    """
    Password hashing, verification and strength policy.

    Hashing uses bcrypt through passlib. The work factor (log2 rounds) is
    configurable; 12 is the production default, tests lower it to keep the
    suite fast.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        """
        Hash a plain text password.

        Every call uses a fresh salt, so hashing the same password twice
        gives two different strings that both verify.
        """
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return True if ``plaintext`` matches ``hashed``. A malformed hash is a mismatch."""
        if not plaintext or not hashed:
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except (ValueError, TypeError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        try:
            return self._context.needs_update(hashed)
        except (ValueError, TypeError):
            return False

    @staticmethod
    def meets_policy(plaintext: str | None) -> bool:
        """
        Check a candidate password against the strength policy.

        Rules:
            - length 8 to 100
            - at least one lowercase, one uppercase, one digit
            - at least one symbol from ``PASSWORD_SPECIALS``
            - no characters outside letters, digits and those symbols
        """
        if not plaintext:
            return False
        if not PASSWORD_MIN_LENGTH <= len(plaintext) <= PASSWORD_MAX_LENGTH:
            return False
        if not _ALLOWED_PASSWORD_RE.match(plaintext):
            return False
        return (
            any(c.islower() for c in plaintext)
            and any(c.isupper() for c in plaintext)
            and any(c.isdigit() for c in plaintext)
            and any(c in PASSWORD_SPECIALS for c in plaintext)
        )


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by an access token."""
    email: str
    user_id: int
    roles: FrozenSet[str]
    expires_at: dt.datetime


class TokenService:
    """
    Issue and validate signed JWT access tokens.

    Token payload:
        - sub: Subject (user email)
        - uid: Numeric user id
        - roles: Role display names, sorted
        - iat: Issued at timestamp
        - exp: Expiration timestamp

    Every failure path is treated as "invalid": callers never get a token
    accepted because it could not be read.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 1440):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = dt.timedelta(minutes=expire_minutes)

    def issue(self, user_id: int, email: str, roles: Iterable[str]) -> str:
        now = dt.datetime.now(dt.timezone.utc)
        payload = {
            "sub": email,
            "uid": user_id,
            "roles": sorted(set(roles)),
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def _decode(self, token: str, verify_exp: bool = True) -> dict:
        return jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={"require": ["sub", "uid", "exp"], "verify_exp": verify_exp},
        )

    @staticmethod
    def _to_claims(payload: dict) -> TokenClaims:
        user_id = payload.get("uid")
        roles = payload.get("roles") or []
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise AuthenticationError("Invalid token")
        if not isinstance(roles, list) or not all(isinstance(r, str) for r in roles):
            raise AuthenticationError("Invalid token")
        return TokenClaims(
            email=payload["sub"],
            user_id=user_id,
            roles=frozenset(roles),
            expires_at=dt.datetime.fromtimestamp(payload["exp"], tz=dt.timezone.utc),
        )

    def parse(self, token: str) -> TokenClaims:
        """
        Decode a token, checking signature and expiry.

        Raises:
            AuthenticationError: token is malformed, tampered with, expired,
                or missing required claims
        """
        try:
            payload = self._decode(token)
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthenticationError("Invalid token") from exc
        return self._to_claims(payload)

    def is_valid(self, token: str, expected_subject: str) -> bool:
        try:
            claims = self.parse(token)
        except AuthenticationError:
            return False
        return claims.email == (expected_subject or "").strip().lower()

    def is_expired(self, token: str) -> bool:
        """True when the token is past its expiry, or cannot be read at all."""
        try:
            payload = self._decode(token, verify_exp=False)
            claims = self._to_claims(payload)
        except (jwt.PyJWTError, AuthenticationError):
            return True
        return claims.expires_at <= dt.datetime.now(dt.timezone.utc)
