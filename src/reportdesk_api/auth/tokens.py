"""Access tokens.

Tokens are RS256 JWTs whose only identity claim is ``sub`` (the user id).
Role and organization are never embedded: the identity resolver re-reads
them from the user record on every request, so a role change or
deactivation applies to tokens already issued.

The signing key comes from JWT settings, or is generated per process when
none is configured (development and tests). Its public half is published as
a JWKS document.
"""

import base64
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from reportdesk_api.config import jwt_settings

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"
REQUIRED_CLAIMS = ("sub", "iss", "aud", "exp", "iat")


class TokenError(Exception):
    """Base exception for token operations."""


class TokenExpiredError(TokenError):
    """Token is past its ``exp``."""


class TokenInvalidError(TokenError):
    """Token is malformed, has a bad signature or has the wrong claims."""


@dataclass
class TokenPayload:
    """Verified claims of an access token."""

    sub: str  # User ID
    iss: str
    aud: str
    exp: int
    iat: int

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TokenPayload":
        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            raise TokenInvalidError(f"Token missing required '{missing[0]}' claim")
        return cls(**{claim: payload[claim] for claim in REQUIRED_CLAIMS})


@dataclass(frozen=True)
class SigningKey:
    """An RSA keypair in PEM form plus its JWKS key id."""

    private_pem: str
    public_pem: str
    kid: str
    public_numbers: rsa.RSAPublicNumbers


def _b64url_uint(value: int) -> str:
    raw = value.to_bytes((value.bit_length() + 7) // 8, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def load_signing_key(
    private_key_pem: str | None = None,
    public_key_pem: str | None = None,
    key_id: str | None = None,
) -> SigningKey:
    """Load the configured keypair, or generate an ephemeral one.

    The public key is derived from the private key unless given. Without an
    explicit ``key_id`` the kid is a fingerprint of the public key.
    """
    if private_key_pem:
        private_key = serialization.load_pem_private_key(
            private_key_pem.encode(), password=None
        )
    else:
        logger.info("No JWT private key configured, generating ephemeral keypair")
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    if private_key_pem and public_key_pem:
        public_key = serialization.load_pem_public_key(public_key_pem.encode())
    else:
        public_key = private_key.public_key()

    public_der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return SigningKey(
        private_pem=private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode(),
        public_pem=public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ).decode(),
        kid=key_id or hashlib.sha256(public_der).hexdigest()[:16],
        public_numbers=public_key.public_numbers(),  # type: ignore[union-attr]
    )


class TokenManager:
    """Issues and verifies access tokens."""

    def __init__(
        self,
        private_key_pem: str | None = None,
        public_key_pem: str | None = None,
        issuer: str = "reportdesk-api",
        audience: str = "reportdesk",
        access_token_ttl_minutes: int = 24 * 60,
        key_id: str | None = None,
    ):
        self.signing_key = load_signing_key(private_key_pem, public_key_pem, key_id)
        self.issuer = issuer
        self.audience = audience
        self.access_token_ttl = timedelta(minutes=access_token_ttl_minutes)

    @property
    def key_id(self) -> str:
        return self.signing_key.kid

    @property
    def expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_token_ttl.total_seconds())

    def create_access_token(self, user_id: str, ttl: timedelta | None = None) -> str:
        """Sign a token for ``user_id``.

        ``ttl`` overrides the configured lifetime; a negative value yields an
        already expired token.
        """
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + (self.access_token_ttl if ttl is None else ttl)
        claims = {
            "sub": user_id,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(
            claims,
            self.signing_key.private_pem,
            algorithm=ALGORITHM,
            headers={"kid": self.key_id},
        )

    def validate_token(self, token: str) -> TokenPayload:
        """Verify signature, issuer, audience and expiry.

        Raises:
            TokenExpiredError: If the token has expired
            TokenInvalidError: For any other verification failure
        """
        try:
            claims = jwt.decode(
                token,
                self.signing_key.public_pem,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                audience=self.audience,
            )
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except JWTClaimsError as e:
            raise TokenInvalidError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            raise TokenInvalidError(f"Invalid token: {e}") from e
        return TokenPayload.from_dict(claims)

    def get_jwks(self) -> dict[str, Any]:
        numbers = self.signing_key.public_numbers
        return {
            "keys": [
                {
                    "kty": "RSA",
                    "use": "sig",
                    "alg": ALGORITHM,
                    "kid": self.key_id,
                    "n": _b64url_uint(numbers.n),
                    "e": _b64url_uint(numbers.e),
                }
            ]
        }


_token_manager: TokenManager | None = None


def get_token_manager() -> TokenManager:
    """Process-wide token manager, built from JWT settings on first use."""
    global _token_manager
    if _token_manager is None:
        _token_manager = TokenManager(
            private_key_pem=jwt_settings.private_key,
            public_key_pem=jwt_settings.public_key,
            issuer=jwt_settings.issuer,
            audience=jwt_settings.audience,
            access_token_ttl_minutes=jwt_settings.access_token_ttl_minutes,
            key_id=jwt_settings.key_id,
        )
    return _token_manager


def create_access_token(user_id: str) -> str:
    return get_token_manager().create_access_token(user_id)


def validate_token(token: str) -> TokenPayload:
    return get_token_manager().validate_token(token)


def get_jwks() -> dict[str, Any]:
    return get_token_manager().get_jwks()
