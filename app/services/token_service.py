"""Bearer token verification (ES256 JWTs from the identity provider).

Learners and graders sign in elsewhere; this service only checks the
access token on each request and reads `sub` and `roles` from it.

Key selection:
- JWT_PUBLIC_KEY_FILE set: the provider's PEM public key verifies tokens,
  and this process cannot mint any.
- unset (dev, tests): an ephemeral P-256 key pair is generated at import.
  create_access_token() signs with it for the demo script and the tests.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

ALGORITHM = "ES256"
AUDIENCE = "quiz-grading-service"
DEV_TOKEN_TTL = timedelta(minutes=15)


def load_public_key(path: str | Path) -> ec.EllipticCurvePublicKey:
    """Read a PEM-encoded EC public key.  Raises ValueError for other key types."""
    key = serialization.load_pem_public_key(Path(path).read_bytes())
    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise ValueError(f"{path} does not hold an EC public key")
    return key


if SETTINGS.jwt_public_key_file:
    _signing_key: ec.EllipticCurvePrivateKey | None = None
    _verification_key = load_public_key(SETTINGS.jwt_public_key_file)
    logger.info("Verifying tokens with %s", SETTINGS.jwt_public_key_file)
else:
    _signing_key = ec.generate_private_key(ec.SECP256R1())
    _verification_key = _signing_key.public_key()


def create_access_token(*, sub: str, roles: list[str] | None = None) -> str:
    """Mint a short-lived token with the local dev key."""
    if _signing_key is None:
        raise RuntimeError("tokens are issued by the identity provider")
    now = datetime.now(UTC)
    claims = {
        "sub": sub,
        "roles": roles or ["user"],
        "iss": SETTINGS.jwt_issuer,
        "aud": AUDIENCE,
        "iat": now,
        "exp": now + DEV_TOKEN_TTL,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, _signing_key, algorithm=ALGORITHM)


def decode_access_token(
    token: str, key: ec.EllipticCurvePublicKey | None = None
) -> dict:
    """Return the verified claims of `token`.

    The algorithm is pinned to ES256; issuer, audience and expiry are
    checked by PyJWT.  Raises jwt.ExpiredSignatureError or
    jwt.InvalidTokenError.
    """
    return jwt.decode(
        token,
        key or _verification_key,
        algorithms=[ALGORITHM],
        issuer=SETTINGS.jwt_issuer,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
