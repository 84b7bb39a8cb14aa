"""Bearer token creation and validation (HMAC-signed JWT).

Tokens carry no expiry: a token stays valid until the signing key in the
configuration file is changed.  Nothing is stored server-side.
"""

from __future__ import annotations

from datetime import UTC, datetime

import jwt

ALGORITHM = "HS256"
# Only the HMAC family is accepted.  Pinning this list is what rejects
# alg:none and RS/ES tokens presented with the shared secret as "public key".
ALLOWED_ALGORITHMS = ["HS256", "HS384", "HS512"]


class TokenCreationError(Exception):
    """A bearer token could not be issued."""


def create_token(signing_key: str, *, algorithm: str = ALGORITHM) -> str:
    """Build and sign a bearer token with the configured signing key."""
    if not signing_key:
        raise TokenCreationError("bearer signing key is not configured")
    if algorithm not in ALLOWED_ALGORITHMS:
        raise TokenCreationError(f"unsupported signing algorithm {algorithm!r}")

    payload = {"iat": datetime.now(UTC)}
    try:
        return jwt.encode(payload, signing_key, algorithm=algorithm)
    except jwt.PyJWTError as e:
        raise TokenCreationError(str(e)) from e


def decode_token(token: str, signing_key: str) -> dict:
    """Verify the token signature and return its claims.

    Raises jwt.PyJWTError on any failure, including a token signed with
    an algorithm outside ALLOWED_ALGORITHMS.
    """
    return jwt.decode(token, signing_key, algorithms=ALLOWED_ALGORITHMS)
