"""Authentication gate in front of /probe.

The gate holds an ordered tuple of verifiers, one per active scheme, and
admits a request only if every verifier accepts it.  With no active
scheme the gate admits everything.

A client satisfying both Basic and Bearer sends two Authorization
headers; each verifier looks for a header with its own scheme.
"""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

import jwt
from starlette.requests import Request

from script_exporter.models.exporter_config import ExporterConfig
from script_exporter.services import token_service

logger = logging.getLogger(__name__)


class Verifier(Protocol):
    scheme: str

    def check(self, request: Request) -> bool: ...


def _authorization_values(request: Request, scheme: str) -> Iterable[str]:
    """Authorization header values whose scheme matches, case-insensitively."""
    for value in request.headers.getlist("authorization"):
        head = value.split(" ", 1)[0]
        if head.lower() == scheme:
            yield value


@dataclass(frozen=True, slots=True)
class BasicAuthVerifier:
    username: str
    password: str
    scheme: str = "basic"

    def check(self, request: Request) -> bool:
        for value in _authorization_values(request, self.scheme):
            credentials = _decode_basic(value)
            if credentials is not None and self._matches(*credentials):
                return True
        return False

    def _matches(self, username: str, password: str) -> bool:
        # Evaluate both comparisons so timing doesn't reveal which failed.
        user_ok = secrets.compare_digest(username.encode(), self.username.encode())
        pass_ok = secrets.compare_digest(password.encode(), self.password.encode())
        return user_ok and pass_ok


def _decode_basic(value: str) -> tuple[str, str] | None:
    _, _, encoded = value.partition(" ")
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


@dataclass(frozen=True, slots=True)
class BearerAuthVerifier:
    signing_key: str
    scheme: str = "bearer"

    def check(self, request: Request) -> bool:
        for value in _authorization_values(request, self.scheme):
            parts = value.split(" ")
            if len(parts) != 2 or not parts[1]:
                continue
            try:
                token_service.decode_token(parts[1], self.signing_key)
            except jwt.PyJWTError as e:
                logger.debug("Bearer token rejected: %s", e)
                continue
            return True
        return False


class AuthGate:
    """Runs every active verifier in order; the first rejection denies."""

    def __init__(self, verifiers: Iterable[Verifier] = ()) -> None:
        self.verifiers: tuple[Verifier, ...] = tuple(verifiers)

    @classmethod
    def from_config(cls, config: ExporterConfig) -> AuthGate:
        verifiers: list[Verifier] = []
        if config.basic_auth.active:
            verifiers.append(
                BasicAuthVerifier(config.basic_auth.username, config.basic_auth.password)
            )
        if config.bearer_auth.active:
            verifiers.append(BearerAuthVerifier(config.bearer_auth.signing_key))
        return cls(verifiers)

    @property
    def basic_active(self) -> bool:
        return any(v.scheme == "basic" for v in self.verifiers)

    def authenticate(self, request: Request) -> bool:
        for verifier in self.verifiers:
            if not verifier.check(request):
                logger.warning(
                    "Probe request rejected by %s authentication", verifier.scheme
                )
                return False
        return True
