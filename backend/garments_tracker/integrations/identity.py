# Overview: Bearer-token verification against the external identity provider.

"""
Identity Verification

WHY: The tracker never sees passwords. Clients sign in with the identity
provider (Firebase Authentication) and present the resulting ID token as
`Authorization: Bearer <token>`. We verify it server-side and only trust the
email claim that comes back.

The verifier is constructed once in the application factory and stored on
app.extensions; tests inject an in-memory implementation instead.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Optional, Protocol

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials


class IdentityError(Exception):
    """Token missing, malformed, invalid, revoked or expired."""
    pass


@dataclass(frozen=True)
class VerifiedIdentity:
    email: str
    uid: Optional[str] = None


class IdentityVerifier(Protocol):
    def verify(self, token: str) -> VerifiedIdentity:
        ...


class FirebaseIdentityVerifier:
    """Verifies Firebase ID tokens with a dedicated (non-default) Admin SDK app."""

    APP_NAME = "garments-tracker"

    def __init__(self, service_account: dict, app_name: str = APP_NAME):
        try:
            self._app = firebase_admin.get_app(app_name)
        except ValueError:
            self._app = firebase_admin.initialize_app(
                credentials.Certificate(service_account), name=app_name
            )

    @classmethod
    def from_config(cls, config) -> Optional["FirebaseIdentityVerifier"]:
        """
        Build from FB_SERVICE_KEY (base64 JSON) or FB_SERVICE_KEY_PATH.

        Returns None when neither is configured.
        """
        encoded = config.get("FB_SERVICE_KEY")
        path = config.get("FB_SERVICE_KEY_PATH")

        if encoded:
            try:
                service_account = json.loads(base64.b64decode(encoded).decode("utf-8"))
            except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
                raise RuntimeError("FB_SERVICE_KEY is not base64-encoded service account JSON") from exc
        elif path:
            with open(path, encoding="utf-8") as fh:
                service_account = json.load(fh)
        else:
            return None

        return cls(service_account)

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            decoded = firebase_auth.verify_id_token(token, app=self._app)
        except (
            ValueError,
            firebase_auth.InvalidIdTokenError,
            firebase_auth.UserDisabledError,
            firebase_auth.CertificateFetchError,
        ) as exc:
            raise IdentityError(type(exc).__name__) from exc

        email = decoded.get("email")
        if not email:
            raise IdentityError("Token carries no email claim")

        return VerifiedIdentity(email=email.strip().lower(), uid=decoded.get("uid"))
