# Overview: Request authentication decorator and the single access-policy enforcement point.

from functools import wraps
from flask import request, g, current_app

from .errors import UnauthorizedError, ForbiddenError, InternalError
from .extensions import IDENTITY_VERIFIER_KEY
from .integrations.identity import IdentityError
from .policy import Action, Actor, decide
from .services import account_service


def require_auth(f):
    """
    Require a verified bearer identity.

    Sets the following Flask g attributes:
    - g.decoded_email: lower-cased email from the verified token
    - g.identity: the full VerifiedIdentity

    SECURITY: Returns 401 if:
    - No Authorization header, or not "Bearer <token>"
    - Token rejected by the identity provider (invalid, revoked, expired)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            raise UnauthorizedError()

        token = auth_header.split(" ", 1)[1].strip()
        if not token:
            raise UnauthorizedError()

        verifier = current_app.extensions.get(IDENTITY_VERIFIER_KEY)
        if verifier is None:
            raise InternalError("Identity provider is not configured")

        try:
            identity = verifier.verify(token)
        except IdentityError as exc:
            current_app.logger.info("Rejected bearer token on %s %s: %s", request.method, request.path, exc)
            raise UnauthorizedError()

        g.identity = identity
        g.decoded_email = identity.email
        g.pop("actor", None)

        return f(*args, **kwargs)

    return decorated_function


def current_actor() -> Actor | None:
    """Actor for the authenticated caller, or None if they have no account row."""
    if "actor" not in g:
        account = account_service.get_account_by_email(getattr(g, "decoded_email", None))
        g.actor = Actor.from_account(account) if account is not None else None
    return g.actor


def authorize(action: Action, *, resource_owner_email: str | None = None, target_email: str | None = None) -> Actor:
    """
    Run the access policy for the current caller and raise on denial.

    Must be called inside a @require_auth handler and before any store
    mutation, so a denied request leaves the store untouched.

    Raises:
        ForbiddenError: code NO_USER, SUSPENDED or FORBIDDEN
    """
    actor = current_actor()
    decision = decide(
        actor,
        action,
        resource_owner_email=resource_owner_email,
        target_email=target_email,
    )
    if not decision.allowed:
        current_app.logger.warning(
            "Policy denied %s for %s on %s %s: %s",
            action.value,
            getattr(g, "decoded_email", None),
            request.method,
            request.path,
            decision.code,
        )
        raise ForbiddenError(decision.message, code=decision.code, details=decision.details)
    return actor
