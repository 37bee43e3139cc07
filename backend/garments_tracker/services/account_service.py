# Overview: Service-layer operations for accounts; encapsulates business logic and database work.

"""
Account Directory

WHY: The identity provider proves who a caller is; this directory says what
they may do (role) and whether they may still do it (status).

DESIGN:
- Registration is register-or-noop keyed by email. Clients cannot pick their
  own role or status; every new account starts as an active "user".
- Role/status changes are an admin operation. Suspending records the
  reason/feedback shown to the suspended user; reinstating clears them.
"""

from __future__ import annotations

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ValidationError, AccountNotFoundError
from ..models import Account
from ..models.accounts import (
    ROLE_USER,
    STATUS_ACTIVE,
    STATUS_SUSPENDED,
    VALID_ROLES,
    VALID_STATUSES,
)
from ..validation import ModelValidationPolicy, validate_payload, normalize_email, parse_record_id
from ..time_utils import utcnow

REGISTRATION_POLICY = ModelValidationPolicy(
    writable_fields={"email", "name", "photo_url"},
    required_on_create={"email"},
    aliases={"displayName": "name", "photoURL": "photo_url"},
)

# Accepted on registration but never trusted.
_IGNORED_REGISTRATION_FIELDS = {"role", "status", "createdAt", "updatedAt", "uid", "_id", "id"}


def get_account_by_email(email: str | None) -> Account | None:
    if not email:
        return None
    return db.session.query(Account).filter(Account.email == email.strip().lower()).first()


def register_account(payload: dict) -> tuple[Account, bool]:
    """
    Create an account on first sign-in.

    Returns:
        (account, created). created is False when the email already exists,
        in which case nothing is written.

    Raises:
        ValidationError: email missing/malformed or unknown fields
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    cleaned = {k: v for k, v in payload.items() if k not in _IGNORED_REGISTRATION_FIELDS}
    patch = validate_payload(model=Account, payload=cleaned, policy=REGISTRATION_POLICY, partial=False)
    patch["email"] = normalize_email(patch.get("email"))

    existing = get_account_by_email(patch["email"])
    if existing:
        return existing, False

    now = utcnow()
    account = Account(role=ROLE_USER, status=STATUS_ACTIVE, created_at=now, updated_at=now, **patch)
    db.session.add(account)
    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent registration for the same email won the insert.
        db.session.rollback()
        return get_account_by_email(patch["email"]), False

    return account, True


def get_role_info(email: str) -> dict:
    """Role/suspension view used by the frontend; unknown emails look like a fresh user."""
    account = get_account_by_email(email)
    if account is None:
        return {"role": ROLE_USER, "status": STATUS_ACTIVE, "suspendReason": None, "suspendFeedback": None}
    return {
        "role": account.role,
        "status": account.status,
        "suspendReason": account.suspend_reason,
        "suspendFeedback": account.suspend_feedback,
    }


def list_accounts(search: str | None = None, role: str | None = None, status: str | None = None) -> list[Account]:
    """
    Admin listing, newest first.

    search matches name or email case-insensitively; role/status of "all"
    (or empty) mean no filter.
    """
    query = db.session.query(Account)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Account.name.ilike(pattern), Account.email.ilike(pattern)))

    if role and role != "all":
        query = query.filter(Account.role == role)

    if status and status != "all":
        query = query.filter(Account.status == status)

    return query.order_by(Account.created_at.desc(), Account.id.desc()).all()


def update_account_role(
    account_id,
    *,
    role: str | None = None,
    status: str | None = None,
    suspend_reason: str | None = None,
    suspend_feedback: str | None = None,
) -> Account:
    """
    Change an account's role and/or status.

    Raises:
        InvalidIdError: malformed id
        ValidationError: unknown role/status, or nothing to change
        AccountNotFoundError: id does not resolve
    """
    account_id = parse_record_id(account_id)

    if role is None and status is None:
        raise ValidationError("role or status is required")
    if role is not None and role not in VALID_ROLES:
        raise ValidationError(f"role must be one of {', '.join(VALID_ROLES)}")
    if status is not None and status not in VALID_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(VALID_STATUSES)}")

    account = db.session.get(Account, account_id)
    if account is None:
        raise AccountNotFoundError()

    now = utcnow()
    if role is not None:
        account.role = role

    if status == STATUS_SUSPENDED:
        account.status = STATUS_SUSPENDED
        account.suspend_reason = suspend_reason
        account.suspend_feedback = suspend_feedback
        account.suspended_at = now
    elif status == STATUS_ACTIVE:
        account.status = STATUS_ACTIVE
        account.suspend_reason = None
        account.suspend_feedback = None
        account.suspended_at = None

    account.updated_at = now
    db.session.commit()
    return account
