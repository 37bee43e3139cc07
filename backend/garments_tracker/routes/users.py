# Overview: Flask API routes for user accounts; parses input and returns JSON responses.

# backend/garments_tracker/routes/users.py
"""
Account routes.

- POST /users                 register-or-noop (public, first sign-in)
- GET  /users/<email>/role    role + suspension info for the frontend
- GET  /users                 admin listing (search, role, status filters)
- PATCH /users/<id>/role      admin role/status/suspension update
"""

from flask import Blueprint, request, current_app, g

from ..errors import NotFoundError
from ..decorators import require_auth, authorize
from ..validation import json_object
from ..policy import Action
from ..services import account_service

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.post("")
def register_user():
    """
    Register the signed-in user on first visit.

    Request body:
    {
        "email": "a@x.com",
        "displayName": "Ayesha",     (optional)
        "photoURL": "https://..."    (optional)
    }

    Returns:
        201: created account
        200: {"message": "user exists"} when the email is already registered
        400: invalid input
    """
    payload = request.get_json(silent=True)
    account, created = account_service.register_account(payload)

    if not created:
        return {"message": "user exists"}, 200

    current_app.logger.info("Registered account id=%s", account.id)
    return {"insertedId": account.id, "user": account.to_dict()}, 201


@users_bp.get("/<email>/role")
def get_user_role(email: str):
    return account_service.get_role_info(email)


@users_bp.get("")
@require_auth
def list_users():
    """
    Admin listing, newest first.

    Query params:
    - search: matches name or email (case-insensitive)
    - role: user | manager | admin | all
    - status: active | suspended | all
    """
    authorize(Action.MANAGE_ACCOUNTS)

    accounts = account_service.list_accounts(
        search=request.args.get("search"),
        role=request.args.get("role"),
        status=request.args.get("status"),
    )
    return {"users": [a.to_dict() for a in accounts], "count": len(accounts)}


@users_bp.patch("/<account_id>/role")
@require_auth
def update_user_role(account_id: str):
    """
    Change role and/or status.

    Request body:
    {
        "role": "manager",                 (optional)
        "status": "suspended",             (optional)
        "suspendReason": "Fraud report",   (with status=suspended)
        "suspendFeedback": "Contact us"    (with status=suspended)
    }

    Returns:
        200: {"matchedCount": 1, "modifiedCount": 1, "user": {...}}
        200: {"matchedCount": 0, "modifiedCount": 0} for an unknown id
        400: invalid id or input
    """
    authorize(Action.MANAGE_ACCOUNTS)

    data = json_object(request.get_json(silent=True))

    try:
        account = account_service.update_account_role(
            account_id,
            role=data.get("role"),
            status=data.get("status"),
            suspend_reason=data.get("suspendReason"),
            suspend_feedback=data.get("suspendFeedback"),
        )
    except NotFoundError:
        return {"matchedCount": 0, "modifiedCount": 0}, 200

    current_app.logger.info(
        "Account %s set to role=%s status=%s by %s", account.id, account.role, account.status, g.decoded_email
    )
    return {"matchedCount": 1, "modifiedCount": 1, "user": account.to_dict()}, 200
