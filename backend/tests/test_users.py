"""
Account directory tests.

Verifies:
- Register-or-noop by email; clients cannot choose role/status
- Role lookup defaults for unknown emails
- Admin-only listing and role/status changes
- Suspension records reason/feedback; reinstatement clears them
"""

from garments_tracker.models import Account


class TestRegistration:

    def test_first_registration_creates_user(self, client, db_session):
        resp = client.post("/users", json={
            "email": "New@Example.com",
            "displayName": "New Buyer",
            "photoURL": "https://img.example.com/a.png",
        })
        assert resp.status_code == 201
        assert resp.json["user"]["email"] == "new@example.com"
        assert resp.json["user"]["role"] == "user"
        assert resp.json["user"]["status"] == "active"
        assert resp.json["user"]["photoURL"] == "https://img.example.com/a.png"

    def test_duplicate_registration_is_noop(self, client, db_session, buyer):
        resp = client.post("/users", json={"email": "BUYER@example.com", "displayName": "Renamed"})
        assert resp.status_code == 200
        assert resp.json == {"message": "user exists"}

        assert db_session.query(Account).filter_by(email="buyer@example.com").count() == 1
        db_session.expire_all()
        assert db_session.get(Account, buyer.id).name == "Buyer"

    def test_client_cannot_pick_role(self, client, db_session):
        resp = client.post("/users", json={"email": "sneaky@example.com", "role": "admin", "status": "active"})
        assert resp.status_code == 201
        assert resp.json["user"]["role"] == "user"

    def test_email_required(self, client, db_session):
        resp = client.post("/users", json={"displayName": "Nobody"})
        assert resp.status_code == 400
        assert resp.json["code"] == "VALIDATION_ERROR"

    def test_invalid_body(self, client, db_session):
        resp = client.post("/users", data="not json", content_type="application/json")
        assert resp.status_code == 400


class TestRoleLookup:

    def test_known_user(self, client, suspended_manager):
        resp = client.get("/users/suspended@example.com/role")
        assert resp.json == {
            "role": "manager",
            "status": "suspended",
            "suspendReason": "Chargebacks",
            "suspendFeedback": "Contact support",
        }

    def test_unknown_user_defaults(self, client, db_session):
        resp = client.get("/users/ghost@example.com/role")
        assert resp.status_code == 200
        assert resp.json["role"] == "user"
        assert resp.json["status"] == "active"


class TestAdministration:

    def test_admin_lists_users(self, client, admin_headers, buyer, manager):
        resp = client.get("/users?role=manager", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 1
        assert resp.json["users"][0]["email"] == "manager@example.com"

        resp = client.get("/users?search=BUY&role=all", headers=admin_headers)
        assert [u["email"] for u in resp.json["users"]] == ["buyer@example.com"]

    def test_manager_cannot_list_users(self, client, manager_headers):
        resp = client.get("/users", headers=manager_headers)
        assert resp.status_code == 403

    def test_promote(self, client, db_session, admin_headers, buyer):
        resp = client.patch(f"/users/{buyer.id}/role", json={"role": "manager"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["matchedCount"] == 1
        assert resp.json["user"]["role"] == "manager"

    def test_suspend_then_reinstate(self, client, db_session, admin_headers, buyer):
        resp = client.patch(
            f"/users/{buyer.id}/role",
            json={"status": "suspended", "suspendReason": "Fake orders", "suspendFeedback": "Email us"},
            headers=admin_headers,
        )
        assert resp.json["user"]["status"] == "suspended"
        assert resp.json["user"]["suspendReason"] == "Fake orders"
        assert resp.json["user"]["suspendedAt"] is not None

        resp = client.patch(f"/users/{buyer.id}/role", json={"status": "active"}, headers=admin_headers)
        assert resp.json["user"]["status"] == "active"
        assert resp.json["user"]["suspendReason"] is None
        assert resp.json["user"]["suspendFeedback"] is None

    def test_suspended_user_blocked_from_ordering(self, client, db_session, admin_headers, buyer):
        client.patch(f"/users/{buyer.id}/role", json={"status": "suspended", "suspendReason": "Fraud"},
                     headers=admin_headers)

        resp = client.post(
            "/orders",
            json={"email": buyer.email, "lineItems": [{"qty": 1}]},
            headers={"Authorization": "Bearer valid:buyer@example.com"},
        )
        assert resp.status_code == 403
        assert resp.json["code"] == "SUSPENDED"
        assert resp.json["suspendReason"] == "Fraud"

    def test_unknown_role(self, client, admin_headers, buyer):
        resp = client.patch(f"/users/{buyer.id}/role", json={"role": "superuser"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_unknown_account(self, client, admin_headers):
        resp = client.patch("/users/9999/role", json={"role": "manager"}, headers=admin_headers)
        assert resp.json == {"matchedCount": 0, "modifiedCount": 0}

    def test_malformed_account_id(self, client, admin_headers):
        resp = client.patch("/users/abc/role", json={"role": "manager"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "INVALID_ID"

    def test_plain_user_cannot_promote_self(self, client, db_session, buyer, buyer_headers):
        resp = client.patch(f"/users/{buyer.id}/role", json={"role": "admin"}, headers=buyer_headers)
        assert resp.status_code == 403
        db_session.expire_all()
        assert db_session.get(Account, buyer.id).role == "user"

    def test_list_body_rejected(self, client, db_session, admin_headers, buyer):
        resp = client.patch(f"/users/{buyer.id}/role", json=[{"role": "admin"}], headers=admin_headers)

        assert resp.status_code == 400
        assert resp.json["code"] == "VALIDATION_ERROR"
        db_session.expire_all()
        assert db_session.get(Account, buyer.id).role == "user"
