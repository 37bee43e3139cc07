"""
Checkout and payment-success route tests (in-memory payment provider).
"""

from garments_tracker.models import Order, Payment


class TestCheckoutRoute:

    def test_returns_session_url(self, client, pending_order, buyer_headers, payment_gateway):
        resp = client.post(
            "/payment-checkout-session",
            json={"cost": "1999.60", "senderEmail": "buyer@example.com", "parcelId": pending_order.id},
            headers=buyer_headers,
        )
        assert resp.status_code == 200
        assert resp.json == {"id": "cs_test_1", "url": "https://checkout.example.test/cs_test_1"}
        assert payment_gateway.created[0]["amount_cents"] == 199960

    def test_requires_auth(self, client, pending_order, payment_gateway):
        resp = client.post("/payment-checkout-session", json={"cost": 5, "senderEmail": "a@x.com", "parcelId": 1})
        assert resp.status_code == 401
        assert payment_gateway.created == []

    def test_missing_fields(self, client, buyer_headers, payment_gateway):
        resp = client.post("/payment-checkout-session", json={}, headers=buyer_headers)
        assert resp.status_code == 400
        assert resp.json["error"] == "Missing required fields: cost and senderEmail"

    def test_cost_differs_from_order_total(self, client, pending_order, buyer_headers, payment_gateway):
        resp = client.post(
            "/payment-checkout-session",
            json={"cost": 1, "senderEmail": "buyer@example.com", "parcelId": pending_order.id},
            headers=buyer_headers,
        )
        assert resp.status_code == 400
        assert resp.json["code"] == "VALIDATION_ERROR"
        assert payment_gateway.created == []

    def test_suspended_caller(self, client, pending_order, suspended_headers, payment_gateway):
        resp = client.post(
            "/payment-checkout-session",
            json={"cost": 5, "senderEmail": "buyer@example.com", "parcelId": pending_order.id},
            headers=suspended_headers,
        )
        assert resp.status_code == 403
        assert resp.json["code"] == "SUSPENDED"
        assert payment_gateway.created == []


class TestPaymentSuccessRoute:

    def test_missing_session_id(self, client, db_session, payment_gateway):
        resp = client.patch("/payment-success")
        assert resp.status_code == 400
        assert resp.json["error"] == "Missing session_id"
        assert payment_gateway.retrieve_calls == 0

    def test_processes_then_replays(self, client, db_session, pending_order, payment_gateway):
        payment_gateway.stage_session("cs_paid", order_id=pending_order.id, transaction_id="pi_777")

        resp = client.patch("/payment-success?session_id=cs_paid")
        assert resp.status_code == 200
        assert resp.json["success"] is True
        assert resp.json["message"] == "Payment processed successfully"
        assert resp.json["transactionId"] == "pi_777"
        assert resp.json["orderId"] == pending_order.id

        resp = client.patch("/payment-success?session_id=cs_paid")
        assert resp.status_code == 200
        assert resp.json["message"] == "Payment already processed"
        assert resp.json["transactionId"] == "pi_777"

        assert db_session.query(Payment).count() == 1
        db_session.expire_all()
        assert db_session.get(Order, pending_order.id).payment_status == "paid"

    def test_unpaid_session(self, client, db_session, pending_order, payment_gateway):
        payment_gateway.stage_session("cs_open", order_id=pending_order.id, payment_status="unpaid")

        resp = client.patch("/payment-success?session_id=cs_open")
        assert resp.status_code == 400
        assert resp.json == {"success": False, "message": "Payment not completed"}
        assert db_session.query(Payment).count() == 0

    def test_session_for_deleted_order(self, client, db_session, payment_gateway):
        payment_gateway.stage_session("cs_orphan", order_id=55555)

        resp = client.patch("/payment-success?session_id=cs_orphan")
        assert resp.status_code == 404
        assert resp.json["code"] == "ORDER_NOT_FOUND"
        assert db_session.query(Payment).count() == 0

    def test_provider_failure(self, client, db_session, payment_gateway):
        resp = client.patch("/payment-success?session_id=cs_unknown")
        assert resp.status_code == 500
        assert resp.json["error"] == "Server error processing payment"
