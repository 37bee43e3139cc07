"""
Pytest fixtures for garments tracker backend tests.

Provides test database setup, in-memory identity/payment providers,
account fixtures and the test client.
"""

import pytest

from garments_tracker import create_app
from garments_tracker.config import Config
from garments_tracker.extensions import db, PAYMENT_GATEWAY_KEY
from garments_tracker.integrations.identity import IdentityError, VerifiedIdentity
from garments_tracker.integrations.payments import (
    CheckoutSession,
    CheckoutSessionSnapshot,
    PaymentProviderError,
)
from garments_tracker.models import Account, Product
from garments_tracker.models.accounts import ROLE_USER, ROLE_MANAGER, ROLE_ADMIN, STATUS_ACTIVE, STATUS_SUSPENDED
from garments_tracker.services import order_service


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    STRIPE_SECRET = None
    FB_SERVICE_KEY = None
    FB_SERVICE_KEY_PATH = None
    SITE_DOMAIN = "http://localhost:5173"


class FakeIdentityVerifier:
    """Accepts tokens of the form "valid:<email>"; rejects everything else."""

    PREFIX = "valid:"

    def verify(self, token):
        if not token.startswith(self.PREFIX):
            raise IdentityError("invalid token")
        email = token[len(self.PREFIX):].strip().lower()
        if not email:
            raise IdentityError("no email claim")
        return VerifiedIdentity(email=email, uid=f"uid-{email}")


class FakePaymentGateway:
    """In-memory checkout provider; tests stage sessions with stage_session()."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.created = []
        self.sessions = {}
        self.retrieve_calls = 0

    def create_checkout_session(self, *, amount_cents, currency, product_name, customer_email, order_id):
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({
            "id": session_id,
            "amount_cents": amount_cents,
            "currency": currency,
            "product_name": product_name,
            "customer_email": customer_email,
            "order_id": order_id,
        })
        return CheckoutSession(id=session_id, url=f"https://checkout.example.test/{session_id}")

    def stage_session(self, session_id, *, order_id, transaction_id="pi_test_1", payment_status="paid",
                      amount_cents=4999, currency="usd", customer_email="buyer@example.com"):
        snapshot = CheckoutSessionSnapshot(
            session_id=session_id,
            transaction_id=transaction_id,
            payment_status=payment_status,
            amount_cents=amount_cents,
            currency=currency,
            customer_email=customer_email,
            order_id=None if order_id is None else str(order_id),
        )
        self.sessions[session_id] = snapshot
        return snapshot

    def retrieve_session(self, session_id):
        self.retrieve_calls += 1
        try:
            return self.sessions[session_id]
        except KeyError:
            raise PaymentProviderError("Server error processing payment")


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(
        TestConfig,
        identity_verifier=FakeIdentityVerifier(),
        payment_gateway=FakePaymentGateway(),
    )

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def payment_gateway(app):
    gateway = app.extensions[PAYMENT_GATEWAY_KEY]
    gateway.reset()
    return gateway


def _make_account(db_session, email, role=ROLE_USER, status=STATUS_ACTIVE, **extra):
    account = Account(email=email, name=email.split("@")[0].title(), role=role, status=status, **extra)
    db_session.add(account)
    db_session.commit()
    return account


@pytest.fixture(scope='function')
def buyer(db_session):
    """Active buyer account."""
    return _make_account(db_session, "buyer@example.com")


@pytest.fixture(scope='function')
def other_buyer(db_session):
    return _make_account(db_session, "other@example.com")


@pytest.fixture(scope='function')
def manager(db_session):
    return _make_account(db_session, "manager@example.com", role=ROLE_MANAGER)


@pytest.fixture(scope='function')
def admin(db_session):
    return _make_account(db_session, "admin@example.com", role=ROLE_ADMIN)


@pytest.fixture(scope='function')
def suspended_manager(db_session):
    """Manager whose account has been suspended."""
    return _make_account(
        db_session,
        "suspended@example.com",
        role=ROLE_MANAGER,
        status=STATUS_SUSPENDED,
        suspend_reason="Chargebacks",
        suspend_feedback="Contact support",
    )


@pytest.fixture(scope='function')
def product(db_session, manager):
    """Catalog product listed by the manager."""
    p = Product(name="Denim Jacket", price_cents=4999, available_quantity=500,
                minimum_order_quantity=10, created_by=manager.email)
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture(scope='function')
def pending_order(db_session, buyer):
    """Pending, unpaid order owned by the buyer."""
    patch = order_service.prepare_order({
        "email": buyer.email,
        "productTitle": "Denim Jacket",
        "lineItems": [{"size": "M", "qty": 40}],
        "quantity": 40,
        "totalPriceCents": 199960,
    })
    return order_service.create_order(patch)


def auth_headers(email: str) -> dict:
    """Helper to create Authorization headers for the fake identity provider."""
    return {'Authorization': f'Bearer {FakeIdentityVerifier.PREFIX}{email}'}


@pytest.fixture(scope='function')
def buyer_headers(buyer):
    return auth_headers(buyer.email)


@pytest.fixture(scope='function')
def manager_headers(manager):
    return auth_headers(manager.email)


@pytest.fixture(scope='function')
def admin_headers(admin):
    return auth_headers(admin.email)


@pytest.fixture(scope='function')
def suspended_headers(suspended_manager):
    return auth_headers(suspended_manager.email)


@pytest.fixture(scope='function')
def stranger_headers(db_session):
    """Valid identity with no account row."""
    return auth_headers("stranger@example.com")
