import os

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medbook.main import app
from medbook.api.deps import get_payment_initiator
from medbook.core.database import get_db, Base
from medbook.core.exceptions import PaymentInitiationFailed
from medbook.core.security import PasswordHasher, UserRole
from medbook.services.credential_store import CredentialStore
from medbook.services.payment import CheckoutIntent, CheckoutSession

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Minimum bcrypt cost keeps the suite fast; the production factor is asserted separately
fast_hasher = PasswordHasher(rounds=4)

class FakePaymentInitiator:
    """Deterministic stand-in for the hosted checkout provider."""

    def __init__(self):
        self.intents = []
        self.fail = False

    def create_checkout(self, intent: CheckoutIntent) -> CheckoutSession:
        if self.fail:
            raise PaymentInitiationFailed()
        self.intents.append(intent)
        number = len(self.intents)
        return CheckoutSession(
            session_id=f"cs_test_{number}",
            redirect_url=f"https://checkout.example.com/pay/cs_test_{number}",
        )

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def payments():
    return FakePaymentInitiator()

@pytest.fixture
def client(test_db, payments):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_initiator] = lambda: payments
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()

@pytest.fixture
def store(db):
    return CredentialStore(db)

def provision(store: CredentialStore, role: UserRole, email: str, password: str = "secret123", **fields):
    """Insert a principal the way out-of-band provisioning would."""
    fields.setdefault("name", f"{role.value.title()} {email.split('@')[0]}")
    return store.for_role(role).insert(
        email=email,
        password_hash=fast_hasher.hash(password),
        role=role,
        **fields
    )

@pytest.fixture
def doctor(store):
    return provision(
        store,
        UserRole.DOCTOR,
        "doctor@example.com",
        bio="General practitioner",
        photo="https://img.example.com/doctor.png",
        specialization="General practice",
        ticket_price=5000,
    )
