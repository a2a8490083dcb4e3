from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from libs.common.config import get_settings
from libs.common.emails.core import NotificationError
from libs.db.base import Base
from libs.db.session import get_async_db
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Import all models so metadata includes every table
from services.store_service import models as _store_models  # noqa: F401
from services.store_service.stripe_client import PaymentIntent, StripeError


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------


class FakeStripeClient:
    """In-memory stand-in for StripeClient.

    ``confirm_outcome`` decides what confirming an intent does: a status
    string, or a StripeError to raise.
    """

    def __init__(self):
        self.intents: dict[str, PaymentIntent] = {}
        self.created: list[PaymentIntent] = []
        self.confirm_calls: list[tuple[str, str]] = []
        self.confirm_outcome = "succeeded"
        self.create_error: Optional[StripeError] = None
        self.retrieve_error: Optional[StripeError] = None

    def add_intent(self, intent_id: str, amount: int, status: str = "succeeded") -> PaymentIntent:
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_test",
            status=status,
            amount=amount,
            currency="aed",
        )
        self.intents[intent_id] = intent
        return intent

    async def create_payment_intent(self, amount, currency, metadata=None):
        if self.create_error:
            raise self.create_error
        intent = self.add_intent(
            f"pi_test{len(self.created) + 1}", amount, status="requires_payment_method"
        )
        intent.currency = currency
        self.created.append(intent)
        return intent

    async def retrieve_payment_intent(self, payment_intent_id):
        if self.retrieve_error:
            raise self.retrieve_error
        if payment_intent_id not in self.intents:
            raise StripeError(
                "No such payment_intent",
                status_code=404,
                error_type="invalid_request_error",
                code="resource_missing",
            )
        return self.intents[payment_intent_id]

    async def retrieve_by_client_secret(self, client_secret):
        intent_id = client_secret.partition("_secret_")[0]
        return await self.retrieve_payment_intent(intent_id)

    async def confirm_payment_intent(self, payment_intent_id, payment_method, return_url=None):
        self.confirm_calls.append((payment_intent_id, payment_method))
        if isinstance(self.confirm_outcome, StripeError):
            raise self.confirm_outcome
        intent = self.intents[payment_intent_id]
        intent.status = self.confirm_outcome
        return intent


class RecordingNotifier:
    """Order confirmation sender that records calls and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.error: Optional[Exception] = None
        self.calls: list[dict] = []

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.fail:
            raise NotificationError("Email provider unavailable", status_code=503)
        return {"id": "email_test"}


@pytest.fixture
def fake_stripe() -> FakeStripeClient:
    return FakeStripeClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


def make_token(user_id: str = "user-1", email: str = "shopper@example.com", admin: bool = False) -> str:
    claims = {"sub": user_id, "email": email, "role": "authenticated"}
    if admin:
        claims["app_metadata"] = {"role": "admin"}
    return jwt.encode(claims, get_settings().SUPABASE_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {make_token('admin-1', 'admin@example.com', admin=True)}"}


@pytest_asyncio.fixture
async def client(session_factory, fake_stripe, notifier) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient against the store app with DB, Stripe and email overridden."""
    from services.store_service.app.main import app
    from services.store_service.routers.checkout import get_order_notifier
    from services.store_service.stripe_client import get_stripe_client

    async def _db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_db] = _db
    app.dependency_overrides[get_stripe_client] = lambda: fake_stripe
    app.dependency_overrides[get_order_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
