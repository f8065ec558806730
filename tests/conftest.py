# tests/conftest.py
from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_EMAILS", '["admin@example.com"]')
os.environ.setdefault("INNOVERIT_API_KEY", "test-api-key")

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from coinsms.api.v1 import dependencies  # noqa: E402
from coinsms.core.settings import settings  # noqa: E402
from coinsms.db.session import Base  # noqa: E402
from coinsms.db.session import get_db as app_get_session  # noqa: E402
from coinsms.main import app as fastapi_app  # noqa: E402
from coinsms.models import Profile  # noqa: E402
from coinsms.services.gateway import GatewayResult  # noqa: E402
from coinsms.services.rate_limit import AdmissionController  # noqa: E402

TEST_DB_URL = "sqlite://"

SUCCESS_PAYLOAD: dict[str, Any] = {
    "error_code": 0,
    "status": "success",
    "message": "SMS sent",
    "delivery_status": "queued",
    "destination": "+5351234567",
    "iso": "CU",
    "idsms": 991,
}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeGateway:
    """In-memory stand-in for ``SmsGatewayClient``.

    Queue answers with ``respond`` (a payload dict) or ``fail`` (an exception);
    with nothing queued every send succeeds.
    """

    def __init__(self, configured: bool = True) -> None:
        self.configured = configured
        self.calls: list[tuple[str, str]] = []
        self._queue: list[dict[str, Any] | BaseException] = []
        self.balance: dict[str, Any] | None = None

    def respond(self, payload: dict[str, Any]) -> None:
        self._queue.append(payload)

    def fail(self, exc: BaseException) -> None:
        self._queue.append(exc)

    async def send(self, destination: str, content: str) -> GatewayResult:
        self.calls.append((destination, content))
        answer: dict[str, Any] | BaseException = (
            self._queue.pop(0) if self._queue else dict(SUCCESS_PAYLOAD, destination=destination)
        )
        if isinstance(answer, BaseException):
            raise answer
        return GatewayResult.from_payload(answer)

    async def get_balance(self) -> dict[str, Any] | None:
        return self.balance


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def admission_controller(clock: FakeClock) -> AdmissionController:
    return AdmissionController(limit=10, window_seconds=60, clock=clock)


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    fake_gateway: FakeGateway,
    admission_controller: AdmissionController,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., Any], Callable[..., Any]] = {
        app_get_session: _get_session_override,
        dependencies.get_gateway_client_dep: lambda: fake_gateway,
        dependencies.get_admission_controller_dep: lambda: admission_controller,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def make_token(
    account_id: str,
    email: str | None = None,
    *,
    secret: str | None = None,
    audience: str | None = "authenticated",
    expires_in: timedelta = timedelta(hours=1),
    **claims: Any,
) -> str:
    """Mint an access token shaped like the identity provider's."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {"sub": account_id, "iat": now, "exp": now + expires_in}
    if email is not None:
        payload["email"] = email
    if audience is not None:
        payload["aud"] = audience
    payload.update(claims)
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers_for(account_id: str, email: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(account_id, email)}"}


@pytest.fixture()
def make_profile(db_session: Session) -> Callable[..., Profile]:
    """Return a factory persisting profiles with a chosen balance."""

    def _make(
        balance: int = 10,
        *,
        email: str | None = None,
        role: str = "user",
        banned: bool = False,
    ) -> Profile:
        account_id = str(uuid.uuid4())
        profile = Profile(
            id=account_id,
            custom_id=account_id[:8],
            email=email or f"{account_id[:8]}@example.com",
            full_name="Test User",
            credits_balance=balance,
            role=role,
            banned=banned,
        )
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return profile

    return _make


@pytest.fixture()
def account(make_profile: Callable[..., Profile]) -> Profile:
    """A regular account holding 10 coins."""
    return make_profile(10)


@pytest.fixture()
def auth_headers(account: Profile) -> dict[str, str]:
    return auth_headers_for(account.id, account.email)


@pytest.fixture()
def token_factory() -> Callable[..., str]:
    return make_token


@pytest.fixture()
def headers_for() -> Callable[..., dict[str, str]]:
    return auth_headers_for
