"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

from app.clients import (
    AccountStore,
    PlatformConfigClient,
    PlatformTokenClient,
    SQLiteStore,
    TokenStore,
)
from app.dependencies import (
    get_account_service,
    get_account_store,
    get_config_update_service,
    get_notification_service,
    get_oauth_token_broker,
    get_session_token_issuer,
    get_sso_validator,
)
from app.main import app
from app.services import (
    AccountService,
    ConfigUpdateService,
    NotificationService,
    OAuthTokenBroker,
    SessionTokenIssuer,
    SsoValidator,
    TokenCipherService,
)
from app.utils.http import RetryConfig

try:
    from ._bootstrap import TEST_APP_PASSWORD, TEST_APP_SALT, TEST_APP_SLUG
except Exception:  # pragma: no cover - fallback for direct execution
    from _bootstrap import (  # type: ignore
        TEST_APP_PASSWORD,
        TEST_APP_SALT,
        TEST_APP_SLUG,
    )

PLATFORM_AUTH = (TEST_APP_SLUG, TEST_APP_PASSWORD)


@dataclass
class FakePlatform:
    """Scripted stand-in for the platform token endpoint and config API."""

    token_responses: list[httpx.Response] = field(default_factory=list)
    config_responses: list[httpx.Response] = field(default_factory=list)
    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = (
            self.token_responses
            if request.url.path.endswith("/oauth/token")
            else self.config_responses
        )
        if not queue:
            raise AssertionError(f"Unexpected platform call: {request.url}")
        return queue.pop(0)


@dataclass
class Wiring:
    account_store: AccountStore
    token_store: TokenStore
    broker: OAuthTokenBroker
    issuer: SessionTokenIssuer
    platform: FakePlatform


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def platform_auth() -> tuple[str, str]:
    """Basic-auth pair the platform presents on its callbacks."""
    return PLATFORM_AUTH


@pytest.fixture()
def wiring(tmp_path: Path):
    store = SQLiteStore(str(tmp_path / "marketplace.db"))
    account_store = AccountStore(store)
    token_store = TokenStore(store, TokenCipherService(secret="test-secret"))
    platform = FakePlatform()
    transport = httpx.MockTransport(platform.handle)
    broker = OAuthTokenBroker(
        token_store=token_store,
        token_client=PlatformTokenClient(
            token_endpoint="https://platform.example.com/v2/add-ons/oauth/token",
            client_secret="test-client-secret",
            transport=transport,
        ),
    )
    config_client = PlatformConfigClient(
        api_base_url="https://platform.example.com",
        retry_config=RetryConfig(attempts=1, backoff_seconds=0),
        transport=transport,
    )
    issuer = SessionTokenIssuer(secret=TEST_APP_SALT)

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            get_account_store: lambda: account_store,
            get_oauth_token_broker: lambda: broker,
            get_session_token_issuer: lambda: issuer,
            get_sso_validator: lambda: SsoValidator(secret=TEST_APP_SALT),
            get_account_service: lambda: AccountService(
                account_store=account_store,
                token_store=token_store,
                token_broker=broker,
            ),
            get_notification_service: lambda: NotificationService(account_store),
            get_config_update_service: lambda: ConfigUpdateService(
                account_store=account_store,
                token_broker=broker,
                config_client=config_client,
            ),
        }
    )
    yield Wiring(
        account_store=account_store,
        token_store=token_store,
        broker=broker,
        issuer=issuer,
        platform=platform,
    )
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(wiring):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as async_client:
        yield async_client
