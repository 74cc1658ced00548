try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import json
import time
from http import HTTPStatus
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.models.oauth import OAuthTokenRecord
from app.services import signing
from app.services.session_tokens import SessionTokenIssuer

try:
    from ._bootstrap import TEST_APP_SALT, TEST_HOMEPAGE
except Exception:  # pragma: no cover - fallback for direct execution
    from _bootstrap import TEST_APP_SALT, TEST_HOMEPAGE  # type: ignore

pytestmark = pytest.mark.anyio("asyncio")

RESOURCE = "abc-123"


def _sso_form(timestamp: int, resource_uuid: str = RESOURCE) -> dict[str, str]:
    message = signing.build_message(str(timestamp), resource_uuid)
    token = signing.sign(TEST_APP_SALT.encode("utf-8"), message).hex()
    return {
        "resource_uuid": resource_uuid,
        "token": token,
        "timestamp": str(timestamp),
        "user_id": "user-1",
        "user_email": "user@example.com",
    }


def _provision(wiring, *, expires_at: int | None = None) -> None:
    wiring.account_store.create(
        resource_uuid=RESOURCE,
        name="team-1",
        email="owner@example.com",
        app_slug="sample_app",
        plan_slug="basic",
        license_key="license-1",
    )
    if expires_at is not None:
        wiring.token_store.put(
            OAuthTokenRecord(
                resource_uuid=RESOURCE,
                access_token="A1",
                refresh_token="R1",
                expires_at=expires_at,
            )
        )


async def test_sso_redirects_with_session_token(wiring, client, platform_auth):
    response = await client.post(
        "/digitalocean/sso",
        data=_sso_form(int(time.time())),
        auth=platform_auth,
    )

    assert response.status_code == HTTPStatus.TEMPORARY_REDIRECT
    location = response.headers["location"]
    assert location.startswith(f"{TEST_HOMEPAGE}?secret=")
    secret = parse_qs(urlparse(location).query)["secret"][0]
    assert wiring.issuer.decode(secret).subject == RESOURCE


async def test_sso_accepts_query_parameters(wiring, client, platform_auth):
    response = await client.post(
        "/digitalocean/sso",
        params=_sso_form(int(time.time())),
        auth=platform_auth,
    )

    assert response.status_code == HTTPStatus.TEMPORARY_REDIRECT


async def test_sso_rejects_stale_request_with_empty_body(wiring, client, platform_auth):
    response = await client.post(
        "/digitalocean/sso",
        data=_sso_form(int(time.time()) - 600),
        auth=platform_auth,
    )

    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.content == b""


async def test_sso_rejects_wrong_resource(wiring, client, platform_auth):
    form = _sso_form(int(time.time()))
    form["resource_uuid"] = "other-resource"

    response = await client.post("/digitalocean/sso", data=form, auth=platform_auth)

    assert response.status_code == HTTPStatus.UNAUTHORIZED


@pytest.mark.parametrize(
    "field, value",
    [("token", "zz"), ("timestamp", "yesterday")],
)
async def test_sso_malformed_values_are_bad_requests(
    wiring, client, platform_auth, field, value
):
    form = _sso_form(int(time.time()))
    form[field] = value

    response = await client.post("/digitalocean/sso", data=form, auth=platform_auth)

    assert response.status_code == HTTPStatus.BAD_REQUEST


async def test_sso_missing_parameters_are_bad_requests(wiring, client, platform_auth):
    response = await client.post(
        "/digitalocean/sso",
        data={"resource_uuid": RESOURCE},
        auth=platform_auth,
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


async def test_sso_requires_platform_credentials(wiring, client):
    response = await client.post(
        "/digitalocean/sso", data=_sso_form(int(time.time()))
    )

    assert response.status_code == HTTPStatus.UNAUTHORIZED
    assert response.headers["www-authenticate"].startswith("Basic")


async def test_authorize_returns_account_and_access_token(wiring, client):
    _provision(wiring, expires_at=int(time.time()) + 3600)

    response = await client.post(
        "/authorize", json={"secret": wiring.issuer.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.OK
    body = response.json()
    assert body["access_token"] == "A1"
    assert body["resource_uuid"] == RESOURCE
    assert body["email"] == "owner@example.com"
    assert body["plan_slug"] == "basic"
    assert body["message"] == "Welcome to your dashboard!"
    assert wiring.platform.requests == []


async def test_authorize_refreshes_expired_access_token(wiring, client):
    _provision(wiring, expires_at=int(time.time()) - 10)
    wiring.platform.token_responses.append(
        httpx.Response(
            200,
            json={"access_token": "A2", "refresh_token": "R2", "expires_in": 28800},
        )
    )

    response = await client.post(
        "/authorize", json={"secret": wiring.issuer.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.OK
    assert response.json()["access_token"] == "A2"
    sent = json.loads(wiring.platform.requests[0].content)
    assert sent["grant_type"] == "refresh_token"
    assert sent["refresh_token"] == "R1"
    stored = wiring.token_store.get(RESOURCE)
    assert (stored.access_token, stored.refresh_token) == ("A2", "R2")


async def test_authorize_rejects_expired_session_token(wiring, client):
    _provision(wiring, expires_at=int(time.time()) + 3600)
    stale_issuer = SessionTokenIssuer(
        secret=TEST_APP_SALT, clock=lambda: time.time() - 3600
    )

    response = await client.post(
        "/authorize", json={"secret": stale_issuer.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.UNAUTHORIZED


async def test_authorize_rejects_forged_session_token(wiring, client):
    _provision(wiring, expires_at=int(time.time()) + 3600)
    forger = SessionTokenIssuer(secret="not-the-app-salt")

    response = await client.post(
        "/authorize", json={"secret": forger.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.UNAUTHORIZED


async def test_authorize_unknown_account_is_not_found(wiring, client):
    response = await client.post(
        "/authorize", json={"secret": wiring.issuer.issue("missing-resource")}
    )

    assert response.status_code == HTTPStatus.NOT_FOUND


async def test_authorize_without_stored_tokens_is_conflict(wiring, client):
    _provision(wiring)

    response = await client.post(
        "/authorize", json={"secret": wiring.issuer.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.CONFLICT


async def test_authorize_maps_rejected_refresh_to_bad_gateway(wiring, client):
    _provision(wiring, expires_at=int(time.time()) - 10)
    wiring.platform.token_responses.append(
        httpx.Response(401, json={"error": "invalid_grant"})
    )

    response = await client.post(
        "/authorize", json={"secret": wiring.issuer.issue(RESOURCE)}
    )

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert wiring.token_store.get(RESOURCE).access_token == "A1"
