"""
FastAPI routes for the marketplace add-on backend.

``platform_router`` serves callbacks from the marketplace platform and sits
behind the basic-auth gate. ``vendor_router`` serves the vendor's own
front-end.
"""

from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from typing import Annotated, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from app.core.config import AppSettings
from app.core.errors import (
    InvalidSessionTokenError,
    MalformedInputError,
    NoCredentialsError,
    PersistenceError,
    PlatformAPIError,
    ResourceConflictError,
    ResourceNotFoundError,
    TokenEndpointTimeoutError,
    UpstreamTokenError,
)
from app.dependencies import (
    PlatformAuthDependency,
    SettingsDependency,
    get_account_service,
    get_account_store,
    get_config_update_service,
    get_notification_service,
    get_oauth_token_broker,
    get_session_token_issuer,
    get_sso_validator,
)
from app.schemas import (
    AuthorizeRequest,
    AuthorizeResponse,
    ErrorResponse,
    PlanChangeRequest,
    ProvisioningRequest,
    ProvisioningResponse,
    SsoRequest,
    parse_notification,
)

logger = logging.getLogger(__name__)

router = APIRouter()
platform_router = APIRouter(
    prefix="/digitalocean", dependencies=[PlatformAuthDependency]
)
vendor_router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _token_failure(exc: Exception) -> HTTPException:
    """Map credential/token failures to generic HTTP errors; details stay in logs."""
    if isinstance(exc, NoCredentialsError):
        return HTTPException(
            status_code=HTTPStatus.CONFLICT,
            detail="Resource has no platform credentials.",
        )
    if isinstance(exc, TokenEndpointTimeoutError):
        return HTTPException(
            status_code=HTTPStatus.GATEWAY_TIMEOUT,
            detail="Platform token endpoint timed out.",
        )
    if isinstance(exc, UpstreamTokenError):
        return HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail="Unable to obtain platform access token.",
        )
    return _storage_failure()


def _storage_failure() -> HTTPException:
    return HTTPException(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        detail="Storage temporarily unavailable.",
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@platform_router.post(
    "/resources",
    response_model=ProvisioningResponse,
    responses={422: {"model": ErrorResponse}},
)
async def provision_resource(
    payload: ProvisioningRequest,
    service: Annotated[Any, Depends(get_account_service)],
) -> Any:
    """Create an account for a newly added resource."""
    logger.info("Got provisioning request for %s", payload.resource_uuid)
    try:
        return await service.provision(payload)
    except ResourceConflictError as exc:
        return _error(HTTPStatus.UNPROCESSABLE_ENTITY, str(exc))
    except PersistenceError as exc:
        logger.error("Provisioning %s failed: %s", payload.resource_uuid, exc)
        raise _storage_failure() from exc


@platform_router.delete("/resources/{resource_uuid}")
async def deprovision_resource(
    resource_uuid: str,
    service: Annotated[Any, Depends(get_account_service)],
) -> Response:
    logger.info("Got deprovision request for %s", resource_uuid)
    try:
        await service.deprovision(resource_uuid)
    except ResourceNotFoundError:
        return Response(status_code=HTTPStatus.NOT_FOUND)
    except PersistenceError as exc:
        logger.error("Deprovisioning %s failed: %s", resource_uuid, exc)
        raise _storage_failure() from exc
    return Response(status_code=HTTPStatus.OK)


@platform_router.put("/resources/{resource_uuid}")
async def change_plan(
    resource_uuid: str,
    payload: PlanChangeRequest,
    service: Annotated[Any, Depends(get_account_service)],
) -> Response:
    logger.info("Got plan change request for %s", resource_uuid)
    try:
        await service.change_plan(resource_uuid, payload.plan_slug)
    except ResourceNotFoundError:
        return Response(status_code=HTTPStatus.NOT_FOUND)
    except PersistenceError as exc:
        logger.error("Plan change for %s failed: %s", resource_uuid, exc)
        raise _storage_failure() from exc
    return Response(status_code=HTTPStatus.NO_CONTENT)


@platform_router.post(
    "/notifications",
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def receive_notification(
    request: Request,
    service: Annotated[Any, Depends(get_notification_service)],
) -> Response:
    """Record a platform notification against the affected accounts."""
    try:
        body = await request.json()
    except ValueError:
        return _error(HTTPStatus.BAD_REQUEST, "Malformed request body.")
    if not isinstance(body, dict):
        return _error(HTTPStatus.BAD_REQUEST, "Malformed request body.")

    try:
        notification = parse_notification(body)
    except ValidationError as exc:
        logger.info("Error binding notification: %s", exc)
        return _error(
            HTTPStatus.UNPROCESSABLE_ENTITY, "Invalid notification payload."
        )

    errors = await service.handle(notification)
    if errors:
        return _error(
            HTTPStatus.UNPROCESSABLE_ENTITY, f"Errors occurred: {'; '.join(errors)}"
        )
    return Response(status_code=HTTPStatus.OK)


async def _sso_params(request: Request) -> SsoRequest:
    """Collect SSO parameters from the form body, falling back to the query."""
    params: dict[str, Any] = dict(request.query_params)
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(
        ("application/x-www-form-urlencoded", "multipart/form-data")
    ):
        form = await request.form()
        params.update(
            {key: value for key, value in form.items() if isinstance(value, str)}
        )
    try:
        return SsoRequest.model_validate(params)
    except ValidationError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="Malformed SSO request."
        ) from exc


@platform_router.post("/sso")
async def single_sign_on(
    sso: Annotated[SsoRequest, Depends(_sso_params)],
    validator: Annotated[Any, Depends(get_sso_validator)],
    issuer: Annotated[Any, Depends(get_session_token_issuer)],
    settings: AppSettings = SettingsDependency,
) -> Response:
    """Authenticate a platform SSO request and hand the user to the front-end."""
    logger.info("Got SSO request for %s", sso.resource_uuid)
    try:
        authorized = validator.validate(sso.token, sso.timestamp, sso.resource_uuid)
    except MalformedInputError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail=str(exc)
        ) from exc

    if not authorized:
        return Response(status_code=HTTPStatus.UNAUTHORIZED)

    session_token = issuer.issue(sso.resource_uuid)
    query = urlencode({"secret": session_token})
    location = f"{settings.marketplace.app_homepage}?{query}"
    return RedirectResponse(url=location, status_code=HTTPStatus.TEMPORARY_REDIRECT)


@vendor_router.post("/authorize", response_model=AuthorizeResponse)
async def authorize_front_end(
    payload: AuthorizeRequest,
    issuer: Annotated[Any, Depends(get_session_token_issuer)],
    account_store: Annotated[Any, Depends(get_account_store)],
    broker: Annotated[Any, Depends(get_oauth_token_broker)],
) -> Any:
    """Verify the session token minted at SSO time and log the user in."""
    try:
        claims = issuer.decode(payload.secret)
    except InvalidSessionTokenError as exc:
        logger.debug("Authorize rejected: %s", exc.reason)
        return Response(status_code=HTTPStatus.UNAUTHORIZED)

    resource_uuid = claims.subject
    try:
        account = await asyncio.to_thread(account_store.get, resource_uuid)
    except PersistenceError as exc:
        logger.error("Account lookup for %s failed: %s", resource_uuid, exc)
        raise _storage_failure() from exc
    if account is None:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail="Account not found."
        )

    try:
        access_token = await broker.get_access_token(resource_uuid)
    except (NoCredentialsError, UpstreamTokenError, PersistenceError) as exc:
        logger.error("Unable to get access token for %s: %s", resource_uuid, exc)
        raise _token_failure(exc) from exc

    return AuthorizeResponse(
        access_token=access_token,
        email=account.email,
        app_slug=account.app_slug,
        plan_slug=account.plan_slug,
        created_at=account.created_at,
        modified_at=account.modified_at,
        resource_uuid=resource_uuid,
    )


@vendor_router.post("/config", dependencies=[PlatformAuthDependency])
async def change_config(
    service: Annotated[Any, Depends(get_config_update_service)],
    uuid: str = Query(..., description="Resource whose license key is rotated."),
) -> Response:
    """Rotate the license key for a resource and push it to the platform."""
    logger.info("Got config request for %s", uuid)
    try:
        await service.rotate_license_key(uuid)
    except ResourceNotFoundError as exc:
        raise HTTPException(
            status_code=HTTPStatus.NOT_FOUND, detail=str(exc)
        ) from exc
    except PlatformAPIError as exc:
        logger.error("Config push for %s failed: %s", uuid, exc)
        raise HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail="Platform rejected config update.",
        ) from exc
    except (NoCredentialsError, UpstreamTokenError, PersistenceError) as exc:
        logger.error("Config update for %s failed: %s", uuid, exc)
        raise _token_failure(exc) from exc
    return Response(status_code=HTTPStatus.OK)


@vendor_router.get("/activities", dependencies=[PlatformAuthDependency])
async def list_activities(
    account_store: Annotated[Any, Depends(get_account_store)],
    uuid: str | None = Query(default=None, description="Optional resource filter."),
) -> list[dict]:
    try:
        activities = await asyncio.to_thread(account_store.list_activities, uuid)
    except PersistenceError as exc:
        logger.error("Listing activities failed: %s", exc)
        raise _storage_failure() from exc
    return [activity.model_dump(mode="json") for activity in activities]


router.include_router(platform_router)
router.include_router(vendor_router)

__all__ = ["platform_router", "router", "vendor_router"]
