from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import Awaitable, Callable
import json
import logging

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from domain_request.api.handlers.dashboard import dashboard_handler
from domain_request.api.handlers.deps import ApiDeps
from domain_request.api.handlers.relay import CORS_HEADERS, relay_handler
from domain_request.api.handlers.submissions import submit_form_handler
from domain_request.api.schemas import (
    DashboardResponse,
    ErrorResponse,
    HealthResponse,
    ReadyResponse,
    RelayErrorResponse,
    RelaySubmissionRequest,
    RelaySuccessResponse,
    SubmitFormRequest,
    SubmitFormResponse,
)
from domain_request.domain.dto import SubmissionForm
from domain_request.domain.errors import DomainDependencyError
from domain_request.domain.models import IdentityUser, OwnerMatch

RELAY_PATH = "/api/send"
RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def build_app(
    role: str,
    run_id: str,
    api_deps: ApiDeps,
    on_startup: Callable[[], Awaitable[None]] | None = None,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    logger = logging.getLogger("runtime")
    client_flow_enabled = api_deps.submission_flow is not None and api_deps.dashboard is not None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        del app
        logger.info(
            "role started",
            extra={"role": role, "service": role, "run_id": run_id},
        )
        if not api_deps.relay_settings.is_configured:
            logger.warning(
                "relay is not configured, submissions will be answered with a configuration error",
                extra={
                    "role": role,
                    "run_id": run_id,
                    "has_admin_api_url": bool(api_deps.relay_settings.admin_api_url),
                    "has_admin_api_key": bool(api_deps.relay_settings.admin_api_key),
                },
            )

        if on_startup is not None:
            await on_startup()

        yield

        if on_shutdown is not None:
            await on_shutdown()

        logger.info(
            "role stopped",
            extra={"role": role, "service": role, "run_id": run_id},
        )

    app = FastAPI(title="domain-request-relay", version="0.1.0", lifespan=lifespan)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", role=role)

    @app.get("/ready", response_model=ReadyResponse, tags=["System"])
    async def ready() -> ReadyResponse:
        return ReadyResponse(
            status="ready",
            role=role,
            relay_configured=api_deps.relay_settings.is_configured,
            client_flow_enabled=client_flow_enabled,
        )

    @app.api_route(
        RELAY_PATH,
        methods=RELAY_METHODS,
        response_model=None,
        responses={
            200: {"model": RelaySuccessResponse},
            400: {"model": RelayErrorResponse},
            405: {"model": RelayErrorResponse},
            408: {"model": RelayErrorResponse},
            500: {"model": RelayErrorResponse},
            502: {"model": RelayErrorResponse},
            503: {"model": RelayErrorResponse},
        },
        openapi_extra={
            "requestBody": {
                "content": {"application/json": {"schema": RelaySubmissionRequest.model_json_schema()}},
            }
        },
        tags=["Relay"],
    )
    async def send(request: Request) -> Response:
        body = await _read_json_body(request) if request.method == "POST" else None
        result = await relay_handler(api_deps, method=request.method, body=body)
        headers = dict(CORS_HEADERS)
        if result.status_code == 405:
            headers["Allow"] = "POST, OPTIONS"
        if result.body is None:
            return Response(status_code=result.status_code, headers=headers)
        return JSONResponse(status_code=result.status_code, content=result.body, headers=headers)

    if not client_flow_enabled:
        return app

    async def _resolve_user(authorization: str | None) -> IdentityUser | None:
        token = _bearer_token(authorization)
        if token is None or api_deps.identity is None:
            return None
        try:
            return await api_deps.identity.get_user(access_token=token)
        except DomainDependencyError as exc:
            logger.error("identity lookup failed", extra={"error_type": type(exc).__name__})
            raise HTTPException(status_code=503, detail="authentication service unavailable") from exc

    @app.post(
        "/submissions",
        response_model=SubmitFormResponse,
        responses={
            400: {"model": SubmitFormResponse},
            401: {"model": SubmitFormResponse},
            502: {"model": SubmitFormResponse},
            503: {"model": ErrorResponse},
        },
        tags=["Submissions"],
    )
    async def submit_form(
        request: SubmitFormRequest,
        authorization: str | None = Header(default=None),
    ) -> JSONResponse:
        if api_deps.submission_flow is None:
            raise HTTPException(status_code=503, detail="submission flow is not available")
        user = await _resolve_user(authorization)
        status_code, response = await submit_form_handler(
            form=SubmissionForm(
                name=request.name,
                email=request.email,
                purpose=request.purpose,
                platform_link=request.platform_link,
            ),
            user=user,
            submission_flow=api_deps.submission_flow,
        )
        return JSONResponse(status_code=status_code, content=response.model_dump(exclude_none=True))

    @app.get(
        "/dashboard",
        response_model=DashboardResponse,
        responses={401: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
        tags=["Submissions"],
    )
    async def dashboard(
        match_by: OwnerMatch = Query(default=OwnerMatch.USER_ID),
        authorization: str | None = Header(default=None),
    ) -> DashboardResponse:
        if api_deps.dashboard is None:
            raise HTTPException(status_code=503, detail="dashboard is not available")
        user = await _resolve_user(authorization)
        if user is None:
            raise HTTPException(status_code=401, detail="Please login to access your dashboard")
        try:
            return await dashboard_handler(user=user, match_by=match_by, dashboard=api_deps.dashboard)
        except DomainDependencyError as exc:
            logger.error(
                "dashboard load failed",
                extra={"user_id": user.user_id, "error_type": type(exc).__name__},
            )
            raise HTTPException(status_code=503, detail="dashboard is temporarily unavailable") from exc

    return app


async def _read_json_body(request: Request) -> object:
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
