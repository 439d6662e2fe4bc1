"""
cloudmon REST API - FastAPI application serving the dashboard.
"""

import asyncio
import contextlib
import secrets
from collections.abc import AsyncIterator
from datetime import datetime, timedelta
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from cloudmon import __version__
from cloudmon.api.sessions import SessionStore
from cloudmon.config import AppSettings, setup_logging
from cloudmon.connect.base import ProviderKind, normalize_token
from cloudmon.connect.registry import canonical_provider
from cloudmon.errors import CloudMonError, MissingTokenError, ProviderError
from cloudmon.see import AccountAggregator


# Request/Response models
class AccountIn(BaseModel):
    """An account as sent by the dashboard."""
    name: str = ""
    token: str = ""
    provider: Optional[str] = None


class AccountsRequest(BaseModel):
    accounts: list[AccountIn]


class ValidateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    account_name: str = Field(..., min_length=1, alias="accountName")
    api_token: str = Field(..., min_length=1, alias="apiToken")
    provider: Optional[str] = None


class ServiceActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1, alias="serviceId")
    environment_id: str = Field(..., min_length=1, alias="environmentId")
    provider: Optional[str] = None


class LogsRequest(ServiceActionRequest):
    project_id: str = Field(..., min_length=1, alias="projectId")
    limit: int = Field(200, ge=1, le=5000)


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1, alias="projectId")
    new_name: str = Field(..., min_length=1, alias="newName")
    provider: Optional[str] = None


class PasswordRequest(BaseModel):
    password: str = ""


def _require_zeabur(provider: Optional[str], action: str) -> None:
    if canonical_provider(provider) != ProviderKind.ZEABUR.value:
        raise HTTPException(status_code=400, detail=f"{action} is only supported for Zeabur")


def _token(raw: str) -> str:
    token = normalize_token(raw)
    if not token:
        raise MissingTokenError()
    return token


def create_app(
    settings: Optional[AppSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the API. `transport` replaces the network for every provider call."""
    settings = settings or AppSettings()
    if configure_logging:
        setup_logging(settings.log_level)

    sessions = SessionStore(lifetime=timedelta(days=settings.session_days))
    aggregator = AccountAggregator(settings=settings, transport=transport)

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        reaper = asyncio.create_task(sessions.reap_forever(settings.session_sweep_seconds))
        try:
            yield
        finally:
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper

    app = FastAPI(
        title="cloudmon API",
        description="Multi-provider cloud account monitor",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sessions = sessions
    app.state.aggregator = aggregator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CloudMonError)
    async def cloudmon_error_handler(_: Request, exc: CloudMonError) -> JSONResponse:
        status = 502 if isinstance(exc, ProviderError) else 400
        return JSONResponse(status_code=status, content={"error": str(exc)})

    def require_auth(request: Request) -> None:
        password = settings.admin_password
        if not password:
            return
        if sessions.validate(request.headers.get("x-session-token")):
            return
        given = request.headers.get("x-admin-password") or ""
        if secrets.compare_digest(given.encode(), password.encode()):
            return
        raise HTTPException(status_code=401, detail="Invalid password or session")

    # Routes
    @app.get("/health")
    async def health():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    @app.get("/api/version")
    async def version():
        return {"version": __version__}

    @app.get("/api/check-password")
    async def check_password():
        return {"hasPassword": bool(settings.admin_password)}

    @app.post("/api/verify-password")
    async def verify_password(body: PasswordRequest):
        if not settings.admin_password:
            raise HTTPException(status_code=400, detail="No password configured")
        if not secrets.compare_digest(body.password.encode(), settings.admin_password.encode()):
            raise HTTPException(status_code=401, detail="Wrong password")
        return {"success": True, "sessionToken": sessions.issue()}

    @app.get("/api/server-accounts", dependencies=[Depends(require_auth)])
    async def server_accounts():
        """Accounts preconfigured through the environment."""
        return settings.env_accounts()

    @app.post("/api/temp-accounts", dependencies=[Depends(require_auth)])
    async def temp_accounts(body: AccountsRequest):
        results = await aggregator.run_batch([a.model_dump() for a in body.accounts])
        return [r.account_view() for r in results]

    @app.post("/api/temp-projects", dependencies=[Depends(require_auth)])
    async def temp_projects(body: AccountsRequest):
        results = await aggregator.run_batch([a.model_dump() for a in body.accounts])
        return [r.project_view() for r in results]

    @app.post("/api/validate-account", dependencies=[Depends(require_auth)])
    async def validate_account(body: ValidateRequest):
        account = {"name": body.account_name, "token": body.api_token, "provider": body.provider}
        snapshot = await aggregator.validate(account)
        return {
            "success": True,
            "userData": snapshot.user.to_dict(),
            "accountName": body.account_name,
            "provider": aggregator.provider_of(account),
        }

    @app.post("/api/service/pause", dependencies=[Depends(require_auth)])
    async def pause_service(body: ServiceActionRequest):
        _require_zeabur(body.provider, "Pausing a service")
        await aggregator.zeabur().suspend_service(_token(body.token), body.service_id, body.environment_id)
        return {"success": True}

    @app.post("/api/service/restart", dependencies=[Depends(require_auth)])
    async def restart_service(body: ServiceActionRequest):
        _require_zeabur(body.provider, "Restarting a service")
        await aggregator.zeabur().restart_service(_token(body.token), body.service_id, body.environment_id)
        return {"success": True}

    @app.post("/api/service/logs", dependencies=[Depends(require_auth)])
    async def service_logs(body: LogsRequest):
        _require_zeabur(body.provider, "Reading logs")
        logs = await aggregator.zeabur().runtime_logs(
            _token(body.token),
            body.project_id,
            body.service_id,
            body.environment_id,
            limit=body.limit,
        )
        return {"success": True, **logs.to_dict()}

    @app.post("/api/project/rename", dependencies=[Depends(require_auth)])
    async def rename_project(body: RenameRequest):
        _require_zeabur(body.provider, "Renaming a project")
        await aggregator.zeabur().rename_project(_token(body.token), body.project_id, body.new_name)
        return {"success": True}

    return app


# Run with: uvicorn cloudmon.api.main:app --reload
app = create_app(configure_logging=False)
