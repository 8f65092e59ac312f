"""HTTP endpoints for brand export and import.

Routes:
    POST /brand-data/export   body {"brandId"}            -> {"backup": {...}}
    POST /brand-data/import   body {"brandId", "backup"}  -> {"ok": true, "report": {...}}

Every request carries ``Authorization: Bearer <token>``; the caller must
hold an allowed role (``admin`` or ``developer`` by default).  Errors are
returned as ``{"error": message}`` with 400 (validation), 401 (missing or
invalid credential), 403 (role), or 500 (table read failure or
unexpected fault).

Usage:
    # Configured from db.toml / environment on startup
    uvicorn --factory brand_backup.api:create_app

    # Explicit collaborators (tests, embedding)
    app = create_app(store=adapter, auth_service=auth)
"""

import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import Depends, FastAPI, Header, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from brand_backup.adapters.base import StoreClient
from brand_backup.auth.gate import (
    DEFAULT_ALLOWED_ROLES,
    AuthService,
    Caller,
    authorize,
    extract_bearer,
)
from brand_backup.backup.codec import encode_snapshot
from brand_backup.backup.export import export_brand
from brand_backup.backup.models import TableRegistry
from brand_backup.backup.registry import default_registry
from brand_backup.backup.restore import import_brand
from brand_backup.errors import AuthError, TableReadError, ValidationError

logger = logging.getLogger(__name__)


# --- Request Models ---


class ExportRequest(BaseModel):
    """Body of ``POST /brand-data/export``."""

    model_config = ConfigDict(extra="ignore")

    brand_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("brandId", "tenantId", "brand_id"),
    )


class ImportRequest(BaseModel):
    """Body of ``POST /brand-data/import``."""

    model_config = ConfigDict(extra="ignore")

    brand_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("brandId", "tenantId", "brand_id"),
    )
    backup: dict[str, Any] | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_body(request: Request) -> dict[str, Any]:
    """Return the JSON body, or ``{}`` when it is missing or not an object."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _parse_body(model: type[BaseModel], body: dict[str, Any]) -> Any:
    """Validate a request body, mapping field type errors to ``ValidationError``."""
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationError(f"Invalid request fields: {', '.join(fields)}") from e


# --- Dependencies ---


async def get_caller(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Caller:
    """Resolve and authorize the caller of the current request."""
    token = extract_bearer(authorization)
    auth_service: AuthService = request.app.state.auth_service
    caller = await auth_service.resolve_caller(token)
    return authorize(caller, request.app.state.allowed_roles, action="manage backups")


# --- Application ---


def create_app(
    store: StoreClient | None = None,
    auth_service: AuthService | None = None,
    registry: TableRegistry | None = None,
    allowed_roles: Iterable[str] | None = None,
    profile_name: str | None = None,
    env_prefix: str = "",
    config_path: Path | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators that are not passed in are created on startup from
    db.toml and the environment (see ``brand_backup.factory``), and
    closed on shutdown.

    Args:
        store: Store adapter.
        auth_service: Caller resolver.
        registry: Table catalog (default: ``default_registry()``).
        allowed_roles: Roles allowed to export and import.
        profile_name: Database profile used when no store is passed.
        env_prefix: Prefix for environment variable lookup.
        config_path: Path to db.toml (default: ``./db.toml``).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        created: list[Any] = []
        if app.state.store is None or app.state.auth_service is None:
            from brand_backup.config.loader import load_db_config
            from brand_backup.factory import get_adapter, get_auth_service

            try:
                config = load_db_config(config_path)
            except FileNotFoundError:
                config = None
            if app.state.store is None:
                app.state.store = await get_adapter(
                    profile_name=profile_name,
                    env_prefix=env_prefix,
                    config_path=config_path,
                )
                created.append(app.state.store)
            if app.state.auth_service is None:
                app.state.auth_service = get_auth_service(config, env_prefix=env_prefix)
                created.append(app.state.auth_service)
            if allowed_roles is None and config is not None:
                app.state.allowed_roles = frozenset(config.auth.allowed_roles)
        try:
            yield
        finally:
            for resource in created:
                await resource.close()

    app = FastAPI(title="Brand Backup", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    app.state.store = store
    app.state.auth_service = auth_service
    app.state.registry = registry or default_registry()
    app.state.allowed_roles = (
        frozenset(allowed_roles) if allowed_roles is not None else DEFAULT_ALLOWED_ROLES
    )

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
        return _error(exc.status_code, str(exc))

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error(400, str(exc))

    @app.exception_handler(TableReadError)
    async def _table_read_error(request: Request, exc: TableReadError) -> JSONResponse:
        return _error(500, str(exc))

    @app.post("/brand-data/export")
    async def export_brand_data(
        request: Request,
        caller: Caller = Depends(get_caller),
    ) -> JSONResponse:
        body = _parse_body(ExportRequest, await _read_body(request))
        if not body.brand_id:
            raise ValidationError("Missing brandId")

        logger.info("Export of brand %s requested by %s", body.brand_id, caller.id)
        try:
            snapshot = await export_brand(
                request.app.state.store, request.app.state.registry, body.brand_id
            )
        except (ValidationError, TableReadError):
            raise
        except Exception as e:
            logger.exception("Unexpected export failure for brand %s", body.brand_id)
            return _error(500, str(e) or "Unexpected error")

        return JSONResponse(status_code=200, content={"backup": encode_snapshot(snapshot)})

    @app.post("/brand-data/import")
    async def import_brand_data(
        request: Request,
        caller: Caller = Depends(get_caller),
    ) -> JSONResponse:
        body = _parse_body(ImportRequest, await _read_body(request))
        if not body.brand_id or body.backup is None:
            raise ValidationError("Missing required fields: brandId, backup")

        logger.info("Import into brand %s requested by %s", body.brand_id, caller.id)
        try:
            report = await import_brand(
                request.app.state.store,
                request.app.state.registry,
                body.brand_id,
                body.backup,
                caller_id=caller.id,
            )
        except ValidationError:
            raise
        except Exception as e:
            logger.exception("Unexpected import failure for brand %s", body.brand_id)
            return _error(500, str(e) or "Unexpected error")

        return JSONResponse(status_code=200, content={"ok": True, "report": report.to_dict()})

    return app
