"""FastAPI application for the ghostpath local JSON API.

Editor integrations post the live buffer here and apply what comes back:
the rewritten text and cursor after a debounced edit, or the concealment
ranges for the visible windows on every redraw.
"""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from .. import __version__
from ..core.concealer import build_concealment, render_displayed
from ..core.model import Settings, VisibleWindow
from ..core.rewriter import safe_rewrite


class RewriteRequest(BaseModel):
    text: str
    cursor: int = Field(0, ge=0)
    path: str = ""


class WindowModel(BaseModel):
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    text: str


class ConcealRequest(BaseModel):
    windows: list[WindowModel]
    enabled: bool | None = None  # None: use the stored setting
    text: str | None = None  # full document, only needed for a display preview


class SettingsModel(BaseModel):
    conceal_enabled: bool


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with storage, index and settings
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="ghostpath API",
        description="Local JSON API for link rewriting and prefix concealment",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/resolve")
    async def resolve(
        name: str = Query(..., description="Short link name"),
        context: str = Query("", description="Path of the referring note"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Resolve a short name to its full path."""
        path = runtime.index.resolve(name, context)
        if path is None:
            raise HTTPException(status_code=404, detail=f"Could not resolve: {name}")
        return {"name": name, "path": path}

    @app.post("/rewrite")
    async def rewrite(req: RewriteRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Rewrite short links in a buffer; the caller applies the result."""
        result = safe_rewrite(req.text, req.cursor, req.path, runtime.index.resolve)
        return {
            "text": result.text,
            "cursor": result.cursor,
            "changed": result.changed,
            "replacements": [
                {"start": r.start, "end": r.end, "text": r.text}
                for r in result.replacements
            ],
        }

    @app.post("/conceal")
    async def conceal(req: ConcealRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Concealment ranges for the visible windows."""
        for w in req.windows:
            if w.end < w.start:
                raise HTTPException(status_code=422, detail="Window end precedes start")
        enabled = req.enabled
        if enabled is None:
            enabled = runtime.settings.load().conceal_enabled

        windows = [VisibleWindow(start=w.start, end=w.end, text=w.text) for w in req.windows]
        ranges = build_concealment(windows, enabled)
        out: dict[str, Any] = {
            "enabled": enabled,
            "ranges": [{"start": r.start, "end": r.end} for r in ranges],
        }
        if req.text is not None:
            out["displayed"] = render_displayed(req.text, ranges)
        return out

    @app.get("/settings")
    async def get_settings(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Current user settings."""
        return {"conceal_enabled": runtime.settings.load().conceal_enabled}

    @app.put("/settings")
    async def put_settings(body: SettingsModel, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Persist user settings."""
        runtime.settings.save(Settings(conceal_enabled=body.conceal_enabled))
        return {"conceal_enabled": body.conceal_enabled}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
