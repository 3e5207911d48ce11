from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..config import Settings
from ..features.session import WorkspaceManager, create_workspace_router
from ..naming import build_naming

__all__ = ["app", "create_app"]

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def create_app(
    settings: Settings | None = None,
    *,
    manager: WorkspaceManager | None = None,
) -> FastAPI:
    cfg = settings or Settings.from_env()
    workspaces = manager or WorkspaceManager(naming_factory=lambda: build_naming(cfg))

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            # Cancels every pending reveal so no late winner fires after shutdown.
            workspaces.close_all()
            logger.info("closed all workspaces on shutdown")

    application = FastAPI(title="teamdraw", version=__version__, lifespan=lifespan)
    application.state.workspaces = workspaces
    application.include_router(create_workspace_router(workspaces, cfg))

    @application.get("/healthz")
    async def healthz() -> JSONResponse:
        return JSONResponse({"status": "ok", "workspaces": len(workspaces)})

    @application.get("/", response_class=HTMLResponse)
    async def index(request: Request) -> Response:
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": "teamdraw",
                "ai_enabled": bool(cfg.gemini_api_key),
                "reveal_seconds": cfg.reveal_seconds,
                "default_theme": cfg.default_theme,
            },
        )

    @application.get("/workspace/{sid}", response_class=HTMLResponse)
    async def workspace_page(request: Request, sid: str) -> Response:
        try:
            snapshot = workspaces.get(sid).snapshot()
        except KeyError:
            return templates.TemplateResponse(
                request,
                "index.html",
                {
                    "title": "teamdraw",
                    "ai_enabled": bool(cfg.gemini_api_key),
                    "reveal_seconds": cfg.reveal_seconds,
                    "default_theme": cfg.default_theme,
                    "missing": sid,
                },
                status_code=404,
            )
        return templates.TemplateResponse(
            request,
            "workspace.html",
            {"title": f"teamdraw · {sid}", "workspace": snapshot},
        )

    return application


app = create_app()


def main() -> None:  # pragma: no cover - runner
    import uvicorn

    host = os.environ.get("BIND", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run(app, host=host, port=port, factory=False)


if __name__ == "__main__":  # pragma: no cover
    main()
