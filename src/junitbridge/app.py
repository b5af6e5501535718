"""HTTP surface over the same tool handlers the MCP server exposes."""

from typing import Any

from fastapi import FastAPI

from .adapters.javac import JavacCompiler
from .api.routes import router as tools_router
from .config.settings import settings


def create_app() -> FastAPI:
    app = FastAPI(
        title="junitbridge API",
        version="0.1.0",
        description="JUnit + Selenium validation and Playwright MCP plan tools",
    )
    app.include_router(tools_router, tags=["tools"])

    @app.get("/healthz")
    def healthz() -> dict[str, Any]:
        # javac is optional; compile reports "skipped" without it
        return {
            "status": "ok",
            "base_url": settings.base_url,
            "javac": JavacCompiler(settings.javac_bin).is_available(),
        }

    return app


app = create_app()
