"""FastMCP server exposing the JUnit validation and plan tools.

Tools:
- validate_syntax: static structure check of a JUnit5 + Selenium source (no JDK needed)
- compile: javac compilation; reports "skipped" when no JDK is installed
- validate_spec: feature scenario coverage of a model output report
- extract_actions: Selenium calls → backend-agnostic semantic actions
- build_plan: semantic actions → Playwright MCP execution plan

Handlers never raise; failures are returned as ``{"error": ...}`` records.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from .api.tools import handle_tool
from .config.settings import settings

logger = logging.getLogger(__name__)

mcp = FastMCP(name="junit-validator")


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> JSONResponse:  # noqa: ARG001
    """Health check endpoint for the HTTP transport."""
    return JSONResponse({"status": "healthy", "service": "junit-validator"})


@mcp.tool
def validate_syntax(java_path: str) -> dict[str, Any]:
    """Statically check a JUnit5 + Selenium .java file for structure, annotations and required elements.

    Args:
        java_path: Path of the .java file to check

    Returns:
        dict with valid, testCount, errors and warnings
    """
    return handle_tool("validate_syntax", {"java_path": java_path})


@mcp.tool
async def compile(java_path: str, classpath: str = "") -> dict[str, Any]:  # noqa: A001
    """Compile a .java file with javac. Returns status "skipped" when no JDK is installed.

    Args:
        java_path: Path of the .java file to compile
        classpath: Extra classpath with the Selenium/JUnit5 jars
    """
    return await asyncio.to_thread(
        handle_tool, "compile", {"java_path": java_path, "classpath": classpath}
    )


@mcp.tool
def validate_spec(txt_path: str, feature: str) -> dict[str, Any]:
    """Check a model output report (.txt) for the scenarios its feature must cover.

    Args:
        txt_path: Path of the model output .txt file
        feature: Feature name the report was generated for
    """
    return handle_tool("validate_spec", {"txt_path": txt_path, "feature": feature})


@mcp.tool
def extract_actions(
    java_path: str, test_name: str | None = None, order: str | None = None
) -> dict[str, Any]:
    """Extract WebDriver calls from JUnit + Selenium code as semantic browser actions.

    Args:
        java_path: Path of the .java file to analyze
        test_name: Only extract this @Test method (default: all methods)
        order: "grouped" (by action kind, default) or "source" (statement order)
    """
    return handle_tool(
        "extract_actions", {"java_path": java_path, "test_name": test_name, "order": order}
    )


@mcp.tool
def build_plan(
    java_path: str,
    base_url: str | None = None,
    test_name: str | None = None,
    order: str | None = None,
) -> dict[str, Any]:
    """Compile a JUnit + Selenium file into a Playwright MCP execution plan.

    Each element interaction is preceded by a browser_snapshot whenever the
    page's last snapshot may be stale, and carries a ref placeholder to be
    resolved against that snapshot.

    Args:
        java_path: Path of the .java file to analyze
        base_url: URL used for variable navigations and auto-inserted navigation
        test_name: Only plan this @Test method (default: all methods)
        order: Action ordering, as for extract_actions
    """
    return handle_tool(
        "build_plan",
        {"java_path": java_path, "base_url": base_url, "test_name": test_name, "order": order},
    )


def main() -> None:
    """Run the MCP server (stdio by default, streamable-http when configured)."""
    logging.basicConfig(level=settings.log_level.upper())
    if settings.mcp_transport == "stdio":
        mcp.run()
        return
    logger.info(f"Starting junit-validator on {settings.mcp_host}:{settings.mcp_port}/mcp")
    mcp.run(
        transport=settings.mcp_transport,
        host=settings.mcp_host,
        port=settings.mcp_port,
        path="/mcp",
    )


if __name__ == "__main__":
    main()
