"""Tool handlers shared by the MCP server, the HTTP API and the CLI.

Every handler takes plain arguments and returns a JSON-serializable
dict. Failures come back as ``{"error": ...}`` records; nothing raises
past :func:`handle_tool`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..adapters.javac import Compiler, JavacCompiler
from ..config.settings import settings
from ..core.extractor.actions import extract_actions
from ..core.planner.bridge import plan_from_extraction, write_plan
from ..core.validator.coverage import check_feature_coverage
from ..core.validator.syntax import validate_syntax
from .dto import TOOL_REQUESTS

logger = logging.getLogger(__name__)


def _read(path: str) -> str | None:
    p = Path(path)
    if not p.is_file():
        return None
    return p.read_text(encoding="utf-8")


def _not_found(path: str) -> dict[str, Any]:
    return {"error": f"File not found: {path}"}


def validate_syntax_tool(java_path: str) -> dict[str, Any]:
    code = _read(java_path)
    if code is None:
        return _not_found(java_path)
    return validate_syntax(code, min_tests=settings.min_test_methods).to_dict()


def compile_tool(
    java_path: str, classpath: str = "", compiler: Compiler | None = None
) -> dict[str, Any]:
    compiler = compiler or JavacCompiler(settings.javac_bin, settings.compile_timeout_s)
    return compiler.run(java_path, classpath).to_dict()


def validate_spec_tool(txt_path: str, feature: str) -> dict[str, Any]:
    text = _read(txt_path)
    if text is None:
        return _not_found(txt_path)
    return check_feature_coverage(text, feature)


def extract_actions_tool(
    java_path: str, test_name: str | None = None, order: str | None = None
) -> dict[str, Any]:
    code = _read(java_path)
    if code is None:
        return _not_found(java_path)
    result = extract_actions(code, test_name=test_name, order=order or settings.action_order)
    return result.to_dict()


def build_plan_tool(
    java_path: str,
    base_url: str | None = None,
    test_name: str | None = None,
    order: str | None = None,
    write: bool | None = None,
) -> dict[str, Any]:
    extraction = extract_actions_tool(java_path, test_name=test_name, order=order)
    if "error" in extraction:
        return extraction
    plan = plan_from_extraction(
        extraction,
        base_url or settings.base_url,
        source_file=str(Path(java_path).resolve()),
        wait_seconds=settings.wait_step_seconds,
    )
    out = plan.to_dict()
    if settings.write_plan_files if write is None else write:
        out["plan_path"] = str(write_plan(plan, Path(java_path)))
    return out


TOOL_HANDLERS = {
    "validate_syntax": validate_syntax_tool,
    "compile": compile_tool,
    "validate_spec": validate_spec_tool,
    "extract_actions": extract_actions_tool,
    "build_plan": build_plan_tool,
}


def handle_tool(name: str, args: dict[str, Any] | None) -> dict[str, Any]:
    """Validate ``args`` for tool ``name`` and run it, converting failures to records."""
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return {"error": f"Unknown tool: {name}"}
    try:
        req = TOOL_REQUESTS[name](**(args or {}))
        return handler(**req.model_dump(exclude_none=True))
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        return {"error": f"Invalid arguments for {name}: {details}"}
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return {"error": str(e)}
