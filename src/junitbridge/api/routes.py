from typing import Any

from fastapi import APIRouter, HTTPException

from .dto import CompileRequest, ExtractRequest, JavaFileRequest, PlanRequest, SpecRequest
from .tools import TOOL_HANDLERS, handle_tool

router = APIRouter()


@router.get("/tools")
def list_tools():
    return {"tools": sorted(TOOL_HANDLERS)}


@router.post("/tools/validate_syntax")
def validate_syntax(req: JavaFileRequest) -> dict[str, Any]:
    return handle_tool("validate_syntax", req.model_dump(exclude_none=True))


@router.post("/tools/compile")
def compile_java(req: CompileRequest) -> dict[str, Any]:
    return handle_tool("compile", req.model_dump(exclude_none=True))


@router.post("/tools/validate_spec")
def validate_spec(req: SpecRequest) -> dict[str, Any]:
    return handle_tool("validate_spec", req.model_dump(exclude_none=True))


@router.post("/tools/extract_actions")
def extract_actions(req: ExtractRequest) -> dict[str, Any]:
    return handle_tool("extract_actions", req.model_dump(exclude_none=True))


@router.post("/tools/build_plan")
def build_plan(req: PlanRequest) -> dict[str, Any]:
    return handle_tool("build_plan", req.model_dump(exclude_none=True))


@router.post("/tools/{name}")
def unknown_tool(name: str):
    raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")
