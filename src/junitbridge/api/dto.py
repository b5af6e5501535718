from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class JavaFileRequest(BaseModel):
    java_path: str = Field(..., description="Path to the .java file to analyze")


class CompileRequest(JavaFileRequest):
    classpath: str = Field(
        "", description="Extra classpath (Selenium/JUnit5 jars) passed to javac -cp"
    )


class SpecRequest(BaseModel):
    txt_path: str = Field(..., description="Path to the model output .txt report")
    feature: str = Field(..., description="Feature name the report was generated for")


class ExtractRequest(JavaFileRequest):
    test_name: str | None = Field(
        None, description="Only extract this @Test method (default: all methods)"
    )
    order: Literal["grouped", "source"] | None = Field(
        None, description="Action ordering: 'grouped' (default) or 'source'"
    )


class PlanRequest(ExtractRequest):
    base_url: str | None = Field(
        None, description="Base URL for variable navigations and auto-inserted navigation"
    )
    write: bool | None = Field(
        None, description="Also write <stem>.playwright-plan.json next to the source"
    )


TOOL_REQUESTS: dict[str, type[BaseModel]] = {
    "validate_syntax": JavaFileRequest,
    "compile": CompileRequest,
    "validate_spec": SpecRequest,
    "extract_actions": ExtractRequest,
    "build_plan": PlanRequest,
}
