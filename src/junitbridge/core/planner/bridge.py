"""Plan orchestration: interchange document in, plan file out."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

from ..ir.model import ExecutionPlan, ExtractionResult
from .compiler import compile_plan

logger = logging.getLogger(__name__)

EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["testMethods"],
    "properties": {
        "testMethods": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "actions"],
                "properties": {
                    "name": {"type": "string"},
                    "actions": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["type"],
                            "properties": {"type": {"type": "string"}},
                        },
                    },
                },
            },
        }
    },
}


class PlanInputError(ValueError):
    """The extraction document is missing or has no test methods."""


def load_extraction(document: dict[str, Any]) -> ExtractionResult:
    try:
        jsonschema.validate(instance=document, schema=EXTRACTION_SCHEMA)
    except jsonschema.ValidationError as e:
        raise PlanInputError(f"Invalid extraction document: {e.message}") from e
    if not document["testMethods"]:
        raise PlanInputError("No testMethods found in input")
    return ExtractionResult.from_dict(document)


def plan_from_extraction(
    document: dict[str, Any],
    base_url: str,
    source_file: str = "",
    wait_seconds: int = 2,
) -> ExecutionPlan:
    extraction = load_extraction(document)
    return compile_plan(extraction, base_url, source_file=source_file, wait_seconds=wait_seconds)


def plan_output_path(input_path: Path) -> Path:
    return input_path.with_name(f"{input_path.stem}.playwright-plan.json")


def write_plan(plan: ExecutionPlan, input_path: Path) -> Path:
    """Write ``plan`` next to ``input_path`` as ``<stem>.playwright-plan.json``."""
    out = plan_output_path(input_path)
    out.write_text(json.dumps(plan.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    total = sum(len(m.steps) for m in plan.methods)
    logger.info(f"Plan written: {out} ({len(plan.methods)} methods, {total} steps)")
    return out
