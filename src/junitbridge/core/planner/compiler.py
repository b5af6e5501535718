"""Semantic actions → snapshot/ref backend steps.

The target backend (Playwright MCP) addresses elements through ``ref``
ids taken from an accessibility snapshot, so any element interaction
needs a snapshot of the current page that is still valid. Compilation is
a fold over the action list:

    (state, action) -> (state', steps)

``CompilerState`` holds the current URL and the set of URLs whose last
snapshot is still fresh. Sequence numbers are only assigned once the
whole method (including any bootstrap steps) is known.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from ..extractor.locators import describe_selector
from ..ir.model import (
    AssertFalse,
    AssertText,
    AssertTrue,
    Clear,
    Click,
    CountElements,
    ExecutionPlan,
    ExtractionResult,
    Fill,
    GetText,
    MethodPlan,
    Navigate,
    PlanStep,
    SemanticAction,
    TestMethod,
    Wait,
    is_deferred,
)

logger = logging.getLogger(__name__)

BACKEND = "@playwright/mcp"
REF_PLACEHOLDER = "{{ resolve ref from latest snapshot }}"
PENDING = "pending"

EXECUTION_GUIDE = [
    "1. Run each entry of test_methods in order.",
    "2. On a 'browser_snapshot' step, take the snapshot and keep it for resolving refs in the steps that follow.",
    f"3. Replace '{REF_PLACEHOLDER}' inside args_template with the ref of the element in the latest snapshot that matches selector_hint.",
    "4. After running a step, update its locator_status to 'resolved' or 'not_found'.",
    "5. When every test method has run, fill in each result and the summary.",
]


@dataclass(frozen=True)
class CompilerState:
    current_url: str = ""
    fresh: frozenset[str] = frozenset()

    def is_fresh(self) -> bool:
        return self.current_url in self.fresh

    def mark_fresh(self, url: str | None = None) -> CompilerState:
        url = self.current_url if url is None else url
        return replace(self, fresh=self.fresh | {url})

    def invalidate(self) -> CompilerState:
        return replace(self, fresh=self.fresh - {self.current_url})


def _snapshot(note: str) -> PlanStep:
    return PlanStep(tool="browser_snapshot", args={}, note=note, snapshot=True)


def _ensure_snapshot(state: CompilerState, reason: str) -> tuple[CompilerState, list[PlanStep]]:
    if state.is_fresh():
        return state, []
    logger.debug(f"Auto-inserting snapshot before {reason} on {state.current_url or '<none>'}")
    return state.mark_fresh(), [_snapshot(f"Snapshot before {reason} (auto-inserted)")]


def _element_target(selector: str) -> dict[str, str]:
    return {"element": describe_selector(selector), "ref": REF_PLACEHOLDER}


def _count_script(selector: str) -> str:
    if selector.startswith("xpath="):
        expr = json.dumps(selector[len("xpath="):])
        return (
            f"() => document.evaluate({expr}, document, null, "
            "XPathResult.ORDERED_NODE_SNAPSHOT_TYPE, null).snapshotLength"
        )
    return f"() => document.querySelectorAll({json.dumps(selector)}).length"


def lower_action(  # noqa: PLR0911
    state: CompilerState, action: SemanticAction, base_url: str, wait_seconds: int = 2
) -> tuple[CompilerState, list[PlanStep]]:
    """Lower one action against the current snapshot state.

    Never raises: an action type without a lowering becomes a single
    skipped ``unhandled`` step.
    """
    if isinstance(action, Navigate):
        url = base_url if is_deferred(action.url) else action.url
        steps = [
            PlanStep(tool="browser_navigate", args={"url": url}, note=f"Navigate to {url}"),
            _snapshot("Capture accessibility snapshot to resolve element refs"),
        ]
        state = replace(state, current_url=url).mark_fresh(url)
        return state, steps

    if isinstance(action, Fill):
        state, steps = _ensure_snapshot(state, "fill")
        steps.append(
            PlanStep(
                tool="browser_fill_form",
                args_template={"fields": [{**_element_target(action.selector), "value": action.value}]},
                note=f'Fill "{action.selector}" with "{action.value}"',
                selector_hint=action.selector,
                locator_status=PENDING,
                original_action=action,
            )
        )
        return state, steps

    if isinstance(action, Clear):
        state, steps = _ensure_snapshot(state, "clear")
        steps.append(
            PlanStep(
                tool="browser_fill_form",
                args_template={"fields": [{**_element_target(action.selector), "value": ""}]},
                note=f'Clear "{action.selector}"',
                selector_hint=action.selector,
                locator_status=PENDING,
                original_action=action,
            )
        )
        return state, steps

    if isinstance(action, Click):
        state, steps = _ensure_snapshot(state, "click")
        steps.append(
            PlanStep(
                tool="browser_click",
                args_template=_element_target(action.selector),
                note=f'Click "{action.selector}"',
                selector_hint=action.selector,
                locator_status=PENDING,
                original_action=action,
            )
        )
        # The click may have changed the page.
        return state.invalidate(), steps

    if isinstance(action, GetText):
        state, steps = _ensure_snapshot(state, "reading text")
        steps.append(
            PlanStep(
                tool="browser_snapshot",
                args={},
                args_template=_element_target(action.selector),
                note=f'Read text from "{action.selector}" in the snapshot output',
                selector_hint=action.selector,
                locator_status=PENDING,
                original_action=action,
            )
        )
        return state, steps

    if isinstance(action, Wait):
        step = PlanStep(
            tool="browser_wait_for",
            args={"time": wait_seconds},
            note=f'Wait for "{action.selector}" to appear',
            selector_hint=action.selector,
            original_action=action,
        )
        return state.invalidate(), [step]

    if isinstance(action, AssertText):
        step = PlanStep(
            tool="browser_verify_text_visible",
            args={"text": action.expected},
            note=f'Assert text visible: "{action.expected}"',
            selector_hint=action.selector,
            locator_status=PENDING,
            original_action=action,
        )
        return state, [step]

    if isinstance(action, (AssertTrue, AssertFalse)):
        negate = "!" if isinstance(action, AssertFalse) else "!!"
        step = PlanStep(
            tool="browser_evaluate",
            args={"function": f"() => {negate}({action.expression})"},
            note=f"{action.type}: {action.expression}",
            original_action=action,
        )
        return state, [step]

    if isinstance(action, CountElements):
        step = PlanStep(
            tool="browser_evaluate",
            args={"function": _count_script(action.selector)},
            note=f'Count elements matching "{action.selector}"',
            selector_hint=action.selector,
            original_action=action,
        )
        return state, [step]

    step = PlanStep(
        tool="unhandled",
        note=f"Unhandled action type: {getattr(action, 'type', '?')}",
        original_action=action,
        skipped=True,
    )
    return state, [step]


def compile_method(
    method: TestMethod, base_url: str, wait_seconds: int = 2
) -> MethodPlan:
    """Compile one test method into a densely numbered step list."""
    state = CompilerState()
    steps: list[PlanStep] = []
    for action in method.actions:
        state, new_steps = lower_action(state, action, base_url, wait_seconds)
        steps.extend(new_steps)

    if method.actions and not any(isinstance(a, Navigate) for a in method.actions):
        bootstrap = [
            PlanStep(
                tool="browser_navigate",
                args={"url": base_url},
                note="Auto-inserted: Navigate to base URL (no explicit navigation in source)",
            ),
            _snapshot("Auto-inserted: Initial snapshot"),
        ]
        steps = bootstrap + steps

    for i, step in enumerate(steps, start=1):
        step.seq = i
    return MethodPlan(name=method.name, steps=steps, fresh_urls=state.fresh)


def compile_plan(
    extraction: ExtractionResult,
    base_url: str,
    source_file: str = "",
    wait_seconds: int = 2,
) -> ExecutionPlan:
    """Compile every method of an extraction result into one execution plan."""
    methods = [compile_method(m, base_url, wait_seconds) for m in extraction.test_methods]
    metadata = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "source_file": source_file,
        "base_url": base_url,
        "backend": BACKEND,
    }
    return ExecutionPlan(metadata=metadata, execution_guide=EXECUTION_GUIDE, methods=methods)
