"""Semantic action IR and execution plan definitions.

Actions are backend-agnostic browser intents recovered from test source.
Plan steps are instructions for a snapshot/ref-based automation backend.
Both serialize to plain dicts; the ``{"testMethods": [...]}`` document is
the interchange format between extraction and plan compilation.
"""

from __future__ import annotations

from dataclasses import MISSING, asdict, dataclass, field
from dataclasses import fields as dataclass_fields
from typing import Any, ClassVar, Union

DEFERRED_PREFIX = "{{"


def deferred(expr: str) -> str:
    """Wrap a source expression whose value is unknown until run time."""
    return f"{{{{ {expr} }}}}"


def is_deferred(value: str | None) -> bool:
    return isinstance(value, str) and value.startswith(DEFERRED_PREFIX)


@dataclass
class Navigate:
    type: ClassVar[str] = "navigate"
    url: str


@dataclass
class Click:
    type: ClassVar[str] = "click"
    selector: str


@dataclass
class Fill:
    type: ClassVar[str] = "fill"
    selector: str
    value: str


@dataclass
class Clear:
    type: ClassVar[str] = "clear"
    selector: str


@dataclass
class GetText:
    type: ClassVar[str] = "get_text"
    selector: str


@dataclass
class Wait:
    type: ClassVar[str] = "wait"
    selector: str
    condition: str | None = None  # e.g. visibilityOfElementLocated


@dataclass
class AssertText:
    type: ClassVar[str] = "assert_text"
    selector: str
    expected: str


@dataclass
class AssertTrue:
    type: ClassVar[str] = "assert_true"
    expression: str


@dataclass
class AssertFalse:
    type: ClassVar[str] = "assert_false"
    expression: str


@dataclass
class CountElements:
    type: ClassVar[str] = "count_elements"
    selector: str


@dataclass
class Unknown:
    """Action whose ``type`` the compiler has no lowering for.

    Only produced when reading an interchange document; the recognizer
    never emits it.
    """

    raw_type: str
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return self.raw_type


SemanticAction = Union[
    Navigate,
    Click,
    Fill,
    Clear,
    GetText,
    Wait,
    AssertText,
    AssertTrue,
    AssertFalse,
    CountElements,
    Unknown,
]

ACTION_TYPES: dict[str, type] = {
    cls.type: cls
    for cls in (
        Navigate,
        Click,
        Fill,
        Clear,
        GetText,
        Wait,
        AssertText,
        AssertTrue,
        AssertFalse,
        CountElements,
    )
}


def action_to_dict(action: SemanticAction) -> dict[str, Any]:
    if isinstance(action, Unknown):
        return {"type": action.raw_type, **action.fields}
    out: dict[str, Any] = {"type": action.type}
    out.update({k: v for k, v in asdict(action).items() if v is not None})
    return out


def action_from_dict(data: dict[str, Any]) -> SemanticAction:
    """Rebuild an action from its dict form.

    Unrecognized types, and known types with a missing or non-string
    field, come back as :class:`Unknown` so the compiler can flag them
    instead of failing.
    """
    typ = str(data.get("type", ""))
    fields = {k: v for k, v in data.items() if k != "type"}
    cls = ACTION_TYPES.get(typ)
    if cls is None:
        return Unknown(raw_type=typ, fields=fields)
    kwargs: dict[str, str] = {}
    for f in dataclass_fields(cls):
        value = fields.get(f.name)
        if value is None and f.default is not MISSING:
            continue
        if not isinstance(value, str):
            return Unknown(raw_type=typ, fields=fields)
        kwargs[f.name] = value
    return cls(**kwargs)


@dataclass
class TestMethod:
    __test__ = False  # not a pytest class

    name: str
    actions: list[SemanticAction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "actions": [action_to_dict(a) for a in self.actions]}


@dataclass
class ExtractionResult:
    test_methods: list[TestMethod] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"testMethods": [m.to_dict() for m in self.test_methods]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionResult:
        methods = [
            TestMethod(
                name=str(m.get("name", "")),
                actions=[action_from_dict(a) for a in m.get("actions", []) or []],
            )
            for m in data.get("testMethods", []) or []
        ]
        return cls(test_methods=methods)


@dataclass
class PlanStep:
    """One backend instruction. ``seq`` is assigned after the whole method is lowered."""

    tool: str
    note: str
    args: dict[str, Any] | None = None
    args_template: dict[str, Any] | None = None
    selector_hint: str | None = None
    locator_status: str | None = None  # pending|resolved|not_found
    original_action: SemanticAction | None = None
    snapshot: bool = False
    skipped: bool = False
    seq: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"seq": self.seq, "tool": self.tool}
        if self.args is not None:
            out["args"] = self.args
        if self.args_template is not None:
            out["args_template"] = self.args_template
        out["note"] = self.note
        if self.selector_hint is not None:
            out["selector_hint"] = self.selector_hint
        if self.locator_status is not None:
            out["locator_status"] = self.locator_status
        if self.original_action is not None:
            out["original_action"] = action_to_dict(self.original_action)
        if self.snapshot:
            out["snapshot"] = True
        if self.skipped:
            out["skipped"] = True
        return out


@dataclass
class MethodPlan:
    name: str
    steps: list[PlanStep] = field(default_factory=list)
    fresh_urls: frozenset[str] = frozenset()
    status: str = "pending"  # pass|fail|partial, filled in by the executing host

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "total_steps": len(self.steps),
            "steps": [s.to_dict() for s in self.steps],
            "result": {"status": self.status, "locator_failures": [], "notes": ""},
        }


@dataclass
class ExecutionPlan:
    metadata: dict[str, Any]
    execution_guide: list[str]
    methods: list[MethodPlan] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metadata": self.metadata,
            "execution_guide": list(self.execution_guide),
            "test_methods": [m.to_dict() for m in self.methods],
            "summary": {
                "total_methods": len(self.methods),
                "status": "pending",
                "locator_resolution_rate": None,
            },
        }
