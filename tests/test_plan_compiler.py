"""Tests for plan compilation (actions → snapshot/ref backend steps)."""

from __future__ import annotations

import json

import pytest

from junitbridge.core.extractor.actions import extract_actions
from junitbridge.core.ir.model import (
    AssertFalse,
    AssertText,
    AssertTrue,
    Clear,
    Click,
    CountElements,
    ExtractionResult,
    Fill,
    GetText,
    Navigate,
    TestMethod,
    Unknown,
    Wait,
    action_from_dict,
    deferred,
)
from junitbridge.core.planner.compiler import (
    REF_PLACEHOLDER,
    CompilerState,
    compile_method,
    compile_plan,
    lower_action,
)

BASE = "http://localhost:8080"


def _tools(plan):
    return [s.tool for s in plan.steps]


class TestLowerAction:
    """Single-action lowering against a snapshot state."""

    def test_navigate_marks_url_fresh(self):
        """Navigation snapshots and marks the URL fresh."""
        state, steps = lower_action(CompilerState(), Navigate(url="http://a/x"), BASE)
        assert [s.tool for s in steps] == ["browser_navigate", "browser_snapshot"]
        assert steps[0].args == {"url": "http://a/x"}
        assert state.current_url == "http://a/x"
        assert state.is_fresh()

    def test_deferred_navigate_resolves_to_base(self):
        """A deferred URL navigates to the base URL."""
        state, steps = lower_action(CompilerState(), Navigate(url=deferred("url")), BASE)
        assert steps[0].args == {"url": BASE}
        assert state.current_url == BASE

    def test_state_is_not_mutated(self):
        """Lowering returns a new state."""
        before = CompilerState(current_url="http://a", fresh=frozenset({"http://a"}))
        after, _ = lower_action(before, Click(selector="#b"), BASE)
        assert before.is_fresh()
        assert not after.is_fresh()

    def test_fill_on_stale_page_inserts_snapshot(self):
        """A stale page gets a snapshot before the fill."""
        state = CompilerState(current_url="http://a")
        state, steps = lower_action(state, Fill(selector="#q", value="v"), BASE)
        assert [s.tool for s in steps] == ["browser_snapshot", "browser_fill_form"]
        assert steps[0].snapshot is True
        assert state.is_fresh()
        field = steps[1].args_template["fields"][0]
        assert field == {"element": 'element with id="q"', "ref": REF_PLACEHOLDER, "value": "v"}
        assert steps[1].locator_status == "pending"
        assert steps[1].selector_hint == "#q"

    def test_clear_fills_empty_value(self):
        """Clear is a fill with an empty value."""
        state = CompilerState(current_url="http://a", fresh=frozenset({"http://a"}))
        _, steps = lower_action(state, Clear(selector="#q"), BASE)
        assert len(steps) == 1
        assert steps[0].args_template["fields"][0]["value"] == ""

    def test_wait_invalidates_without_snapshot(self):
        """Waits emit no snapshot but invalidate the page."""
        state = CompilerState(current_url="http://a", fresh=frozenset({"http://a"}))
        state, steps = lower_action(state, Wait(selector=".x"), BASE, wait_seconds=3)
        assert [s.tool for s in steps] == ["browser_wait_for"]
        assert steps[0].args == {"time": 3}
        assert not state.is_fresh()

    def test_get_text_reads_from_snapshot(self):
        """Reading text is a snapshot step."""
        state = CompilerState(current_url="http://a", fresh=frozenset({"http://a"}))
        state, steps = lower_action(state, GetText(selector=".msg"), BASE)
        assert [s.tool for s in steps] == ["browser_snapshot"]
        assert steps[0].args_template["ref"] == REF_PLACEHOLDER
        assert steps[0].locator_status == "pending"
        assert state.is_fresh()

    def test_assert_text_needs_no_snapshot(self):
        """Text assertions use visibility checks."""
        _, steps = lower_action(CompilerState(), AssertText(selector=".m", expected="Hi"), BASE)
        assert [s.tool for s in steps] == ["browser_verify_text_visible"]
        assert steps[0].args == {"text": "Hi"}

    def test_boolean_assertions(self):
        """assert_false negates the expression."""
        _, t = lower_action(CompilerState(), AssertTrue(expression="a > 1"), BASE)
        _, f = lower_action(CompilerState(), AssertFalse(expression="b"), BASE)
        assert t[0].tool == f[0].tool == "browser_evaluate"
        assert t[0].args["function"] == "() => !!(a > 1)"
        assert f[0].args["function"] == "() => !(b)"

    def test_count_elements_css_and_xpath(self):
        """Counting uses CSS or XPath evaluation."""
        _, css = lower_action(CompilerState(), CountElements(selector="li.item"), BASE)
        _, xp = lower_action(CompilerState(), CountElements(selector="xpath=//li"), BASE)
        assert css[0].args["function"] == '() => document.querySelectorAll("li.item").length'
        assert 'document.evaluate("//li"' in xp[0].args["function"]
        assert xp[0].args["function"].endswith(".snapshotLength")

    def test_unknown_type_is_skipped_not_raised(self):
        """Unknown actions become skipped steps."""
        action = Unknown(raw_type="hover", fields={"selector": "#m"})
        _, steps = lower_action(CompilerState(), action, BASE)
        assert len(steps) == 1
        assert steps[0].skipped is True
        assert steps[0].tool == "unhandled"
        assert steps[0].to_dict()["original_action"] == {"type": "hover", "selector": "#m"}


class TestCompileMethod:
    """Whole-method compilation and numbering."""

    def test_navigate_fill_click(self):
        """Fill and click reuse the snapshot taken after navigation."""
        method = TestMethod(
            name="m",
            actions=[
                Navigate(url="http://a/login"),
                Fill(selector="#x", value="v"),
                Click(selector="#y"),
            ],
        )
        plan = compile_method(method, BASE)
        assert _tools(plan) == [
            "browser_navigate",
            "browser_snapshot",
            "browser_fill_form",
            "browser_click",
        ]
        assert [s.seq for s in plan.steps] == [1, 2, 3, 4]
        assert "http://a/login" not in plan.fresh_urls

    def test_click_only_gets_bootstrap(self):
        """Methods without navigation get a bootstrap pair."""
        plan = compile_method(TestMethod(name="m", actions=[Click(selector="#x")]), BASE)
        assert _tools(plan) == [
            "browser_navigate",
            "browser_snapshot",
            "browser_snapshot",
            "browser_click",
        ]
        assert plan.steps[0].args == {"url": BASE}
        assert plan.steps[0].note.startswith("Auto-inserted")
        assert [s.seq for s in plan.steps] == [1, 2, 3, 4]

    def test_empty_method(self):
        """No actions, no steps."""
        plan = compile_method(TestMethod(name="empty", actions=[]), BASE)
        assert plan.steps == []
        assert plan.to_dict()["total_steps"] == 0

    def test_unknown_action_keeps_neighbours_in_order(self):
        """Skipped steps do not reorder their neighbours."""
        actions = [
            Navigate(url="http://a"),
            action_from_dict({"type": "drag", "selector": "#d"}),
            Click(selector="#c"),
        ]
        plan = compile_method(TestMethod(name="m", actions=actions), BASE)
        assert _tools(plan) == [
            "browser_navigate",
            "browser_snapshot",
            "unhandled",
            "browser_click",
        ]
        skipped = [s for s in plan.steps if s.skipped]
        assert len(skipped) == 1
        assert skipped[0].original_action.type == "drag"
        assert [s.seq for s in plan.steps] == [1, 2, 3, 4]

    def test_click_then_fill_resnapshots(self):
        """A click makes the next fill take a new snapshot."""
        actions = [Navigate(url="http://a"), Click(selector="#c"), Fill(selector="#f", value="x")]
        plan = compile_method(TestMethod(name="m", actions=actions), BASE)
        assert _tools(plan) == [
            "browser_navigate",
            "browser_snapshot",
            "browser_click",
            "browser_snapshot",
            "browser_fill_form",
        ]

    @pytest.mark.parametrize("name", ["testSuccessfulLogin", "testInvalidPassword", "testMenuLinks"])
    def test_seq_is_dense_for_real_methods(self, login_java, name):
        """Sequence numbers run 1..n."""
        method = next(m for m in extract_actions(login_java).test_methods if m.name == name)
        plan = compile_method(method, BASE)
        assert [s.seq for s in plan.steps] == list(range(1, len(plan.steps) + 1))


class TestCompilePlan:
    """Plan document assembly."""

    def test_full_document(self, login_java):
        """The plan has metadata, guide, methods and summary."""
        plan = compile_plan(extract_actions(login_java), BASE, source_file="/tmp/LoginTest.java")
        doc = plan.to_dict()
        json.dumps(doc)

        assert doc["metadata"]["base_url"] == BASE
        assert doc["metadata"]["source_file"] == "/tmp/LoginTest.java"
        assert doc["execution_guide"]
        assert doc["summary"] == {
            "total_methods": 3,
            "status": "pending",
            "locator_resolution_rate": None,
        }
        totals = {m["name"]: m["total_steps"] for m in doc["test_methods"]}
        assert totals == {"testSuccessfulLogin": 9, "testInvalidPassword": 7, "testMenuLinks": 6}
        for method in doc["test_methods"]:
            assert method["result"]["status"] == "pending"

    def test_empty_extraction(self):
        """An empty extraction compiles to an empty plan."""
        plan = compile_plan(ExtractionResult(), BASE)
        assert plan.to_dict()["test_methods"] == []
