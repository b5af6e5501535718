from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich import print
from rich.table import Table

from .api.tools import handle_tool
from .config.settings import settings
from .core.planner.bridge import PlanInputError, plan_from_extraction, write_plan
from .core.validator.report import validate_report
from .core.validator.syntax import validate_syntax
from .runtime.storage import ResultStore, load_evaluation_results

app = typer.Typer(add_completion=False, help="JUnit + Selenium → Playwright MCP bridge")


@app.callback()
def _setup(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else settings.log_level.upper())


def _fail(msg: str, code: int = 1) -> NoReturn:
    print(f"[red]❌ {msg}[/red]")
    raise typer.Exit(code=code)


def _emit(result: dict[str, Any]) -> None:
    if "error" in result:
        _fail(result["error"])
    typer.echo(json.dumps(result, ensure_ascii=False, indent=2))


@app.command()
def syntax(java_path: Path) -> None:
    """Static structure check of a .java file."""
    result = handle_tool("validate_syntax", {"java_path": str(java_path)})
    _emit(result)
    if not result["valid"]:
        raise typer.Exit(code=1)


@app.command("compile")
def compile_cmd(java_path: Path, classpath: str = typer.Option("", help="javac -cp value")) -> None:
    """Compile a .java file with javac (skipped when no JDK)."""
    result = handle_tool("compile", {"java_path": str(java_path), "classpath": classpath})
    _emit(result)
    if result["status"] == "error":
        raise typer.Exit(code=1)


@app.command()
def coverage(txt_path: Path, feature: str = typer.Option(..., help="Feature name")) -> None:
    """Feature scenario coverage of a model output report."""
    result = handle_tool("validate_spec", {"txt_path": str(txt_path), "feature": feature})
    _emit(result)
    if not result["valid"]:
        raise typer.Exit(code=1)


@app.command()
def extract(
    java_path: Path,
    test_name: Optional[str] = typer.Option(None, help="Only this @Test method"),
    order: Optional[str] = typer.Option(None, help="grouped|source"),
    out: Optional[Path] = typer.Option(None, help="Write the actions JSON here"),
) -> None:
    """Extract semantic actions from a .java file."""
    result = handle_tool(
        "extract_actions",
        {"java_path": str(java_path), "test_name": test_name, "order": order},
    )
    if out and "error" not in result:
        out.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"[green]✅ Actions written:[/green] {out}")
        return
    _emit(result)


@app.command()
def plan(
    input_path: Path,
    base_url: Optional[str] = typer.Option(None, help="Base URL (default: BRIDGE_BASE_URL)"),
) -> None:
    """Build a Playwright MCP plan from an actions JSON file or a .java source."""
    if not input_path.is_file():
        _fail(f"File not found: {input_path}")
    url = base_url or settings.base_url

    if input_path.suffix == ".java":
        result = handle_tool(
            "build_plan", {"java_path": str(input_path), "base_url": url, "write": True}
        )
        if "error" in result:
            _fail(result["error"])
        out = result["plan_path"]
        methods = result["test_methods"]
    else:
        try:
            document = json.loads(input_path.read_text(encoding="utf-8"))
            execution_plan = plan_from_extraction(
                document,
                url,
                source_file=str(input_path.resolve()),
                wait_seconds=settings.wait_step_seconds,
            )
        except (json.JSONDecodeError, PlanInputError) as e:
            _fail(str(e))
        out = str(write_plan(execution_plan, input_path))
        methods = execution_plan.to_dict()["test_methods"]

    print("[green]✅ Playwright validation plan generated:[/green]")
    print(f"   {out}")
    print(f"   Methods: {len(methods)}")
    print(f"   Total steps: {sum(m['total_steps'] for m in methods)}")


@app.command("export")
def export_cmd(
    results_json: Path = typer.Argument(Path("results/evaluation-results.json")),
    out_dir: Optional[Path] = typer.Option(None, help="Result store root (default: RESULTS_ROOT)"),
) -> None:
    """Split an evaluation results file into per-model .txt/.java files."""
    if not results_json.is_file():
        _fail(f"File not found: {results_json}")
    entries = load_evaluation_results(results_json)
    if not entries:
        _fail("No results found; check the structure of the results file.")

    store = ResultStore(out_dir or Path(settings.results_root))
    summary = store.export(entries)
    print(f"📊 Saved: {len(summary.saved)}  Skipped: {summary.skipped}")
    print(f"📁 Output base: {store.root.resolve()}/")


def _check_report(txt_path: Path) -> tuple[Path, bool, list[str]]:
    errors = validate_report(txt_path.read_text(encoding="utf-8")).errors
    java_path = txt_path.with_suffix(".java")
    if java_path.is_file():
        syntax_report = validate_syntax(
            java_path.read_text(encoding="utf-8"), min_tests=settings.min_test_methods
        )
        errors = errors + [f"{java_path.name}: {e}" for e in syntax_report.errors]
    return txt_path, not errors, errors


@app.command()
def check(
    results_dir: Optional[Path] = typer.Argument(None, help="Result store root"),
    workers: int = typer.Option(4, help="Files checked in parallel"),
) -> None:
    """Validate every stored report (and its .java sibling) under the result store."""
    store = ResultStore(results_dir or Path(settings.results_root))
    reports = store.iter_reports()
    if not reports:
        _fail(f"No reports found under {store.root}")

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        outcomes = list(pool.map(_check_report, reports))

    table = Table(title="Report validation")
    table.add_column("File")
    table.add_column("Result")
    table.add_column("Errors")
    for path, ok, errors in outcomes:
        table.add_row(
            str(path.relative_to(store.root)),
            "[green]PASS[/green]" if ok else "[red]FAIL[/red]",
            "\n".join(errors),
        )
    print(table)

    failed = sum(1 for _, ok, _ in outcomes if not ok)
    print(f"  PASS: {len(outcomes) - failed}")
    print(f"  FAIL: {failed}")
    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
