"""Result store: model outputs and derived Java sources on disk.

Layout::

    <root>/<model>/<description>.txt   full model output
    <root>/<model>/<description>.java  fenced ```java blocks, when present
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_JAVA_BLOCK_RE = re.compile(r"```java\s*([\s\S]*?)\s*```")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def to_model_dir_name(provider_id: str) -> str:
    """``openrouter:meta-llama/llama-4-scout:free`` → ``llama-4-scout``."""
    name = re.sub(r"^openrouter:", "", provider_id)
    name = re.sub(r":[^/]+$", "", name)
    name = re.sub(r"^.*/", "", name)
    return re.sub(r'[<>:"/\\|?*]', "_", name)


def to_safe_filename(description: str) -> str:
    name = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", description)
    name = re.sub(r"\s+", "_", name)
    return name[:100]


def extract_java_blocks(text: str) -> str | None:
    blocks = _JAVA_BLOCK_RE.findall(text)
    if not blocks:
        return None
    return "\n\n".join(blocks)


def load_evaluation_results(path: Path) -> list[dict[str, Any]]:
    """Read entries from an evaluation results file (nested or flat shape)."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    results = raw.get("results") if isinstance(raw, dict) else None
    if isinstance(results, dict):
        results = results.get("results")
    return results if isinstance(results, list) else []


@dataclass
class SavedOutput:
    model: str
    txt_path: Path
    java_path: Path | None


@dataclass
class ExportSummary:
    saved: list[SavedOutput]
    skipped: int


class ResultStore:
    def __init__(self, root: Path) -> None:
        self.root = root

    def save_output(self, provider_id: str, description: str, output: str) -> SavedOutput:
        model = to_model_dir_name(provider_id)
        model_dir = self.root / model
        ensure_dir(model_dir)
        stem = to_safe_filename(description)

        txt_path = model_dir / f"{stem}.txt"
        txt_path.write_text(output, encoding="utf-8")

        java_path: Path | None = None
        java = extract_java_blocks(output)
        if java:
            java_path = model_dir / f"{stem}.java"
            java_path.write_text(java, encoding="utf-8")

        logger.info(f"[{model}] {stem}.txt{' + .java' if java_path else ' (no Java block)'}")
        return SavedOutput(model=model, txt_path=txt_path, java_path=java_path)

    def export(self, results: list[dict[str, Any]]) -> ExportSummary:
        saved: list[SavedOutput] = []
        skipped = 0
        for entry in results:
            provider = entry.get("provider")
            provider_id = (
                provider.get("id") if isinstance(provider, dict) else provider
            ) or "(unknown-provider)"
            test_case = entry.get("testCase") or {}
            description = (
                test_case.get("description")
                or entry.get("description")
                or f"test_{len(saved) + skipped}"
            )
            response = entry.get("response") or {}
            output = response.get("output") or entry.get("output") or ""
            if not output:
                logger.warning(f"Skip (no output): [{provider_id}] {description}")
                skipped += 1
                continue
            saved.append(self.save_output(str(provider_id), str(description), str(output)))
        return ExportSummary(saved=saved, skipped=skipped)

    def iter_reports(self) -> list[Path]:
        return sorted(p for p in self.root.glob("*/*.txt") if p.is_file())
