"""External Java compiler as a black-box capability.

Compilation is optional tooling: when no JDK is installed, or javac
hangs past its timeout, the outcome is ``skipped`` so the rest of the
pipeline keeps going. Only a real non-zero exit is an ``error``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

OK = "ok"
ERROR = "error"
SKIPPED = "skipped"


@dataclass
class CompileOutcome:
    status: str  # ok|error|skipped
    output: str = ""
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "output": self.output, "errors": list(self.errors)}


@runtime_checkable
class Compiler(Protocol):
    """Anything that can compile one source file into an outcome."""

    def run(self, java_path: str, classpath: str = "") -> CompileOutcome: ...


def split_error_lines(raw: str) -> list[str]:
    return [line.strip() for line in raw.splitlines() if line.strip()]


class JavacCompiler:
    """Runs ``javac -d <tmp>`` on a single file with a bounded timeout."""

    def __init__(self, binary: str = "javac", timeout_s: float = 30) -> None:
        self.binary = binary
        self.timeout_s = timeout_s

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def run(self, java_path: str, classpath: str = "") -> CompileOutcome:
        if not Path(java_path).exists():
            return CompileOutcome(status=ERROR, errors=[f"File not found: {java_path}"])

        if not self.is_available():
            logger.info(f"{self.binary} not found; skipping compilation of {java_path}")
            return CompileOutcome(
                status=SKIPPED,
                output=f"{self.binary} not found. Install a JDK to enable compilation.",
            )

        with tempfile.TemporaryDirectory(prefix="junit-compile-") as out_dir:
            cmd = [self.binary, "-d", out_dir]
            if classpath:
                cmd += ["-cp", classpath]
            cmd.append(java_path)
            try:
                result = subprocess.run(
                    cmd,
                    check=False,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    timeout=self.timeout_s,
                )
            except subprocess.TimeoutExpired:
                logger.warning(f"Compilation timed out after {self.timeout_s}s: {java_path}")
                return CompileOutcome(
                    status=SKIPPED,
                    output=f"Compilation timed out after {self.timeout_s}s.",
                )
            except FileNotFoundError:
                return CompileOutcome(
                    status=SKIPPED,
                    output=f"{self.binary} not found. Install a JDK to enable compilation.",
                )

        combined = "\n".join(s for s in (result.stdout, result.stderr) if s)
        if result.returncode != 0:
            logger.warning(f"Compilation failed ({result.returncode}): {java_path}")
            raw = result.stderr or result.stdout or f"{self.binary} exited with {result.returncode}"
            return CompileOutcome(status=ERROR, output=raw, errors=split_error_lines(raw))
        return CompileOutcome(status=OK, output=combined or "Compilation successful.")
