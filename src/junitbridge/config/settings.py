from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


@dataclass
class Settings:
    base_url: str = os.getenv("BRIDGE_BASE_URL", "http://localhost:8080")
    results_root: str = os.getenv("RESULTS_ROOT", "results")
    javac_bin: str = os.getenv("JAVAC_BIN", "javac")
    compile_timeout_s: int = _env_int("COMPILE_TIMEOUT_S", 30)
    wait_step_seconds: int = _env_int("WAIT_STEP_SECONDS", 2)
    action_order: str = os.getenv("ACTION_ORDER", "grouped")  # grouped|source
    min_test_methods: int = _env_int("MIN_TEST_METHODS", 3)
    mcp_transport: str = os.getenv("MCP_TRANSPORT", "stdio")  # stdio|streamable-http
    mcp_host: str = os.getenv("MCP_HOST", "127.0.0.1")
    mcp_port: int = _env_int("MCP_PORT", 8085)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    write_plan_files: bool = _env_bool("WRITE_PLAN_FILES", True)


settings = Settings()
