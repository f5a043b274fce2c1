from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


_DEFAULT_PATHS = {
    "file": "./data/tasks.json",
    "sqlite": "./data/tasks.db",
}


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - STORAGE_BACKEND: 'memory' (default), 'file' or 'sqlite'
    - STORAGE_PATH: location of the file/sqlite store. Defaults to './data/tasks.json'
      for 'file' and './data/tasks.db' for 'sqlite'
    - TASKS_STORAGE_KEY: key holding the serialized task collection. Default 'tasks'
    - EMPTY_LIST_TEXT: placeholder shown when there are no tasks. Default 'No tasks found'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: INFO)
    - LOG_FILE: optional path of a log file; console only when unset
    """

    storage_backend: str
    storage_path: Optional[str]
    storage_key: str
    empty_list_text: str
    cors_allow_origins: List[str]
    log_level: str
    log_file: Optional[str]


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("STORAGE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "file", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    storage_path: Optional[str] = None
    if backend in _DEFAULT_PATHS:
        storage_path = _get_env("STORAGE_PATH", _DEFAULT_PATHS[backend]).strip()

    log_file = os.getenv("LOG_FILE") or None

    return Settings(
        storage_backend=backend,
        storage_path=storage_path,
        storage_key=_get_env("TASKS_STORAGE_KEY", "tasks").strip(),
        empty_list_text=_get_env("EMPTY_LIST_TEXT", "No tasks found"),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        log_file=log_file.strip() if log_file else None,
    )
