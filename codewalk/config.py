"""Configuration for codewalk, loaded from environment variables."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path

EXECUTOR_TYPES = ("remote", "sandbox")


@dataclass
class Config:
    executor_type: str = "remote"  # "remote" or "sandbox"
    api_url: str = "http://localhost:8081/api"
    compile_url: str = "http://localhost:8081/api/compile"
    module_dir: str = "modules"
    sandbox_command: str = "wasmtime run"
    execution_timeout: int = 10  # seconds
    request_timeout: float = 30.0  # seconds
    db_path: str = ""
    go_playground_url: str = "https://play.golang.org/compile"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.executor_type not in EXECUTOR_TYPES:
            raise ValueError(
                f"Unknown executor type {self.executor_type!r}; expected one of {', '.join(EXECUTOR_TYPES)}"
            )

    @property
    def sandbox_argv(self) -> list[str]:
        return shlex.split(self.sandbox_command)

    @property
    def module_path(self) -> Path:
        return Path(self.module_dir).expanduser()

    @classmethod
    def from_env(cls, **overrides) -> Config:
        overrides = {k: v for k, v in overrides.items() if v is not None}
        kwargs: dict = {}
        env_map: dict[str, tuple[str, type]] = {
            "CODEWALK_EXECUTOR": ("executor_type", str),
            "CODEWALK_API_URL": ("api_url", str),
            "CODEWALK_COMPILE_URL": ("compile_url", str),
            "CODEWALK_MODULE_DIR": ("module_dir", str),
            "CODEWALK_SANDBOX_COMMAND": ("sandbox_command", str),
            "CODEWALK_EXECUTION_TIMEOUT": ("execution_timeout", int),
            "CODEWALK_REQUEST_TIMEOUT": ("request_timeout", float),
            "CODEWALK_DB_PATH": ("db_path", str),
            "GO_PLAYGROUND_URL": ("go_playground_url", str),
            "CODEWALK_LOG_LEVEL": ("log_level", str),
        }
        for env_var, (field_name, conv) in env_map.items():
            val = os.environ.get(env_var)
            if val is not None:
                kwargs[field_name] = conv(val)
        # The compile endpoint lives under the API unless set explicitly
        if "compile_url" not in kwargs and "compile_url" not in overrides:
            api_url = overrides.get("api_url") or kwargs.get("api_url")
            if api_url:
                kwargs["compile_url"] = api_url.rstrip("/") + "/compile"
        kwargs.update(overrides)
        return cls(**kwargs)
