"""Factory for creating execution backends based on configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from codewalk.backend_base import ExecutionBackend, SandboxRuntime
from codewalk.backend_remote import RemoteCompileBackend

if TYPE_CHECKING:
    from codewalk.config import Config


def create_backend(config: Config, runtime: SandboxRuntime | None = None) -> ExecutionBackend:
    """Create a backend based on config.executor_type."""
    if config.executor_type == "sandbox":
        from codewalk.backend_sandbox import LocalSandboxBackend, SubprocessRuntime

        if runtime is None:
            runtime = SubprocessRuntime(config.sandbox_argv, timeout=config.execution_timeout)
        return LocalSandboxBackend(runtime, config.module_path)
    return RemoteCompileBackend(config)
