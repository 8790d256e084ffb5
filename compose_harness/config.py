from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlparse

import yaml

from .compose import COMMAND_TIMEOUT
from .compose_executable import DEFAULT_BINARY, DockerComposeExecutable
from .errors import ConfigError
from .shutdown_strategy import ShutdownStrategy
from .sync_executable import DEFAULT_OUTPUT_TIMEOUT, DEFAULT_REAP_TIMEOUT

LOCALHOST_IP = "127.0.0.1"
DEFAULT_CONFIG_FILE = "compose-harness.yaml"


@dataclass
class HarnessConfig:
    compose_files: List[str] = field(default_factory=lambda: ["docker-compose.yml"])
    project_name: Optional[str] = None
    working_dir: str = "."
    binary: str = DEFAULT_BINARY
    env: Dict[str, str] = field(default_factory=dict)
    output_timeout_seconds: float = DEFAULT_OUTPUT_TIMEOUT
    reap_timeout_seconds: float = DEFAULT_REAP_TIMEOUT
    logs_timeout_seconds: float = COMMAND_TIMEOUT
    shutdown_strategy: str = ShutdownStrategy.KILL_DOWN.name

    @classmethod
    def load(cls, path: str) -> "HarnessConfig":
        """Read a YAML config file; a missing file yields the defaults."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{config_path} must contain a mapping, got {type(raw).__name__}")
        return cls.from_dict(raw, base_dir=config_path.parent)

    @classmethod
    def from_dict(cls, raw: dict, base_dir: Optional[Path] = None) -> "HarnessConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        config = cls(**raw)
        config._validate()
        if isinstance(config.compose_files, str):
            config.compose_files = [config.compose_files]
        config.compose_files = [str(f) for f in config.compose_files]
        config.env = {str(k): str(v) for k, v in (config.env or {}).items()}
        if base_dir is not None and not Path(config.working_dir).is_absolute():
            config.working_dir = str(base_dir / config.working_dir)
        config.strategy()
        return config

    def _validate(self) -> None:
        files = [self.compose_files] if isinstance(self.compose_files, str) else self.compose_files
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ConfigError("compose_files must be a file name or a list of file names")
        if self.project_name is not None and not isinstance(self.project_name, str):
            raise ConfigError("project_name must be a string")
        for name in ("working_dir", "binary", "shutdown_strategy"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"{name} must be a non-empty string")
        if self.env is not None and not isinstance(self.env, dict):
            raise ConfigError("env must be a mapping of variable names to values")
        for name in ("output_timeout_seconds", "reap_timeout_seconds", "logs_timeout_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number of seconds, got {value!r}")

    def host_ip(self) -> str:
        """IP address published ports are reachable on, taken from DOCKER_HOST."""
        docker_host = self.env.get("DOCKER_HOST") or os.environ.get("DOCKER_HOST")
        if not docker_host:
            return LOCALHOST_IP
        parsed = urlparse(docker_host)
        if parsed.scheme in ("tcp", "http", "https") and parsed.hostname:
            return parsed.hostname
        return LOCALHOST_IP

    def strategy(self) -> ShutdownStrategy:
        try:
            return ShutdownStrategy[str(self.shutdown_strategy).upper()]
        except KeyError:
            choices = ", ".join(s.name for s in ShutdownStrategy)
            raise ConfigError(
                f"Unknown shutdown strategy '{self.shutdown_strategy}' (expected one of {choices})"
            ) from None

    def executable(self) -> DockerComposeExecutable:
        return DockerComposeExecutable(
            self.compose_files,
            project_name=self.project_name,
            cwd=self.working_dir,
            env_overrides=self.env,
            binary=self.binary.split() if " " in self.binary else self.binary,
        )
