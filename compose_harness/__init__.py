"""Compose harness package.

Drives docker-compose environments from test code:
- Running compose subcommands synchronously with bounded waits
- Per-command error policies for non-zero exits
- Querying container names, published ports and logs
- Tearing environments down through a shutdown strategy
"""

from .compose import DockerCompose
from .compose_executable import DockerComposeExecutable
from .config import HarnessConfig
from .container import Container
from .errors import (
    ComposeHarnessError,
    DockerComposeExecutionError,
    NoSuchContainerError,
    OutputTimeoutError,
)
from .ps_parsing import DockerPort, Ports
from .shutdown_strategy import ShutdownStrategy
from .sync_executable import ProcessResult, SynchronousDockerComposeExecutable

__all__ = [
    "DockerCompose",
    "DockerComposeExecutable",
    "SynchronousDockerComposeExecutable",
    "ProcessResult",
    "ShutdownStrategy",
    "HarnessConfig",
    "Container",
    "DockerPort",
    "Ports",
    "ComposeHarnessError",
    "DockerComposeExecutionError",
    "NoSuchContainerError",
    "OutputTimeoutError",
]

__version__ = "0.1.0"
