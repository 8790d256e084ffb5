"""Failure types raised by the compose harness."""

from __future__ import annotations

from typing import Sequence

__all__ = [
    "ComposeHarnessError",
    "ProcessLaunchError",
    "DockerComposeExecutionError",
    "OutputTimeoutError",
    "OutputCollectionError",
    "NoSuchContainerError",
    "NoSuchPortError",
    "ConfigError",
]


class ComposeHarnessError(Exception):
    """Base exception for all compose harness errors."""


class ProcessLaunchError(ComposeHarnessError):
    """Raised when the compose process could not be started at all."""

    def __init__(self, command: Sequence[str], reason: str):
        self.command = tuple(command)
        self.reason = reason
        super().__init__(f"Could not start '{' '.join(self.command)}': {reason}")


class DockerComposeExecutionError(ComposeHarnessError):
    """
    Raised when a compose command exits with a non-zero code.

    Attributes:
        exit_code: The non-zero exit code
        command: The subcommand and its arguments
        output: Everything the command wrote before exiting
    """

    def __init__(self, message: str, *, exit_code: int, command: Sequence[str], output: str):
        self.exit_code = exit_code
        self.command = tuple(command)
        self.output = output
        super().__init__(message)


class OutputTimeoutError(ComposeHarnessError):
    """Raised when a command's output stream stays open past the output timeout.

    The child process is not killed; an environment this hung is not expected
    to recover.
    """


class OutputCollectionError(ComposeHarnessError):
    """Raised when draining a command's output fails."""


class NoSuchContainerError(ComposeHarnessError, ValueError):
    """Raised when no container exists for a requested service."""


class NoSuchPortError(ComposeHarnessError, KeyError):
    """Raised when a container does not publish the requested internal port."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message
        return str(self.args[0]) if self.args else ""


class ConfigError(ComposeHarnessError, ValueError):
    """Raised for invalid harness configuration."""
