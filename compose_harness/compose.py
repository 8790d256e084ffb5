from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional, Set, TextIO

from .compose_executable import DockerComposeExecutable
from .container import Container
from .error_handlers import ErrorHandler, swallowing_down_command_does_not_exist, throwing_on_error
from .errors import NoSuchContainerError
from .ps_parsing import Ports, parse_container_names, parse_ports
from .sync_executable import (
    DEFAULT_OUTPUT_TIMEOUT,
    DEFAULT_REAP_TIMEOUT,
    SynchronousDockerComposeExecutable,
)

log = logging.getLogger(__name__)

COMMAND_TIMEOUT = 2 * 60


class DockerCompose:
    """Typed docker-compose operations for a single environment.

    Each operation runs one subcommand synchronously and applies its own
    error policy when the exit code is non-zero.
    """

    def __init__(
        self,
        executable: DockerComposeExecutable,
        *,
        host_ip: str = "127.0.0.1",
        output_timeout: float = DEFAULT_OUTPUT_TIMEOUT,
        reap_timeout: float = DEFAULT_REAP_TIMEOUT,
        logs_timeout: float = COMMAND_TIMEOUT,
        synchronous_executable: Optional[SynchronousDockerComposeExecutable] = None,
    ):
        self.raw_executable = executable
        self.executable = synchronous_executable or SynchronousDockerComposeExecutable(
            executable,
            log.debug,
            output_timeout=output_timeout,
            reap_timeout=reap_timeout,
        )
        self.host_ip = host_ip
        self.logs_timeout = logs_timeout

    @classmethod
    def from_config(cls, config) -> "DockerCompose":
        return cls(
            config.executable(),
            host_ip=config.host_ip(),
            output_timeout=config.output_timeout_seconds,
            reap_timeout=config.reap_timeout_seconds,
            logs_timeout=config.logs_timeout_seconds,
        )

    @property
    def tool(self) -> str:
        return self.raw_executable.tool_name

    def build(self) -> None:
        self._execute(throwing_on_error(self.tool), "build")

    def up(self) -> None:
        self._execute(throwing_on_error(self.tool), "up", "-d")

    def down(self) -> None:
        self._execute(swallowing_down_command_does_not_exist(self.tool), "down")

    def kill(self) -> None:
        self._execute(throwing_on_error(self.tool), "kill")

    def rm(self) -> None:
        self._execute(throwing_on_error(self.tool), "rm", "-f")

    def ps(self) -> Set[str]:
        ps_output = self._execute(throwing_on_error(self.tool), "ps")
        return parse_container_names(ps_output, self.raw_executable.default_project_name)

    def container(self, name: str) -> Container:
        return Container(name, self)

    def ports(self, service: str) -> Ports:
        ps_output = self._execute(throwing_on_error(self.tool), "ps", service)
        if not ps_output.strip():
            raise NoSuchContainerError(f"No container with name '{service}' found")
        return parse_ports(ps_output, self.host_ip)

    def write_logs(self, container: str, sink: TextIO) -> bool:
        """Copy a container's logs into ``sink`` until the log stream closes.

        Returns whether the ``logs`` process exited within ``logs_timeout``
        once the stream closed. A process that did not exit is killed.
        """
        process = self.raw_executable.execute("logs", "--no-color", container)
        finished = False
        try:
            with process.stdout:
                shutil.copyfileobj(process.stdout, sink)
            try:
                process.wait(timeout=self.logs_timeout)
                finished = True
            except subprocess.TimeoutExpired:
                log.warning("Gave up waiting for logs of '%s' after %s seconds", container, self.logs_timeout)
            return finished
        finally:
            if not finished:
                process.kill()
                process.wait()

    def _execute(self, error_handler: ErrorHandler, *command: str) -> str:
        result = self.executable.run(*command)

        if result.exit_code != 0:
            error_handler(result.exit_code, result.output, command)

        return result.output
