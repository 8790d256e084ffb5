from __future__ import annotations

import logging
from typing import Callable, Sequence

from .errors import DockerComposeExecutionError

log = logging.getLogger(__name__)

# (exit_code, output, command) -> None; may raise to abort the command.
ErrorHandler = Callable[[int, str, Sequence[str]], None]

DOWN_COMMAND_MISSING = "No such command"


def non_zero_exit_message(tool: str, exit_code: int, command: Sequence[str]) -> str:
    return f"'{tool} {' '.join(command)}' returned exit code {exit_code}"


def throwing_on_error(tool: str) -> ErrorHandler:
    def handle(exit_code: int, output: str, command: Sequence[str]) -> None:
        message = non_zero_exit_message(tool, exit_code, command)
        log.warning(message)
        log.warning("The output was:")
        log.warning(output)
        raise DockerComposeExecutionError(message, exit_code=exit_code, command=command, output=output)

    return handle


def swallowing_down_command_does_not_exist(tool: str) -> ErrorHandler:
    """Tolerate compose builds that predate the ``down`` subcommand.

    Any other failure of ``down`` is raised exactly as ``throwing_on_error``
    would raise it.
    """
    throwing = throwing_on_error(tool)

    def handle(exit_code: int, output: str, command: Sequence[str]) -> None:
        if DOWN_COMMAND_MISSING not in output:
            throwing(exit_code, output, command)
        log.warning("It looks like `%s down` didn't work.", tool)
        log.warning("This probably means your version of %s doesn't support the `down` command", tool)
        log.warning("Updating to version 1.6+ of %s is likely to fix this issue.", tool)

    return handle
