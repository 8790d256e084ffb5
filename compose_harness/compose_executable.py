from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .errors import ProcessLaunchError

log = logging.getLogger(__name__)

DEFAULT_BINARY = "docker-compose"


class DockerComposeExecutable:
    """Start docker-compose processes against a fixed set of compose files.

    Every invocation runs in the same working directory with the same
    environment overrides. stderr is folded into stdout so callers see the
    tool's complaints (e.g. unknown subcommands) in the captured output.
    """

    def __init__(
        self,
        compose_files: Sequence[str] = (),
        *,
        project_name: Optional[str] = None,
        cwd: Optional[str] = None,
        env_overrides: Optional[Dict[str, str]] = None,
        binary: Union[str, Sequence[str]] = DEFAULT_BINARY,
    ):
        self.compose_files = [str(f) for f in compose_files]
        self.project_name = project_name
        self.cwd = str(Path(cwd).resolve()) if cwd else os.getcwd()
        self.env_overrides = dict(env_overrides or {})
        self.binary = [binary] if isinstance(binary, str) else list(binary)

    @property
    def tool_name(self) -> str:
        return " ".join(self.binary)

    @property
    def default_project_name(self) -> str:
        """The project name compose prefixes container names with.

        Without an explicit name compose uses the directory holding the first
        compose file.
        """
        if self.project_name:
            return self.project_name
        project_dir = Path(self.cwd)
        if self.compose_files:
            project_dir = (project_dir / self.compose_files[0]).resolve().parent
        return project_dir.name

    def command_line(self, *args: str) -> List[str]:
        cmd = list(self.binary)
        for compose_file in self.compose_files:
            cmd.extend(["--file", compose_file])
        if self.project_name:
            cmd.extend(["--project-name", self.project_name])
        cmd.extend(args)
        return cmd

    def execute(self, *args: str) -> subprocess.Popen:
        cmd = self.command_line(*args)
        env = os.environ.copy()
        env.update(self.env_overrides)
        log.debug("Running %s in %s", cmd, self.cwd)
        try:
            return subprocess.Popen(
                cmd,
                cwd=self.cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise ProcessLaunchError(cmd, str(exc)) from exc
