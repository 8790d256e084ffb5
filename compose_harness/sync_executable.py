from __future__ import annotations

import logging
import os
import subprocess
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Callable, List

from .errors import OutputCollectionError, OutputTimeoutError

log = logging.getLogger(__name__)

LogSink = Callable[[str], None]

HOURS_TO_WAIT_FOR_STD_OUT_TO_CLOSE = 12
MINUTES_TO_WAIT_AFTER_STD_OUT_CLOSES = 1

DEFAULT_OUTPUT_TIMEOUT = HOURS_TO_WAIT_FOR_STD_OUT_TO_CLOSE * 60 * 60
DEFAULT_REAP_TIMEOUT = MINUTES_TO_WAIT_AFTER_STD_OUT_CLOSES * 60


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    output: str


class SynchronousDockerComposeExecutable:
    """Run one compose command to completion and capture what it printed.

    stdout is drained on a dedicated worker thread while the caller waits, so
    a child that fills the pipe buffer never blocks. Only that worker reads
    the pipe. The caller waits at most ``output_timeout`` seconds for the
    output to close, then at most ``reap_timeout`` seconds for the process to
    exit.
    """

    def __init__(
        self,
        executable,
        log_sink: LogSink,
        *,
        output_timeout: float = DEFAULT_OUTPUT_TIMEOUT,
        reap_timeout: float = DEFAULT_REAP_TIMEOUT,
    ):
        self.executable = executable
        self.log_sink = log_sink
        self.output_timeout = output_timeout
        self.reap_timeout = reap_timeout

    def run(self, *command: str) -> ProcessResult:
        process = self.executable.execute(*command)

        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="compose-output")
        try:
            output_processing = pool.submit(self._process_output_from, process)
            output = self._wait_for_result_from(output_processing, command)
        except OutputCollectionError:
            process.kill()
            process.wait()
            raise
        finally:
            pool.shutdown(wait=False)

        exit_code = self._wait_for_exit(process, command)
        return ProcessResult(exit_code, output)

    def _process_output_from(self, process: subprocess.Popen) -> str:
        lines: List[str] = []
        with process.stdout:
            for raw_line in process.stdout:
                line = raw_line.rstrip("\r\n")
                self.log_sink(line)
                lines.append(line)
        return os.linesep.join(lines)

    def _wait_for_result_from(self, output_processing: Future, command) -> str:
        try:
            return output_processing.result(timeout=self.output_timeout)
        except FutureTimeoutError as exc:
            raise OutputTimeoutError(
                f"Output of '{' '.join(command)}' did not close within {self.output_timeout} seconds"
            ) from exc
        except Exception as exc:
            raise OutputCollectionError(
                f"Failed to collect output of '{' '.join(command)}': {exc}"
            ) from exc

    def _wait_for_exit(self, process: subprocess.Popen, command) -> int:
        try:
            return process.wait(timeout=self.reap_timeout)
        except subprocess.TimeoutExpired:
            log.warning(
                "'%s' was still running %s seconds after its output closed; killing it",
                " ".join(command),
                self.reap_timeout,
            )
            process.kill()
            return process.wait()
