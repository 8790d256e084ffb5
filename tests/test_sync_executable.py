import io
import os
import subprocess
import sys

import pytest

from compose_harness.errors import OutputCollectionError, OutputTimeoutError
from compose_harness.sync_executable import ProcessResult, SynchronousDockerComposeExecutable


class PythonExecutable:
    """Runs a Python snippet in place of docker-compose; args land in sys.argv."""

    def __init__(self, code):
        self.code = code
        self.processes = []

    def execute(self, *args):
        process = subprocess.Popen(
            [sys.executable, "-c", self.code, *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
        self.processes.append(process)
        return process


def test_run_captures_output_and_exit_code():
    lines = []
    executable = SynchronousDockerComposeExecutable(
        PythonExecutable("print('one'); print('two')"), lines.append
    )
    result = executable.run("ps")
    assert result == ProcessResult(0, os.linesep.join(["one", "two"]))
    assert lines == ["one", "two"]


def test_run_passes_command_to_executable():
    executable = SynchronousDockerComposeExecutable(
        PythonExecutable("import sys; print(' '.join(sys.argv[1:]))"), lambda line: None
    )
    assert executable.run("up", "-d").output == "up -d"


def test_run_returns_non_zero_exit_without_raising():
    executable = SynchronousDockerComposeExecutable(
        PythonExecutable("import sys; print('boom'); sys.exit(3)"), lambda line: None
    )
    result = executable.run("kill")
    assert result.exit_code == 3
    assert result.output == "boom"


def test_run_drains_output_larger_than_pipe_buffer():
    count = 20000
    code = f"import sys\nfor i in range({count}):\n    sys.stdout.write('line %05d %s\\n' % (i, 'x' * 80))\n"
    lines = []
    executable = SynchronousDockerComposeExecutable(PythonExecutable(code), lines.append, output_timeout=120)

    result = executable.run("logs")

    expected = ["line %05d %s" % (i, "x" * 80) for i in range(count)]
    assert result.exit_code == 0
    assert lines == expected
    assert result.output == os.linesep.join(expected)


def test_run_with_no_output_returns_empty_string():
    executable = SynchronousDockerComposeExecutable(PythonExecutable("pass"), lambda line: None)
    assert executable.run("rm", "-f") == ProcessResult(0, "")


def test_output_timeout_is_fatal():
    fake = PythonExecutable("import time; print('started', flush=True); time.sleep(30)")
    executable = SynchronousDockerComposeExecutable(fake, lambda line: None, output_timeout=0.5)
    try:
        with pytest.raises(OutputTimeoutError) as excinfo:
            executable.run("up")
        assert "up" in str(excinfo.value)
    finally:
        for process in fake.processes:
            process.kill()
            process.wait()


def test_failing_log_sink_surfaces_as_collection_error():
    def sink(line):
        raise RuntimeError("sink exploded")

    executable = SynchronousDockerComposeExecutable(PythonExecutable("print('hello')"), sink)
    with pytest.raises(OutputCollectionError) as excinfo:
        executable.run("ps")
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_failed_collection_leaves_no_running_child():
    def sink(line):
        raise RuntimeError("sink exploded")

    fake = PythonExecutable("import time; print('x', flush=True); time.sleep(20)")
    executable = SynchronousDockerComposeExecutable(fake, sink)
    with pytest.raises(OutputCollectionError):
        executable.run("up")
    assert fake.processes[0].poll() is not None


class StuckProcess:
    """Output already closed, but the process never exits until killed."""

    def __init__(self, output):
        self.stdout = io.StringIO(output)
        self.killed = False

    def wait(self, timeout=None):
        if not self.killed:
            raise subprocess.TimeoutExpired("docker-compose", timeout)
        return -9

    def kill(self):
        self.killed = True


class StuckExecutable:
    def __init__(self, process):
        self.process = process

    def execute(self, *args):
        return self.process


def test_unreaped_process_is_killed_after_reap_timeout(caplog):
    process = StuckProcess("a\nb\n")
    executable = SynchronousDockerComposeExecutable(StuckExecutable(process), lambda line: None, reap_timeout=0.1)

    result = executable.run("down")

    assert process.killed is True
    assert result == ProcessResult(-9, os.linesep.join(["a", "b"]))
    assert "killing it" in caplog.text
