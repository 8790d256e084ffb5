import os
import subprocess
import sys
from pathlib import Path


def test_cli_help_runs_successfully():
    repo_root = Path(__file__).resolve().parents[1]
    env = os.environ.copy()
    result = subprocess.run(
        [sys.executable, "scripts/run_compose_harness.py", "--help"],
        cwd=str(repo_root),
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    assert result.returncode == 0, result.stderr
    assert "Drive docker-compose environments for tests." in result.stdout
