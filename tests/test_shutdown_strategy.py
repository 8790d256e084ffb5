from unittest.mock import Mock, call

import pytest

from compose_harness.compose import DockerCompose
from compose_harness.shutdown_strategy import ShutdownStrategy


def test_kill_down_calls_kill_on_stop():
    compose = Mock(spec=DockerCompose)

    ShutdownStrategy.KILL_DOWN.stop(compose)

    assert compose.mock_calls == [call.kill()]


def test_kill_down_calls_down_on_shutdown():
    compose = Mock(spec=DockerCompose)
    docker = Mock()

    ShutdownStrategy.KILL_DOWN.shutdown(compose, docker)

    assert compose.mock_calls == [call.down()]
    assert docker.mock_calls == []


@pytest.mark.parametrize(
    "strategy, stop_calls, shutdown_calls",
    [
        (ShutdownStrategy.GRACEFUL, [], [call.down()]),
        (ShutdownStrategy.AGGRESSIVE, [call.kill()], [call.rm()]),
        (ShutdownStrategy.SKIP, [], []),
    ],
)
def test_other_strategies(strategy, stop_calls, shutdown_calls):
    stopped = Mock(spec=DockerCompose)
    strategy.stop(stopped)
    assert stopped.mock_calls == stop_calls

    shut_down = Mock(spec=DockerCompose)
    strategy.shutdown(shut_down, Mock())
    assert shut_down.mock_calls == shutdown_calls


def test_strategies_are_distinct_members():
    assert len(list(ShutdownStrategy)) == 4
