from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class ShutdownStrategy(Enum):
    """How an environment is torn down.

    Each member is ``(stop operations, shutdown operations)``, the names of
    ``DockerCompose`` methods run in order. ``stop`` runs when the environment
    is being left; ``shutdown`` runs afterwards to release it.
    """

    KILL_DOWN = (("kill",), ("down",))
    GRACEFUL = ((), ("down",))
    AGGRESSIVE = (("kill",), ("rm",))
    SKIP = ((), ())

    def __init__(self, stop_operations: Tuple[str, ...], shutdown_operations: Tuple[str, ...]):
        self.stop_operations = stop_operations
        self.shutdown_operations = shutdown_operations

    def stop(self, compose) -> None:
        for operation in self.stop_operations:
            getattr(compose, operation)()

    def shutdown(self, compose, docker: Any = None) -> None:
        # docker is unused by every current strategy
        for operation in self.shutdown_operations:
            getattr(compose, operation)()
