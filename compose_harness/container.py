from __future__ import annotations

from typing import Optional

from .ps_parsing import DockerPort, Ports


class Container:
    """A single compose service, looked up lazily through its dispatcher."""

    def __init__(self, name: str, compose):
        self.name = name
        self.compose = compose
        self._ports: Optional[Ports] = None

    def ports(self) -> Ports:
        if self._ports is None:
            self._ports = self.compose.ports(self.name)
        return self._ports

    def port(self, internal_port: int) -> DockerPort:
        return self.ports().port(internal_port)

    def __repr__(self) -> str:
        return f"Container({self.name!r})"
