"""Turn ``docker-compose ps`` output into container names and port mappings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set

from .errors import NoSuchContainerError, NoSuchPortError

_HEADER_SEPARATOR = re.compile(r"^-{3,}\s*$", re.MULTILINE)
_SCALED_NAME = re.compile(r"^(?P<base>.+?)(?P<sep>[_-])\d+$")
_PORT_MAPPING = re.compile(r"(\d+\.\d+\.\d+\.\d+):(\d+)->(\d+)/tcp")
_NON_ALNUM = re.compile(r"[^a-z0-9]")

UNBOUND_IP = "0.0.0.0"


def _project_prefixes(project_name: Optional[str]) -> List[str]:
    if not project_name:
        return []
    lowered = project_name.lower()
    # compose v1 strips everything but letters and digits from project names
    prefixes = [lowered, _NON_ALNUM.sub("", lowered)]
    return [p for i, p in enumerate(prefixes) if p and p not in prefixes[:i]]


def semantic_name(raw_name: str, project_name: Optional[str] = None) -> str:
    """``itest_web_1`` -> ``web`` for project ``itest``; ``my_db_1`` -> ``my_db`` otherwise."""
    match = _SCALED_NAME.match(raw_name)
    if not match:
        return raw_name
    base, sep = match.group("base"), match.group("sep")
    for prefix in _project_prefixes(project_name):
        if base.lower().startswith(prefix + sep) and len(base) > len(prefix) + 1:
            return base[len(prefix) + 1:]
    return base


def parse_container_names(ps_output: str, project_name: Optional[str] = None) -> Set[str]:
    body = ps_output
    separator = _HEADER_SEPARATOR.search(ps_output)
    if separator:
        body = ps_output[separator.end():]

    names: Set[str] = set()
    for line in body.splitlines():
        if not line.strip():
            continue
        names.add(semantic_name(line.split()[0], project_name))
    return names


@dataclass(frozen=True)
class DockerPort:
    ip: str
    external_port: int
    internal_port: int

    def in_format(self, template: str) -> str:
        """Substitute ``$HOST`` and ``$EXTERNAL_PORT`` in ``template``."""
        return template.replace("$HOST", self.ip).replace("$EXTERNAL_PORT", str(self.external_port))


class Ports:
    def __init__(self, ports: List[DockerPort]):
        self._ports = list(ports)

    def __iter__(self) -> Iterator[DockerPort]:
        return iter(self._ports)

    def __len__(self) -> int:
        return len(self._ports)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Ports) and self._ports == other._ports

    def __repr__(self) -> str:
        return f"Ports({self._ports!r})"

    def port(self, internal_port: int) -> DockerPort:
        for p in self._ports:
            if p.internal_port == internal_port:
                return p
        raise NoSuchPortError(f"No port mapped for internal port {internal_port}")


def parse_ports(ps_output: str, host_ip: str) -> Ports:
    if not ps_output.strip():
        raise NoSuchContainerError("No container found")
    ports: List[DockerPort] = []
    for ip, external, internal in _PORT_MAPPING.findall(ps_output):
        ports.append(
            DockerPort(
                ip=host_ip if ip == UNBOUND_IP else ip,
                external_port=int(external),
                internal_port=int(internal),
            )
        )
    return Ports(ports)
