"""Service endpoints and the text form used in configuration files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import ConfigError, Kind

DEFAULT_REMOTE_PORT = 443


class Transport(Enum):
    """How a client reaches a service."""

    UNASSIGNED = "unassigned"
    INPROCESS = "inprocess"
    REMOTE = "remote"


@dataclass(frozen=True)
class Endpoint:
    """A transport together with the network address of a service."""

    transport: Transport = Transport.UNASSIGNED
    net_addr: str = ""

    def __str__(self) -> str:
        if self.transport is Transport.REMOTE:
            return f"{self.transport.value},{self.net_addr}"
        return self.transport.value

    @classmethod
    def parse(cls, text: str) -> "Endpoint":
        """Parse the strict ``<transport>[,<address>]`` form."""

        op = "endpoint.parse"
        transport, _, addr = text.partition(",")
        if transport == Transport.INPROCESS.value:
            return cls(Transport.INPROCESS)
        if transport == Transport.UNASSIGNED.value:
            return cls(Transport.UNASSIGNED)
        if transport == Transport.REMOTE.value:
            if not addr:
                raise ConfigError(
                    f"remote endpoint {text!r} requires a netaddr", op=op, kind=Kind.INVALID
                )
            return cls(Transport.REMOTE, addr)
        raise ConfigError(
            f"unknown transport type in endpoint {text!r}", op=op, kind=Kind.INVALID
        )


def parse_endpoint(text: Optional[str]) -> Endpoint:
    """Parse an endpoint as written in a configuration file.

    Empty input is the unassigned endpoint. A bare address with no
    transport is taken to be remote, and a remote address without a port
    gets port 443.
    """

    if not text:
        return Endpoint()
    try:
        endpoint = Endpoint.parse(text)
    except ConfigError as exc:
        if "," in text:
            raise ConfigError(
                f"cannot parse service {text!r}: {exc}", op="config.parse_endpoint", kind=Kind.INVALID
            ) from exc
        try:
            endpoint = Endpoint.parse(f"{Transport.REMOTE.value},{text}")
        except ConfigError:
            raise ConfigError(
                f"cannot parse service {text!r}: {exc}", op="config.parse_endpoint", kind=Kind.INVALID
            ) from exc

    if endpoint.transport is Transport.REMOTE and ":" not in endpoint.net_addr:
        endpoint = Endpoint(Transport.REMOTE, f"{endpoint.net_addr}:{DEFAULT_REMOTE_PORT}")
    return endpoint
