"""Error types raised by the Bitcoin Core RPC client."""

from __future__ import annotations

from dataclasses import dataclass


class BitcoinRPCError(Exception):
    """Base class for every failure surfaced by the client.

    ``kind`` tags the failure stage. A call is checked in a fixed order:
    transport, then protocol, then decode.
    """

    kind = "error"


class InvalidArgumentError(BitcoinRPCError, ValueError):
    """Arguments rejected locally; nothing was sent to the node."""

    kind = "validation"


class ConstructionError(BitcoinRPCError, ValueError):
    """The transport could not be built from the given endpoint."""

    kind = "construction"


class TransportError(BitcoinRPCError):
    """Connection, timeout or HTTP failure before a JSON-RPC reply was read."""

    kind = "transport"


@dataclass
class RPCError(BitcoinRPCError):
    """The node answered with a JSON-RPC ``error`` member."""

    code: int
    message: str

    kind = "protocol"

    def __str__(self) -> str:  # noqa: D401
        return f"RPC error {self.code}: {self.message}"


class DecodeError(BitcoinRPCError):
    """The result payload does not match the expected shape."""

    kind = "decode"
