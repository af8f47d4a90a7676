"""Minimal Bitcoin Core JSON-RPC transport."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import requests
from requests import RequestException, Response
from requests.auth import HTTPBasicAuth

from .errors import ConstructionError, RPCError, TransportError

LOGGER = logging.getLogger(__name__)

RPCCLIENT_TIMEOUT = 30
REQUEST_ID = "bitcoind-rpc"


@dataclass
class RPCResponse:
    """Decoded JSON-RPC reply: the result payload and the protocol error slot."""

    result: Any = None
    error: Optional[RPCError] = None
    id: Any = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class RPCClient:
    """JSON-RPC client with user/password or cookie auth."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str = "",
        password: str = "",
        use_ssl: bool = False,
        timeout: int = RPCCLIENT_TIMEOUT,
        *,
        wallet: Optional[str] = None,
        cookie: Optional[tuple[str, str]] = None,
    ) -> None:
        host = (host or "").strip()
        if not host or "://" in host or any(char.isspace() for char in host):
            raise ConstructionError(f"Invalid RPC host: {host!r}")
        if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
            raise ConstructionError(f"Invalid RPC port: {port!r}")
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ConstructionError(f"Invalid RPC timeout: {timeout!r}")

        scheme = "https" if use_ssl else "http"
        self.url = f"{scheme}://{host}:{port}"
        if wallet:
            self.url += f"/wallet/{quote(wallet, safe='')}"
        self.timeout = timeout
        if cookie:
            user, password = cookie
        self.auth = HTTPBasicAuth(user, password) if user or password else None

    def call(self, method: str, params: Optional[Sequence[Any]] = None) -> RPCResponse:
        payload = {
            "jsonrpc": "2.0",
            "id": REQUEST_ID,
            "method": method,
            "params": list(params) if params is not None else [],
        }
        LOGGER.debug("RPC call %s", method)
        try:
            response: Response = requests.post(
                self.url,
                data=json.dumps(payload),
                headers={"Content-Type": "application/json"},
                auth=self.auth,
                timeout=self.timeout,
            )
        except RequestException as exc:
            raise TransportError(f"{method}: {exc}") from exc

        # Bitcoin Core reports RPC failures as HTTP 500 with a JSON-RPC body.
        data = _json_body(response)
        if data is None or (not response.ok and not data.get("error")):
            LOGGER.error(
                "RPC request failed",
                extra={"method": method, "status_code": response.status_code},
            )
            try:
                response.raise_for_status()
            except RequestException as exc:
                raise TransportError(f"{method}: {exc}") from exc
            raise TransportError(f"{method}: response is not a JSON-RPC object")

        return RPCResponse(
            result=data.get("result"),
            error=_rpc_error(data.get("error")),
            id=data.get("id"),
        )


def _json_body(response: Response) -> Optional[Dict[str, Any]]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _rpc_error(error: Any) -> Optional[RPCError]:
    if not error:
        return None
    if not isinstance(error, dict):
        return RPCError(code=-1, message=str(error))
    return RPCError(code=error.get("code", -1), message=error.get("message", "Unknown"))
