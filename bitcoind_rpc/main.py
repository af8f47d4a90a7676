"""Command line entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_delay,
    wait_exponential,
)

from .client import BitcoinClient
from .config import RPCSettings, load_config
from .errors import BitcoinRPCError, RPCError, TransportError

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Node still loading the block index or wallet.
RPC_IN_WARMUP = -28

# RPC name -> (client method, positional arguments as (name, type, nargs)).
COMMANDS: Dict[str, Tuple[str, List[Tuple[str, Callable[[str], Any], Optional[str]]]]] = {
    "getblockcount": ("get_block_count", []),
    "getblockchaininfo": ("get_blockchain_info", []),
    "getmempoolinfo": ("get_mempool_info", []),
    "getnetworkinfo": ("get_network_info", []),
    "getblock": ("get_block", [("blockhash", str, None)]),
    "getblockhash": ("get_block_hash", [("height", int, None)]),
    "getnewaddress": ("get_new_address", [("account", str, "*")]),
    "getbalance": ("get_balance", [("account", str, "?"), ("minconf", int, "?")]),
    "estimatesmartfee": (
        "estimate_smart_fee",
        [("conf_target", int, None), ("estimate_mode", str, "?")],
    ),
    "gettransaction": ("get_transaction", [("txid", str, None)]),
    "getrawtransaction": ("get_raw_transaction", [("txid", str, None)]),
    "decoderawtransaction": ("decode_raw_transaction", [("hexstring", str, None)]),
    "createrawtransaction": (
        "create_raw_transaction",
        [("inputs", json.loads, None), ("outputs", json.loads, None)],
    ),
    "signrawtransactionwithwallet": (
        "sign_raw_transaction_with_wallet",
        [("hexstring", str, None)],
    ),
    "sendrawtransaction": ("send_raw_transaction", [("hexstring", str, None)]),
    "sendtoaddress": (
        "send_to_address",
        [
            ("address", str, None),
            ("amount", float, None),
            ("comment", str, "?"),
            ("comment_to", str, "?"),
        ],
    ),
    "listunspent": ("list_unspent", [("minconf", int, "?"), ("maxconf", int, "?")]),
}

DEFAULTS = {
    "account": "",
    "minconf": 1,
    "maxconf": 0,
    "estimate_mode": "CONSERVATIVE",
    "comment": "",
    "comment_to": "",
}


def _resolve_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Bitcoin Core RPC client")
    parser.add_argument("--wait", action="store_true", help="Wait for the RPC server to start")
    parser.add_argument(
        "--wait-timeout",
        type=float,
        default=60.0,
        help="Seconds to keep waiting with --wait",
    )
    parser.add_argument("--log-level", default=None, help="Override BITCOIN_RPC_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (_, arguments) in COMMANDS.items():
        sub = subparsers.add_parser(name)
        for arg_name, arg_type, nargs in arguments:
            kwargs: Dict[str, Any] = {"type": arg_type}
            if nargs is not None:
                kwargs["nargs"] = nargs
            if nargs == "?":
                kwargs["default"] = DEFAULTS[arg_name]
            sub.add_argument(arg_name, **kwargs)
    return parser


def _command_args(args: argparse.Namespace) -> List[Any]:
    _, arguments = COMMANDS[args.command]
    values: List[Any] = []
    for arg_name, _, nargs in arguments:
        value = getattr(args, arg_name)
        if nargs == "*":
            values.extend(value)
        else:
            values.append(value)
    return values


def _render(result: Any) -> str:
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    elif isinstance(result, list):
        result = [
            item.model_dump(mode="json", by_alias=True) if isinstance(item, BaseModel) else item
            for item in result
        ]
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2)


def _waiting_for_server(exc: BaseException) -> bool:
    if isinstance(exc, TransportError):
        return True
    return isinstance(exc, RPCError) and exc.code == RPC_IN_WARMUP


def run_command(
    client: BitcoinClient,
    command: str,
    values: Sequence[Any],
    wait: bool = False,
    wait_timeout: float = 60.0,
) -> Any:
    method = getattr(client, COMMANDS[command][0])
    if not wait:
        return method(*values)
    retrying = Retrying(
        retry=retry_if_exception(_waiting_for_server),
        stop=stop_after_delay(wait_timeout),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=lambda state: LOGGER.info("Waiting for RPC server (%s)", command),
    )
    return retrying(method, *values)


def main(argv: Optional[Sequence[str]] = None, config: Optional[RPCSettings] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config or load_config()
        level = _resolve_log_level(args.log_level or config.bitcoin_rpc_log_level)
    except ValueError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    logging.basicConfig(level=level, format=LOG_FORMAT)

    try:
        client = BitcoinClient.from_config(config)
        result = run_command(
            client, args.command, _command_args(args), args.wait, args.wait_timeout
        )
    except RetryError as exc:
        LOGGER.error("RPC server did not become available: %s", exc.last_attempt.exception())
        return 1
    except RPCError as exc:
        print(f"error code: {exc.code}\nerror message:\n{exc.message}", file=sys.stderr)
        return 1
    except BitcoinRPCError as exc:
        LOGGER.error("%s failed: %s", args.command, exc)
        return 1
    except (ValueError, OSError) as exc:
        LOGGER.error("Cannot load RPC credentials: %s", exc)
        return 1

    print(_render(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
