"""Typed wrappers around Bitcoin Core RPC methods."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Type, TypeVar, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .autodetect import resolve_credentials
from .config import RPCSettings
from .errors import DecodeError, InvalidArgumentError
from .models import (
    Block,
    BlockchainInfo,
    Input,
    MempoolInfo,
    NetworkInfo,
    RawTransaction,
    SignedRawTransaction,
    SmartFee,
    Transaction,
    UnspentOutput,
)
from .rpc import RPCCLIENT_TIMEOUT, RPCClient, RPCResponse

LOGGER = logging.getLogger(__name__)

ESTIMATE_MODES = frozenset({"UNSET", "ECONOMICAL", "CONSERVATIVE"})
UINT64_MAX = 2**64 - 1

T = TypeVar("T")

_STR = TypeAdapter(str)
_UNSPENT_LIST = TypeAdapter(List[UnspentOutput])


class Transport(Protocol):
    def call(self, method: str, params: Optional[Sequence[Any]] = None) -> RPCResponse:
        ...


def parse_block_count(raw: Any) -> int:
    """Parse a raw result as a base-10 unsigned 64-bit integer."""

    if isinstance(raw, bool):
        raise DecodeError(f"invalid block count: {raw!r}")
    text = str(raw)
    if not (text.isascii() and text.isdigit()):
        raise DecodeError(f"invalid block count: {text!r}")
    count = int(text)
    if count > UINT64_MAX:
        raise DecodeError(f"block count out of range: {text}")
    return count


def parse_balance(raw: Any) -> float:
    """Parse a raw decimal result as a float."""

    if isinstance(raw, bool) or raw is None:
        raise DecodeError(f"invalid balance: {raw!r}")
    text = str(raw)
    # float() also takes digit separators and surrounding whitespace.
    if not text or text.strip() != text or "_" in text:
        raise DecodeError(f"invalid balance: {raw!r}")
    try:
        return float(text)
    except ValueError as exc:
        raise DecodeError(f"invalid balance: {raw!r}") from exc


def _decode(model: Union[Type[T], TypeAdapter[T]], raw: Any) -> T:
    try:
        if isinstance(model, TypeAdapter):
            return model.validate_python(raw)
        return model.model_validate(raw)  # type: ignore[attr-defined]
    except PydanticValidationError as exc:
        raise DecodeError(str(exc)) from exc


def _require_uint(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidArgumentError(f"{name} must be a non-negative integer, got {value!r}")
    return value


class BitcoinClient:
    """Bitcoin Core client exposing one method per remote procedure."""

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: str = "",
        password: str = "",
        use_ssl: bool = False,
        timeout: int = RPCCLIENT_TIMEOUT,
        *,
        wallet: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        """Build an ``RPCClient`` for ``host:port``, or use ``transport`` as given."""

        if transport is None:
            transport = RPCClient(
                host or "", port, user, password, use_ssl, timeout, wallet=wallet  # type: ignore[arg-type]
            )
        self.transport: Transport = transport
        self.logger = logger or LOGGER

    @classmethod
    def from_transport(
        cls, transport: Transport, logger: Optional[logging.Logger] = None
    ) -> "BitcoinClient":
        return cls(transport=transport, logger=logger)

    @classmethod
    def from_config(cls, config: RPCSettings) -> "BitcoinClient":
        user, password = resolve_credentials(config)
        return cls(
            config.bitcoin_rpc_host,
            config.bitcoin_rpc_port,
            user,
            password,
            config.bitcoin_rpc_use_ssl,
            config.bitcoin_rpc_timeout,
            wallet=config.bitcoin_rpc_wallet,
        )

    def _call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        response = self.transport.call(method, params)
        response.raise_for_error()
        return response.result

    def call(self, method: str, *params: Any) -> Any:
        """Invoke any RPC method and return its undecoded result."""

        return self._call(method, list(params))

    # Blockchain -----------------------------------------------------------

    def get_block_count(self) -> int:
        """Return the height of the most-work fully-validated chain."""

        return parse_block_count(self._call("getblockcount"))

    def get_block(self, block_hash: str) -> Block:
        return _decode(Block, self._call("getblock", [block_hash]))

    def get_block_hash(self, height: int) -> str:
        _require_uint("height", height)
        return _decode(_STR, self._call("getblockhash", [height]))

    def get_blockchain_info(self) -> BlockchainInfo:
        return _decode(BlockchainInfo, self._call("getblockchaininfo"))

    def get_mempool_info(self) -> MempoolInfo:
        return _decode(MempoolInfo, self._call("getmempoolinfo"))

    def get_network_info(self) -> NetworkInfo:
        return _decode(NetworkInfo, self._call("getnetworkinfo"))

    def estimate_smart_fee(self, conf_target: int, estimate_mode: str) -> SmartFee:
        """Estimate the fee rate needed to confirm within ``conf_target`` blocks.

        ``estimate_mode`` is one of UNSET, ECONOMICAL or CONSERVATIVE.
        """

        if estimate_mode not in ESTIMATE_MODES:
            raise InvalidArgumentError(f"Not valid estimate_mode: {estimate_mode}")
        return _decode(SmartFee, self._call("estimatesmartfee", [conf_target, estimate_mode]))

    # Wallet ---------------------------------------------------------------

    def get_new_address(self, *account: str) -> str:
        """Return a new address, optionally for one account/label."""

        if len(account) > 1:
            raise InvalidArgumentError(
                "Bad parameters for get_new_address: you can set 0 or 1 account"
            )
        return _decode(_STR, self._call("getnewaddress", list(account)))

    def get_balance(self, account: str = "", minconf: int = 1) -> float:
        """Return the wallet balance.

        An empty ``account`` means the total available balance.
        """

        _require_uint("minconf", minconf)
        return parse_balance(self._call("getbalance", [account, minconf]))

    def get_transaction(self, txid: str) -> Transaction:
        return _decode(Transaction, self._call("gettransaction", [txid]))

    def list_unspent(self, minconf: int = 1, maxconf: int = 0) -> List[UnspentOutput]:
        """List unspent outputs with at least ``minconf`` confirmations.

        A ``maxconf`` of 0 leaves the upper bound to the node. A ``maxconf``
        below ``minconf`` is raised to ``minconf``.
        """

        _require_uint("minconf", minconf)
        _require_uint("maxconf", maxconf)
        args: List[int] = [minconf]
        if maxconf > 0:
            args.append(max(maxconf, minconf))
        return _decode(_UNSPENT_LIST, self._call("listunspent", args))

    def send_to_address(
        self, address: str, amount: float, comment: str = "", comment_to: str = ""
    ) -> str:
        return _decode(
            _STR, self._call("sendtoaddress", [address, amount, comment, comment_to])
        )

    def sign_raw_transaction_with_wallet(self, hex_string: str) -> SignedRawTransaction:
        return _decode(
            SignedRawTransaction, self._call("signrawtransactionwithwallet", [hex_string])
        )

    # Raw transactions -----------------------------------------------------

    def get_raw_transaction(self, txid: str) -> RawTransaction:
        return _decode(RawTransaction, self._call("getrawtransaction", [txid, 1]))

    def decode_raw_transaction(self, hex_string: str) -> RawTransaction:
        return _decode(RawTransaction, self._call("decoderawtransaction", [hex_string]))

    def create_raw_transaction(
        self,
        inputs: Sequence[Union[Input, Mapping[str, Any]]],
        outputs: Mapping[str, float],
    ) -> str:
        """Build an unsigned transaction spending ``inputs`` to ``outputs``.

        ``outputs`` maps addresses to BTC amounts. The hex is returned unsigned.
        """

        try:
            encoded = [
                (item if isinstance(item, Input) else Input.model_validate(item)).to_rpc()
                for item in inputs
            ]
        except PydanticValidationError as exc:
            raise InvalidArgumentError(f"Invalid transaction input: {exc}") from exc
        return _decode(_STR, self._call("createrawtransaction", [encoded, dict(outputs)]))

    def send_raw_transaction(self, signed_hex: str) -> str:
        response = self.transport.call("sendrawtransaction", [signed_hex])
        self.logger.debug("sendrawtransaction result: %r", response.result)
        response.raise_for_error()
        return _decode(_STR, response.result)
