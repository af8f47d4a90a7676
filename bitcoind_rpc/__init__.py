"""Typed client for the Bitcoin Core JSON-RPC interface."""

from .client import BitcoinClient, parse_balance, parse_block_count
from .config import RPCSettings, load_config
from .errors import (
    BitcoinRPCError,
    ConstructionError,
    DecodeError,
    InvalidArgumentError,
    RPCError,
    TransportError,
)
from .models import (
    Block,
    BlockchainInfo,
    Input,
    MempoolInfo,
    NetworkInfo,
    RawTransaction,
    ScriptPubKey,
    ScriptSig,
    SignedRawTransaction,
    SignedRawTransactionError,
    SmartFee,
    Transaction,
    TransactionDetails,
    UnspentOutput,
    Vin,
    Vout,
)
from .rpc import RPCCLIENT_TIMEOUT, RPCClient, RPCResponse

__all__ = [
    "BitcoinClient",
    "BitcoinRPCError",
    "Block",
    "BlockchainInfo",
    "ConstructionError",
    "DecodeError",
    "Input",
    "InvalidArgumentError",
    "MempoolInfo",
    "NetworkInfo",
    "RPCCLIENT_TIMEOUT",
    "RPCClient",
    "RPCError",
    "RPCResponse",
    "RPCSettings",
    "RawTransaction",
    "ScriptPubKey",
    "ScriptSig",
    "SignedRawTransaction",
    "SignedRawTransactionError",
    "SmartFee",
    "Transaction",
    "TransactionDetails",
    "TransportError",
    "UnspentOutput",
    "Vin",
    "Vout",
    "load_config",
    "parse_balance",
    "parse_block_count",
]
