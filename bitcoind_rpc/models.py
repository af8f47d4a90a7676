"""Response shapes returned by Bitcoin Core RPC methods."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RPCModel(BaseModel):
    """Base for decoded results.

    Unknown fields from newer nodes are ignored and every field has a default,
    so optional members may be missing from the payload.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Block(RPCModel):
    hash: str = ""
    confirmations: int = 0
    size: int = 0
    stripped_size: int = Field(0, alias="strippedsize")
    weight: int = 0
    height: int = 0
    version: int = 0
    version_hex: str = Field("", alias="versionHex")
    merkle_root: str = Field("", alias="merkleroot")
    tx: List[str] = Field(default_factory=list)
    time: int = 0
    median_time: int = Field(0, alias="mediantime")
    nonce: int = 0
    bits: str = ""
    difficulty: float = 0.0
    chainwork: str = ""
    n_tx: int = Field(0, alias="nTx")
    previous_block_hash: str = Field("", alias="previousblockhash")
    next_block_hash: str = Field("", alias="nextblockhash")


class SmartFee(RPCModel):
    """Fee estimate in BTC/kvB. ``fee_rate`` is absent when ``errors`` is set."""

    fee_rate: Optional[float] = Field(None, alias="feerate")
    errors: List[str] = Field(default_factory=list)
    blocks: int = 0


class ScriptSig(RPCModel):
    asm: str = ""
    hex: str = ""


class Vin(RPCModel):
    coinbase: str = ""
    txid: str = ""
    vout: int = 0
    script_sig: ScriptSig = Field(default_factory=ScriptSig, alias="scriptSig")
    sequence: int = 0
    witness: List[str] = Field(default_factory=list, alias="txinwitness")

    @property
    def is_coinbase(self) -> bool:
        return bool(self.coinbase)


class ScriptPubKey(RPCModel):
    asm: str = ""
    hex: str = ""
    req_sigs: Optional[int] = Field(None, alias="reqSigs")
    type: str = ""
    # Nodes from 22.0 on report a single ``address``; older ones a list.
    address: Optional[str] = None
    addresses: List[str] = Field(default_factory=list)


class Vout(RPCModel):
    value: float = 0.0
    n: int = 0
    script_pub_key: ScriptPubKey = Field(default_factory=ScriptPubKey, alias="scriptPubKey")


class RawTransaction(RPCModel):
    hex: str = ""
    txid: str = ""
    hash: str = ""
    version: int = 0
    size: int = 0
    vsize: int = 0
    weight: int = 0
    locktime: int = 0
    vin: List[Vin] = Field(default_factory=list)
    vout: List[Vout] = Field(default_factory=list)
    block_hash: str = Field("", alias="blockhash")
    confirmations: int = 0
    time: int = 0
    block_time: int = Field(0, alias="blocktime")


class SignedRawTransactionError(RPCModel):
    txid: str = ""
    vout: int = 0
    script_sig: str = Field("", alias="scriptSig")
    sequence: int = 0
    error: str = ""


class SignedRawTransaction(RPCModel):
    hex: str = ""
    complete: bool = False
    errors: List[SignedRawTransactionError] = Field(default_factory=list)


class Input(RPCModel):
    """Outpoint spent by a transaction built with ``createrawtransaction``."""

    txid: str
    vout: int
    sequence: Optional[int] = None

    def to_rpc(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TransactionDetails(RPCModel):
    account: str = ""
    address: str = ""
    category: str = ""
    amount: float = 0.0
    fee: float = 0.0
    label: str = ""
    vout: int = 0


class Transaction(RPCModel):
    amount: float = 0.0
    account: str = ""
    address: str = ""
    category: str = ""
    fee: float = 0.0
    confirmations: int = 0
    block_hash: str = Field("", alias="blockhash")
    block_index: int = Field(0, alias="blockindex")
    block_time: int = Field(0, alias="blocktime")
    txid: str = ""
    wallet_conflicts: List[str] = Field(default_factory=list, alias="walletconflicts")
    time: int = 0
    time_received: int = Field(0, alias="timereceived")
    details: List[TransactionDetails] = Field(default_factory=list)
    hex: str = ""


class UnspentOutput(RPCModel):
    txid: str = ""
    vout: int = 0
    address: str = ""
    label: str = ""
    script_pub_key: str = Field("", alias="scriptPubKey")
    amount: float = 0.0
    confirmations: int = 0
    spendable: bool = False
    solvable: bool = False
    safe: bool = False


class BlockchainInfo(RPCModel):
    chain: str = ""
    blocks: int = 0
    headers: int = 0
    best_block_hash: str = Field("", alias="bestblockhash")
    difficulty: float = 0.0
    median_time: int = Field(0, alias="mediantime")
    verification_progress: float = Field(0.0, alias="verificationprogress")
    initial_block_download: bool = Field(False, alias="initialblockdownload")
    size_on_disk: int = 0
    pruned: bool = False


class MempoolInfo(RPCModel):
    loaded: bool = False
    size: int = 0
    bytes: int = 0
    usage: int = 0
    max_mempool: int = Field(0, alias="maxmempool")
    mempool_min_fee: float = Field(0.0, alias="mempoolminfee")
    min_relay_tx_fee: float = Field(0.0, alias="minrelaytxfee")


class NetworkInfo(RPCModel):
    version: int = 0
    subversion: str = ""
    protocol_version: int = Field(0, alias="protocolversion")
    connections: int = 0
    network_active: bool = Field(False, alias="networkactive")
    relay_fee: float = Field(0.0, alias="relayfee")
    # A string on most releases, a list of strings from 28.0 on.
    warnings: Any = ""
