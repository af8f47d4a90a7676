"""Configuration loader for the RPC client."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NETWORKS = ("mainnet", "testnet", "signet", "regtest")


class RPCSettings(BaseSettings):
    """Pydantic-based configuration model."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    bitcoin_rpc_host: str = "127.0.0.1"
    bitcoin_rpc_port: int = 8332
    bitcoin_rpc_user: str = ""
    bitcoin_rpc_password: str = ""
    bitcoin_rpc_cookie_path: Optional[str] = None
    bitcoin_rpc_use_ssl: bool = False
    bitcoin_rpc_timeout: int = 30
    bitcoin_rpc_wallet: Optional[str] = None
    bitcoin_network: Literal["mainnet", "testnet", "signet", "regtest"] = "mainnet"
    bitcoin_datadir: Optional[str] = "~/.bitcoin"

    bitcoin_rpc_log_level: str = "INFO"

    @field_validator("bitcoin_rpc_cookie_path", "bitcoin_datadir", mode="before")
    @classmethod
    def expand_user(cls, value: str | None) -> str | None:
        """Expand user home references (~) unless the value is blank."""

        if value is None:
            return None
        value_str = str(value).strip()
        if not value_str:
            return None
        return os.path.expanduser(value_str)

    @field_validator("bitcoin_rpc_wallet", mode="before")
    @classmethod
    def blank_wallet(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator("bitcoin_network", mode="before")
    @classmethod
    def validate_network(cls, value: str | None) -> str:
        if isinstance(value, str):
            value_str = value.strip().lower() or "mainnet"
        else:
            value_str = str(value or "mainnet").lower()
        if value_str not in NETWORKS:
            raise ValueError(f"BITCOIN_NETWORK must be one of {set(NETWORKS)}")
        return value_str

    @field_validator("bitcoin_rpc_use_ssl", mode="before")
    @classmethod
    def normalize_use_ssl(cls, value: object) -> bool | object:
        """Coerce common string and numeric values to booleans."""

        if isinstance(value, bool) or value is None:
            return value

        truthy = {"1", "true", "yes", "on"}
        falsy = {"0", "false", "no", "off", ""}

        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in truthy:
                return True
            if normalized in falsy:
                return False
            raise ValueError(
                "BITCOIN_RPC_USE_SSL must be one of: 1, 0, true, false, yes, no, on, off"
            )

        if isinstance(value, int):
            if value in (0, 1):
                return bool(value)
            raise ValueError("BITCOIN_RPC_USE_SSL integer values must be 0 or 1")

        return value

    @field_validator("bitcoin_rpc_timeout")
    @classmethod
    def positive_timeout(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("BITCOIN_RPC_TIMEOUT must be positive")
        return value

    @property
    def cookie_path(self) -> Optional[Path]:
        if not self.bitcoin_rpc_cookie_path:
            return None
        path = Path(self.bitcoin_rpc_cookie_path).expanduser()
        return path if path.exists() else None


def load_config() -> RPCSettings:
    """Load configuration from environment variables."""

    return RPCSettings()
