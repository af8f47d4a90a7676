"""Helpers to autodetect local Bitcoin Core credentials."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import RPCSettings

LOGGER = logging.getLogger(__name__)

BITCOIN_CONF_LOCATIONS = (
    Path("~/.bitcoin/bitcoin.conf"),
    Path("/etc/bitcoin/bitcoin.conf"),
)

# Subdirectory of the datadir holding each network's cookie file.
NETWORK_DIRS = {
    "mainnet": "",
    "testnet": "testnet3",
    "signet": "signet",
    "regtest": "regtest",
}

# bitcoin.conf section names per network.
CONF_SECTIONS = {
    "mainnet": "main",
    "testnet": "test",
    "signet": "signet",
    "regtest": "regtest",
}


def find_cookie(datadir: str | None, network: str = "mainnet") -> Optional[Path]:
    """Return the cookie path if it exists."""

    if not datadir:
        return None
    path = Path(datadir).expanduser()
    subdir = NETWORK_DIRS.get(network, "")
    if subdir:
        path = path / subdir
    path = path / ".cookie"
    return path if path.exists() else None


def read_bitcoin_conf(datadir: str | None = None, network: str = "mainnet") -> dict[str, str]:
    """Parse bitcoin.conf into a dictionary for ``network``."""

    candidates = []
    if datadir:
        candidates.append(Path(datadir).expanduser() / "bitcoin.conf")
    candidates.extend(p.expanduser() for p in BITCOIN_CONF_LOCATIONS)

    for candidate in candidates:
        if candidate.exists():
            return _parse_conf(candidate, network)
    return {}


def _parse_conf(path: Path, network: str = "mainnet") -> dict[str, str]:
    # Keys under [main]/[test]/[signet]/[regtest], or prefixed as
    # ``regtest.rpcuser``, apply to that network only and win over top-level keys.
    wanted = CONF_SECTIONS.get(network, "main")
    top: dict[str, str] = {}
    scoped: dict[str, str] = {}
    section = ""
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key, value = key.strip(), value.strip()
        if not section and "." in key:
            section_name, key = key.split(".", 1)
            if section_name == wanted:
                scoped[key] = value
        elif not section:
            top[key] = value
        elif section == wanted:
            scoped[key] = value
    return {**top, **scoped}


def detect_rpc_credentials(
    datadir: str | None, network: str = "mainnet"
) -> Optional[tuple[str, str]]:
    """Attempt to read rpcuser/rpcpassword credentials from bitcoin.conf."""

    conf = read_bitcoin_conf(datadir, network)
    user = conf.get("rpcuser")
    password = conf.get("rpcpassword")
    if user and password:
        return user, password
    return None


def format_cookie_auth(cookie_path: Path) -> tuple[str, str]:
    """Read the cookie file and extract username/password."""

    raw = cookie_path.read_text(encoding="utf-8").strip()
    if ":" in raw:
        username, password = raw.split(":", 1)
        return username, password
    raise ValueError("Malformed cookie file")


def resolve_credentials(config: RPCSettings) -> tuple[str, str]:
    """Pick RPC credentials from, in order: explicit settings, an explicit
    cookie file, bitcoin.conf, then the datadir cookie."""

    if config.bitcoin_rpc_user or config.bitcoin_rpc_password:
        return config.bitcoin_rpc_user, config.bitcoin_rpc_password
    if config.cookie_path is not None:
        LOGGER.debug("Using cookie file %s", config.cookie_path)
        return format_cookie_auth(config.cookie_path)
    if config.bitcoin_datadir:
        credentials = detect_rpc_credentials(config.bitcoin_datadir, config.bitcoin_network)
        if credentials:
            return credentials
        cookie_path = find_cookie(config.bitcoin_datadir, config.bitcoin_network)
        if cookie_path:
            LOGGER.debug("Using cookie file %s", cookie_path)
            return format_cookie_auth(cookie_path)
    return "", ""
