import json
import logging

import pytest

from bitcoind_rpc import main as cli
from bitcoind_rpc.client import BitcoinClient
from bitcoind_rpc.config import RPCSettings
from bitcoind_rpc.errors import RPCError, TransportError
from bitcoind_rpc.main import _resolve_log_level, build_parser, run_command
from bitcoind_rpc.rpc import RPCResponse


class DummyTransport:
    def __init__(self, results: list) -> None:
        self._results = list(results)
        self.calls: list[tuple[str, list | None]] = []

    def call(self, method, params=None):
        self.calls.append((method, None if params is None else list(params)))
        outcome = self._results.pop(0)
        if isinstance(outcome, RPCError):
            return RPCResponse(error=outcome)
        if isinstance(outcome, Exception):
            raise outcome
        return RPCResponse(result=outcome)


def _patch_client(monkeypatch, transport: DummyTransport) -> None:
    monkeypatch.setattr(
        cli.BitcoinClient,
        "from_config",
        classmethod(lambda cls, config: BitcoinClient.from_transport(transport)),
    )


def test_resolve_log_level_is_case_insensitive():
    assert _resolve_log_level("debug") == logging.DEBUG
    assert _resolve_log_level(" Info ") == logging.INFO


def test_resolve_log_level_rejects_invalid_values():
    with pytest.raises(ValueError):
        _resolve_log_level("not-a-level")


def test_parser_applies_defaults():
    args = build_parser().parse_args(["listunspent"])

    assert args.minconf == 1
    assert args.maxconf == 0


def test_main_prints_scalar_result(monkeypatch, capsys):
    transport = DummyTransport([850000])
    _patch_client(monkeypatch, transport)

    assert cli.main(["getblockcount"], config=RPCSettings()) == 0

    assert capsys.readouterr().out.strip() == "850000"
    assert transport.calls == [("getblockcount", None)]


def test_main_prints_model_with_daemon_names(monkeypatch, capsys):
    transport = DummyTransport([{"feerate": 0.00012, "blocks": 3}])
    _patch_client(monkeypatch, transport)

    assert cli.main(["estimatesmartfee", "3", "ECONOMICAL"], config=RPCSettings()) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["feerate"] == 0.00012
    assert transport.calls == [("estimatesmartfee", [3, "ECONOMICAL"])]


def test_main_passes_json_arguments(monkeypatch, capsys):
    transport = DummyTransport(["0200000001"])
    _patch_client(monkeypatch, transport)

    exit_code = cli.main(
        [
            "createrawtransaction",
            '[{"txid": "aa", "vout": 0}]',
            '{"bc1qexample": 0.1}',
        ],
        config=RPCSettings(),
    )

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "0200000001"
    assert transport.calls == [
        ("createrawtransaction", [[{"txid": "aa", "vout": 0}], {"bc1qexample": 0.1}])
    ]


def test_main_reports_rpc_error(monkeypatch, capsys):
    class ErrorTransport:
        def call(self, method, params=None):
            return RPCResponse(error=RPCError(code=-5, message="Block not found"))

    monkeypatch.setattr(
        cli.BitcoinClient,
        "from_config",
        classmethod(lambda cls, config: BitcoinClient.from_transport(ErrorTransport())),
    )

    assert cli.main(["getblock", "00"], config=RPCSettings()) == 1

    err = capsys.readouterr().err
    assert "error code: -5" in err
    assert "Block not found" in err


def test_main_rejects_invalid_arguments(monkeypatch):
    transport = DummyTransport([])
    _patch_client(monkeypatch, transport)

    assert cli.main(["getnewaddress", "a", "b"], config=RPCSettings()) == 1
    assert transport.calls == []


def test_run_command_waits_for_transport(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    transport = DummyTransport([TransportError("refused"), TransportError("refused"), 7])
    client = BitcoinClient.from_transport(transport)

    assert run_command(client, "getblockcount", [], wait=True, wait_timeout=60) == 7
    assert len(transport.calls) == 3


def test_run_command_does_not_retry_without_wait():
    transport = DummyTransport([TransportError("refused"), 7])
    client = BitcoinClient.from_transport(transport)

    with pytest.raises(TransportError):
        run_command(client, "getblockcount", [])
    assert len(transport.calls) == 1


def test_run_command_waits_through_warmup(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    warmup = RPCError(code=-28, message="Loading block index...")
    transport = DummyTransport([TransportError("refused"), warmup, 850000])
    client = BitcoinClient.from_transport(transport)

    assert run_command(client, "getblockcount", [], wait=True, wait_timeout=60) == 850000
    assert len(transport.calls) == 3


def test_run_command_wait_does_not_retry_other_rpc_errors(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    transport = DummyTransport([RPCError(code=-5, message="Block not found"), "00"])
    client = BitcoinClient.from_transport(transport)

    with pytest.raises(RPCError):
        run_command(client, "getblock", ["00"], wait=True, wait_timeout=60)
    assert len(transport.calls) == 1


def test_main_reports_malformed_cookie(tmp_path, caplog):
    cookie = tmp_path / ".cookie"
    cookie.write_text("nocolon", encoding="utf-8")
    config = RPCSettings(
        bitcoin_rpc_user="",
        bitcoin_rpc_password="",
        bitcoin_rpc_cookie_path=str(cookie),
    )

    with caplog.at_level(logging.ERROR):
        assert cli.main(["getblockcount"], config=config) == 1

    assert "Malformed cookie file" in caplog.text


def test_main_reports_unreadable_cookie(tmp_path, monkeypatch):
    cookie = tmp_path / ".cookie"
    cookie.write_text("__cookie__:abc", encoding="utf-8")
    config = RPCSettings(
        bitcoin_rpc_user="",
        bitcoin_rpc_password="",
        bitcoin_rpc_cookie_path=str(cookie),
    )

    def _denied(*args, **kwargs):
        raise PermissionError(13, "Permission denied", str(cookie))

    monkeypatch.setattr("pathlib.Path.read_text", _denied)

    assert cli.main(["getblockcount"], config=config) == 1


def test_main_reports_invalid_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BITCOIN_RPC_TIMEOUT", "-1")

    assert cli.main(["getblockcount"]) == 1
