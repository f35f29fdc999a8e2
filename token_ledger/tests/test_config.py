import json

import pytest

from token_ledger import config as ledger_config
from token_ledger.config import LedgerConfig
from token_ledger.errors import ConfigError


def test_defaults():
    cfg = LedgerConfig().validate()
    assert cfg.total_supply == 20_000_000
    assert cfg.seeding == "explicit"
    assert cfg.max_value == 2**64 - 1
    assert not cfg.allow_public_burn


@pytest.mark.parametrize("kwargs", [
    {"seeding": "airdrop"},
    {"width_bits": 4},
    {"total_supply": -1},
    {"total_supply": True},
    {"width_bits": 8, "total_supply": 256},
])
def test_invalid_configs(kwargs):
    with pytest.raises(ConfigError):
        LedgerConfig(**kwargs).validate()


def test_from_env(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_TOTAL_SUPPLY", "1_000")
    monkeypatch.setenv("TOKEN_LEDGER_SEEDING", "Genesis")
    monkeypatch.setenv("TOKEN_LEDGER_ALLOW_PUBLIC_BURN", "yes")
    monkeypatch.setenv("TOKEN_LEDGER_METRICS", "off")
    cfg = ledger_config.from_env()
    assert cfg.total_supply == 1_000
    assert cfg.seeding == "genesis"
    assert cfg.allow_public_burn
    assert not cfg.metrics_enabled


def test_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_EMIT_BURN_EVENTS", "maybe")
    with pytest.raises(ConfigError):
        ledger_config.from_env()


def test_from_yaml_file(tmp_path):
    p = tmp_path / "ledger.yaml"
    p.write_text("total_supply: 42\nwidth_bits: 16\n", encoding="utf-8")
    cfg = ledger_config.from_file(p)
    assert cfg.total_supply == 42
    assert cfg.max_value == 65_535


def test_from_file_rejects_unknown_keys(tmp_path):
    p = tmp_path / "ledger.json"
    p.write_text(json.dumps({"total_supply": 1, "decimals": 18}), encoding="utf-8")
    with pytest.raises(ConfigError):
        ledger_config.from_file(p)


def test_load_layers_env_over_file(tmp_path, monkeypatch):
    p = tmp_path / "ledger.json"
    p.write_text(json.dumps({"total_supply": 10, "seeding": "genesis"}), encoding="utf-8")
    monkeypatch.setenv("TOKEN_LEDGER_CONFIG_FILE", str(p))
    monkeypatch.setenv("TOKEN_LEDGER_TOTAL_SUPPLY", "11")
    cfg = ledger_config.load()
    assert cfg.total_supply == 11
    assert cfg.seeding == "genesis"
    assert json.loads(ledger_config.pretty(cfg))["total_supply"] == 11
