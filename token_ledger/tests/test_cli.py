import json

from typer.testing import CliRunner

from token_ledger.cli.main import app
from token_ledger.version import __version__

runner = CliRunner()

CALLS = [
    {"op": "init", "caller": "alice"},
    {"op": "transfer", "caller": "alice", "args": {"to": "bob", "value": 200}},
    {"op": "approve", "caller": "alice", "args": {"spender": "bob", "value": 200}},
    {"op": "transferFrom", "caller": "bob", "args": {"from": "alice", "to": "charlie", "value": 200}},
]


def _write(tmp_path, name, obj):
    p = tmp_path / name
    p.write_text(json.dumps(obj), encoding="utf-8")
    return p


def test_version():
    r = runner.invoke(app, ["version"])
    assert r.exit_code == 0
    assert r.stdout.strip() == __version__


def test_version_json_matches_package():
    r = runner.invoke(app, ["version", "--json"])
    assert r.exit_code == 0
    meta = json.loads(r.stdout)
    assert meta["version"] == __version__
    assert meta["distribution"] == "token-ledger"
    assert meta["installed"] == ("false" if __version__.endswith("+source") else "true")


def test_config_prints_json(monkeypatch):
    monkeypatch.setenv("TOKEN_LEDGER_TOTAL_SUPPLY", "77")
    r = runner.invoke(app, ["config"])
    assert r.exit_code == 0
    assert json.loads(r.stdout)["total_supply"] == 77


def test_genesis_json(tmp_path):
    p = _write(tmp_path, "genesis.json", {"total_supply": 900, "supply_owner": "alice"})
    r = runner.invoke(app, ["genesis", str(p), "--json"])
    assert r.exit_code == 0
    out = json.loads(r.stdout)
    assert out["state"]["balances"] == {"alice": 900}
    assert out["state"]["initialized"] is True
    assert out["state_root"].startswith("0x")


def test_genesis_invalid_exits_2(tmp_path):
    p = _write(tmp_path, "genesis.json", {"total_supply": -5})
    r = runner.invoke(app, ["genesis", str(p)])
    assert r.exit_code == 2


def test_apply_scenario_json(tmp_path):
    p = _write(tmp_path, "calls.json", CALLS)
    r = runner.invoke(app, ["apply", str(p), "--json"])
    assert r.exit_code == 0
    out = json.loads(r.stdout)
    assert [res["status"] for res in out["results"]] == ["SUCCESS"] * 4
    assert out["state"]["balances"] == {"alice": 19_999_600, "bob": 200, "charlie": 200}
    assert out["state"]["allowances"] == {}
    assert out["events_digest"].startswith("0x")


def test_apply_text_output_and_strict(tmp_path):
    p = _write(tmp_path, "calls.json", CALLS + [
        {"op": "transfer", "caller": "charlie", "args": {"to": "bob", "value": 201}},
    ])
    r = runner.invoke(app, ["apply", str(p)])
    assert r.exit_code == 0
    assert "[4] transfer: INSUFFICIENT_BALANCE" in r.stdout
    assert "charlie: 200" in r.stdout

    strict = runner.invoke(app, ["apply", str(p), "--strict"])
    assert strict.exit_code == 1


def test_apply_with_genesis_and_admin_burn(tmp_path):
    g = _write(tmp_path, "genesis.json", {"total_supply": 1_000, "supply_owner": "alice"})
    calls = _write(tmp_path, "calls.json", [
        {"op": "burn", "caller": "alice", "args": {"amount": 100}},
        {"op": "totalSupply"},
    ])
    denied = runner.invoke(app, ["apply", str(calls), "--genesis", str(g), "--json"])
    assert denied.exit_code == 0
    out = json.loads(denied.stdout)
    assert out["results"][0]["status"] == "ERROR"
    assert out["results"][0]["error"]["code"] == "DISPATCH_ERROR"
    assert out["state"]["total_supply"] == 1_000
    strict = runner.invoke(app, ["apply", str(calls), "--genesis", str(g), "--strict"])
    assert strict.exit_code == 1

    r = runner.invoke(app, ["apply", str(calls), "--genesis", str(g), "--admin", "--json"])
    assert r.exit_code == 0
    out = json.loads(r.stdout)
    assert out["results"][1]["value"] == 900
    assert out["state"]["total_supply"] == 900


def test_apply_rejects_non_list(tmp_path):
    p = _write(tmp_path, "calls.json", {"op": "init"})
    r = runner.invoke(app, ["apply", str(p)])
    assert r.exit_code == 2


def test_apply_reports_calls_before_a_malformed_one(tmp_path):
    p = _write(tmp_path, "calls.json", [
        {"op": "init", "caller": "alice"},
        {"op": "transfer", "caller": "alice", "args": {"to": "bob", "value": 5}},
        {"op": "transfer", "caller": "alice", "args": {"value": 5}},
    ])
    r = runner.invoke(app, ["apply", str(p)])
    assert r.exit_code == 0
    assert "[0] init: ok" in r.stdout
    assert "[1] transfer: ok" in r.stdout
    assert "[2] transfer: DISPATCH_ERROR" in r.stdout
    assert "bob: 5" in r.stdout


def test_apply_resumes_from_saved_state(tmp_path):
    first = _write(tmp_path, "calls.json", CALLS)
    r = runner.invoke(app, ["apply", str(first), "--json"])
    assert r.exit_code == 0
    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(r.stdout, encoding="utf-8")

    more = _write(tmp_path, "more.json", [
        {"op": "init", "caller": "bob"},
        {"op": "transfer", "caller": "charlie", "args": {"to": "dave", "value": 50}},
    ])
    r2 = runner.invoke(app, ["--log-level", "WARNING", "apply", str(more), "--state", str(snapshot), "--json"])
    assert r2.exit_code == 0
    out = json.loads(r2.stdout)
    assert out["results"][0]["error"]["code"] == "ALREADY_INITIALIZED"
    assert out["results"][1]["status"] == "SUCCESS"
    assert out["state"]["balances"] == {
        "alice": 19_999_600, "bob": 200, "charlie": 150, "dave": 50,
    }


def test_apply_refuses_inconsistent_state(tmp_path):
    calls = _write(tmp_path, "calls.json", [{"op": "totalSupply"}])
    state = _write(tmp_path, "state.json", {
        "total_supply": 10, "initialized": True, "balances": {"alice": 11}, "allowances": {},
    })
    r = runner.invoke(app, ["apply", str(calls), "--state", str(state)])
    assert r.exit_code == 2


def test_log_file_receives_json_lines(tmp_path):
    calls = _write(tmp_path, "calls.json", [{"op": "transfer", "caller": "alice", "args": {"to": "bob", "value": 1}}])
    log_path = tmp_path / "logs" / "ledger.jsonl"
    r = runner.invoke(app, ["--log-file", str(log_path), "apply", str(calls)])
    assert r.exit_code == 0
    lines = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert any(rec["msg"] == "operation rejected" for rec in lines)
