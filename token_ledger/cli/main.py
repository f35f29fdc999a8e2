from __future__ import annotations

"""
token_ledger.cli.main
---------------------

Command-line entrypoint for inspecting and exercising a token ledger.

Commands
--------
config    print the effective LedgerConfig ($TOKEN_LEDGER_CONFIG_FILE + env)
genesis   validate a genesis file and print the state it seeds
apply     run a JSON list of calls through the dispatcher, print results + final state
version   print the package version

Examples
--------
# Effective configuration as JSON
token-ledger config

# Seed from genesis.yaml and show the resulting state root
token-ledger genesis ./genesis.yaml

# Explicit-init ledger: the calls file must start with an init
token-ledger apply calls.json --json

# Genesis-seeded ledger, burn allowed
token-ledger apply calls.json --genesis genesis.json --admin

# Continue from a saved snapshot (the "state" object of a previous --json run)
token-ledger apply more.json --state snapshot.json

Calls file format:
[
  {"op": "init", "caller": "alice"},
  {"op": "transfer", "caller": "alice", "args": {"to": "bob", "value": 200}}
]
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer

from .. import config as ledger_config
from .. import logging as llog
from ..errors import ConfigError
from ..genesis import load_genesis
from ..runtime.dispatcher import apply_batch
from ..runtime.ledger import TokenLedger
from ..state.ledger_state import LedgerState
from ..version import __version__, version_metadata

app = typer.Typer(
    name="token-ledger",
    add_completion=False,
    no_args_is_help=True,
    help="Inspect genesis files and apply calls to a fungible token ledger.",
)

# -------------------- utils --------------------


def _load_config(path: Optional[Path]) -> ledger_config.LedgerConfig:
    base = ledger_config.from_file(path) if path else None
    if base is None:
        return ledger_config.load()
    return ledger_config.from_env(base=base)


def _read_calls(path: Path) -> List[Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"cannot parse calls file {path}: {e}") from e
    if isinstance(data, dict) and "calls" in data:
        data = data["calls"]
    if not isinstance(data, list):
        raise ConfigError(f"calls file {path} must contain a JSON list of calls")
    return data


def _read_state(path: Path, max_value: int) -> LedgerState:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"cannot parse state file {path}: {e}") from e
    if isinstance(data, dict) and isinstance(data.get("state"), dict):
        data = data["state"]
    if not isinstance(data, dict):
        raise ConfigError(f"state file {path} must contain a JSON object")
    return LedgerState.from_dict(data, max_value=max_value)


def _fail(msg: str, code: int = 2) -> None:
    typer.secho(msg, err=True, fg=typer.colors.RED)
    raise typer.Exit(code)


def _print_state(state: Dict[str, Any], root: str) -> None:
    typer.echo(f"total_supply: {state['total_supply']}")
    typer.echo(f"initialized:  {state['initialized']}")
    typer.echo(f"state_root:   {root}")
    if state["balances"]:
        typer.echo("balances:")
        for acct, bal in state["balances"].items():
            typer.echo(f"  {acct}: {bal}")
    if state["allowances"]:
        typer.echo("allowances:")
        for owner, per_spender in state["allowances"].items():
            for spender, v in per_spender.items():
                typer.echo(f"  {owner} -> {spender}: {v}")


# -------------------- commands --------------------


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (default: $TOKEN_LEDGER_LOG_LEVEL or INFO)."
    ),
    log_json: Optional[bool] = typer.Option(
        None, "--log-json/--log-text", help="Force JSON or text log lines."
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON log lines to this file."
    ),
) -> None:
    llog.configure(json=log_json, level=log_level, file_path=log_file)


@app.command("config")
def cmd_config(
    config_file: Optional[Path] = typer.Option(None, "--config", help="JSON/YAML config file."),
) -> None:
    """Print the effective configuration."""
    try:
        cfg = _load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        _fail(f"config error: {e}")
    typer.echo(ledger_config.pretty(cfg))


@app.command("genesis")
def cmd_genesis(
    path: Path = typer.Argument(..., help="Genesis file (.json/.yaml/.yml)."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Validate a genesis file and print the state it seeds."""
    try:
        genesis = load_genesis(path)
        ledger = TokenLedger.from_genesis(genesis)
    except (ConfigError, FileNotFoundError) as e:
        _fail(f"genesis error: {e}")

    if json_out:
        out = {"genesis": genesis.to_dict(), "state": ledger.snapshot(), "state_root": ledger.state_root()}
        typer.echo(json.dumps(out, indent=2, sort_keys=True))
        return
    _print_state(ledger.snapshot(), ledger.state_root())


@app.command("apply")
def cmd_apply(
    calls_file: Path = typer.Argument(..., help="JSON list of calls."),
    genesis_file: Optional[Path] = typer.Option(
        None, "--genesis", help="Seed from this genesis file instead of an explicit init."
    ),
    state_file: Optional[Path] = typer.Option(
        None, "--state", help="Resume from a saved state snapshot (JSON) instead of a fresh ledger."
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", help="JSON/YAML config file."),
    admin: bool = typer.Option(False, "--admin", help="Dispatch as administrator (enables seed and burn)."),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any call was rejected."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Apply a batch of calls in order and print each result and the final state."""
    try:
        cfg = _load_config(config_file)
        if genesis_file is not None and state_file is not None:
            raise ConfigError("--genesis and --state are mutually exclusive")
        if genesis_file is not None:
            ledger = TokenLedger.from_genesis(load_genesis(genesis_file, max_value=cfg.max_value), cfg)
        elif state_file is not None:
            ledger = TokenLedger(cfg, state=_read_state(state_file, cfg.max_value))
        else:
            ledger = TokenLedger(cfg)
        calls = _read_calls(calls_file)
    except (ConfigError, FileNotFoundError) as e:
        _fail(f"setup error: {e}")

    with llog.trace_scope(ledger_id=ledger.ledger_id):
        results = apply_batch(ledger, calls, admin=admin)

    rejected = sum(1 for r in results if not r.ok)
    if json_out:
        out = {
            "results": [r.to_dict() for r in results],
            "state": ledger.snapshot(),
            "state_root": ledger.state_root(),
            "events_digest": ledger.sink.digest() if hasattr(ledger.sink, "digest") else None,
        }
        typer.echo(json.dumps(out, indent=2, sort_keys=True))
    else:
        for i, r in enumerate(results):
            if r.ok:
                extra = f" -> {r.value}" if r.value is not None else ""
                names = ",".join(ev.name for ev in r.events)
                typer.echo(f"[{i}] {r.op}: ok{extra}" + (f" ({names})" if names else ""))
            else:
                typer.echo(f"[{i}] {r.op}: {r.error_code} {r.error.get('message', '') if r.error else ''}")
        typer.echo("")
        _print_state(ledger.snapshot(), ledger.state_root())

    if strict and rejected:
        raise typer.Exit(1)


@app.command("version")
def cmd_version(
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Print the package version."""
    if json_out:
        typer.echo(json.dumps(version_metadata(), indent=2, sort_keys=True))
    else:
        typer.echo(__version__)


if __name__ == "__main__":
    app()
