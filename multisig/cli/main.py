"""
multisig — command-line interface for the approval gateway.

Commands:
  demo         Run the three-owner / threshold-2 walkthrough on an in-memory ledger
  run          Validate a scenario JSON file and apply its steps
  check-env    Validate deployment environment variables (NETWORK, OWNERn, THRESHOLD, GNOSIS_SAFE)
  config       Show the effective runtime configuration

Global options:
  --log-level TEXT   Log level for the `multisig` logger (env MULTISIG_LOG_LEVEL)
  --log-json         Emit JSON log lines instead of text

Examples:
  python -m multisig.cli demo
  python -m multisig.cli run scenario.json --json --strict
  NETWORK=test OWNER1=0x… OWNER2=0x… OWNER3=0x… python -m multisig.cli check-env
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from pydantic import ValidationError

from .. import __version__
from .. import logging as mlog
from ..config import load_config, summary
from ..errors import MultisigError
from ..provision import DeploymentSettings
from ..types.address import to_principal
from ..version import version_metadata
from ..wallet import MultisigWallet
from .scenario import Scenario, dumps, run_scenario

app = typer.Typer(
    name="multisig",
    help="Multi-party transaction approval gateway",
    no_args_is_help=True,
    add_completion=False,
)

DEMO_OWNERS = {
    "A": "0x" + "a1" * 20,
    "B": "0x" + "b2" * 20,
    "C": "0x" + "c3" * 20,
}
DEMO_DESTINATION = "0x" + "de" * 20


def _echo_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level for the multisig logger",
        envvar="MULTISIG_LOG_LEVEL",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Emit JSON log lines",
    ),
) -> None:
    """
    Multisig CLI — drive an in-memory approval gateway from the shell.
    """
    mlog.configure(json=log_json, level=log_level)


@app.command("version")
def version_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output version metadata as JSON"),
) -> None:
    """Print the package version."""
    if json_output:
        _echo_json(version_metadata())
    else:
        typer.echo(__version__)


@app.command("config")
def config_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show the configuration loaded from MULTISIG_* variables."""
    try:
        cfg = load_config()
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2)
    if json_output:
        _echo_json(cfg.to_dict())
    else:
        typer.echo(summary(cfg))


@app.command("demo")
def demo(
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """
    Owners A, B, C with threshold 2: submit, confirm twice, execute, and retry.
    """
    owners = DEMO_OWNERS
    wallet = MultisigWallet()
    wallet.executor.deposit(wallet.address, 100)  # type: ignore[attr-defined]
    wallet.initialize(list(owners.values()), 2)

    steps = []

    def record(label: str, fn: Any) -> None:
        try:
            res = fn()
        except MultisigError as err:
            steps.append({"step": label, "status": "REJECTED", "error": err.code})
            return
        out: Dict[str, Any] = {"step": label, "status": "OK"}
        if hasattr(res, "to_dict"):
            out["result"] = res.to_dict()
        elif res is not None:
            out["result"] = res
        steps.append(out)

    record("A submits 10 to destination", lambda: wallet.submit(owners["A"], DEMO_DESTINATION, 10))
    record("A confirms tx 0", lambda: wallet.confirm(owners["A"], 0))
    record("state", lambda: wallet.transaction_state(0).code)
    record("A executes tx 0 early", lambda: wallet.execute(owners["A"], 0))
    record("B confirms tx 0", lambda: wallet.confirm(owners["B"], 0))
    record("state", lambda: wallet.transaction_state(0).code)
    record("A executes tx 0", lambda: wallet.execute(owners["A"], 0))
    record("A executes tx 0 again", lambda: wallet.execute(owners["A"], 0))

    balance = wallet.executor.balance_of(to_principal(DEMO_DESTINATION))  # type: ignore[attr-defined]
    notifications = [n.to_dict() for n in wallet.notifications]
    if json_output:
        _echo_json({"steps": steps, "notifications": notifications, "destination_balance": balance})
        return

    for s in steps:
        detail = s.get("error") or s.get("result", "")
        typer.echo(f"{s['status']:<9} {s['step']:<30} {detail}")
    typer.echo("")
    typer.echo("notifications:")
    for n in wallet.notifications:
        typer.echo(f"  {n!r}")
    typer.echo(f"destination balance: {balance}")


@app.command("run")
def run(
    scenario_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Scenario JSON"),
    json_output: bool = typer.Option(False, "--json", help="Output the full JSON report"),
    strict: bool = typer.Option(False, "--strict", help="Exit 1 if any step outcome differs from its expectation"),
) -> None:
    """Validate SCENARIO_FILE and apply its steps to a fresh wallet."""
    try:
        scenario = Scenario.load(scenario_file)
    except (ValidationError, ValueError) as e:
        typer.echo(f"invalid scenario: {e}", err=True)
        raise typer.Exit(code=2)

    try:
        report = run_scenario(scenario)
    except MultisigError as err:
        typer.echo(f"initialization rejected: {err}", err=True)
        raise typer.Exit(code=2)

    if json_output:
        typer.echo(dumps(report))
    else:
        for row in report["steps"]:
            mark = "✓" if row["matched"] else "✗"
            typer.echo(f"{mark} [{row['index']}] {row['op']:<15} {row['outcome']}")
        typer.echo(f"{len(report['notifications'])} notification(s), {report['mismatches']} mismatch(es)")

    if strict and report["mismatches"]:
        raise typer.Exit(code=1)


@app.command("check-env")
def check_env(
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Validate NETWORK / OWNERn / THRESHOLD / GNOSIS_SAFE from the environment."""
    try:
        settings = DeploymentSettings.from_env()
    except MultisigError as err:
        errors = (err.data or {}).get("errors", [err.message])
        if json_output:
            _echo_json({"ok": False, "errors": errors})
        else:
            for line in errors:
                typer.echo(f"error: {line}", err=True)
        raise typer.Exit(code=1)

    if json_output:
        _echo_json({"ok": True, "settings": settings.to_dict()})
    else:
        typer.echo(
            f"ok: network={settings.network} owners={len(settings.owners)} "
            f"threshold={settings.threshold} safe={settings.admin_safe or '-'}"
        )


def main(argv: Optional[list] = None) -> None:
    app(args=argv)


__all__ = ["app", "main"]
