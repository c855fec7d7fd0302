"""
sp1_verifier.cli
----------------
Command-line entrypoints for SP1 proofs:

- convert   : SP1 JSON artifact → canonical constants / generated pytest module
- verify    : Verify an SP1 JSON artifact (or raw hex inputs)
- dev-prove : Produce a valid artifact with the development setup
- versions  : List registered verifier versions and their selectors
- info      : Runtime banner, configuration and versions

Exit codes: 0 success, 1 proof rejected, 2 bad input.

Usage:
  sp1v verify proof.json
  sp1v convert proof.json --constants-out consts.py --test-out test_proof.py
  python -m sp1_verifier.cli versions --json
"""
from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .. import registry
from ..adapters.sp1_json import (convert_artifact, dump_artifact, make_artifact, render_constants,
                                 render_test_module)
from ..config import load_config
from ..errors import ArtifactError, VerifierError
from ..gateway import default_gateway
from ..logging import configure as configure_logging
from ..verifiers.binder import bind_public_inputs
from ..version import __version__, runtime_banner

__all__ = ["build_app", "main", "__version__"]


def _die(msg: str, code: int = 2) -> None:
    sys.stderr.write(msg.rstrip() + "\n")
    raise typer.Exit(code)


def _hex_arg(value: str, what: str) -> bytes:
    text = value.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise typer.BadParameter(f"{what} is not valid hex") from None


def _emit_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True))


def _version_rows() -> List[Dict[str, Any]]:
    rows = []
    for version in registry.list_versions():
        spec = registry.get(version)
        verifier = registry.build_verifier(version)
        rows.append(
            {
                "version": version,
                "selector": "0x" + verifier.selector.hex(),
                "identity_hash": "0x" + verifier.identity_hash().hex(),
                "description": spec.description,
            }
        )
    return rows


def _versions_table(rows: List[Dict[str, Any]]) -> Table:
    t = Table(title="Verifier versions", box=box.SIMPLE)
    t.add_column("Version")
    t.add_column("Selector")
    t.add_column("Identity hash")
    t.add_column("Description")
    for r in rows:
        t.add_row(r["version"], r["selector"], r["identity_hash"], r["description"])
    return t


def build_app() -> typer.Typer:
    app = typer.Typer(
        name="sp1v",
        help="SP1 proof tools: convert, verify and inspect SP1 zkVM proofs",
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback(invoke_without_command=True)
    def _meta(
        ctx: typer.Context,
        version: bool = typer.Option(False, "--version", "-V", help="Print version and exit", is_eager=True),
        log_level: Optional[str] = typer.Option(None, "--log-level", help="Override SP1V_LOG_LEVEL"),
    ) -> None:
        if version:
            typer.echo(f"sp1-verifier {__version__}")
            raise typer.Exit(0)
        cfg = load_config()
        configure_logging(level=log_level or cfg.log_level, json=cfg.log_json)
        if ctx.invoked_subcommand is None:
            typer.echo(ctx.get_help())
            raise typer.Exit(0)

    @app.command("convert")
    def convert_cmd(
        artifact: Path = typer.Argument(..., help="SP1 JSON proof artifact"),
        constants_out: Optional[Path] = typer.Option(None, "--constants-out", help="Write constants to this file"),
        test_out: Optional[Path] = typer.Option(None, "--test-out", help="Write a generated pytest module"),
        test_name: str = typer.Option("SP1VerifierTest", "--test-name", help="Class name of the generated test"),
        fmt: str = typer.Option("python", "--format", "-f", help="Constants format: python | json"),
        strict: bool = typer.Option(False, "--strict", help="Require public_inputs[1] to match the values digest"),
        json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    ) -> None:
        """Convert an SP1 JSON artifact into canonical verifier inputs."""
        try:
            converted = convert_artifact(artifact, strict=strict)
            constants = render_constants(converted, fmt=fmt)
            test_module = render_test_module(converted, test_name) if test_out else None
        except (ArtifactError, ValueError) as e:
            if json_out:
                _emit_json({"ok": False, "error": str(e), "file": str(artifact)})
                raise typer.Exit(2)
            _die(f"[convert] {artifact}: {e}")
            return

        if constants_out:
            constants_out.write_text(constants, encoding="utf-8")
        if test_out and test_module is not None:
            test_out.write_text(test_module, encoding="utf-8")

        if json_out:
            out = {"ok": True, "file": str(artifact), **converted.summary(), "proof": converted.proof_hex(),
                   "public_values": converted.public_values_hex()}
            if constants_out:
                out["constants_out"] = str(constants_out)
            if test_out:
                out["test_out"] = str(test_out)
            _emit_json(out)
            return

        console = Console()
        if not constants_out:
            console.print(constants, markup=False, highlight=False)
        if constants_out:
            console.print(f"constants written to {constants_out}")
        if test_out:
            console.print(f"test module written to {test_out}")

    @app.command("verify")
    def verify_cmd(
        artifact: Optional[Path] = typer.Argument(None, help="SP1 JSON proof artifact"),
        program_vkey: Optional[str] = typer.Option(None, "--vkey", help="Program vkey (32-byte hex), instead of an artifact"),
        public_values: Optional[str] = typer.Option(None, "--values", help="Public values (hex)"),
        proof: Optional[str] = typer.Option(None, "--proof", help="Proof bytes (hex, selector || payload)"),
        version: Optional[str] = typer.Option(None, "--verifier", help="Verifier version (default: route by selector)"),
        json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    ) -> None:
        """Verify a proof, routed by its selector unless --verifier is given."""
        if artifact is not None:
            try:
                converted = convert_artifact(artifact)
            except ArtifactError as e:
                _die(f"[verify] {artifact}: {e}")
                return
            vkey, values, proof_bytes = converted.program_vkey, converted.public_values, converted.proof
        elif program_vkey is not None and public_values is not None and proof is not None:
            vkey = _hex_arg(program_vkey, "--vkey")
            values = _hex_arg(public_values, "--values")
            proof_bytes = _hex_arg(proof, "--proof")
            if len(vkey) != 32:
                _die("--vkey must be 32 bytes")
        else:
            _die("give an artifact path, or all of --vkey, --values and --proof")
            return

        try:
            target = registry.build_verifier(version) if version else default_gateway()
        except registry.RegistryError as e:
            _die(f"[verify] {e}")
            return
        try:
            target.verify_proof(vkey, values, proof_bytes)
        except VerifierError as e:
            code = getattr(e.code, "value", str(e.code))
            if json_out:
                _emit_json({"ok": False, "code": code, "error": e.msg, "ctx": e.ctx})
            else:
                Console(stderr=True).print(f"[bold red]REJECTED[/] {code}: {e.msg}")
            raise typer.Exit(1)

        if json_out:
            _emit_json({"ok": True, "selector": "0x" + proof_bytes[:4].hex(), "program_vkey": "0x" + vkey.hex()})
            return
        Console().print(f"[bold green]OK[/] proof verified (selector 0x{proof_bytes[:4].hex()})")

    @app.command("dev-prove")
    def dev_prove_cmd(
        program_vkey: str = typer.Option(..., "--vkey", help="Program vkey (32-byte hex, < BN254 r)"),
        public_values: Optional[str] = typer.Option(None, "--values", help="Public values (hex)"),
        values_file: Optional[Path] = typer.Option(None, "--values-file", help="Read raw public values from a file"),
        out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the artifact here (default: stdout)"),
        seed: Optional[str] = typer.Option(None, "--seed", help="Development setup seed (default: SP1V_DEV_SEED)"),
    ) -> None:
        """Produce a valid SP1-shaped artifact with the development setup (not for production)."""
        from ..verifiers.plonk_kzg_bn254 import dev_setup

        vkey = _hex_arg(program_vkey, "--vkey")
        if len(vkey) != 32:
            _die("--vkey must be 32 bytes")
        if values_file is not None:
            values = values_file.read_bytes()
        elif public_values is not None:
            values = _hex_arg(public_values, "--values")
        else:
            values = b""

        setup = dev_setup(seed or load_config().dev_seed)
        try:
            payload = setup.prover.prove(bind_public_inputs(vkey, values))
        except ValueError as e:
            _die(f"[dev-prove] {e}")
            return
        data = dump_artifact(make_artifact(vkey, values, payload, setup.identity_hash, sp1_version="dev"))
        if out is None:
            sys.stdout.write(data.decode("utf-8") + "\n")
        else:
            out.write_bytes(data + b"\n")

    @app.command("versions")
    def versions_cmd(
        json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    ) -> None:
        """List registered verifier versions."""
        rows = _version_rows()
        if json_out:
            _emit_json(rows)
            return
        Console().print(_versions_table(rows))

    @app.command("info")
    def info_cmd(
        json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON result"),
    ) -> None:
        """Show runtime, configuration and registered versions."""
        cfg = load_config()
        settings = {
            "log_level": cfg.log_level,
            "log_json": cfg.log_json,
            "verifier_version": cfg.verifier_version,
            "verify_timeout_s": cfg.verify_timeout_s,
            "cache_size": cfg.cache_size,
        }
        rows = _version_rows()
        if json_out:
            _emit_json({"banner": runtime_banner(), "config": settings, "versions": rows})
            return
        meta = Table.grid(padding=(0, 2))
        meta.add_row("Runtime", runtime_banner())
        for k, v in settings.items():
            meta.add_row(k, str(v))
        console = Console()
        console.print(Panel(meta, title="sp1-verifier", expand=False))
        console.print(_versions_table(rows))

    return app


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint used by `sp1v` and `python -m sp1_verifier.cli`. Returns the exit code."""
    app = build_app()
    try:
        app(args=argv, prog_name="sp1v")
    except SystemExit as e:
        return int(e.code or 0)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
