"""Anchor service command line."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from loguru import logger

from anchorsvc.app import build_runtime, read_requests
from anchorsvc.config import load_anchor_keys, load_settings
from anchorsvc.encoding import prepend_block_height
from anchorsvc.errors import ConfigurationError, InvalidHeight
from anchorsvc.logging_utils import LOG_PROFILES, configure_logging

app = typer.Typer(name="anchorsvc", help="Anchor directory blocks into Bitcoin or Ethereum", add_completion=False)


@app.command()
def serve(
    env_file: Path | None = typer.Option(None, "--env-file", "-e", help="Settings file"),  # noqa: B008
    log_profile: str = typer.Option("default", "--log-profile", help="default (plain stderr) or console (rich)"),
) -> None:
    """Run the anchor service, reading anchor requests as JSON lines from stdin."""

    if log_profile not in LOG_PROFILES:
        raise typer.BadParameter(f"expected one of {', '.join(LOG_PROFILES)}", param_hint="--log-profile")
    try:
        settings = load_settings(env_file)
    except ConfigurationError as exc:
        configure_logging(profile=log_profile)
        logger.critical("anchor.startup.failed error={}", exc)
        raise typer.Exit(2) from exc

    configure_logging(profile=log_profile, level=settings.log_level)
    try:
        runtime = build_runtime(settings)
    except ConfigurationError as exc:
        logger.critical("anchor.startup.failed error={}", exc)
        raise typer.Exit(2) from exc

    asyncio.run(runtime.run(read_requests(sys.stdin)))
    if runtime.failed:
        raise typer.Exit(1)


@app.command()
def encode(
    height: int = typer.Argument(..., help="Directory block height"),
    digest: str = typer.Argument(..., help="Hash to anchor, hex"),
) -> None:
    """Print the on-chain payload for HEIGHT and DIGEST as hex."""

    try:
        raw = bytes.fromhex(digest)
    except ValueError as exc:
        typer.echo(f"invalid hash: {exc}", err=True)
        raise typer.Exit(1) from exc
    try:
        payload = prepend_block_height(height, raw)
    except InvalidHeight as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc
    typer.echo(payload.hex())


@app.command("check-config")
def check_config(
    env_file: Path | None = typer.Option(None, "--env-file", "-e", help="Settings file"),  # noqa: B008
) -> None:
    """Parse settings and keys without starting the service."""

    try:
        settings = load_settings(env_file)
        keys = load_anchor_keys(settings)
        target = settings.anchor_target()
    except ConfigurationError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"factomd: {settings.factom_addr}")
    typer.echo(f"anchor chain: {keys.chain_id}")
    typer.echo(f"ec address: {keys.ec_address.public_address()}")
    typer.echo(f"backend: {target.name.lower()}")
