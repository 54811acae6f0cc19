from __future__ import annotations

import os

import typer

from preferred_pictures.signing import PROTOCOLS

from .. import console
from ..config import config_path, default_config, load_config, normalize_endpoint, save_config, secret_state

app = typer.Typer(help="Manage local client settings (identity, secret key, endpoint).")


def _check_protocol(value: str) -> str:
    name = value.strip().lower()
    if name not in PROTOCOLS:
        console.err(f"Unknown protocol: {value} (expected one of: {', '.join(sorted(PROTOCOLS))})")
        raise typer.Exit(code=2)
    return name


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        identity: str = typer.Option(..., "--identity", prompt="Identity", help="Account identity."),
        secret_key: str = typer.Option(
            ...,
            "--secret-key",
            prompt="Secret key",
            hide_input=True,
            help="HMAC signing key.",
        ),
        endpoint: str | None = typer.Option(None, "--endpoint", help="API endpoint override."),
        max_choices: int | None = typer.Option(None, "--max-choices", min=1, help="Maximum choices per request."),
        protocol: str | None = typer.Option(None, "--protocol", help="Signing protocol: current or legacy."),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.identity = identity.strip()
    cfg.secret_key = secret_key
    if not cfg.identity or not cfg.secret_key:
        console.err("Identity and secret key cannot be empty.")
        raise typer.Exit(code=2)
    if endpoint:
        cfg.endpoint = normalize_endpoint(endpoint, warn=True)
    if max_choices is not None:
        cfg.max_choices = max_choices
    if protocol:
        cfg.protocol = _check_protocol(protocol)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    console.out(
        f"identity={cfg.identity or '(empty)'} secret_key={secret_state(cfg.secret_key)} "
        f"endpoint={cfg.endpoint} max_choices={cfg.max_choices} protocol={cfg.protocol}"
    )


@app.command("set")
def set_setting(
        identity: str | None = typer.Option(None, "--identity", help="Set account identity."),
        secret_key: str | None = typer.Option(None, "--secret-key", help="Set HMAC signing key."),
        endpoint: str | None = typer.Option(None, "--endpoint", help="Set API endpoint."),
        max_choices: int | None = typer.Option(None, "--max-choices", min=1, help="Set maximum choices."),
        protocol: str | None = typer.Option(None, "--protocol", help="Set signing protocol."),
):
    cfg = load_config(with_env=False)
    if identity is not None:
        cfg.identity = identity.strip()
    if secret_key is not None:
        cfg.secret_key = secret_key
    if endpoint is not None:
        cfg.endpoint = normalize_endpoint(endpoint, warn=True)
    if max_choices is not None:
        cfg.max_choices = max_choices
    if protocol is not None:
        cfg.protocol = _check_protocol(protocol)
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
