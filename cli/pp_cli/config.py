from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from typing import Any

import tomli_w
from platformdirs import user_config_dir

from preferred_pictures.config_types import DEFAULT_ENDPOINT, DEFAULT_MAX_CHOICES, DEFAULT_PROTOCOL

from . import console

APP_NAME = "preferred-pictures"
CONFIG_FILENAME = "config.toml"
ENV_IDENTITY = "PP_IDENTITY"
ENV_SECRET_KEY = "PP_SECRET_KEY"
ENV_ENDPOINT = "PP_ENDPOINT"
DEFAULT_TIMEOUT_S = 15.0

_WARNED_ENDPOINT_SCHEME = False


@dataclass
class AppConfig:
    identity: str = ""
    secret_key: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    max_choices: int = DEFAULT_MAX_CHOICES
    protocol: str = DEFAULT_PROTOCOL
    timeout_s: float = DEFAULT_TIMEOUT_S


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_config() -> AppConfig:
    return AppConfig()


def normalize_endpoint(raw: str | None, *, warn: bool = False) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    value = value.rstrip("/")
    lowered = value.lower()
    if lowered.startswith("http://") or lowered.startswith("https://"):
        return value

    host = value.split("/", 1)[0]
    host = host.split(":", 1)[0].lower()
    if host in {"localhost", "127.0.0.1", "0.0.0.0"}:
        scheme = "http://"
    else:
        scheme = "https://"

    normalized = f"{scheme}{value}"
    if warn:
        _warn_missing_scheme(normalized)
    return normalized


def _warn_missing_scheme(normalized: str) -> None:
    global _WARNED_ENDPOINT_SCHEME
    if _WARNED_ENDPOINT_SCHEME:
        return
    console.warn(f"endpoint missing scheme, assuming {normalized}")
    _WARNED_ENDPOINT_SCHEME = True


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    data: dict[str, Any] = {
        "identity": cfg.identity,
        "secret_key": cfg.secret_key,
        "endpoint": cfg.endpoint,
        "max_choices": cfg.max_choices,
        "protocol": cfg.protocol,
        "timeout_s": cfg.timeout_s,
    }
    return {k: v for k, v in data.items() if v not in (None, "")}


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    cfg.identity = str(data.get("identity") or "").strip()
    cfg.secret_key = str(data.get("secret_key") or "")
    cfg.endpoint = normalize_endpoint(str(data.get("endpoint") or ""), warn=True) or DEFAULT_ENDPOINT
    cfg.protocol = str(data.get("protocol") or DEFAULT_PROTOCOL).strip().lower()

    max_choices = data.get("max_choices")
    if max_choices is not None:
        try:
            cfg.max_choices = int(max_choices)
        except (TypeError, ValueError):
            console.warn(f"ignoring invalid max_choices in config: {max_choices!r}")

    timeout_s = data.get("timeout_s")
    if timeout_s is not None:
        try:
            cfg.timeout_s = float(timeout_s)
        except (TypeError, ValueError):
            console.warn(f"ignoring invalid timeout_s in config: {timeout_s!r}")
    return cfg


def apply_env(cfg: AppConfig) -> AppConfig:
    identity = os.getenv(ENV_IDENTITY, "").strip()
    secret_key = os.getenv(ENV_SECRET_KEY, "")
    endpoint = os.getenv(ENV_ENDPOINT, "").strip()
    return AppConfig(
        identity=identity or cfg.identity,
        secret_key=secret_key or cfg.secret_key,
        endpoint=normalize_endpoint(endpoint, warn=True) if endpoint else cfg.endpoint,
        max_choices=cfg.max_choices,
        protocol=cfg.protocol,
        timeout_s=cfg.timeout_s,
    )


def load_config(*, with_env: bool = True) -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data)
    except FileNotFoundError:
        cfg = default_config()
    return apply_env(cfg) if with_env else cfg


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    # holds the signing key; never created with wider permissions
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path


def secret_state(value: str) -> str:
    return "(set)" if value else "(empty)"
