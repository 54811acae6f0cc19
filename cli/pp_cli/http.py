from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx

from preferred_pictures import ClientConfig, PreferredPicturesClient, PreferredPicturesError

from .config import AppConfig, normalize_endpoint


class NetworkError(PreferredPicturesError):
    """Transport/network layer error."""


class ApiError(PreferredPicturesError):
    def __init__(self, status_code: int, message: str, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@dataclass(frozen=True)
class ChoiceResult:
    status_code: int
    location: str | None = None
    data: Any = None


def make_client(cfg: AppConfig, *, endpoint_override: str | None = None) -> PreferredPicturesClient:
    endpoint = normalize_endpoint(endpoint_override, warn=True) if endpoint_override else cfg.endpoint
    return PreferredPicturesClient(
        ClientConfig(
            identity=cfg.identity,
            secret_key=cfg.secret_key,
            max_choices=cfg.max_choices,
            endpoint=endpoint,
            protocol=cfg.protocol,
        )
    )


class Transport:
    """Executes signed URLs against the service; the URLs carry all auth."""

    def __init__(self, *, timeout_s: float = 15.0, transport: httpx.BaseTransport | None = None):
        self._client = httpx.Client(
            timeout=timeout_s,
            headers={"User-Agent": "preferred-pictures-cli/0.1.0"},
            follow_redirects=False,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _send(self, method: str, url: str) -> httpx.Response:
        try:
            r = self._client.request(method, url)
        except httpx.RequestError as e:
            raise NetworkError(str(e)) from e

        if r.status_code >= 400:
            msg = f"{method} {url.split('?', 1)[0]} failed with {r.status_code}"
            details = None
            data: Any = None
            try:
                data = r.json()
            except ValueError:
                details = r.text[:1000] or None
            if isinstance(data, dict) and data.get("message"):
                msg = str(data["message"])
                details = json.dumps(data, ensure_ascii=False)
            raise ApiError(r.status_code, msg, details)
        return r

    def fetch_choice(self, url: str) -> ChoiceResult:
        r = self._send("GET", url)
        if r.is_redirect:
            return ChoiceResult(status_code=r.status_code, location=r.headers.get("location"))
        try:
            data = r.json()
        except ValueError:
            data = r.text
        return ChoiceResult(status_code=r.status_code, data=data)

    def report_action(self, url: str) -> int:
        r = self._send("POST", url)
        return r.status_code
