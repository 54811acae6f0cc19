from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from typer.testing import CliRunner

from pp_cli import config
from pp_cli import main
from pp_cli.commands import choose_cmd
from pp_cli.http import ChoiceResult, NetworkError


def _configure(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path))
    monkeypatch.delenv(config.ENV_ENDPOINT, raising=False)
    monkeypatch.setenv(config.ENV_IDENTITY, "testing")
    monkeypatch.setenv(config.ENV_SECRET_KEY, "abcdefg")


class _FakeTransport:
    calls: list[tuple[str, str]] = []
    result = ChoiceResult(status_code=302, location="https://example.com/jacket-red.jpg")
    error: Exception | None = None

    def __init__(self, *, timeout_s: float = 15.0):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None

    def fetch_choice(self, url: str) -> ChoiceResult:
        self.calls.append(("GET", url))
        if self.error:
            raise self.error
        return self.result

    def report_action(self, url: str) -> int:
        self.calls.append(("POST", url))
        return 200


def test_choose_url_prints_signed_url(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    runner = CliRunner()
    result = runner.invoke(
        main.app,
        [
            "choose-url", "red", "green", "blue",
            "--tournament", "testing",
            "--ttl", "600",
            "--choices-prefix", "https://example.com/jacket-",
            "--choices-suffix", ".jpg",
            "--uid", "fixed-uid",
        ],
    )
    assert result.exit_code == 0, result.output
    url = result.stdout.strip()
    assert url.startswith("https://api.preferred-pictures.com/choose?")
    query = parse_qs(urlsplit(url).query)
    assert query["choices[]"] == ["red", "green", "blue"]
    assert query["identity"] == ["testing"]
    assert query["uid"] == ["fixed-uid"]
    assert "json" not in query
    assert "go" not in query
    assert len(query["signature"][0]) == 64


def test_choose_url_passes_destinations_and_flags(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    runner = CliRunner()
    result = runner.invoke(
        main.app,
        [
            "choose-url", "1", "2",
            "-t", "testing",
            "-d", "a", "-d", "b",
            "--json", "--go", "--limited-signature",
        ],
    )
    assert result.exit_code == 0, result.output
    query = parse_qs(urlsplit(result.stdout.strip()).query)
    assert query["destinations[]"] == ["a", "b"]
    assert query["json"] == ["true"]
    assert query["go"] == ["true"]
    assert query["limited_signature"] == ["true"]


def test_choose_url_reports_validation_error(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    runner = CliRunner()
    result = runner.invoke(main.app, ["choose-url", "red", "-t", "testing", "--ttl", "7200"])
    assert result.exit_code == 2
    assert "ttl must not exceed expiration horizon" in result.output


def test_choose_url_requires_identity(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path))
    monkeypatch.delenv(config.ENV_IDENTITY, raising=False)
    monkeypatch.delenv(config.ENV_SECRET_KEY, raising=False)
    runner = CliRunner()
    result = runner.invoke(main.app, ["choose-url", "red", "-t", "testing"])
    assert result.exit_code == 2
    assert "identity is required" in result.output


def test_choose_url_fetch_prints_location(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    _FakeTransport.calls = []
    _FakeTransport.error = None
    monkeypatch.setattr(choose_cmd, "Transport", _FakeTransport)
    runner = CliRunner()
    result = runner.invoke(main.app, ["choose-url", "red", "-t", "testing", "--fetch"])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "https://example.com/jacket-red.jpg"
    assert _FakeTransport.calls[0][0] == "GET"
    assert "/choose?" in _FakeTransport.calls[0][1]


def test_choose_url_fetch_network_error_exits_1(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    _FakeTransport.calls = []
    _FakeTransport.error = NetworkError("connection refused")
    monkeypatch.setattr(choose_cmd, "Transport", _FakeTransport)
    runner = CliRunner()
    result = runner.invoke(main.app, ["choose-url", "red", "-t", "testing", "--fetch"])
    _FakeTransport.error = None
    assert result.exit_code == 1
    assert "connection refused" in result.output


def test_report_action_posts(tmp_path, monkeypatch) -> None:
    _configure(tmp_path, monkeypatch)
    _FakeTransport.calls = []
    monkeypatch.setattr(choose_cmd, "Transport", _FakeTransport)
    runner = CliRunner()
    url = "https://api.preferred-pictures.com/choose?uid=u&signature=s"
    result = runner.invoke(main.app, ["report-action", url])
    assert result.exit_code == 0, result.output
    assert _FakeTransport.calls == [("POST", url)]
