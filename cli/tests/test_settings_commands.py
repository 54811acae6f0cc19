from __future__ import annotations

from typer.testing import CliRunner

from pp_cli import config
from pp_cli import main


def _use_tmp_config_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path))
    for name in (config.ENV_IDENTITY, config.ENV_SECRET_KEY, config.ENV_ENDPOINT):
        monkeypatch.delenv(name, raising=False)


def test_settings_group_available() -> None:
    runner = CliRunner()
    result = runner.invoke(main.app, ["--help"])
    assert result.exit_code == 0
    assert "settings" in result.output
    assert "choose-url" in result.output


def test_settings_init_then_show_hides_secret(tmp_path, monkeypatch) -> None:
    _use_tmp_config_dir(tmp_path, monkeypatch)
    runner = CliRunner()

    result = runner.invoke(
        main.app,
        ["settings", "init", "--identity", "acme", "--secret-key", "hunter2", "--protocol", "legacy"],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(main.app, ["settings", "show"])
    assert result.exit_code == 0
    assert "identity=acme" in result.stdout
    assert "secret_key=(set)" in result.stdout
    assert "protocol=legacy" in result.stdout
    assert "hunter2" not in result.output


def test_settings_init_refuses_to_overwrite(tmp_path, monkeypatch) -> None:
    _use_tmp_config_dir(tmp_path, monkeypatch)
    config.save_config(config.AppConfig(identity="first", secret_key="k"))
    runner = CliRunner()

    runner.invoke(main.app, ["settings", "init", "--identity", "second", "--secret-key", "k"])

    assert config.load_config().identity == "first"


def test_settings_set_rejects_unknown_protocol(tmp_path, monkeypatch) -> None:
    _use_tmp_config_dir(tmp_path, monkeypatch)
    runner = CliRunner()
    result = runner.invoke(main.app, ["settings", "set", "--protocol", "v9"])
    assert result.exit_code == 2


def test_settings_set_does_not_persist_env_values(tmp_path, monkeypatch) -> None:
    _use_tmp_config_dir(tmp_path, monkeypatch)
    config.save_config(config.AppConfig(identity="file-id", secret_key="file-key"))
    monkeypatch.setenv(config.ENV_SECRET_KEY, "env-key")
    runner = CliRunner()

    result = runner.invoke(main.app, ["settings", "set", "--max-choices", "12"])

    assert result.exit_code == 0, result.output
    saved = config.load_config(with_env=False)
    assert saved.secret_key == "file-key"
    assert saved.max_choices == 12
