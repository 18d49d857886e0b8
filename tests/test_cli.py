from __future__ import annotations

from typer.testing import CliRunner

from anchorsvc.cli import app
from conftest import CHAIN_ID

runner = CliRunner()


def test_encode_prints_payload_hex() -> None:
    result = runner.invoke(app, ["encode", "1", "00" * 32])

    assert result.exit_code == 0
    assert result.stdout.strip() == "4661000000000001" + "00" * 32


def test_encode_rejects_height_over_48_bits() -> None:
    result = runner.invoke(app, ["encode", str(0x0001000000000000), "00" * 32])

    assert result.exit_code == 1


def test_encode_rejects_non_hex_hash() -> None:
    result = runner.invoke(app, ["encode", "1", "xyz"])

    assert result.exit_code == 1


def test_check_config_reports_parsed_settings(anchor_env: dict[str, str]) -> None:
    result = runner.invoke(app, ["check-config"])

    assert result.exit_code == 0
    assert f"anchor chain: {CHAIN_ID}" in result.stdout
    assert "ec address: EC" in result.stdout
    assert "backend: bitcoin" in result.stdout


def test_check_config_fails_on_bad_key(anchor_env: dict[str, str], monkeypatch) -> None:
    monkeypatch.setenv("ANCHOR_SIG_KEY", "not-hex")

    result = runner.invoke(app, ["check-config"])

    assert result.exit_code == 1


def test_serve_exits_on_startup_error(anchor_env: dict[str, str], monkeypatch) -> None:
    monkeypatch.setenv("ANCHOR_ANCHOR_TO", "7")
    monkeypatch.setattr("anchorsvc.cli.configure_logging", lambda **_kwargs: None)

    result = runner.invoke(app, ["serve"])

    assert result.exit_code == 2


def test_serve_exits_nonzero_after_failure_threshold(anchor_env: dict[str, str], monkeypatch) -> None:
    class _Runtime:
        failed = True

        async def run(self, requests) -> None:
            await requests.aclose()

    monkeypatch.setattr("anchorsvc.cli.configure_logging", lambda **_kwargs: None)
    monkeypatch.setattr("anchorsvc.cli.build_runtime", lambda _settings: _Runtime())

    result = runner.invoke(app, ["serve"], input="")

    assert result.exit_code == 1


def test_serve_configures_logging_from_env_file(anchor_env: dict[str, str], tmp_path, monkeypatch) -> None:
    class _Runtime:
        failed = False

        async def run(self, requests) -> None:
            await requests.aclose()

    calls: list[dict] = []
    built: list = []
    monkeypatch.delenv("ANCHOR_LOG_LEVEL", raising=False)
    monkeypatch.setattr("anchorsvc.cli.configure_logging", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr("anchorsvc.cli.build_runtime", lambda settings: built.append(settings) or _Runtime())
    env_file = tmp_path / "anchor.env"
    env_file.write_text("ANCHOR_LOG_LEVEL=DEBUG\n", encoding="utf-8")

    result = runner.invoke(app, ["serve", "--env-file", str(env_file), "--log-profile", "console"], input="")

    assert result.exit_code == 0
    assert calls == [{"profile": "console", "level": "DEBUG"}]
    assert built[0].log_level == "DEBUG"


def test_serve_rejects_unknown_log_profile(anchor_env: dict[str, str], monkeypatch) -> None:
    monkeypatch.setattr("anchorsvc.cli.configure_logging", lambda **_kwargs: None)

    result = runner.invoke(app, ["serve", "--log-profile", "json"])

    assert result.exit_code == 2
