from __future__ import annotations

import threading
import time
from pathlib import Path

from typer.testing import CliRunner

from tailpoll import __version__, cli
from tailpoll.cli import app

runner = CliRunner()


def _later(delay: float, fn) -> threading.Thread:
    def run():
        time.sleep(delay)
        fn()

    t = threading.Thread(target=run, daemon=True)
    t.start()
    return t


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"tailpoll {__version__}" in result.output


def test_follow_missing_file_exits_1(tmp_path: Path):
    result = runner.invoke(app, ["follow", str(tmp_path / "missing.log")])
    assert result.exit_code == 1
    assert "Could not find file" in result.output


def test_follow_rejects_empty_delimiter(log_file: Path):
    result = runner.invoke(app, ["follow", str(log_file), "-d", ""])
    assert result.exit_code == 1
    assert "delimiter" in result.output


def test_follow_rejects_bad_config(tmp_path: Path, log_file: Path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("poll_interval_ms: -5\n", encoding="utf-8")
    result = runner.invoke(app, ["follow", str(log_file), "--config", str(cfg)])
    assert result.exit_code == 1
    assert "poll_interval_ms" in result.output


def test_follow_prints_lines_until_deleted(log_file: Path, append):
    t1 = _later(0.3, lambda: append(log_file, "first||second||"))
    t2 = _later(1.0, log_file.unlink)

    result = runner.invoke(app, ["follow", str(log_file), "-i", "10", "-d", "||"])
    t1.join()
    t2.join()

    assert result.exit_code == 0
    assert "first\nsecond\n" in result.output
    assert "was deleted" in result.output


def test_follow_prompts_until_file_exists(log_file: Path):
    t = _later(0.5, log_file.unlink)

    result = runner.invoke(app, ["follow", "-i", "10"], input=f"/no/such/file\n{log_file}\n")
    t.join()

    assert result.exit_code == 0
    assert "Which file do you want to monitor?" in result.output
    assert "File does not exist. Please try again." in result.output
    assert "was deleted" in result.output


def test_config_command(tmp_path: Path):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("delimiter: '||'\npoll_interval_ms: 200\n", encoding="utf-8")

    result = runner.invoke(app, ["config", "--config", str(cfg)])
    assert result.exit_code == 0
    assert f"CONFIG: {cfg}" in result.output
    assert "poll_interval_ms: 200" in result.output
    assert "resolved delimiter: '||'" in result.output


def test_config_command_creates_user_file(_isolated_home: Path):
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert (_isolated_home / ".config" / "tailpoll" / "config.yaml").exists()


def test_follow_keep_offset_disables_reset(log_file: Path, monkeypatch):
    built = []
    real = cli.TailEngine.from_config

    def spy(path, cfg):
        eng = real(path, cfg)
        built.append(eng)
        return eng

    monkeypatch.setattr(cli.TailEngine, "from_config", spy)
    t = _later(0.3, log_file.unlink)

    result = runner.invoke(app, ["follow", str(log_file), "-i", "10", "--keep-offset"])
    t.join()

    assert result.exit_code == 0
    assert built[0].reset_before_restart is False


def test_follow_resets_on_restart_by_default(log_file: Path, monkeypatch):
    built = []
    real = cli.TailEngine.from_config

    def spy(path, cfg):
        eng = real(path, cfg)
        built.append(eng)
        return eng

    monkeypatch.setattr(cli.TailEngine, "from_config", spy)
    t = _later(0.3, log_file.unlink)

    result = runner.invoke(app, ["follow", str(log_file), "-i", "10"])
    t.join()

    assert result.exit_code == 0
    assert built[0].reset_before_restart is True


def test_unescape_keeps_non_ascii():
    assert cli._unescape("§\\n") == "§\n"
    assert cli._unescape("\\r\\n") == "\r\n"
    assert cli._unescape("\\t|é|") == "\t|é|"
    assert cli._unescape("a\\\\n") == "a\\n"
    assert cli._unescape("||") == "||"
