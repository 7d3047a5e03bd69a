"""Tests for the diaglog command line."""

import json

import pytest

from diaglog.cli import main


class TestRotate:
    def test_rotate(self, tmp_path, capsys):
        (tmp_path / "mixer.log").write_text("old")
        main(["rotate", str(tmp_path), "--app", "mixer", "--backups", "3"])
        assert (tmp_path / "mixer.log.1").read_text() == "old"
        assert "mixer.log is free" in capsys.readouterr().out

    def test_rotate_missing_dir(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["rotate", str(tmp_path / "missing")])
        assert exc.value.code == 1

    def test_rotate_invalid_backups(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["rotate", str(tmp_path), "--backups", "0"])


class TestEmit:
    def test_emit_writes_line(self, tmp_path, monkeypatch, capsys):
        monkeypatch.delenv("DIAGLOG_LEVEL", raising=False)
        main(["emit", "hello there", "--dir", str(tmp_path), "--app", "cli",
              "--level", "critical", "--category", "tool"])
        lines = (tmp_path / "cli.log").read_text().splitlines()
        assert any(line.endswith("] tool: hello there") and line.startswith("Critical [") for line in lines)
        assert "Written to" in capsys.readouterr().out

    def test_emit_rejects_path_app_name(self, tmp_path, capsys):
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        with pytest.raises(SystemExit) as exc:
            main(["emit", "x", "--dir", str(log_dir), "--app", "../escaped"])
        assert exc.value.code == 1
        assert "Invalid settings" in capsys.readouterr().err
        assert not (tmp_path / "escaped.log").exists()
        assert list(log_dir.iterdir()) == []

    def test_emit_invalid_level(self):
        with pytest.raises(SystemExit):
            main(["emit", "x", "--level", "shouty"])


class TestConfig:
    def test_config_prints_json(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("DIAGLOG_LEVEL", "info")
        path = tmp_path / "s.json"
        path.write_text(json.dumps({"app_name": "mixer"}))
        main(["config", "--file", str(path)])
        data = json.loads(capsys.readouterr().out)
        assert data["app_name"] == "mixer"
        assert data["level"] == "info"
        assert data["flush_level"] == "critical"

    def test_config_invalid(self, monkeypatch, capsys):
        monkeypatch.setenv("DIAGLOG_LEVEL", "chatty")
        with pytest.raises(SystemExit) as exc:
            main(["config"])
        assert exc.value.code == 1
        assert "Invalid settings" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit):
        main([])
    assert "diaglog" in capsys.readouterr().out
