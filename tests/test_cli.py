"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from pulse.cli import main
from pulse.models import HostStatus


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "hosts.yaml"
    path.write_text(
        "hosts:\n"
        "  - name: up\n"
        "    host: 10.0.0.1\n"
        "    user: admin\n"
        "  - name: down\n"
        "    host: 10.0.0.2\n"
        "    user: admin\n"
    )
    return path


@pytest.fixture
def fake_checks(monkeypatch):
    def fake_check_host(host, options=None, known_hosts=None):
        if host.name == "down":
            return HostStatus(config=host, online=False, error="dial: connection refused")
        return HostStatus(config=host, online=True, cpu="0.1 0.2 0.3", disk="42%")

    monkeypatch.setattr("pulse.monitor.check_host", fake_check_host)


class TestInit:
    def test_writes_sample(self, runner, tmp_path):
        target = tmp_path / "cfg" / "hosts.yaml"
        result = runner.invoke(main, ["init", "-o", str(target)])
        assert result.exit_code == 0
        assert target.exists()

    def test_refuses_to_overwrite(self, runner, tmp_path):
        target = tmp_path / "hosts.yaml"
        target.write_text("keep me")
        result = runner.invoke(main, ["init", "-o", str(target)])
        assert result.exit_code == 1
        assert target.read_text() == "keep me"

        result = runner.invoke(main, ["init", "-o", str(target), "--force"])
        assert result.exit_code == 0
        assert "hosts:" in target.read_text()


class TestCheck:
    def test_json_output(self, runner, config_file, fake_checks):
        result = runner.invoke(main, ["check", "-c", str(config_file), "--json"])
        assert result.exit_code == 1  # one host is down

        rows = json.loads(result.stdout)
        assert [r["host"] for r in rows] == ["10.0.0.1", "10.0.0.2"]
        assert rows[0]["online"] is True
        assert rows[0]["disk"] == "42%"
        assert rows[1]["error"] == "dial: connection refused"
        assert rows[1]["check_count"] == 1

    def test_table_output(self, runner, config_file, fake_checks):
        result = runner.invoke(main, ["check", "-c", str(config_file)])
        assert "UP" in result.stdout
        assert "DOWN" in result.stdout

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(main, ["check", "-c", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 1

    @pytest.mark.parametrize("line", ["interval: soon", "log_level: LOUD"])
    def test_invalid_config(self, runner, config_file, line):
        config_file.write_text(line + "\n" + config_file.read_text())
        result = runner.invoke(main, ["check", "-c", str(config_file)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestDispatch:
    def test_assign_status_list_remove(self, runner, tmp_path):
        store = tmp_path / "dispatch.json"
        base = ["dispatch", "--file", str(store)]

        result = runner.invoke(main, base + ["assign", "PROJ-1", "hostA", "-s", "Fix bug"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(main, base + ["status", "PROJ-1→hostA", "done", "-n", "merged"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(main, base + ["list", "--target", "hostA", "--json"])
        records = json.loads(result.stdout)
        assert len(records) == 1
        assert records[0]["status"] == "done"
        assert records[0]["note"] == "merged"

        result = runner.invoke(main, base + ["remove", "PROJ-1→hostA"])
        assert result.exit_code == 0
        assert json.loads(store.read_text()) == {"assignments": []}

    def test_unknown_id(self, runner, tmp_path):
        base = ["dispatch", "--file", str(tmp_path / "dispatch.json")]
        result = runner.invoke(main, base + ["remove", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_malformed_file(self, runner, tmp_path):
        store = tmp_path / "dispatch.json"
        store.write_text("{broken")
        result = runner.invoke(main, ["dispatch", "--file", str(store), "list"])
        assert result.exit_code == 1
        assert "parse dispatch file" in result.output
