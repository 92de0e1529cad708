"""Tests for configuration module."""

import tempfile
from pathlib import Path

import pytest

from pulse.config import (
    Config,
    HostConfig,
    NotifyConfig,
    SSHOptions,
    write_default_config,
)


class TestHostConfig:
    """Tests for per-host configuration."""

    def test_from_dict_minimal(self):
        host = HostConfig.from_dict({"name": "web1", "host": "192.168.1.10", "user": "admin"})
        assert host.host == "192.168.1.10"
        assert host.user == "admin"
        assert host.port == 22  # Default
        assert host.key_file is None
        assert host.password is None
        assert host.label == "web1"  # Defaults to name

    def test_from_dict_full(self):
        data = {
            "name": "db",
            "host": "10.0.0.1",
            "user": "root",
            "port": 2222,
            "key_file": "~/.ssh/custom_key",
            "label": "Database",
        }
        host = HostConfig.from_dict(data)
        assert host.port == 2222
        assert host.key_file == "~/.ssh/custom_key"
        assert host.label == "Database"

    def test_zero_port_means_default(self):
        host = HostConfig.from_dict({"name": "a", "host": "a.local", "user": "u", "port": 0})
        assert host.port == 22

    def test_name_defaults_to_host(self):
        host = HostConfig.from_dict({"host": "a.local", "user": "u"})
        assert host.name == "a.local"
        assert host.label == "a.local"

    def test_direct_construction_fills_label(self):
        host = HostConfig(name="web1", host="10.0.0.1", user="admin")
        assert host.label == "web1"

    @pytest.mark.parametrize("missing", ["host", "user"])
    def test_missing_required_field(self, missing):
        data = {"name": "x", "host": "10.0.0.1", "user": "admin"}
        del data[missing]
        with pytest.raises(ValueError, match=missing):
            HostConfig.from_dict(data)

    def test_is_immutable(self):
        host = HostConfig(name="web1", host="10.0.0.1", user="admin")
        with pytest.raises(AttributeError):
            host.host = "10.0.0.2"


class TestNotifyConfig:
    """Tests for notification configuration."""

    def test_empty_is_disabled(self):
        assert NotifyConfig().enabled is False
        assert NotifyConfig.from_dict({"webhook": "", "command": None}).enabled is False

    def test_either_channel_enables(self):
        assert NotifyConfig(webhook="http://hook").enabled is True
        assert NotifyConfig(command="echo {host}").enabled is True


class TestSSHOptions:
    """Tests for shared session options."""

    def test_defaults(self):
        opts = SSHOptions()
        assert opts.dial_timeout == 5.0
        assert opts.command_timeout == 30.0
        assert opts.host_key_policy == "ignore"

    def test_disable_command_timeout(self):
        opts = SSHOptions.from_dict({"command_timeout": None})
        assert opts.command_timeout is None

    def test_unknown_host_key_policy(self):
        with pytest.raises(ValueError, match="host_key_policy"):
            SSHOptions.from_dict({"host_key_policy": "strict"})


class TestConfig:
    """Tests for main configuration."""

    def test_from_dict(self):
        data = {
            "interval": 120,
            "hosts": [
                {"name": "server1", "host": "192.168.1.10", "user": "admin"},
                {"name": "server2", "host": "192.168.1.11", "user": "admin", "label": "Two"},
            ],
            "notify": {"webhook": "https://hooks.example.com/x"},
            "max_workers": 4,
        }
        config = Config.from_dict(data)
        assert len(config.hosts) == 2
        assert config.interval == 120
        assert config.max_workers == 4
        assert config.notify.webhook == "https://hooks.example.com/x"
        assert config.hosts[1].label == "Two"

    @pytest.mark.parametrize("interval", [None, 0, -5])
    def test_interval_defaults_to_30(self, interval):
        config = Config.from_dict({"interval": interval})
        assert config.interval == 30

    @pytest.mark.parametrize("interval", ["fast", 2.5, True, [30]])
    def test_interval_must_be_integer(self, interval):
        with pytest.raises(ValueError, match="interval"):
            Config.from_dict({"interval": interval})

    def test_log_level_normalised(self):
        assert Config.from_dict({"log_level": "debug"}).log_level == "DEBUG"
        assert Config.from_dict({}).log_level == "WARNING"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="log_level"):
            Config.from_dict({"log_level": "LOUD"})

    def test_empty_dict(self):
        config = Config.from_dict({})
        assert config.hosts == []
        assert config.notify.enabled is False
        assert config.max_workers is None

    def test_from_yaml(self):
        yaml_content = """
interval: 60
hosts:
  - name: web-server
    host: 192.168.1.10
    user: admin
notify:
  command: echo {host} {state}
"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            f.write(yaml_content)
            f.flush()

            config = Config.from_yaml(f.name)
            assert len(config.hosts) == 1
            assert config.hosts[0].name == "web-server"
            assert config.interval == 60
            assert config.notify.command == "echo {host} {state}"

            Path(f.name).unlink()

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "nope.yaml")

    def test_get_host(self):
        config = Config.from_dict({
            "hosts": [
                {"name": "server1", "host": "10.0.0.1", "user": "u"},
                {"name": "server2", "host": "10.0.0.2", "user": "u"},
            ]
        })
        host = config.get_host("server1")
        assert host is not None
        assert host.host == "10.0.0.1"
        assert config.get_host("nonexistent") is None

    def test_to_yaml(self, tmp_path):
        config = Config(
            hosts=[HostConfig(name="a", host="10.0.0.1", user="u", label="Alpha")],
            notify=NotifyConfig(command="echo {state}"),
            interval=15,
        )
        path = tmp_path / "nested" / "hosts.yaml"
        config.to_yaml(path)

        loaded = Config.from_yaml(path)
        assert loaded.interval == 15
        assert loaded.hosts == config.hosts
        assert loaded.notify.command == "echo {state}"


class TestSampleConfig:
    """Tests for the sample configuration writer."""

    def test_write_default_config(self, tmp_path):
        path = write_default_config(tmp_path / "pulse" / "hosts.yaml")
        assert path.exists()

        config = Config.from_yaml(path)
        assert config.interval == 30
        assert len(config.hosts) == 1
        assert config.hosts[0].label == "Example Server"
        assert config.hosts[0].port == 22
