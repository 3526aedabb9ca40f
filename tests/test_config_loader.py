"""Tests for config loader."""
import pytest

from pastec.utils.config_loader import load_config, get_config, reset_config


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Reset global config state and env for each test."""
    for var in ("PASTEC_HOST", "PASTEC_PORT", "PASTEC_USE_SSL", "PASTEC_TIMEOUT", "PASTEC_CONFIG"):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


def test_load_config():
    """Test loading config from yaml file."""
    config = load_config("config/config.yaml")

    assert config is not None
    assert "server" in config
    assert "files" in config


def test_get_config():
    """Test getting cached config."""
    load_config("config/config.yaml")

    config = get_config()
    assert config["server"]["host"] == "localhost"
    assert config["server"]["port"] == 4212


def test_server_config():
    """Test server configuration values and types."""
    server = load_config("config/config.yaml")["server"]

    assert server["use_ssl"] is False
    assert server["timeout"] == 30.0
    assert isinstance(server["port"], int)


def test_env_var_resolution(monkeypatch):
    """Test environment variable resolution."""
    monkeypatch.setenv("PASTEC_HOST", "pastec.example.org")
    monkeypatch.setenv("PASTEC_PORT", "8080")
    monkeypatch.setenv("PASTEC_USE_SSL", "true")

    server = load_config("config/config.yaml")["server"]

    assert server["host"] == "pastec.example.org"
    assert server["port"] == 8080
    assert server["use_ssl"] is True


def test_empty_timeout_means_none(monkeypatch):
    """Empty timeout leaves timeouts to the transport."""
    monkeypatch.setenv("PASTEC_TIMEOUT", "")
    assert load_config("config/config.yaml")["server"]["timeout"] is None


def test_missing_default_file_uses_defaults(tmp_path, monkeypatch):
    """Missing default config file falls back to defaults."""
    monkeypatch.chdir(tmp_path)
    config = load_config()

    assert config["server"] == {
        "host": "localhost", "port": 4212, "use_ssl": False, "timeout": None
    }
    assert config["files"]["max_dim"] == 1920


def test_partial_file_merges_defaults(tmp_path):
    """Sections missing from the file keep their defaults."""
    path = tmp_path / "config.yaml"
    path.write_text("server:\n  host: cbir.local\n")

    config = load_config(str(path))

    assert config["server"]["host"] == "cbir.local"
    assert config["server"]["port"] == 4212
    assert config["files"]["jpeg_quality"] == 95


def test_config_path_from_env(tmp_path, monkeypatch):
    """PASTEC_CONFIG selects the file when no path is given."""
    path = tmp_path / "custom.yaml"
    path.write_text("server:\n  port: 9999\n")
    monkeypatch.setenv("PASTEC_CONFIG", str(path))

    assert load_config()["server"]["port"] == 9999


def test_explicit_missing_file_raises(tmp_path):
    """A config path that was asked for must exist."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "typo.yaml"))


def test_missing_env_config_raises(tmp_path, monkeypatch):
    """PASTEC_CONFIG pointing nowhere is an error, not a silent default."""
    monkeypatch.setenv("PASTEC_CONFIG", str(tmp_path / "typo.yaml"))

    with pytest.raises(FileNotFoundError):
        load_config()
