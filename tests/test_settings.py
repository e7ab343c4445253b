import pytest

from zkpin.crypto.exceptions import ConfigurationError
from zkpin.settings import (
    DEFAULT_PERSISTENCE_TIMEOUT,
    DEFAULT_PROVER_TIMEOUT,
    Settings,
    get_settings,
    load_settings_file,
    set_settings_override,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ZKPIN_SETTINGS",
        "ZKPIN_PROVER_TIMEOUT",
        "ZKPIN_PERSISTENCE_TIMEOUT",
        "ZKPIN_MERKLE_DEPTH",
        "ZKPIN_KEYSTORE_PATH",
        "ZKPIN_PIN_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    set_settings_override(None)


def test_defaults():
    settings = get_settings()
    assert settings.prover_timeout == DEFAULT_PROVER_TIMEOUT
    assert settings.persistence_timeout == DEFAULT_PERSISTENCE_TIMEOUT
    assert settings.merkle_depth is None


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("ZKPIN_PROVER_TIMEOUT", "30")
    monkeypatch.setenv("ZKPIN_MERKLE_DEPTH", "5")
    settings = get_settings()
    assert settings.prover_timeout == 30.0
    assert settings.merkle_depth == 5


def test_file_then_env(monkeypatch, tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("prover_timeout: 15\npin_dir: /tmp/pins\n")
    monkeypatch.setenv("ZKPIN_SETTINGS", str(path))
    monkeypatch.setenv("ZKPIN_PROVER_TIMEOUT", "20")
    settings = get_settings()
    assert settings.prover_timeout == 20.0
    assert settings.pin_dir == "/tmp/pins"


def test_explicit_path(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("persistence_timeout: 2.5\n")
    assert get_settings(path).persistence_timeout == 2.5


def test_unknown_key(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("bogus: 1\n")
    with pytest.raises(ConfigurationError, match="bogus"):
        load_settings_file(path)


def test_non_mapping(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigurationError):
        load_settings_file(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings_file(tmp_path / "absent.yaml")


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("ZKPIN_PROVER_TIMEOUT", "soon")
    with pytest.raises(ConfigurationError):
        get_settings()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"prover_timeout": 0},
        {"persistence_timeout": -1},
        {"merkle_depth": 0},
        {"merkle_depth": 33},
    ],
)
def test_validation(kwargs):
    with pytest.raises(ConfigurationError):
        Settings(**kwargs)


def test_override():
    override = Settings(prover_timeout=1.0)
    set_settings_override(override)
    assert get_settings() is override
