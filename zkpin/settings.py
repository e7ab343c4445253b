"""
Runtime settings for zkpin.

Resolution order per field: in-memory override (testing only), environment
variable, YAML settings file, built-in default.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Final, Optional

import yaml

from .crypto.config import MAX_MERKLE_DEPTH
from .crypto.exceptions import ConfigurationError

_ENV_PREFIX: Final[str] = "ZKPIN_"
_ENV_SETTINGS_FILE: Final[str] = "ZKPIN_SETTINGS"

DEFAULT_PROVER_TIMEOUT = 120.0
DEFAULT_PERSISTENCE_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    prover_timeout: float = DEFAULT_PROVER_TIMEOUT
    persistence_timeout: float = DEFAULT_PERSISTENCE_TIMEOUT
    merkle_depth: Optional[int] = None
    keystore_path: str = "~/.zkpin/keystore.yaml"
    pin_dir: str = "~/.zkpin/pins"

    def __post_init__(self):
        if self.prover_timeout <= 0 or self.persistence_timeout <= 0:
            raise ConfigurationError("timeouts must be positive")
        if self.merkle_depth is not None and not (
            1 <= self.merkle_depth <= MAX_MERKLE_DEPTH
        ):
            raise ConfigurationError(
                f"merkle_depth must be in [1, {MAX_MERKLE_DEPTH}]"
            )


_FIELDS = {f.name: f for f in dataclasses.fields(Settings)}

_settings_override: Optional[Settings] = None


def _coerce(name: str, value: Any) -> Any:
    if value is None or value == "":
        return None
    try:
        if name in ("prover_timeout", "persistence_timeout"):
            return float(value)
        if name == "merkle_depth":
            return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for {name}: {value!r}") from exc
    return str(value)


def load_settings_file(path: Path | str) -> Dict[str, Any]:
    """
    Read settings from a YAML mapping.

    Raises:
        ConfigurationError: If the file is not a mapping or has unknown keys
    """
    try:
        with open(Path(path).expanduser(), "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to read settings file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError("settings file must contain a mapping")
    unknown = set(data) - set(_FIELDS)
    if unknown:
        raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
    return {name: _coerce(name, value) for name, value in data.items()}


def get_settings(path: Path | str | None = None) -> Settings:
    """
    Resolve settings.

    Args:
        path: Optional YAML settings file; falls back to $ZKPIN_SETTINGS.

    Raises:
        ConfigurationError: If any source holds an invalid value
    """
    if _settings_override is not None:
        return _settings_override

    values: Dict[str, Any] = {}
    path = path or os.getenv(_ENV_SETTINGS_FILE)
    if path:
        values.update(
            {k: v for k, v in load_settings_file(path).items() if v is not None}
        )

    for name in _FIELDS:
        env_value = _coerce(name, os.getenv(_ENV_PREFIX + name.upper()))
        if env_value is not None:
            values[name] = env_value

    return Settings(**values)


def set_settings_override(value: Optional[Settings]) -> None:
    """Set in-memory settings override (testing only)."""
    global _settings_override
    _settings_override = value
