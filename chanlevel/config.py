from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .validation import validate_int_range, validate_non_negative, validate_probability_per_mille


@dataclass
class ServerConfig:
    bind_address: str = "0.0.0.0"
    port: int = 8090
    # Time in-flight transfers get to finish after a shutdown signal
    shutdown_grace_seconds: float = 30.0
    # Codec worker threads
    max_workers: int = 8


@dataclass
class ChannelConfig:
    """Impairments applied to every message, per mille (0-1000)."""

    frame_loss_probability_per_mille: int = 16
    bit_error_probability_per_mille: int = 100
    # Seed for the per-message generators; None draws fresh OS entropy
    seed: int | None = None


@dataclass
class TransferConfig:
    """Downstream service that receives the processed segments."""

    endpoint: str = "http://127.0.0.1:8080/transfer"
    timeout_seconds: float = 10.0
    enabled: bool = True


@dataclass
class LoggingConfig:
    level: str = "INFO"
    # Rotating log file; console only when unset
    file: str | None = None


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    channel: ChannelConfig = field(default_factory=ChannelConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        checks = [
            validate_probability_per_mille(
                self.channel.frame_loss_probability_per_mille,
                "channel.frame_loss_probability_per_mille",
            ),
            validate_probability_per_mille(
                self.channel.bit_error_probability_per_mille,
                "channel.bit_error_probability_per_mille",
            ),
            validate_int_range(self.server.port, 1, 65535, "server.port"),
            validate_int_range(self.server.max_workers, 1, 256, "server.max_workers"),
            validate_non_negative(self.server.shutdown_grace_seconds, "server.shutdown_grace_seconds"),
            validate_non_negative(self.transfer.timeout_seconds, "transfer.timeout_seconds", allow_zero=False),
        ]
        problems = [reason for ok, reason in checks if not ok]
        if problems:
            raise ValueError("Invalid config: " + "; ".join(problems))


_SECTIONS = ("server", "channel", "transfer", "logging")


def default_config_path() -> str:
    """Get default config path relative to module location."""
    module_dir = Path(__file__).resolve().parent
    return str(module_dir.parent / "config" / "chanlevel.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")
        return data


def _overlay(dst: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _overlay(dst[k], v)
        else:
            dst[k] = v
    return dst


def local_config_path(path: Path) -> Path:
    """chanlevel.yaml -> chanlevel.local.yaml, next to the base file."""
    return path.with_name(f"{path.stem}.local{path.suffix}")


def load_config(path_str: str) -> AppConfig:
    path = Path(path_str)
    raw: dict[str, Any] = _read_yaml(path)
    _overlay(raw, _read_yaml(local_config_path(path)))

    # Environment overrides (prefix CHANLEVEL__SECTION__KEY)
    # Example: CHANLEVEL__CHANNEL__BIT_ERROR_PROBABILITY_PER_MILLE=0
    prefix = "CHANLEVEL__"
    for k, v in os_environ_items():
        if not k.startswith(prefix):
            continue
        parts = k[len(prefix) :].split("__")
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.lower()
        key = key.lower()
        if section not in _SECTIONS:
            continue
        raw.setdefault(section, {})
        if isinstance(raw[section], dict):
            raw[section][key] = coerce_env_value(v)

    for section in _SECTIONS:
        if not isinstance(raw.get(section, {}), dict):
            raise ValueError(f"Config section '{section}' must be a mapping")

    try:
        config = AppConfig(
            server=ServerConfig(**raw.get("server", {})),
            channel=ChannelConfig(**raw.get("channel", {})),
            transfer=TransferConfig(**raw.get("transfer", {})),
            logging=LoggingConfig(**raw.get("logging", {})),
        )
    except TypeError as exc:
        raise ValueError(f"Unknown config key: {exc}") from exc

    config.validate()
    return config


def coerce_env_value(val: str) -> Any:
    # Basic bool/int/float coercion for convenience
    lower = val.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    if lower in {"none", "null"}:
        return None
    try:
        return int(val)
    except ValueError:
        pass
    try:
        return float(val)
    except ValueError:
        return val


def os_environ_items() -> list[tuple[str, str]]:
    # Wrapped for testability
    from os import environ

    return [(k, v) for k, v in environ.items()]
