"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir() -> Path:
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = config_dir or _find_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir=config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        storage: dict[str, Any] | None = None,
        app: dict[str, Any] | None = None,
        chain: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.app = app or {}
        self.chain = chain or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            app=raw.get("app"),
            chain=raw.get("chain"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def store_backend(self) -> str:
        return str(self.storage.get("backend", "duckdb")).lower()

    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/whispermarket.duckdb")

    @property
    def base_url(self) -> str:
        return str(self.app.get("base_url", "http://localhost:8000")).rstrip("/")

    @property
    def frame_page_size(self) -> int:
        return int(self.app.get("frame_page_size", 5))

    @property
    def chain_id(self) -> int:
        return int(self.chain.get("chain_id", 8453))

    @property
    def contract_address(self) -> str:
        return self.chain.get("contract_address", "0x1234567890123456789012345678901234567890")

    @property
    def paymaster_url(self) -> str | None:
        return self.chain.get("paymaster_url", "https://paymaster.base.org") or None

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
