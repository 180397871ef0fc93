"""
Settings for a ledger node process.

A node reads its settings once, at import time, from three layers. Later
layers win:

    1. Built-in defaults (port 8080 on all interfaces, genesis unchecked)
    2. config/server.ini, or config/server.example.ini when no server.ini exists
    3. LEDGER_* environment variables (plus PORT, for container platforms)

The result is a :class:`ServerConfig`. The HTTP app and the ``ledger-server``
CLI read the module-level ``config``; tests build their own ``ServerConfig()``
and hand it to :func:`~ledger_server.api.server.create_app`.

Environment variables:
    LEDGER_HOST            [server] host
    LEDGER_PORT, PORT      [server] port (LEDGER_PORT wins)
    LEDGER_VERIFY_GENESIS  [ledger] verify_genesis
    LEDGER_LOG_LEVEL       [logging] level
    LEDGER_CORS_ORIGINS    [security] cors_origins (comma-separated)
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# Repository root: src/ledger_server/config.py -> ../../..
PROJECT_ROOT = Path(__file__).parent.parent.parent

CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"

_TRUE_WORDS = ("true", "yes", "1", "on", "enabled")


# =============================================================================
# SETTINGS SECTIONS
# =============================================================================


@dataclass
class ServerSettings:
    """Where the node listens."""

    host: str = "0.0.0.0"  # nosec B104 - nodes must be reachable by peers
    port: int = 8080


@dataclass
class LedgerSettings:
    """How strictly replacement chains are checked."""

    # Require a replacement's first record to be a self-consistent genesis.
    verify_genesis: bool = False


@dataclass
class SecuritySettings:
    """Browser access and API docs."""

    cors_origins: list[str] = field(default_factory=list)
    docs_enabled: Literal["enabled", "disabled"] = "enabled"


@dataclass
class LoggingSettings:
    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class ServerConfig:
    """All settings for one node process, grouped by INI section."""

    server: ServerSettings = field(default_factory=ServerSettings)
    ledger: LedgerSettings = field(default_factory=LedgerSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def docs_should_be_enabled(self) -> bool:
        """True when /docs, /redoc and /openapi.json are served."""
        return self.security.docs_enabled == "enabled"


# =============================================================================
# LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_WORDS


def _parse_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping blank entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _load_from_ini(parser: configparser.ConfigParser, cfg: ServerConfig) -> None:
    """Copy recognised options from ``parser`` onto ``cfg``.

    Unknown sections and options are ignored. Enumerated options
    (``docs_enabled``, ``format``) keep their current value when the file
    holds something unrecognised.
    """
    if parser.has_option("server", "host"):
        cfg.server.host = parser.get("server", "host")
    if parser.has_option("server", "port"):
        cfg.server.port = parser.getint("server", "port")

    if parser.has_option("ledger", "verify_genesis"):
        cfg.ledger.verify_genesis = _parse_bool(parser.get("ledger", "verify_genesis"))

    if parser.has_option("security", "cors_origins"):
        cfg.security.cors_origins = _parse_list(parser.get("security", "cors_origins"))
    if parser.has_option("security", "docs_enabled"):
        docs = parser.get("security", "docs_enabled").lower()
        if docs in ("enabled", "disabled"):
            cfg.security.docs_enabled = docs  # type: ignore[assignment]

    if parser.has_option("logging", "level"):
        cfg.logging.level = parser.get("logging", "level").upper()
    if parser.has_option("logging", "format"):
        log_format = parser.get("logging", "format").lower()
        if log_format in ("simple", "detailed"):
            cfg.logging.format = log_format  # type: ignore[assignment]


def _apply_env_overrides(cfg: ServerConfig) -> None:
    """Overlay LEDGER_* environment variables onto ``cfg``."""
    if host := os.getenv("LEDGER_HOST"):
        cfg.server.host = host
    if port := os.getenv("LEDGER_PORT") or os.getenv("PORT"):
        cfg.server.port = int(port)

    if verify := os.getenv("LEDGER_VERIFY_GENESIS"):
        cfg.ledger.verify_genesis = _parse_bool(verify)

    if origins := os.getenv("LEDGER_CORS_ORIGINS"):
        cfg.security.cors_origins = _parse_list(origins)

    if level := os.getenv("LEDGER_LOG_LEVEL"):
        cfg.logging.level = level.upper()


def _config_source() -> Path | None:
    if CONFIG_FILE.exists():
        return CONFIG_FILE
    if CONFIG_EXAMPLE.exists():
        return CONFIG_EXAMPLE
    return None


def load_config() -> ServerConfig:
    """Build a fresh :class:`ServerConfig` from defaults, INI file and environment."""
    cfg = ServerConfig()

    source = _config_source()
    if source is not None:
        parser = configparser.ConfigParser()
        parser.read(source)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)
    return cfg


def reload_config() -> ServerConfig:
    """Re-read settings and rebind the module-level ``config``.

    Apps and ledgers that already exist keep the settings they were built with.
    """
    global config
    config = load_config()
    return config


config = load_config()


# =============================================================================
# DIAGNOSTICS
# =============================================================================


def get_config_status() -> dict:
    """Describe where the active settings came from, for ``show-config``."""
    source = _config_source()
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": source == CONFIG_EXAMPLE,
        "verify_genesis": config.ledger.verify_genesis,
        "docs_enabled": config.docs_should_be_enabled,
    }


def print_config_summary() -> None:
    """Print the active node settings and their source to stdout."""
    status = get_config_status()
    if status["config_file_exists"]:
        source = status["config_file_path"]
    elif status["using_example"]:
        source = f"{CONFIG_EXAMPLE} (no server.ini found)"
    else:
        source = "built-in defaults"

    print("ledger-server settings")
    print(f"  source          {source}")
    print(f"  listen          {config.server.host}:{config.server.port}")
    print(f"  verify genesis  {'on' if config.ledger.verify_genesis else 'off'}")
    print(f"  cors origins    {', '.join(config.security.cors_origins) or '(none)'}")
    print(f"  api docs        {'on' if status['docs_enabled'] else 'off'}")
    print(f"  log level       {config.logging.level} ({config.logging.format})")
