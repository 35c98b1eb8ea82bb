"""Configuration for deeplucid.

Loads configuration from:
1. deeplucid_project.yaml (session store, server transport, logging)
2. Environment variables (.env)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

CONFIG_FILENAME = "deeplucid_project.yaml"


@dataclass(frozen=True)
class SessionConfig:
    """Session state store configuration."""
    enabled: bool = False  # State starts disabled; clients opt in via manage_state
    expiry_seconds: float = 1800  # Idle time before a session is swept
    max_sessions: int = 100  # Capacity; least recently used session is evicted beyond it
    sweep_interval_seconds: float = 60


@dataclass(frozen=True)
class ServerConfig:
    """MCP server configuration."""
    name: str = "DeepLucid3D"
    version: str = "0.1.0"
    transport: str = "stdio"  # "stdio" or "http"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"


@dataclass(frozen=True)
class Settings:
    """Complete deeplucid configuration."""
    project_root: Path
    session: SessionConfig = field(default_factory=SessionConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _find_project_root() -> Path:
    """Find project root by looking for deeplucid_project.yaml or a .env file."""
    current = Path.cwd().resolve()

    for path in [current] + list(current.parents):
        if (path / CONFIG_FILENAME).exists():
            return path
        if (path / ".env").exists():
            return path

    # Fallback to current directory
    return current


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """Load and parse YAML config file."""
    if not path.exists():
        return {}

    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings() -> Settings:
    """Load deeplucid configuration.

    Process:
    1. Find project root
    2. Load .env file
    3. Load deeplucid_project.yaml (if exists)
    4. Build Settings object
    """
    project_root = _find_project_root()

    env_file = project_root / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    config = _load_yaml_config(project_root / CONFIG_FILENAME)

    session_config = config.get("session") or {}
    defaults = SessionConfig()
    session = SessionConfig(
        enabled=bool(session_config.get("enabled", defaults.enabled)),
        expiry_seconds=float(session_config.get("expiry_seconds", defaults.expiry_seconds)),
        max_sessions=int(session_config.get("max_sessions", defaults.max_sessions)),
        sweep_interval_seconds=float(
            session_config.get("sweep_interval_seconds", defaults.sweep_interval_seconds)
        ),
    )

    server_config = config.get("server") or {}
    transport = str(server_config.get("transport") or "stdio").strip().lower()
    if transport not in {"stdio", "http"}:
        transport = "stdio"
    server = ServerConfig(
        name=str(server_config.get("name") or "DeepLucid3D"),
        version=str(server_config.get("version") or "0.1.0"),
        transport=transport,
        host=str(server_config.get("host") or "127.0.0.1"),
        port=int(server_config.get("port", 8000)),
        log_level=str(os.getenv("LOG_LEVEL") or server_config.get("log_level") or "INFO").upper(),
    )

    return Settings(project_root=project_root, session=session, server=server)
