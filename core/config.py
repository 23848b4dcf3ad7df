"""Configuration models and loading."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "salt-proxier"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=0, le=65535)
    debug: bool = False


class UpstreamSettings(BaseModel):
    # username:password@host:port or host:port
    proxy: str | None = None
    # None waits on the outbound call indefinitely
    timeout: float | None = None


class CorsSettings(BaseModel):
    origin: str = "*"


class LimitSettings(BaseModel):
    # None buffers request bodies of any size
    max_body_size: int | None = Field(default=None, ge=0)
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config() -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(CONFIG_FILE.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = CONFIG_FILE.with_suffix(".json.bak")
        CONFIG_FILE.rename(backup)
        default = Config()
        CONFIG_FILE.write_text(default.model_dump_json(indent=2))
        return default


def apply_cli_overrides(config: Config, overrides: dict[str, Any]) -> Config:
    """Return a copy of config with command line values layered on top.

    Keys are ``port``, ``host``, ``proxy``, ``cors`` and ``max_body_size``;
    None values leave the file setting untouched.
    """
    data = config.model_dump()
    sections = {
        "port": ("proxy", "port"),
        "host": ("proxy", "host"),
        "proxy": ("upstream", "proxy"),
        "cors": ("cors", "origin"),
        "max_body_size": ("limits", "max_body_size"),
    }
    for key, (section, field) in sections.items():
        value = overrides.get(key)
        if value is not None:
            data[section][field] = value
    return Config.model_validate(data)
