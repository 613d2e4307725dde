"""
Configuration loader for the multi-turn prompts bot.
Reads settings from YAML file with environment variable substitution.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml


@dataclass
class BotConfig:
    name: str = "Bot"                     # display name of the bot account in conversationUpdate events


@dataclass
class StorageConfig:
    store_backend: str = "memory"         # "memory" | "file"
    store_file_dir: str = "./data"        # directory for file backend


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3978


@dataclass
class Settings:
    app_name: str = "MultiTurnPromptsBot"
    debug: bool = False
    bot: BotConfig = field(default_factory=BotConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


_settings: Optional[Settings] = None


def _substitute_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""
    pattern = re.compile(r'\$\{(\w+)\}')
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return pattern.sub(replacer, value)


def _process_values(obj: Any) -> Any:
    """Recursively substitute env vars in all string values."""
    if isinstance(obj, str):
        return _substitute_env_vars(obj)
    elif isinstance(obj, dict):
        return {k: _process_values(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_process_values(v) for v in obj]
    return obj


def load_settings(config_path: str = None) -> Settings:
    """Load settings from YAML file."""
    global _settings

    if config_path is None:
        config_path = os.environ.get(
            "BOT_CONFIG",
            str(Path(__file__).parent / "settings.yaml"),
        )

    settings = Settings()

    if Path(config_path).exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        raw = _process_values(raw)

        settings.app_name = raw.get("app_name", settings.app_name)
        settings.debug = raw.get("debug", settings.debug)

        if "bot" in raw:
            settings.bot = BotConfig(
                name=raw["bot"].get("name", settings.bot.name),
            )

        if "storage" in raw:
            st = raw["storage"]
            settings.storage = StorageConfig(
                store_backend=st.get("store_backend", settings.storage.store_backend),
                store_file_dir=st.get("store_file_dir", settings.storage.store_file_dir),
            )

        if "server" in raw:
            srv = raw["server"]
            settings.server = ServerConfig(
                host=srv.get("host", settings.server.host),
                port=int(srv.get("port", settings.server.port)),
            )

    _settings = settings
    return settings


def get_settings() -> Settings:
    """Return cached settings or load from default path."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings
