"""Graph store location settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_value, require_env_vars
from .errors import ConfigurationError

APP_DIR_NAME: Final[str] = "conceptgraph"
DEFAULT_DB_FILENAME: Final[str] = "conceptgraph.db"
DATABASE_URI_VAR: Final[str] = "DATABASE_URI"
DATA_DIR_VAR: Final[str] = "CONCEPTGRAPH_DATA_DIR"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        if data_dir.exists() and not data_dir.is_dir():
            raise ConfigurationError(f"{DATA_DIR_VAR} is not a directory: {data_dir}")
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = env_value(DATA_DIR_VAR)
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)


def get_database_config(
    *,
    storage: StorageConfig | None = None,
    require_uri: bool = False,
) -> DatabaseConfig:
    """Resolve the store URI.

    ``DATABASE_URI`` wins when set. Otherwise a SQLite file in the data
    directory is used, unless ``require_uri`` forbids the local fallback.
    """

    if require_uri:
        return DatabaseConfig(uri=require_env_vars([DATABASE_URI_VAR])[DATABASE_URI_VAR])
    env_uri = env_value(DATABASE_URI_VAR)
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())


def get_database_uri() -> str:
    return get_database_config().uri
