from enum import Enum
from pathlib import Path
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rulesync.errors import ConfigurationError

load_dotenv()


class LayoutMode(str, Enum):
    """How source relative paths map onto the destination tree."""

    preserve = "preserve"
    flatten = "flatten"

    def target(self, relative_path: str) -> str:
        """Get the destination relative path for a source relative path."""
        if self is LayoutMode.flatten:
            return relative_path.rsplit("/", 1)[-1]
        return relative_path


DEFAULT_LAYOUT = LayoutMode.preserve


def _env_path(name: str, default: Path) -> Path:
    value = os.getenv(name)
    return Path(value).expanduser() if value else default


class SyncSettings(BaseModel):
    """Paths and options for one synchronization run."""

    model_config = ConfigDict(extra="forbid", validate_default=True)

    source_dir: Path = Field(default_factory=lambda: _env_path("RULESYNC_SOURCE_DIR", Path.cwd() / "rules"))
    dest_dir: Path = Field(default_factory=lambda: _env_path("RULESYNC_DEST_DIR", Path.home() / ".claude" / "rules"))
    layout_mode: LayoutMode = Field(default_factory=lambda: os.getenv("RULESYNC_LAYOUT", DEFAULT_LAYOUT.value))
    cache_search_root: Path = Field(
        default_factory=lambda: _env_path("RULESYNC_CACHE_DIR", Path.home() / ".claude" / "plugins" / "cache")
    )
    plugin_id: str = Field(default_factory=lambda: os.getenv("RULESYNC_PLUGIN_ID", "rulesync"))
    entry_relative_path: str = Field(
        default_factory=lambda: os.getenv("RULESYNC_ENTRY", "commands/install-rules.md")
    )

    @field_validator("layout_mode", mode="before")
    @classmethod
    def _normalize_layout(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("entry_relative_path")
    @classmethod
    def _relative_entry(cls, value: str) -> str:
        value = value.strip().replace("\\", "/").strip("/")
        if not value:
            raise ValueError("entry path must not be empty")
        return value


def load_settings(**overrides) -> SyncSettings:
    """Build settings from the environment, applying any non-None overrides.

    Raises:
        ConfigurationError: If a value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return SyncSettings(**values)
    except ValueError as error:
        raise ConfigurationError(f"Invalid configuration: {error}") from error
