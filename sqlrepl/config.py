"""App configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .drivers.base import IsolationLevel
from .rows import DEFAULT_MAX_WIDTH

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "sqlrepl" / "config.toml"


class ShellOptions(BaseModel):
    """Session options applied to every connection."""

    auto_commit: bool = True
    isolation: IsolationLevel = IsolationLevel.REPEATABLE_READ
    max_width: int = Field(default=DEFAULT_MAX_WIDTH, gt=0)
    skip_metadata: bool = False
    strict_metadata: bool = False


class ConnectionProfileConfig(BaseModel):
    """Connection profile stored in config.toml."""

    name: str
    url: str
    driver: str | None = None
    user: str | None = None
    password: str | None = None


class AppConfig(BaseModel):
    """Shape of the application configuration file."""

    options: ShellOptions = Field(default_factory=ShellOptions)
    profiles: list[ConnectionProfileConfig] = Field(default_factory=lambda: list(_default_profiles()))
    active_profile: str | None = None

    def profile(self, name: str | None = None) -> ConnectionProfileConfig | None:
        """Profile called ``name``, else the active one, else the first."""

        target = name or self.active_profile
        if target is None:
            return self.profiles[0] if self.profiles else None
        for profile in self.profiles:
            if profile.name == target:
                return profile
        if name is not None:
            raise ValueError(f"Profile '{name}' not found.")
        return self.profiles[0] if self.profiles else None

    def with_active_profile(self, name: str) -> AppConfig:
        """Return a copy with the active profile updated."""

        return self.model_copy(update={"active_profile": name})

    def with_options(self, **updates: object) -> AppConfig:
        """Return a copy with option changes applied."""

        options = self.options.model_copy(update=updates)
        return self.model_copy(update={"options": options})


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from disk; fall back to defaults if missing or invalid."""

    target = path or CONFIG_FILE
    try:
        with target.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError:
        return AppConfig()
    except (tomllib.TOMLDecodeError, OSError) as exc:
        LOG.warning("Ignoring unreadable config file", extra={"path": str(target), "error": str(exc)})
        return AppConfig()

    data: dict[str, object] = {}
    options = raw.get("options")
    if isinstance(options, dict):
        data["options"] = options
    profiles = raw.get("profiles")
    if isinstance(profiles, list):
        data["profiles"] = [profile for profile in profiles if isinstance(profile, dict)]
    active_profile = raw.get("active_profile")
    if isinstance(active_profile, str):
        data["active_profile"] = active_profile
    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        LOG.warning("Ignoring invalid config file", extra={"path": str(target), "error": str(exc)})
        return AppConfig()


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Persist configuration to disk."""

    target = path or CONFIG_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    if config.active_profile:
        lines.append(f"active_profile = {_toml_string(config.active_profile)}")
        lines.append("")
    options = config.options
    lines.append("[options]")
    lines.append(f"auto_commit = {str(options.auto_commit).lower()}")
    lines.append(f"isolation = {_toml_string(options.isolation.value)}")
    lines.append(f"max_width = {options.max_width}")
    lines.append(f"skip_metadata = {str(options.skip_metadata).lower()}")
    lines.append(f"strict_metadata = {str(options.strict_metadata).lower()}")
    for profile in config.profiles:
        lines.append("")
        lines.append("[[profiles]]")
        lines.append(f"name = {_toml_string(profile.name)}")
        lines.append(f"url = {_toml_string(profile.url)}")
        if profile.driver:
            lines.append(f"driver = {_toml_string(profile.driver)}")
        if profile.user:
            lines.append(f"user = {_toml_string(profile.user)}")
        if profile.password:
            lines.append(f"password = {_toml_string(profile.password)}")
    target.write_text("\n".join(lines) + "\n")


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _default_profiles() -> tuple[ConnectionProfileConfig, ...]:
    """Profiles shown on first run before config is customized."""

    return (
        ConnectionProfileConfig(name="Scratch", url="sqlite::memory:"),
        ConnectionProfileConfig(
            name="Local PostgreSQL",
            url="postgresql://localhost:5432/postgres",
            user="postgres",
        ),
    )


__all__ = [
    "AppConfig",
    "CONFIG_FILE",
    "ConnectionProfileConfig",
    "ShellOptions",
    "load_config",
    "save_config",
]
