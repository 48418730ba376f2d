from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vibex.exceptions import ConfigFileError
from vibex.scrubber import ScrubConfig

ENV_FILE = find_dotenv(usecwd=True)
PROJECT_CONFIG_NAME = ".vibex.yaml"

if ENV_FILE:
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseModel):
    """Options for one vibex invocation, as handed over by the CLI."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    cwd: Path = Field(default_factory=Path.cwd, description="Working directory.")
    files: list[str] = Field(default_factory=list, description="File patterns to include.")
    exclude: list[str] = Field(default_factory=list, description="Patterns to exclude.")
    force: bool = Field(default=False, description="Bypass the built-in excludes.")
    trim: list[str] = Field(default_factory=list, description="Character ranges to keep.")
    cut: list[str] = Field(default_factory=list, description="Character ranges to drop.")
    rc: bool = Field(default=False, description="Remove comments.")
    rp: bool = Field(default=False, description="Remove private information.")
    monitor: bool = Field(default=False, description="Rebuild the output on changes.")
    separate: bool = Field(default=False, description="Lead each file block with a newline.")
    log_file: str = Field(
        default_factory=lambda: os.environ.get("VX_LOG_FILE", ""),
        description="Log file path.",
    )
    config: str = Field(
        default_factory=lambda: os.environ.get("VX_CONFIG", ""),
        description="YAML project configuration.",
    )
    scrub: ScrubConfig = Field(default_factory=ScrubConfig, description="Redaction tokens.")

    @model_validator(mode="before")
    @classmethod
    def _watch_alias(cls, data: Any) -> Any:  # noqa: ANN401
        if isinstance(data, dict) and "watch" in data:
            data = dict(data)
            watch = data.pop("watch")
            data["monitor"] = bool(data.get("monitor")) or bool(watch)
        return data

    @field_validator("files", "exclude", "trim", "cut", mode="before")
    @classmethod
    def _as_list(cls, value: Any) -> Any:  # noqa: ANN401
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


def find_project_config(cwd: Path, explicit: str = "") -> Path | None:
    """Locate the YAML project configuration.

    Args:
        cwd (Path): the working directory searched for ``.vibex.yaml``
        explicit (str): a path given on the command line or through ``VX_CONFIG``

    Raises:
        ConfigFileError: if an explicit path does not exist.

    Returns:
        Path | None: the configuration file, or None when there is none
    """
    if explicit:
        path = Path(explicit)
        if not path.is_absolute():
            path = cwd / path
        if not path.is_file():
            raise ConfigFileError(path=path, message="The configuration file does not exist.")
        return path
    default = cwd / PROJECT_CONFIG_NAME
    return default if default.is_file() else None


def load_project_config(path: Path) -> dict[str, Any]:
    """Read the ``exclude`` and ``scrub`` sections of a YAML project file.

    Raises:
        ConfigFileError: if the file is unreadable or not a mapping, or if the
            scrub section does not validate.

    Returns:
        dict[str, Any]: keyword arguments ready to be merged into Settings
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(path=path, message=str(e)) from e
    if not isinstance(data, dict):
        raise ConfigFileError(path=path)

    out: dict[str, Any] = {}
    exclude = data.get("exclude", [])
    if isinstance(exclude, str):
        exclude = [exclude]
    if not isinstance(exclude, list):
        raise ConfigFileError(path=path, message="`exclude` must be a list of patterns.")
    out["exclude"] = [str(p) for p in exclude]

    scrub = data.get("scrub")
    if scrub is not None:
        try:
            out["scrub"] = ScrubConfig.model_validate(scrub)
        except ValidationError as e:
            raise ConfigFileError(path=path, message=f"Invalid `scrub` section: {e}") from e
    return out


def build_settings(**options: Any) -> Settings:  # noqa: ANN401
    """Create Settings from CLI options, merged with the project configuration.

    Project excludes come first, followed by the ones given on the command line.
    """
    settings = Settings(**options)
    path = find_project_config(settings.cwd, settings.config)
    if path is None:
        return settings
    project = load_project_config(path)
    update: dict[str, Any] = {"exclude": [*project["exclude"], *settings.exclude]}
    if "scrub" in project and "scrub" not in options:
        update["scrub"] = project["scrub"]
    return settings.model_copy(update=update)
