"""Configuration file support and settings layering.

Settings come from three places, in priority order:
    1. Command-line options
    2. The config file (~/.config/devcruft/config.toml)
    3. Built-in defaults

Example config:

    project_type = "rust"
    dir = "~/Projects"

    [filtering]
    keep_size = "50MB"
    keep_days = 7
    sort = "size"
    reverse = false

    [scanning]
    threads = 4
    verbose = true
    skip = [".cargo", "vendor"]

    [execution]
    keep_executables = true
    interactive = false
    dry_run = false
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from devcruft.exceptions import ConfigError
from devcruft.filtering import SortKey
from devcruft.models import FilterCriteria, TypeFilter
from devcruft.sizes import parse_size

log = logging.getLogger(__name__)

APP_NAME = "devcruft"
CONFIG_FILENAME = "config.toml"


class FilteringConfig(BaseModel):
    keep_size: Optional[str] = Field(None, description="Ignore artifacts smaller than this")
    keep_days: Optional[int] = Field(None, ge=0, description="Ignore recently modified artifacts")
    sort: Optional[SortKey] = Field(None, description="Ordering of the project list")
    reverse: Optional[bool] = None


class ScanningConfig(BaseModel):
    threads: Optional[int] = Field(None, ge=0, description="0 means one per CPU")
    verbose: Optional[bool] = None
    skip: Optional[list[str]] = Field(None, description="Directory names or paths to skip")


class ExecutionConfig(BaseModel):
    keep_executables: Optional[bool] = None
    interactive: Optional[bool] = None
    dry_run: Optional[bool] = None


class FileConfig(BaseModel):
    """Contents of the config file; every value is optional."""

    project_type: Optional[TypeFilter] = None
    dir: Optional[str] = None
    filtering: FilteringConfig = Field(default_factory=FilteringConfig)
    scanning: ScanningConfig = Field(default_factory=ScanningConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)


class Settings(BaseModel):
    """Fully resolved settings for one run."""

    root: Path
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)
    threads: int = 0
    verbose: bool = False
    quiet: bool = False
    sort: SortKey = SortKey.SIZE
    reverse: bool = False
    dry_run: bool = False
    interactive: bool = False
    yes: bool = False
    keep_executables: bool = False


def config_path() -> Path:
    """Location of the config file, honouring XDG_CONFIG_HOME."""
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return Path(base) / APP_NAME / CONFIG_FILENAME


def expand_tilde(value: str) -> str:
    return os.path.expanduser(value) if value.startswith("~") else value


def load_config(path: Optional[Path] = None) -> FileConfig:
    """
    Load the config file.

    Args:
        path: Explicit config file; defaults to ``config_path()``

    Returns:
        The parsed config, empty when the default file does not exist

    Raises:
        ConfigError: If the file cannot be read or is invalid, or an
            explicitly given file is missing
    """
    explicit = path is not None
    path = path or config_path()

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return FileConfig()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file at {path}: {e}") from e

    try:
        config = FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config file at {path}: {e}") from e

    log.debug("Loaded config from %s", path)
    return config


def _first(*values):
    for value in values:
        if value is not None:
            return value
    return None


def build_settings(
    config: FileConfig,
    *,
    directory: Optional[Path] = None,
    project_type: Optional[TypeFilter] = None,
    keep_size: Optional[str] = None,
    keep_days: Optional[int] = None,
    sort: Optional[SortKey] = None,
    reverse: bool = False,
    threads: Optional[int] = None,
    skip: Optional[list[str]] = None,
    verbose: bool = False,
    quiet: bool = False,
    dry_run: bool = False,
    interactive: bool = False,
    yes: bool = False,
    keep_executables: bool = False,
) -> Settings:
    """
    Merge command-line values over the config file over defaults.

    Flags only ever switch behaviour on: a flag set in the config file
    stays set. Skip lists from both sources are combined.

    Raises:
        SizeParseError: If the keep size is not a valid size string
    """
    root = _first(directory, config.dir, ".")
    size_text = _first(keep_size, config.filtering.keep_size)
    skip_dirs = {expand_tilde(s) for s in (config.scanning.skip or [])}
    skip_dirs.update(expand_tilde(s) for s in (skip or []))

    criteria = FilterCriteria(
        type_filter=_first(project_type, config.project_type, TypeFilter.ALL),
        min_size=parse_size(size_text) if size_text else None,
        max_age_days=_first(keep_days, config.filtering.keep_days),
        skip_dirs=skip_dirs,
    )

    return Settings(
        root=Path(expand_tilde(str(root))),
        criteria=criteria,
        threads=_first(threads, config.scanning.threads, 0),
        verbose=verbose or bool(config.scanning.verbose),
        quiet=quiet,
        sort=_first(sort, config.filtering.sort, SortKey.SIZE),
        reverse=reverse or bool(config.filtering.reverse),
        dry_run=dry_run or bool(config.execution.dry_run),
        interactive=interactive or bool(config.execution.interactive),
        yes=yes,
        keep_executables=keep_executables or bool(config.execution.keep_executables),
    )
