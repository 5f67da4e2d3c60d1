"""Configuration defaults and helpers."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from .utils import parse_bool

USER_CONFIG_PATH = Path("~/.config/foldercast/config.ini").expanduser()

DEFAULT_SITE_URL = "https://example.com"
DEFAULT_LOG_DIR = Path("~/.local/state/foldercast").expanduser()
DEFAULT_INTERVAL_HOURS = 4.0

# Environment variable names. These match the names used by existing
# deployments' .env files, so they are kept as-is.
ENV_ROOT_DIR = "MAIN_DIRECTORY"
ENV_SHARE_URL = "ROOT_SHARE_URL"
ENV_SITE_URL = "DEFAULT_SITE_URL"
ENV_LOG_DIR = "FOLDERCAST_LOG_DIR"
ENV_INTERVAL_HOURS = "FOLDERCAST_INTERVAL_HOURS"

# Per-channel artifacts. The refresh pass deletes only these.
METADATA_FILENAME = "metadata.json"
FEED_FILENAME = "feed.xml"
URL_LIST_FILENAME = "feed_urls.txt"
ITEMS_DIRNAME = "items"
DESCRIPTION_FILENAME = "description.txt"
DETAILS_FILENAME = "details.json"


class ConfigError(ValueError):
    """Raised when required configuration is missing or invalid."""


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> dict:
    """Read ~/.config/foldercast/config.ini and return overrides as a dict.

    Only keys that are explicitly set in the file are returned, so callers
    can distinguish "not set" from "set to default".

    Supported keys (all in [foldercast] section):
        root_dir        = /srv/podcasts
        share_url       = https://cloud.example.com/s/abc123/download?path=
        site_url        = https://example.com
        log_dir         = /var/log/foldercast
        interval_hours  = 4
        normalize_names = false
        refresh_recursive = false
        encode_urls     = true
    """
    if not config_path.exists():
        return {}
    parser = configparser.ConfigParser()
    parser.read(config_path, encoding="utf-8")
    section = "foldercast"
    if not parser.has_section(section):
        return {}
    return dict(parser[section])


def load_env_config(environ: Mapping[str, str] | None = None) -> dict:
    """Return the settings found in the process environment.

    A ``.env`` file in the working directory is loaded first; variables that
    are already set in the real environment are not overridden.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    mapping = {
        "root_dir": ENV_ROOT_DIR,
        "share_url": ENV_SHARE_URL,
        "site_url": ENV_SITE_URL,
        "log_dir": ENV_LOG_DIR,
        "interval_hours": ENV_INTERVAL_HOURS,
    }
    return {key: environ[name] for key, name in mapping.items() if environ.get(name)}


def _as_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    parsed = parse_bool(value)
    if parsed is not None:
        return parsed
    raise ConfigError(f"Expected a boolean value, got {value!r}")


@dataclass(frozen=True)
class Config:
    root_dir: Path
    share_url: str
    site_url: str = DEFAULT_SITE_URL
    log_dir: Path = DEFAULT_LOG_DIR
    interval_hours: float = DEFAULT_INTERVAL_HOURS
    normalize_names: bool = False
    refresh_recursive: bool = False
    encode_urls: bool = True

    def __post_init__(self) -> None:
        if self.root_dir is None or not str(self.root_dir).strip():
            raise ConfigError(
                f"Root directory is not set (use --root or {ENV_ROOT_DIR})."
            )
        if not (self.share_url or "").strip():
            raise ConfigError(
                f"Public share URL is not set (use --share-url or {ENV_SHARE_URL})."
            )
        if self.interval_hours <= 0:
            raise ConfigError("interval_hours must be positive")

    @property
    def url_list_path(self) -> Path:
        return self.root_dir / URL_LIST_FILENAME

    @property
    def root_metadata_path(self) -> Path:
        return self.root_dir / METADATA_FILENAME


def build_config(
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    user_config_path: Path = USER_CONFIG_PATH,
) -> Config:
    """Assemble a :class:`Config` from ini file, environment and CLI values.

    Later sources win: ini < environment < *overrides*. ``None`` values in
    *overrides* mean "not given on the command line".
    """
    settings: dict[str, object] = {}
    settings.update(load_user_config(user_config_path))
    settings.update(load_env_config(environ))
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})

    try:
        interval_hours = float(settings.get("interval_hours", DEFAULT_INTERVAL_HOURS))
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"interval_hours must be a number, got {settings.get('interval_hours')!r}"
        ) from exc

    root_dir = str(settings.get("root_dir") or "")
    log_dir = settings.get("log_dir")
    return Config(
        root_dir=Path(root_dir).expanduser() if root_dir else None,  # type: ignore[arg-type]
        share_url=str(settings.get("share_url") or ""),
        site_url=str(settings.get("site_url") or DEFAULT_SITE_URL),
        log_dir=Path(str(log_dir)).expanduser() if log_dir else DEFAULT_LOG_DIR,
        interval_hours=interval_hours,
        normalize_names=_as_bool(settings.get("normalize_names"), False),
        refresh_recursive=_as_bool(settings.get("refresh_recursive"), False),
        encode_urls=_as_bool(settings.get("encode_urls"), True),
    )
