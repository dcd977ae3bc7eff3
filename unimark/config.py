"""
Layered settings for unimark.

Later layers win: built-in defaults, ``~/.config/unimark/config.toml``, the
first of ``./unimark.toml`` / ``./.unimarkrc``, an explicit ``--config``
file, ``UNIMARK_*`` environment variables, then command-line flags passed to
``init_config``.
"""
import logging
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, fields, asdict

from unimark.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "UNIMARK_"
LOCAL_CONFIG_NAMES = ("unimark.toml", ".unimarkrc")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def user_config_path() -> Path:
    return Path.home() / ".config" / "unimark" / "config.toml"


@dataclass
class UnimarkConfig:
    """Settings that live outside the bookmark store."""

    store_file: str = field(default="bookmarks.json")
    # None defers to the command saved in the store
    default_browser_cmd: Optional[str] = field(default=None)
    color_output: bool = field(default=True)
    history_file: str = field(default="~/.unimark_history")
    log_level: str = field(default="INFO")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "UnimarkConfig":
        """
        Build a configuration from every layer.

        Raises:
            ConfigError: If ``config_file`` is missing, or any TOML file
                cannot be parsed or holds an invalid ``log_level``
        """
        config = cls()

        if user_config_path().exists():
            config._merge(_read_toml(user_config_path()))

        local = next((Path.cwd() / name for name in LOCAL_CONFIG_NAMES
                      if (Path.cwd() / name).exists()), None)
        if local is not None:
            config._merge(_read_toml(local))

        if config_file is not None:
            if not Path(config_file).is_file():
                raise ConfigError(f"config file not found: {config_file}")
            config._merge(_read_toml(Path(config_file)))

        config._merge(_env_overrides(os.environ))
        config._expand_paths()
        config._check()
        return config

    def _merge(self, data: Dict[str, Any]):
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)

    def _expand_paths(self):
        for name in ("store_file", "history_file"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, os.path.expanduser(os.path.expandvars(value)))

    def _check(self):
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"invalid log_level '{self.log_level}', expected one of "
                              + ", ".join(LOG_LEVELS))

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the settings as TOML (user config by default) and return the path."""
        path = Path(path) if path is not None else user_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        # TOML has no null
        data = {k: v for k, v in asdict(self).items() if v is not None}
        with open(path, "wb") as f:
            tomli_w.dump(data, f)
        return path

    def get_store_path(self) -> Path:
        """Store path, relative names resolved against the working directory."""
        path = Path(self.store_file)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomli.load(f)
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"could not read {path}: {e}") from e


def _env_overrides(environ) -> Dict[str, Any]:
    """Collect ``UNIMARK_<FIELD>`` values, coerced to the field's type."""
    bool_fields = {f.name for f in fields(UnimarkConfig) if f.type in (bool, "bool")}
    known = {f.name for f in fields(UnimarkConfig)}

    overrides = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name not in known:
            logger.debug(f"Ignoring unknown setting {key}")
            continue
        if name in bool_fields:
            overrides[name] = value.lower() in ("true", "1", "yes")
        else:
            overrides[name] = value
    return overrides


_config: Optional[UnimarkConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> UnimarkConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None or reload:
        _config = UnimarkConfig.load(config_file)
    return _config


def init_config(store_file: Optional[str] = None,
                config_file: Optional[Path] = None, **kwargs) -> UnimarkConfig:
    """
    Load the configuration and apply command-line overrides.

    Unknown keys and ``None`` values in ``kwargs`` are ignored.
    """
    config = get_config(reload=config_file is not None, config_file=config_file)

    if store_file:
        config.store_file = store_file
    config._merge({k: v for k, v in kwargs.items() if v is not None})
    config._check()
    return config
