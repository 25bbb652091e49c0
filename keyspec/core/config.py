"""
Persistent preferences stored in ``~/.config/keyspec/config.toml``.

Flat ``key = value`` lines; ``#`` starts a comment. Recognised keys::

  default_template = "AES256_GCM"   # catalog name served by default_template()
  debug = true                      # enable DEBUG logging via configure_logging()

Unknown keys and invalid values are skipped with a warning so a stale
file never breaks descriptor generation. ``KEYSPEC_CONFIG`` overrides
the file location.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

_CONFIG_DIR = Path.home() / ".config" / "keyspec"
_CONFIG_FILE = _CONFIG_DIR / "config.toml"

_TRUE_VALUES = {"true", "yes", "1", "on"}
_FALSE_VALUES = {"false", "no", "0", "off"}

_STRING_KEYS = {"default_template"}
_BOOL_KEYS = {"debug"}


def _config_path() -> Path:
    override = os.environ.get("KEYSPEC_CONFIG")
    return Path(override) if override else _CONFIG_FILE


def _parse_bool(raw: str) -> bool | None:
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def _strip_comment(raw: str) -> str:
    """Drop an unquoted ``#`` and everything after it."""
    quote = None
    for i, ch in enumerate(raw):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return raw[:i].rstrip()
    return raw


def _valid_template_name(name: str) -> bool:
    from .templates import TEMPLATE_CHOICES
    return name.upper() in TEMPLATE_CHOICES


def load_config() -> dict[str, Any]:
    """Read preferences. Returns an empty dict when the file is missing."""
    path = _config_path()
    if not path.is_file():
        return {}

    settings: dict[str, Any] = {}
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            logger.warning("%s:%d: ignoring malformed line", path, lineno)
            continue

        key, raw = (part.strip() for part in line.split("=", 1))
        raw = _strip_comment(raw).strip('"').strip("'")

        if key in _STRING_KEYS:
            if key == "default_template" and not _valid_template_name(raw):
                logger.warning("%s:%d: unknown template %r", path, lineno, raw)
                continue
            settings[key] = raw
        elif key in _BOOL_KEYS:
            value = _parse_bool(raw)
            if value is None:
                logger.warning("%s:%d: %s expects a boolean, got %r", path, lineno, key, raw)
                continue
            settings[key] = value
        else:
            logger.warning("%s:%d: unknown key %r", path, lineno, key)

    return settings


def save_config(settings: dict[str, Any]) -> Path:
    """Write preferences (mode 0600). Raises ConfigurationError on bad values."""
    lines = ["# keyspec preferences"]
    for key, value in settings.items():
        if key in _STRING_KEYS:
            if key == "default_template" and not _valid_template_name(str(value)):
                raise ConfigurationError(f"Unknown template {value!r}")
            lines.append(f'{key} = "{value}"')
        elif key in _BOOL_KEYS:
            if not isinstance(value, bool):
                raise ConfigurationError(f"{key} must be a boolean")
            lines.append(f"{key} = {'true' if value else 'false'}")
        else:
            raise ConfigurationError(f"Unknown preference {key!r}")

    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write("\n".join(lines) + "\n")
    os.chmod(path, 0o600)
    return path


def configure_logging(settings: dict[str, Any] | None = None) -> None:
    """Set the ``keyspec`` logger level from the ``debug`` preference."""
    if settings is None:
        settings = load_config()
    level = logging.DEBUG if settings.get("debug") else logging.WARNING
    logging.getLogger("keyspec").setLevel(level)
