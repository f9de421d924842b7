#!/usr/bin/env python3
"""
Load and save twodo display settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import tomllib

CONFIG_PATH_ENV = "TWODO_CONFIG_PATH"
OUTPUT_FORMATS = ("table", "minimal", "json")
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """
    User settings.

    Attributes
    ----------
    colors : bool
        Color short codes in output.
    output_format : str
        Default output format for ``twodo ids`` (table/minimal/json).
    """

    colors: bool = True
    output_format: str = "table"


def get_config_path() -> Path:
    """
    Return the settings file path.

    Examples
    --------
    >>> isinstance(get_config_path(), Path)
    True
    """
    override = os.environ.get(CONFIG_PATH_ENV, "").strip()
    if override:
        return Path(os.path.expandvars(os.path.expanduser(override)))
    return Path.home() / ".config" / "twodo" / "config.toml"


def _parse_bool(value: Any) -> bool:
    """
    Parse a boolean setting value.

    Raises
    ------
    ValueError
        If the value is not a recognized boolean.
    """
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _parse_output_format(value: Any) -> str:
    """
    Parse an output format name.

    Raises
    ------
    ValueError
        If the name is not one of OUTPUT_FORMATS.
    """
    text = str(value).strip().lower()
    if text not in OUTPUT_FORMATS:
        raise ValueError(
            f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {value!r}"
        )
    return text


PARSERS = {
    "colors": _parse_bool,
    "output_format": _parse_output_format,
}


def normalize_setting_key(key: str) -> str:
    """
    Examples
    --------
    >>> normalize_setting_key("output-format")
    'output_format'
    """
    return key.strip().lower().replace("-", "_")


def update_setting(settings: Settings, key: str, value: Any) -> Settings:
    """
    Return settings with one value replaced.

    Parameters
    ----------
    settings : Settings
        Current settings.
    key : str
        Setting name (dashes or underscores).
    value : Any
        Raw value, typically CLI text.

    Returns
    -------
    Settings
        Updated settings.

    Raises
    ------
    ValueError
        If the key is unknown or the value is invalid.

    Examples
    --------
    >>> update_setting(Settings(), "colors", "off").colors
    False
    >>> update_setting(Settings(), "output-format", "JSON").output_format
    'json'
    """
    name = normalize_setting_key(key)
    parser = PARSERS.get(name)
    if parser is None:
        raise ValueError(f"unknown setting: {key}")
    return replace(settings, **{name: parser(value)})


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Load settings from disk, falling back to defaults.

    Parameters
    ----------
    path : Optional[Path], optional
        Settings path (default: standard path).

    Returns
    -------
    Settings
        Loaded settings; invalid entries keep their default value.
    """
    config_path = path or get_config_path()
    settings = Settings()
    if not config_path.exists():
        return settings
    try:
        parsed = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return settings
    for key, value in parsed.items():
        try:
            settings = update_setting(settings, key, value)
        except ValueError:
            continue
    return settings


def _format_toml_value(value: Any) -> str:
    """
    Format a scalar as a TOML value.

    Examples
    --------
    >>> _format_toml_value(True)
    'true'
    >>> _format_toml_value('table')
    '"table"'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f"\"{text}\""


def settings_as_dict(settings: Settings) -> Dict[str, Any]:
    """
    Convert settings to a plain dictionary keyed by field name.

    Parameters
    ----------
    settings : Settings
        Settings to convert.

    Returns
    -------
    Dict[str, Any]
        Field values in declaration order.
    """
    return {item.name: getattr(settings, item.name) for item in fields(settings)}


def format_settings_toml(settings: Settings) -> str:
    """
    Format settings as TOML text.

    Examples
    --------
    >>> print(format_settings_toml(Settings()), end="")
    colors = true
    output_format = "table"
    """
    lines = [
        f"{key} = {_format_toml_value(value)}"
        for key, value in settings_as_dict(settings).items()
    ]
    return "\n".join(lines) + "\n"


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """
    Save settings to disk, returning the path written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(format_settings_toml(settings), encoding="utf-8")
    return config_path
