#!/usr/bin/env python3
"""
Read and validate the data manager configuration from a file in the
.ini format.

The configuration lives in a single section, `[data_manager]` by
default. Every key is optional and falls back to its default value.
Unknown keys and invalid values are rejected. A default annotated .ini
file can be generated from the schema.

---
LazyBroadcast - Lazily-loaded data broadcasting

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Callable, NamedTuple, TextIO

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "data_manager"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


########################################################################
#                 Configuration parser custom error                    #
########################################################################


class ConfigError(Exception):
    """
    General configuration error. It's the only error raised by this
    module.
    """

    def __init__(self, msg: str):
        super().__init__(msg)


########################################################################
#                        Configuration holder                          #
########################################################################


@dataclass(frozen=True)
class ManagerConfig:
    """
    Behavior settings shared by the data managers.

    Attributes:
        update_if_empty (bool): Default for `register_listener()`, start
            an update when a listener registers and no value is cached.
        cancel_if_locked (bool): Default for `trigger_update()`, cancel
            the update in progress and start a new one.
        discard_stale (bool): Drop the result of a fetch completing after
            a newer fetch has started.
        warn_on_cancel (bool): Log a warning when the default
            `cancel_fetch()` is called during a fetch.
        log_level (str): Logging level name used by applications.
    """

    update_if_empty: bool = True
    cancel_if_locked: bool = False
    discard_stale: bool = True
    warn_on_cancel: bool = True
    log_level: str = "INFO"


########################################################################
#                         Internal helpers                             #
########################################################################


def _str_to_bool(s: str) -> bool:
    """
    Convert the given string to a bool, if possible.

    Raises:
        ValueError: string doesn't contain a valid boolean.
    """
    s = s.strip().lower()
    if s in {"true", "1", "yes", "on"}:
        return True
    elif s in {"false", "0", "no", "off"}:
        return False

    raise ValueError(f"Invalid boolean string: {s}")


def _str_to_level(s: str) -> str:
    """
    Normalize a logging level name.

    Raises:
        ValueError: unknown level name.
    """
    level = s.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {s}")
    return level


class _SchemaEntry(NamedTuple):
    """
    Converting function and help comment of a configuration key.
    """

    convert: Callable[[str], Any]
    comment: str


_SCHEMA: dict[str, _SchemaEntry] = {
    "update_if_empty": _SchemaEntry(
        _str_to_bool, "Fetch the data when a listener registers and none is cached"
    ),
    "cancel_if_locked": _SchemaEntry(
        _str_to_bool, "Cancel the update in progress instead of skipping the new one"
    ),
    "discard_stale": _SchemaEntry(
        _str_to_bool, "Drop results of fetches superseded by a newer fetch"
    ),
    "warn_on_cancel": _SchemaEntry(
        _str_to_bool, "Warn when cancelling a fetch that cannot be cancelled"
    ),
    "log_level": _SchemaEntry(
        _str_to_level, f"Logging level, one of {', '.join(LOG_LEVELS)}"
    ),
}


########################################################################
#                     Loading and default generation                  #
########################################################################


def load_config(
    source: str | Path | TextIO, section: str = DEFAULT_SECTION
) -> ManagerConfig:
    """
    Load and validate the manager configuration.

    Args:
        source (str | Path | TextIO): Path to the configuration file
            (.ini) or an already opened file-like object.
        section (str): Section holding the manager configuration.

    Returns:
        ManagerConfig: The configuration, default values are used for
            the missing keys or if the section is missing.

    Raises:
        ConfigError: The file cannot be read or holds invalid data.
    """
    parser = configparser.ConfigParser(interpolation=None)
    name = str(source) if isinstance(source, (str, Path)) else section

    try:
        if isinstance(source, (str, Path)):
            with open(source, encoding="utf-8") as file:
                parser.read_file(file)
        else:
            parser.read_file(source)

    except FileNotFoundError:
        raise ConfigError(f"Configuration file '{name}' not found.")
    except configparser.Error as e:
        raise ConfigError(f"A parsing exception occurred opening '{name}'.") from e
    except OSError as e:
        raise ConfigError(f"An error occurred reading '{name}'.") from e

    if not parser.has_section(section):
        logger.info(f"No [{section}] section in '{name}', using defaults.")
        return ManagerConfig()

    extra = set(parser[section].keys()) - set(_SCHEMA.keys())
    if extra:
        raise ConfigError(
            f"Unrecognized key(s) in section [{section}] of '{name}': "
            f"{', '.join(sorted(extra))}."
        )

    values: dict[str, Any] = {}
    for key, raw in parser[section].items():
        try:
            values[key] = _SCHEMA[key].convert(raw)
        except ValueError as e:
            raise ConfigError(
                f"Value for key '{key}' in section [{section}] is invalid: {e}."
            ) from e

    return ManagerConfig(**values)


def generate_default(
    stream: TextIO, section: str = DEFAULT_SECTION, annotate: bool = True
):
    """
    Write the default configuration in the .ini format.

    Args:
        stream (TextIO): Stream to write the configuration into.
        section (str): Section name.
        annotate (bool): `True` to write a help comment before each key.
    """
    defaults = ManagerConfig()
    stream.write(f"[{section}]\n")
    for field in fields(ManagerConfig):
        if annotate:
            stream.write(f"; {_SCHEMA[field.name].comment}\n")
        value = getattr(defaults, field.name)
        if isinstance(value, bool):
            value = str(value).lower()
        stream.write(f"{field.name} = {value}\n")
    stream.write("\n")
