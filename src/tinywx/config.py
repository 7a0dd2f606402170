"""
src/tinywx/config.py

Resolve command-line flags or a TOML config file into one EffectiveConfig.
The two sources are mutually exclusive: a ConfigSource is either CommandLine
or File, and resolve() turns it into validated, immutable settings with
defaults applied (metric units, single-space separator, icon + temperature).
Nothing here touches the network or the filesystem; the caller reads the file
and passes its text in.
"""

from __future__ import annotations
import logging
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import (
    FileParseError,
    InvalidValue,
    MissingRequiredField,
    UnknownField,
    UnknownGlyph,
)
from .icons import GLYPHS

API_KEY_ENV = "OWM_API_KEY"
DEFAULT_SEPARATOR = " "


class Units(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"
    STANDARD = "standard"


class FieldName(str, Enum):
    ICON = "icon"
    TEMPERATURE = "temperature"
    FEELS_LIKE = "feels_like"
    HUMIDITY = "humidity"
    WIND_SPEED = "wind_speed"
    DESCRIPTION = "description"
    TIME = "time"


FIELD_ALIASES = {
    "temp": FieldName.TEMPERATURE,
    "wind": FieldName.WIND_SPEED,
    "desc": FieldName.DESCRIPTION,
}


@dataclass(frozen=True)
class FieldSpec:
    name: FieldName
    icon: Optional[str] = None  # glyph key override


DEFAULT_FIELDS = (FieldSpec(FieldName.ICON), FieldSpec(FieldName.TEMPERATURE))


@dataclass(frozen=True)
class Location:
    city: str
    state: str = ""
    country: str = ""

    def query(self) -> str:
        # "city,state,country", skipping empty parts
        return ",".join(p for p in (self.city, self.state, self.country) if p)


@dataclass(frozen=True)
class EffectiveConfig:
    location: Location
    api_key: str
    units: Units = Units.METRIC
    fields: Tuple[FieldSpec, ...] = DEFAULT_FIELDS
    separator: str = DEFAULT_SEPARATOR


# --------------------------------------------------------------------------- #
#  Sources
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class CommandLine:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    api_key: Optional[str] = None
    units: Optional[str] = None
    display: List[str] = field(default_factory=list)
    icon: bool = False
    separator: Optional[str] = None


@dataclass(frozen=True)
class File:
    path: str
    text: str


ConfigSource = Union[CommandLine, File]

# flags that may not be combined with --config-file, keyed by CommandLine attribute
EXCLUSIVE_FLAGS = {
    "city": "--city",
    "state": "--state",
    "country": "--country",
    "api_key": "--api-key",
    "units": "--units",
    "display": "--display",
    "icon": "--icon",
    "separator": "--separator",
}


def flags_given(args: CommandLine) -> List[str]:
    """Names of the exclusive flags that were actually passed."""
    return [flag for attr, flag in EXCLUSIVE_FLAGS.items()
            if getattr(args, attr) not in (None, False, [])]


FILE_KEYS = {"location", "city", "state", "country", "api_key", "units", "imperial",
             "fields", "data", "separator"}


# --------------------------------------------------------------------------- #
#  Parsing helpers
# --------------------------------------------------------------------------- #
def parse_field(entry: Union[str, Dict[str, Any]]) -> FieldSpec:
    """
    Parse one display entry: "humidity", "icon:rain" or, from TOML,
    {name = "humidity", icon = "humidity"}.
    """
    if isinstance(entry, dict):
        name = entry.get("name")
        icon = entry.get("icon")
        if not isinstance(name, str) or (icon is not None and not isinstance(icon, str)):
            raise InvalidValue("fields", entry, "a table with string 'name' and optional 'icon'")
    elif isinstance(entry, str):
        name, _, icon = entry.partition(":")
        icon = icon or None
    else:
        raise InvalidValue("fields", entry, "a field name or table")

    key = name.strip().lower()
    if key in FIELD_ALIASES:
        fname = FIELD_ALIASES[key]
    else:
        try:
            fname = FieldName(key)
        except ValueError:
            raise UnknownField(name, [f.value for f in FieldName]) from None

    if icon is not None:
        icon = icon.strip()
        if icon not in GLYPHS:
            raise UnknownGlyph(icon)
    return FieldSpec(fname, icon)


def parse_fields(entries) -> Tuple[FieldSpec, ...]:
    specs = tuple(parse_field(e) for e in entries)
    return specs or DEFAULT_FIELDS


def parse_units(value) -> Units:
    if value is None:
        return Units.METRIC
    try:
        return Units(str(value).strip().lower())
    except ValueError:
        raise InvalidValue("units", value, "one of " + ", ".join(u.value for u in Units)) from None


def _required(value, name: str, hint: str = "") -> str:
    if value is None or not str(value).strip():
        raise MissingRequiredField(name, hint)
    return str(value).strip()


def _api_key(value, env: Mapping[str, str], hint: str) -> str:
    if value is None or not str(value).strip():
        value = env.get(API_KEY_ENV)
    return _required(value, "api_key", f"{hint} or set {API_KEY_ENV}")


# --------------------------------------------------------------------------- #
#  Resolution
# --------------------------------------------------------------------------- #
def _from_command_line(args: CommandLine, env: Mapping[str, str]) -> EffectiveConfig:
    display = list(args.display)
    if args.icon:
        display = [FieldName.ICON.value] + (display or [FieldName.TEMPERATURE.value])

    return EffectiveConfig(
        location=Location(
            city=_required(args.city, "location", "pass --city"),
            state=(args.state or "").strip(),
            country=(args.country or "").strip(),
        ),
        api_key=_api_key(args.api_key, env, "pass --api-key"),
        units=parse_units(args.units),
        fields=parse_fields(display),
        separator=DEFAULT_SEPARATOR if args.separator is None else args.separator,
    )


def _from_file(src: File, env: Mapping[str, str]) -> EffectiveConfig:
    try:
        data = tomllib.loads(src.text)
    except tomllib.TOMLDecodeError as e:
        raise FileParseError(src.path, str(e)) from e

    for key in sorted(set(data) - FILE_KEYS):
        logging.warning(f"{src.path}: ignoring unknown key '{key}'")

    def _str(key):
        val = data.get(key)
        if val is not None and not isinstance(val, str):
            raise FileParseError(src.path, f"'{key}' must be a string")
        return val

    city = _str("location") if "location" in data else _str("city")

    units = _str("units")
    if units is None:
        imperial = data.get("imperial", False)
        if not isinstance(imperial, bool):
            raise FileParseError(src.path, "'imperial' must be true or false")
        units = Units.IMPERIAL.value if imperial else None

    fields = data.get("fields", data.get("data", []))
    if not isinstance(fields, list):
        raise FileParseError(src.path, "'fields' must be an array")

    separator = _str("separator")

    return EffectiveConfig(
        location=Location(
            city=_required(city, "location", f"set 'location' in {src.path}"),
            state=(_str("state") or "").strip(),
            country=(_str("country") or "").strip(),
        ),
        api_key=_api_key(_str("api_key"), env, f"set 'api_key' in {src.path}"),
        units=parse_units(units),
        fields=parse_fields(fields),
        separator=DEFAULT_SEPARATOR if separator is None else separator,
    )


def resolve(source: ConfigSource, env: Optional[Mapping[str, str]] = None) -> EffectiveConfig:
    """
    Build the EffectiveConfig for one run.

    Parameters
    ----------
    source : CommandLine | File
        Where the settings come from. A File is the sole source of truth.
    env : mapping, optional
        Environment consulted for OWM_API_KEY when the source has no key.

    Raises
    ------
    ConfigError
        MissingRequiredField, UnknownField, UnknownGlyph, InvalidValue or
        FileParseError. Always raised before any request is made.
    """
    env = env or {}
    if isinstance(source, File):
        cfg = _from_file(source, env)
    else:
        cfg = _from_command_line(source, env)
    logging.debug(
        f"config: location={cfg.location.query()!r} units={cfg.units.value} "
        f"fields={[f.name.value for f in cfg.fields]}"
    )
    return cfg
