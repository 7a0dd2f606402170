"""
src/tinywx/render.py

Turn a WeatherSnapshot into the status-bar line: one token per requested
field, in request order, joined by the configured separator.
"""

from __future__ import annotations
import math
from datetime import datetime, timezone

from .client import WeatherSnapshot
from .config import EffectiveConfig, FieldName, FieldSpec, Units
from .icons import GLYPHS, condition_glyph

WIND_UNITS = {
    Units.METRIC: "m/s",
    Units.STANDARD: "m/s",
    Units.IMPERIAL: "mph",
}


def round_half_away(x: float) -> int:
    # round() would give banker's rounding: 0.5 -> 0, 2.5 -> 2
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _degrees(x: float) -> str:
    return f"{round_half_away(x)}°"


def _clock(observed_at) -> str:
    if observed_at is None:
        return "--:--:--"
    # observed_at already carries the location's UTC offset
    return datetime.fromtimestamp(observed_at, tz=timezone.utc).strftime("%H:%M:%S")


def render_field(spec: FieldSpec, snap: WeatherSnapshot, units: Units) -> str:
    if spec.name is FieldName.ICON:
        if spec.icon:
            return GLYPHS[spec.icon]
        return condition_glyph(snap.condition_code, snap.is_night)

    if spec.name is FieldName.TEMPERATURE:
        value = _degrees(snap.temperature)
    elif spec.name is FieldName.FEELS_LIKE:
        value = _degrees(snap.feels_like)
    elif spec.name is FieldName.HUMIDITY:
        value = f"{snap.humidity}%"
    elif spec.name is FieldName.WIND_SPEED:
        value = f"{snap.wind_speed:.1f}{WIND_UNITS[units]}"
    elif spec.name is FieldName.DESCRIPTION:
        value = snap.description
    elif spec.name is FieldName.TIME:
        value = _clock(snap.observed_at)
    else:
        raise ValueError(f"unhandled field {spec.name}")

    if spec.icon:
        return f"{GLYPHS[spec.icon]} {value}"
    return value


def render(snap: WeatherSnapshot, cfg: EffectiveConfig) -> str:
    return cfg.separator.join(render_field(f, snap, cfg.units) for f in cfg.fields)
