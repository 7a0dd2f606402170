"""
src/tinywx/icons.py

Nerd Font glyphs for OpenWeatherMap conditions.
GLYPHS maps a glyph key to its codepoint and is read-only; condition_glyph()
picks the key for an OpenWeatherMap condition id.
Reference: https://openweathermap.org/weather-conditions
"""

from __future__ import annotations
from types import MappingProxyType

GLYPHS = MappingProxyType({
    # conditions
    "clear_day": "\ue30d",
    "clear_night": "\uf186",
    "few_clouds_day": "\ue302",
    "few_clouds_night": "\ue37e",
    # nf-weather-cloud; the old nf-mdi cloud at U+FA8F is gone from Nerd Fonts 3
    "scattered_clouds": "\ue33d",
    "broken_clouds": "\ue312",
    "shower_rain": "\ue34a",
    "rain": "\ue371",
    "thunderstorm": "\ue315",
    "snow": "\uf2dc",
    "mist": "\ue31e",
    "unknown": "\ue374",
    # decorations for the other display fields
    "thermometer": "\ue350",
    "humidity": "\ue373",
    "wind": "\ue34b",
    "clock": "\ue38a",
})

UNKNOWN = "unknown"


def condition_key(code: int, night: bool = False) -> str:
    """Return the GLYPHS key for an OpenWeatherMap condition id."""
    if code == 800:
        return "clear_night" if night else "clear_day"
    if code == 801:
        return "few_clouds_night" if night else "few_clouds_day"
    if code == 802:
        return "scattered_clouds"
    if code in (803, 804):
        return "broken_clouds"
    if 200 <= code < 300:
        return "thunderstorm"
    # drizzle and the shower-rain group share one icon
    if 300 <= code < 400 or 520 <= code < 600:
        return "shower_rain"
    if code == 511:  # freezing rain
        return "snow"
    if 500 <= code < 600:
        return "rain"
    if 600 <= code < 700:
        return "snow"
    if 700 <= code < 800:
        return "mist"
    return UNKNOWN


def condition_glyph(code: int, night: bool = False) -> str:
    return GLYPHS[condition_key(code, night)]
