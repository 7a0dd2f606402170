"""
src/tinywx/client.py

Fetch current conditions from the OpenWeatherMap "current weather" endpoint
and flatten the JSON into a WeatherSnapshot. One blocking GET per call, no
retries, no caching.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import EffectiveConfig
from .errors import ApiError, MalformedResponse, NetworkError

API_URL = "https://api.openweathermap.org/data/2.5/weather"
# 9999-12-31T23:59:59Z, the last instant datetime can represent
MAX_TIMESTAMP = 253402300799


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature: float
    feels_like: float
    humidity: int
    wind_speed: float
    condition_code: int
    description: str
    icon_code: Optional[str] = None  # e.g. "01n"; trailing "n" means night
    observed_at: Optional[int] = None  # unix seconds shifted to local time

    @property
    def is_night(self) -> bool:
        return bool(self.icon_code) and self.icon_code.endswith("n")


def _number(obj: Dict[str, Any], key: str, path: str) -> float:
    val = obj.get(key)
    # bool is an int subclass, reject it explicitly
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise MalformedResponse(f"'{path}' is missing or not a number")
    try:
        val = float(val)
    except OverflowError:
        val = math.inf
    if not math.isfinite(val):
        raise MalformedResponse(f"'{path}' is not a finite number")
    return val


def _timestamp(dt, tz) -> Optional[int]:
    # dt and timezone are optional, anything unusable just drops the time field
    if any(isinstance(v, bool) or not isinstance(v, int) for v in (dt, tz)):
        return None
    local = dt + tz
    return local if 0 <= local <= MAX_TIMESTAMP else None


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    val = payload.get(key)
    if not isinstance(val, dict):
        raise MalformedResponse(f"'{key}' is missing or not an object")
    return val


def parse_snapshot(payload: Any) -> WeatherSnapshot:
    """Flatten an OpenWeatherMap current-weather payload."""
    if not isinstance(payload, dict):
        raise MalformedResponse("top-level JSON value is not an object")

    main = _section(payload, "main")
    wind = _section(payload, "wind")

    conditions = payload.get("weather")
    if not isinstance(conditions, list) or not conditions or not isinstance(conditions[0], dict):
        raise MalformedResponse("'weather' is missing or empty")
    cond = conditions[0]
    code = _number(cond, "id", "weather[0].id")
    description = cond.get("description")
    if not isinstance(description, str):
        raise MalformedResponse("'weather[0].description' is missing or not a string")
    icon_code = cond.get("icon") if isinstance(cond.get("icon"), str) else None

    observed_at = _timestamp(payload.get("dt"), payload.get("timezone", 0))

    return WeatherSnapshot(
        temperature=_number(main, "temp", "main.temp"),
        feels_like=_number(main, "feels_like", "main.feels_like"),
        humidity=int(_number(main, "humidity", "main.humidity")),
        wind_speed=_number(wind, "speed", "wind.speed"),
        condition_code=int(code),
        description=description,
        icon_code=icon_code,
        observed_at=observed_at,
    )


def _error_message(resp: requests.Response) -> str:
    # OpenWeatherMap errors look like {"cod": 401, "message": "Invalid API key. ..."}
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason or "request failed"


def fetch(cfg: EffectiveConfig, session: Optional[requests.Session] = None) -> WeatherSnapshot:
    """
    Fetch the current weather for cfg.location.

    Raises NetworkError on transport failures, ApiError on a non-2xx status and
    MalformedResponse when a successful body does not have the expected shape.
    """
    params = {
        "q": cfg.location.query(),
        "units": cfg.units.value,
        "appid": cfg.api_key,
    }
    http = session or requests
    logging.debug(f"GET {API_URL} q={params['q']!r} units={params['units']}")
    try:
        resp = http.get(API_URL, params=params)
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e

    logging.debug(f"HTTP {resp.status_code}")
    if not resp.ok:
        raise ApiError(resp.status_code, _error_message(resp))

    try:
        payload = resp.json()
    except ValueError as e:
        raise MalformedResponse(f"body is not JSON ({e})") from e
    return parse_snapshot(payload)
