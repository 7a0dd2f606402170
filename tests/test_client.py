# tests/test_client.py

import json

import pytest
import requests

from tinywx.client import API_URL, fetch, parse_snapshot
from tinywx.config import CommandLine, resolve
from tinywx.errors import ApiError, MalformedResponse, NetworkError

SAMPLE = {
    "coord": {"lon": -9.1333, "lat": 38.7167},
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01n"}],
    "base": "stations",
    "main": {
        "temp": 30.4,
        "feels_like": 29.8,
        "temp_min": 28.9,
        "temp_max": 31.1,
        "pressure": 1016,
        "humidity": 40,
    },
    "visibility": 10000,
    "wind": {"speed": 4.63, "deg": 340},
    "clouds": {"all": 0},
    "dt": 1690000000,
    "sys": {"type": 2, "id": 2012254, "country": "PT", "sunrise": 1, "sunset": 2},
    "timezone": 3600,
    "id": 2267057,
    "name": "Lisbon",
    "cod": 200,
}


class FakeResponse:
    def __init__(self, status_code, body, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if isinstance(self._body, str):
            return json.loads(self._body)
        return self._body


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def get(self, url, params=None):
        self.calls.append((url, params))
        if self.exc:
            raise self.exc
        return self.response


def _cfg(**kw):
    args = dict(city="Lisbon", country="PT", api_key="secret")
    args.update(kw)
    return resolve(CommandLine(**args))


def test_fetch_builds_request_and_parses():
    session = FakeSession(FakeResponse(200, SAMPLE))
    snap = fetch(_cfg(units="imperial"), session=session)

    assert session.calls == [
        (API_URL, {"q": "Lisbon,PT", "units": "imperial", "appid": "secret"})
    ]
    assert snap.temperature == 30.4
    assert snap.feels_like == 29.8
    assert snap.humidity == 40
    assert snap.wind_speed == 4.63
    assert snap.condition_code == 800
    assert snap.description == "clear sky"
    assert snap.icon_code == "01n"
    assert snap.is_night
    assert snap.observed_at == 1690000000 + 3600


def test_api_error_uses_provider_message():
    body = {"cod": 401, "message": "Invalid API key. Please see https://openweathermap.org/faq#error401 for more info."}
    session = FakeSession(FakeResponse(401, body, reason="Unauthorized"))

    with pytest.raises(ApiError) as exc:
        fetch(_cfg(), session=session)
    assert exc.value.status_code == 401
    assert exc.value.message.startswith("Invalid API key")
    assert exc.value.exit_code == 2


def test_api_error_without_json_body():
    session = FakeSession(FakeResponse(502, "<html>bad gateway</html>", reason="Bad Gateway"))

    with pytest.raises(ApiError) as exc:
        fetch(_cfg(), session=session)
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway"


def test_transport_failure_is_network_error():
    session = FakeSession(exc=requests.ConnectionError("Name or service not known"))

    with pytest.raises(NetworkError) as exc:
        fetch(_cfg(), session=session)
    assert "Name or service not known" in str(exc.value)


def test_non_json_success_body():
    session = FakeSession(FakeResponse(200, "not json"))
    with pytest.raises(MalformedResponse):
        fetch(_cfg(), session=session)


def test_fetch_uses_requests_by_default(monkeypatch):
    calls = []

    def fake_get(url, params=None):
        calls.append(params["q"])
        return FakeResponse(200, SAMPLE)

    monkeypatch.setattr(requests, "get", fake_get)
    fetch(_cfg())
    assert calls == ["Lisbon,PT"]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p.pop("main"),
        lambda p: p["main"].pop("temp"),
        lambda p: p["main"].update(humidity="high"),
        lambda p: p.pop("wind"),
        lambda p: p.update(weather=[]),
        lambda p: p["weather"][0].pop("description"),
        lambda p: p["weather"][0].update(id=True),
        lambda p: p["main"].update(temp=float("nan")),
        lambda p: p["main"].update(humidity=float("inf")),
        lambda p: p["wind"].update(speed=-float("inf")),
        lambda p: p["main"].update(feels_like=10**400),
    ],
)
def test_schema_mismatch_is_malformed(mutate):
    payload = json.loads(json.dumps(SAMPLE))
    mutate(payload)
    with pytest.raises(MalformedResponse):
        parse_snapshot(payload)


def test_optional_fields_may_be_absent():
    payload = json.loads(json.dumps(SAMPLE))
    del payload["dt"]
    del payload["weather"][0]["icon"]

    snap = parse_snapshot(payload)
    assert snap.observed_at is None
    assert snap.icon_code is None
    assert not snap.is_night


def test_top_level_must_be_object():
    with pytest.raises(MalformedResponse):
        parse_snapshot([1, 2, 3])

@pytest.mark.parametrize(
    "body",
    [
        '"humidity": 1e400',
        '"humidity": 40, "temp": NaN',
        '"humidity": 40, "temp": Infinity',
    ],
)
def test_non_finite_numbers_from_json_are_malformed(body):
    # json accepts NaN, Infinity and overflowing literals without complaint
    text = (
        '{"main": {"temp": 20.0, "feels_like": 19.0, ' + body + '}, '
        '"wind": {"speed": 1.0}, '
        '"weather": [{"id": 800, "description": "clear sky"}]}'
    )
    with pytest.raises(MalformedResponse):
        parse_snapshot(json.loads(text))


@pytest.mark.parametrize(
    "dt,tz",
    [
        (True, 0),
        (1690000000, False),
        (10**20, 0),
        (0, -3600),
        (1690000000.5, 0),
    ],
)
def test_unusable_timestamp_is_dropped(dt, tz):
    payload = json.loads(json.dumps(SAMPLE))
    payload["dt"] = dt
    payload["timezone"] = tz

    assert parse_snapshot(payload).observed_at is None
