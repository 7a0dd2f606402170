"""
src/tinywx/errors.py

Exception taxonomy for tinywx. Configuration problems are detected before any
network traffic and exit with status 1; problems talking to the weather
provider exit with status 2. Every error is terminal for the invocation.
"""

from __future__ import annotations

EXIT_OK = 0
EXIT_CONFIG = 1
EXIT_CLIENT = 2


class TinyWxError(Exception):
    exit_code = EXIT_CONFIG


# --------------------------------------------------------------------------- #
#  Configuration
# --------------------------------------------------------------------------- #
class ConfigError(TinyWxError):
    exit_code = EXIT_CONFIG


class ConflictingSources(ConfigError):
    def __init__(self, flags):
        self.flags = sorted(flags)
        super().__init__(
            "a config file cannot be combined with "
            + ", ".join(self.flags)
            + "; use either command-line flags or --config-file"
        )


class MissingRequiredField(ConfigError):
    def __init__(self, field: str, hint: str = ""):
        self.field = field
        msg = f"missing required setting '{field}'"
        super().__init__(f"{msg} ({hint})" if hint else msg)


class UnknownField(ConfigError):
    def __init__(self, name: str, choices=()):
        self.name = name
        msg = f"unknown display field '{name}'"
        if choices:
            msg += f" (choose from {', '.join(choices)})"
        super().__init__(msg)


class UnknownGlyph(ConfigError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"unknown icon '{key}'")


class InvalidValue(ConfigError):
    def __init__(self, setting: str, value, expected: str):
        self.setting = setting
        self.value = value
        super().__init__(f"invalid value {value!r} for '{setting}': expected {expected}")


class FileParseError(ConfigError):
    def __init__(self, path, detail: str):
        self.path = str(path)
        super().__init__(f"cannot read config file {self.path}: {detail}")


# --------------------------------------------------------------------------- #
#  Weather provider
# --------------------------------------------------------------------------- #
class ClientError(TinyWxError):
    exit_code = EXIT_CLIENT


class NetworkError(ClientError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"network error: {detail}")


class ApiError(ClientError):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"weather API error {status_code}: {message}")


class MalformedResponse(ClientError):
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"unexpected response from weather API: {detail}")
