"""Outbound logging for data source failures.

`fail` and `error` events never reach the index: they are turned into one
structured log line each and the last good generation stays in service.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from countrieslib.pipeline.text_clean import trim_html

FAIL_TEMPLATE = "Countries CachedModel request failed :outVerb :outRequest :outResponseCode :outError"
ERROR_TEMPLATE = "Countries CachedModel request error :err.message"

_TOKEN = re.compile(r":([A-Za-z_]\w*(?:\.\w+)*)")
_MISSING_TOKEN = "-"


def field_value(source: Any, name: str, default: Any = None) -> Any:
    """Read `name` from a mapping key or an attribute, whichever the source has."""
    if source is None:
        return default
    if isinstance(source, Mapping):
        return source.get(name, default)
    return getattr(source, name, default)


def error_message(err: Any) -> str | None:
    if isinstance(err, BaseException):
        return getattr(err, "message", None) or str(err) or None
    return field_value(err, "message")


def _resolve(fields: Mapping[str, Any], path: str) -> Any:
    value: Any = fields
    for part in path.split("."):
        if part == "message" and isinstance(value, BaseException):
            value = error_message(value)
        else:
            value = field_value(value, part)
        if value is None:
            return None
    return value


def render_template(template: str, fields: Mapping[str, Any]) -> str:
    """Substitute `:name` / `:name.sub` tokens with values from fields."""

    def _sub(match: re.Match) -> str:
        value = _resolve(fields, match.group(1))
        if value is None or value == "":
            return _MISSING_TOKEN
        return str(value)

    return _TOKEN.sub(_sub, template)


class OutboundLogger:
    """Logs requests made to upstream services with their raw fields attached."""

    def __init__(self, name: str = "countrieslib.outbound"):
        self._logger = logging.getLogger(name)

    def outbound(self, template: str, fields: Mapping[str, Any], level: int = logging.INFO) -> None:
        self._logger.log(level, "%s", render_template(template, fields), extra={"outbound": dict(fields)})

    def trim_html(self, body: Any) -> Any:
        return trim_html(body)


class CountryNotifications:
    """Handlers subscribed to the data source's `fail` and `error` events."""

    def __init__(self, outbound_logger: OutboundLogger | None = None):
        self.outbound_logger = outbound_logger or OutboundLogger()

    def on_fail(self, err=None, data=None, settings=None, status_code=None, response_time=None) -> None:
        error_text = error_message(err) or field_value(data, "error") or ""

        self.outbound_logger.outbound(
            FAIL_TEMPLATE,
            {
                "outVerb": field_value(settings, "method"),
                "outRequest": field_value(settings, "url"),
                "outResponseCode": status_code,
                "outResponseTime": response_time,
                "outError": error_text,
                "outErrorBody": self.outbound_logger.trim_html(field_value(err, "body")),
            },
            level=logging.WARNING,
        )

    def on_error(self, err=None) -> None:
        self.outbound_logger.outbound(ERROR_TEMPLATE, {"err": err}, level=logging.ERROR)
