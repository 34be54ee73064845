import logging

from countrieslib.engine.notifications import (
    CountryNotifications,
    OutboundLogger,
    render_template,
)


class RecordingLogger(OutboundLogger):
    def __init__(self):
        super().__init__()
        self.calls = []

    def outbound(self, template, fields, level=logging.INFO):
        self.calls.append((template, fields, level))


class ErrorWithBody(Exception):
    def __init__(self, message, body):
        super().__init__(message)
        self.message = message
        self.body = body


SETTINGS = {"method": "GET", "url": "http://example.com/countries"}


def test_on_fail_fields():
    outbound = RecordingLogger()
    err = ErrorWithBody("Request timeout", "<html><body><h1>Error page</h1></body></html>")

    CountryNotifications(outbound).on_fail(err, {"error": "Service unavailable"}, SETTINGS, 503, 1200)

    template, fields, level = outbound.calls[0]
    assert template == "Countries CachedModel request failed :outVerb :outRequest :outResponseCode :outError"
    assert fields == {
        "outVerb": "GET",
        "outRequest": "http://example.com/countries",
        "outResponseCode": 503,
        "outResponseTime": 1200,
        "outError": "Request timeout",
        "outErrorBody": "Error page",
    }
    assert level == logging.WARNING


def test_on_fail_falls_back_to_data_error():
    outbound = RecordingLogger()
    CountryNotifications(outbound).on_fail({}, {"error": "Service unavailable"}, SETTINGS, 503, 10)
    assert outbound.calls[0][1]["outError"] == "Service unavailable"


def test_on_fail_falls_back_to_empty_string():
    outbound = RecordingLogger()
    CountryNotifications(outbound).on_fail(None, None, SETTINGS, 500, 10)
    fields = outbound.calls[0][1]
    assert fields["outError"] == ""
    assert fields["outErrorBody"] is None


def test_on_fail_never_raises_on_missing_fields(caplog):
    caplog.set_level(logging.INFO)
    CountryNotifications().on_fail(None, "not a mapping", None, None, None)
    assert "Countries CachedModel request failed - - - -" in caplog.text


def test_on_fail_renders_log_line(caplog):
    caplog.set_level(logging.INFO)
    err = ErrorWithBody("Request timeout", None)
    CountryNotifications().on_fail(err, None, SETTINGS, 503, 1200)
    assert (
        "Countries CachedModel request failed GET http://example.com/countries 503 Request timeout"
        in caplog.text
    )
    record = caplog.records[-1]
    assert record.outbound["outResponseTime"] == 1200


def test_on_error_logs_message(caplog):
    CountryNotifications().on_error(ValueError("Network unreachable"))
    assert "Countries CachedModel request error Network unreachable" in caplog.text
    assert caplog.records[-1].levelno == logging.ERROR


def test_on_error_passes_raw_error():
    outbound = RecordingLogger()
    err = RuntimeError("boom")
    CountryNotifications(outbound).on_error(err)
    assert outbound.calls[0][1] == {"err": err}


def test_on_error_without_error(caplog):
    CountryNotifications().on_error(None)
    assert "Countries CachedModel request error -" in caplog.text


def test_render_template_dotted_tokens():
    assert render_template(":a.b :c", {"a": {"b": "x"}, "c": 3}) == "x 3"


def test_render_template_single_character_tokens():
    assert render_template(":a-:b.", {"a": 1, "b": 2}) == "1-2."
