import asyncio

import httpx
import pytest

from countrieslib.pipeline.country_api import CountryFetchError, fetch_countries

URL = "http://example.com/countries"


def _fetch(handler):
    return asyncio.run(fetch_countries(URL, timeout=5.0, transport=httpx.MockTransport(handler)))


def test_returns_parsed_payload():
    result = _fetch(lambda request: httpx.Response(200, json=[{"countryCode": "GB"}]))
    assert result.data == [{"countryCode": "GB"}]
    assert result.status_code == 200
    assert result.response_time_ms >= 0


def test_error_status_raises_with_body_and_settings():
    with pytest.raises(CountryFetchError) as exc_info:
        _fetch(lambda request: httpx.Response(503, json={"error": "Service unavailable"}))
    err = exc_info.value
    assert err.status_code == 503
    assert err.data == {"error": "Service unavailable"}
    assert err.settings == {"method": "GET", "url": URL}
    assert "Service unavailable" in err.body


def test_html_error_body_is_kept_raw():
    with pytest.raises(CountryFetchError) as exc_info:
        _fetch(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))
    assert exc_info.value.body == "<html>Bad gateway</html>"
    assert exc_info.value.data is None


def test_non_json_success_raises():
    with pytest.raises(CountryFetchError) as exc_info:
        _fetch(lambda request: httpx.Response(200, text="not json"))
    assert exc_info.value.status_code == 200


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CountryFetchError) as exc_info:
        _fetch(handler)
    assert exc_info.value.status_code == 0
    assert "connection refused" in exc_info.value.message
