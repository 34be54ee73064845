"""Fetch the country reference dataset from the countries API."""

import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "countrieslib/1.0",
}


@dataclass
class FetchResult:
    data: Any
    status_code: int
    response_time_ms: int


class CountryFetchError(Exception):
    """An outbound request for country data failed.

    Carries what the `fail` event reports: the raw response body, the parsed
    body (if it was JSON), the request settings, status code and timing.
    """

    def __init__(
        self,
        message: str,
        *,
        settings: dict[str, str],
        status_code: int = 0,
        response_time_ms: int = 0,
        body: str | None = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.settings = settings
        self.status_code = status_code
        self.response_time_ms = response_time_ms
        self.body = body
        self.data = data


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _parse_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def fetch_countries(
    url: str,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FetchResult:
    """GET the country list as JSON.

    Raises CountryFetchError on transport errors, non-2xx responses and
    bodies that are not JSON.
    """
    request_settings = {"method": "GET", "url": url}
    started = time.monotonic()

    async with httpx.AsyncClient(
        timeout=timeout, headers=HEADERS, follow_redirects=True, transport=transport
    ) as client:
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            raise CountryFetchError(
                str(exc) or exc.__class__.__name__,
                settings=request_settings,
                response_time_ms=_elapsed_ms(started),
            ) from exc

    response_time_ms = _elapsed_ms(started)
    data = _parse_json(response)

    if response.is_error:
        raise CountryFetchError(
            f"Countries API responded {response.status_code}",
            settings=request_settings,
            status_code=response.status_code,
            response_time_ms=response_time_ms,
            body=response.text,
            data=data,
        )
    if data is None:
        raise CountryFetchError(
            "Countries API returned a non-JSON body",
            settings=request_settings,
            status_code=response.status_code,
            response_time_ms=response_time_ms,
            body=response.text,
        )

    logger.debug("Fetched country data from %s (%d, %dms)", url, response.status_code, response_time_ms)
    return FetchResult(data=data, status_code=response.status_code, response_time_ms=response_time_ms)
