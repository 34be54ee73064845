"""Cached country model.

Polls the countries API and the store on two APScheduler interval jobs and
publishes the result as events:

- change(data)                                          new payload adopted
- fail(err, data, settings, status_code, response_time) API request failed
- error(err)                                            anything else went wrong

Handlers run one at a time, in emission order, whichever job thread emits.
"""

import asyncio
import logging
import threading
from collections import defaultdict
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from countrieslib.db.store import CountryStore
from countrieslib.pipeline.country_api import CountryFetchError, fetch_countries

logger = logging.getLogger(__name__)


def _run_async(coro):
    """Run an async coroutine from a sync scheduler callback."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class CachedModel:
    log_level = logging.INFO

    def __init__(
        self,
        attributes: dict | None = None,
        *,
        url: str,
        key: str,
        store: CountryStore | None = None,
        api_interval: int = 3600,
        store_interval: int = 60,
        timeout: float = 30.0,
        fetcher=fetch_countries,
    ):
        self.url = url
        self.key = key
        self.store = store
        self.api_interval = api_interval
        self.store_interval = store_interval
        self.timeout = timeout
        self.fetcher = fetcher

        self._attributes = dict(attributes or {})
        self._handlers: dict[str, list] = defaultdict(list)
        self._lock = threading.RLock()
        self._scheduler: BackgroundScheduler | None = None

    def on(self, event: str, handler) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, *args) -> None:
        with self._lock:
            for handler in list(self._handlers[event]):
                handler(*args)

    def get(self, attribute: str):
        return self._attributes.get(attribute)

    def start(self) -> None:
        """Start polling the API and the store, both immediately and then on their intervals."""
        if self._scheduler is not None:
            return
        scheduler = BackgroundScheduler(timezone="UTC")
        now = datetime.now(timezone.utc)

        if self.store is not None:
            scheduler.add_job(
                self.load_from_store, "interval", seconds=self.store_interval,
                id=f"{self.key}-store", replace_existing=True, next_run_time=now,
                max_instances=1, coalesce=True,
            )
        scheduler.add_job(
            self.load_from_api, "interval", seconds=self.api_interval,
            id=f"{self.key}-api", replace_existing=True, next_run_time=now,
            max_instances=1, coalesce=True,
        )

        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "Cached model %s started: api every %ds, store every %ds",
            self.key, self.api_interval, self.store_interval,
        )

    def stop(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Cached model %s stopped", self.key)

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def load_from_api(self) -> None:
        """Fetch from the API, persist to the store and publish the payload."""
        logger.log(self.log_level, "Loading %s from %s", self.key, self.url)
        try:
            result = _run_async(self.fetcher(self.url, self.timeout))
        except CountryFetchError as err:
            self.emit("fail", err, err.data, err.settings, err.status_code, err.response_time_ms)
            return
        except Exception as err:
            self.emit("error", err)
            return

        fetched_at = datetime.now(timezone.utc)
        if self.store is not None:
            try:
                _run_async(self.store.set(self.key, result.data, fetched_at))
            except Exception as err:
                # The payload is still good; only persistence failed.
                self.emit("error", err)

        self._set_data(result.data, fetched_at)
        logger.log(self.log_level, "Loaded %s from API in %dms", self.key, result.response_time_ms)

    def load_from_store(self) -> None:
        """Adopt the stored payload if it is newer than the one in memory."""
        if self.store is None:
            return
        try:
            stored = _run_async(self.store.get(self.key))
        except Exception as err:
            self.emit("error", err)
            return
        if stored is None:
            return
        if self._set_data(stored.data, stored.fetched_at, only_if_newer=True):
            logger.log(self.log_level, "Loaded %s from store (fetched %s)", self.key, stored.fetched_at)

    def _set_data(self, data, fetched_at: datetime, only_if_newer: bool = False) -> bool:
        with self._lock:
            current = self._attributes.get("fetched_at")
            if only_if_newer and current is not None and fetched_at <= current:
                return False
            self._attributes["data"] = data
            self._attributes["fetched_at"] = fetched_at
            try:
                self.emit("change", data)
            except Exception:
                logger.exception("Change handler failed for %s", self.key)
            return True


class MutedCachedModel(CachedModel):
    """Same as CachedModel, but routine polling is logged at DEBUG."""

    log_level = logging.DEBUG


def select_cached_model(verbose: bool) -> type[CachedModel]:
    return CachedModel if verbose else MutedCachedModel
