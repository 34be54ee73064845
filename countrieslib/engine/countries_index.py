import logging
import threading
from collections.abc import Iterable, Mapping, Sequence

from countrieslib.config import Settings, settings
from countrieslib.db.store import CountryStore
from countrieslib.engine.formatter import DEFAULT_PIN_CODE, dropdown_list, sort_country_list
from countrieslib.engine.indexer import ViewCatalog, build_catalog
from countrieslib.engine.notifications import CountryNotifications
from countrieslib.scheduler.cached_model import select_cached_model
from countrieslib.schemas.country import Country, DropdownOption

logger = logging.getLogger(__name__)

RESTRICTED_CONTENT_TYPE = 7
ACTIVE_STATUS = "ACTIVE"

# Historical synonym accepted by code lookups
CODE_ALIASES = {"UK": "GB"}


class _NotFound:
    """Returned by lookups when a key was given but matched nothing.

    Falsy like None, but distinct from it: None means no key was supplied.
    """

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


class CountriesIndex:
    """Queryable index over the country dataset published by a cached model.

    Every `change` event rebuilds a complete ViewCatalog and swaps it in with a
    single assignment, so a query always reads one generation. Until the first
    change all views are empty.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        source=None,
        notifications: CountryNotifications | None = None,
    ):
        config = config or settings
        if source is None:
            model = select_cached_model(config.VERBOSE)
            source = model(
                url=config.COUNTRY_URL,
                key=f"{config.CACHE_KEY}-countries",
                store=CountryStore(config.DATABASE_URL),
                api_interval=config.COUNTRY_INTERVAL_SECONDS,
                store_interval=config.STORE_INTERVAL_SECONDS,
                timeout=config.REQUEST_TIMEOUT_SECONDS,
            )

        self._source = source
        self._catalog = ViewCatalog()
        self._rebuild_lock = threading.Lock()
        self.notifications = notifications or CountryNotifications()

        self.on("change", self.rebuild)
        self.on("fail", self.notifications.on_fail)
        self.on("error", self.notifications.on_error)

    def on(self, event: str, handler) -> None:
        """Subscribe a handler to a data source event ('change', 'fail', 'error')."""
        self._source.on(event, handler)

    def start(self) -> None:
        logger.debug("start")
        self._source.start()

    def stop(self) -> None:
        logger.debug("stop")
        self._source.stop()

    def rebuild(self, snapshot: Sequence[Country | Mapping]) -> None:
        """Replace every view and lookup table with ones built from `snapshot`.

        Raises InvalidSnapshotError for a non-sequence payload; the current
        generation is kept in that case.
        """
        with self._rebuild_lock:
            catalog = build_catalog(snapshot)
            self._catalog = catalog
        logger.info(
            "Indexed %d countries (%d residence, %d birth)",
            len(catalog.countries), len(catalog.residence_countries), len(catalog.birth_countries),
        )

    @property
    def catalog(self) -> ViewCatalog:
        return self._catalog

    # Views

    def get_all_countries(self) -> tuple[Country, ...]:
        return self._catalog.countries

    def get_overseas_countries(self) -> tuple[Country, ...]:
        return self._catalog.overseas_countries

    def get_residence_countries(self) -> tuple[Country, ...]:
        return self._catalog.residence_countries

    def get_residence_countries_for_contact(self) -> tuple[Country, ...]:
        """Residence countries usable for contact phone numbers (no Palestine application variants)."""
        return self._catalog.residence_countries_for_contact

    def get_overseas_residence_countries(self) -> tuple[Country, ...]:
        return self._catalog.overseas_residence_countries

    def get_birth_countries(self) -> tuple[Country, ...]:
        return self._catalog.birth_countries

    def get_overseas_birth_countries(self) -> tuple[Country, ...]:
        return self._catalog.overseas_birth_countries

    # Lookups

    @staticmethod
    def _lookup(table: Mapping[str, Country], key: str | None):
        if not key:
            return None
        return table.get(key, NOT_FOUND)

    def get_country_by_id(self, country_code: str | None):
        """Country for a code ('UK' is read as 'GB').

        Returns None when no code is given and NOT_FOUND when nothing matches.
        """
        country_code = CODE_ALIASES.get(country_code, country_code)
        return self._lookup(self._catalog.by_code, country_code)

    def get_country_by_slug(self, country_name_slug: str | None):
        return self._lookup(self._catalog.by_slug, country_name_slug)

    def get_country_by_display_name(self, display_name: str | None):
        return self._lookup(self._catalog.by_display_name, display_name)

    def get_country_data_by_id(self, country_code: str | None):
        return self.get_country_by_id(country_code)

    def get_country_data_by_slug(self, country_name_slug: str | None):
        return self.get_country_by_slug(country_name_slug)

    # Predicates; an unmatched code propagates the lookup result instead of a bool.

    def is_restricted_by_id(self, country_code: str | None):
        country = self.get_country_data_by_id(country_code)
        return country and country.content_type == RESTRICTED_CONTENT_TYPE

    def are_new_applications_stopped_for_id(self, country_code: str | None):
        country = self.get_country_data_by_id(country_code)
        if not country:
            return country
        processing = country.application_processing
        return processing.stop_new_applications if processing is not None else None

    def is_active_by_id(self, country_code: str | None):
        country = self.get_country_data_by_id(country_code)
        return country and country.status == ACTIVE_STATUS

    def get_slug_by_id(self, country_code: str | None):
        country = self.get_country_by_id(country_code)
        return country and country.country_name_slug

    # Presentation

    def sort_country_list(
        self, countries: Iterable[Country], pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[Country]:
        return sort_country_list(countries, pin_code)

    def dropdown_list(
        self, countries: Iterable[Country], welsh: bool = False, pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[DropdownOption]:
        return dropdown_list(countries, welsh, pin_code)

    def dropdown_list_birth_countries(
        self, welsh: bool = False, pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[DropdownOption]:
        return dropdown_list(self.get_birth_countries(), welsh, pin_code)

    def dropdown_list_overseas_birth_countries(
        self, welsh: bool = False, pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[DropdownOption]:
        return dropdown_list(self.get_overseas_birth_countries(), welsh, pin_code)

    def dropdown_list_residence_countries(
        self, welsh: bool = False, pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[DropdownOption]:
        return dropdown_list(self.get_residence_countries(), welsh, pin_code)

    def dropdown_list_overseas_residence_countries(
        self, welsh: bool = False, pin_code: str | None = DEFAULT_PIN_CODE
    ) -> list[DropdownOption]:
        return dropdown_list(self.get_overseas_residence_countries(), welsh, pin_code)
