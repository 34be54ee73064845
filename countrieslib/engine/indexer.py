"""Index builder.

Turns one country snapshot into a ViewCatalog generation:
1. Six filtered views (overseas, residence, contact, overseas residence, birth, overseas birth)
2. Three lookup tables (by code, by slug, by display name)

A generation is never patched; the owner swaps in a new one on every change.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from pydantic import ValidationError

from countrieslib.schemas.country import Country

logger = logging.getLogger(__name__)

HOME_COUNTRY_CODE = "GB"

# Palestine (West Bank) and Palestine (Gaza) are countries of application only;
# PS is used for address/contact details instead.
CONTACT_EXCLUDED_CODES = frozenset({"PJ", "PZ"})

# addressCountryFlag marks both countries of application and address/contact
# countries. The UK, Crown Dependencies and Faroe Islands are not part of the
# overseas journey; PS is replaced by the PJ/PZ variants for application.
OVERSEAS_RESIDENCE_EXCLUDED_CODES = frozenset({"FO", "GB", "GG", "IM", "JE", "PS"})


def _empty_table() -> Mapping[str, Country]:
    return MappingProxyType({})


class InvalidSnapshotError(ValueError):
    """Raised when a change event carries something other than a sequence of countries."""


@dataclass(frozen=True)
class ViewCatalog:
    """Read-only views and lookup tables derived from a single snapshot."""

    countries: tuple[Country, ...] = ()
    overseas_countries: tuple[Country, ...] = ()
    residence_countries: tuple[Country, ...] = ()
    residence_countries_for_contact: tuple[Country, ...] = ()
    overseas_residence_countries: tuple[Country, ...] = ()
    birth_countries: tuple[Country, ...] = ()
    overseas_birth_countries: tuple[Country, ...] = ()
    by_code: Mapping[str, Country] = field(default_factory=_empty_table)
    by_slug: Mapping[str, Country] = field(default_factory=_empty_table)
    by_display_name: Mapping[str, Country] = field(default_factory=_empty_table)


def is_overseas_country(country: Country) -> bool:
    return country.country_code != HOME_COUNTRY_CODE


def is_residence_country(country: Country) -> bool:
    return country.address_country_flag is True


def is_contact_residence_country(country: Country) -> bool:
    return is_residence_country(country) and country.country_code not in CONTACT_EXCLUDED_CODES


def is_overseas_residence_country(country: Country) -> bool:
    return (
        country.address_country_flag is True
        and country.country_code not in OVERSEAS_RESIDENCE_EXCLUDED_CODES
    )


def is_birth_country(country: Country) -> bool:
    return country.country_of_birth_flag is True


def is_overseas_birth_country(country: Country) -> bool:
    return country.country_of_birth_flag is True and country.country_code != HOME_COUNTRY_CODE


def index_by(countries: Sequence[Country], attribute: str) -> Mapping[str, Country]:
    """Map attribute value -> record. Later records overwrite earlier ones with the same key."""
    table: dict[str, Country] = {}
    for country in countries:
        table[getattr(country, attribute)] = country
    return MappingProxyType(table)


def _coerce_snapshot(snapshot: object) -> tuple[Country, ...]:
    if isinstance(snapshot, (str, bytes, bytearray, Mapping)) or not isinstance(snapshot, Sequence):
        raise InvalidSnapshotError(
            f"Country snapshot must be a sequence of records, got {type(snapshot).__name__}"
        )

    countries: list[Country] = []
    for idx, item in enumerate(snapshot):
        if isinstance(item, Country):
            countries.append(item)
        elif isinstance(item, Mapping):
            try:
                countries.append(Country.model_validate(item))
            except ValidationError as exc:
                raise InvalidSnapshotError(f"Invalid country record at index {idx}: {exc}") from exc
        else:
            raise InvalidSnapshotError(
                f"Expected country record at index {idx}, got {type(item).__name__}"
            )
    return tuple(countries)


def build_catalog(snapshot: Sequence[Country | Mapping]) -> ViewCatalog:
    """Build every view and lookup table from one snapshot."""
    countries = _coerce_snapshot(snapshot)
    logger.debug("Indexing %d countries", len(countries))

    return ViewCatalog(
        countries=countries,
        overseas_countries=tuple(c for c in countries if is_overseas_country(c)),
        residence_countries=tuple(c for c in countries if is_residence_country(c)),
        residence_countries_for_contact=tuple(c for c in countries if is_contact_residence_country(c)),
        overseas_residence_countries=tuple(c for c in countries if is_overseas_residence_country(c)),
        birth_countries=tuple(c for c in countries if is_birth_country(c)),
        overseas_birth_countries=tuple(c for c in countries if is_overseas_birth_country(c)),
        by_code=index_by(countries, "country_code"),
        by_slug=index_by(countries, "country_name_slug"),
        by_display_name=index_by(countries, "display_name"),
    )
