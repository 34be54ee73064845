"""Presentation helpers: sort a country list and turn it into dropdown options.

Countries without a display name sort after every named one; options carry
whatever label the record has, None included.
"""

from collections.abc import Iterable

from countrieslib.config import settings
from countrieslib.schemas.country import Country, DropdownOption

DEFAULT_PIN_CODE = settings.DEFAULT_PIN_CODE


def _display_name_key(country: Country) -> tuple[bool, str]:
    return (country.display_name is None, country.display_name or "")


def sort_country_list(
    countries: Iterable[Country],
    pin_code: str | None = DEFAULT_PIN_CODE,
) -> list[Country]:
    """Sort countries by display name, moving `pin_code` (if present) to the top.

    The sort is stable, so equal display names keep their input order.
    Pass pin_code=None to skip pinning.
    """
    ordered = sorted(countries, key=_display_name_key)
    if pin_code:
        pinned = next((c for c in ordered if c.country_code == pin_code), None)
        if pinned is not None:
            ordered = [pinned] + [c for c in ordered if c.country_code != pin_code]
    return ordered


def to_options(countries: Iterable[Country], welsh: bool = False) -> list[DropdownOption]:
    """Project countries into dropdown options, in the given order."""
    options = []
    for country in countries:
        label = country.display_name_welsh if welsh else country.display_name
        options.append(DropdownOption(value=country.country_code, text=label, label=label))
    return options


def dropdown_list(
    countries: Iterable[Country],
    welsh: bool = False,
    pin_code: str | None = DEFAULT_PIN_CODE,
) -> list[DropdownOption]:
    return to_options(sort_country_list(countries, pin_code), welsh)
