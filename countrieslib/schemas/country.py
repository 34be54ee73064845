from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class ApplicationProcessing(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True)

    stop_new_applications: bool | None = None


class Country(BaseModel):
    """One record of the country reference dataset, keyed by country_code.

    Wire names are camelCase (countryCode, displayNameWelsh, ...). Unknown
    fields such as `channel` are kept as extras.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow", frozen=True)

    country_code: str
    country_name_slug: str | None = None
    display_name: str | None = None
    display_name_welsh: str | None = None
    address_country_flag: bool | None = None
    country_of_birth_flag: bool | None = None
    status: str | None = None
    content_type: int | None = None
    application_processing: ApplicationProcessing | None = None

    @field_validator("address_country_flag", "country_of_birth_flag", mode="before")
    @classmethod
    def _explicit_flag(cls, value: Any) -> bool | None:
        # Only a literal boolean is an eligibility flag; "true", 1, null are not.
        return value if isinstance(value, bool) else None

    @field_validator("content_type", mode="before")
    @classmethod
    def _explicit_int(cls, value: Any) -> int | None:
        # "7" is not restricted content; bools are not classification codes either.
        return value if isinstance(value, int) and not isinstance(value, bool) else None


class DropdownOption(BaseModel):
    value: str
    text: str | None
    label: str | None


class CountryStatusResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    country_code: str
    restricted: bool
    new_applications_stopped: bool | None
    active: bool
    slug: str | None
