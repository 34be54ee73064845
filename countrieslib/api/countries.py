from collections.abc import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from countrieslib.engine.countries_index import CountriesIndex
from countrieslib.engine.formatter import DEFAULT_PIN_CODE
from countrieslib.schemas.country import Country, CountryStatusResponse, DropdownOption

router = APIRouter(tags=["countries"])

VIEWS: dict[str, Callable[[CountriesIndex], tuple[Country, ...]]] = {
    "all": CountriesIndex.get_all_countries,
    "overseas": CountriesIndex.get_overseas_countries,
    "residence": CountriesIndex.get_residence_countries,
    "residence-contact": CountriesIndex.get_residence_countries_for_contact,
    "overseas-residence": CountriesIndex.get_overseas_residence_countries,
    "birth": CountriesIndex.get_birth_countries,
    "overseas-birth": CountriesIndex.get_overseas_birth_countries,
}


def get_index(request: Request) -> CountriesIndex:
    return request.app.state.index


def _view(index: CountriesIndex, view: str) -> list[Country]:
    getter = VIEWS.get(view)
    if getter is None:
        raise HTTPException(status_code=404, detail=f"Unknown view '{view}'")
    return list(getter(index))


def _found(country) -> Country:
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")
    return country


@router.get("/countries", response_model=list[Country])
async def list_countries(index: CountriesIndex = Depends(get_index)):
    return list(index.get_all_countries())


@router.get("/countries/views/{view}", response_model=list[Country])
async def list_view(view: str, index: CountriesIndex = Depends(get_index)):
    return _view(index, view)


@router.get("/countries/by-code/{code}", response_model=Country)
async def get_by_code(code: str, index: CountriesIndex = Depends(get_index)):
    return _found(index.get_country_by_id(code))


@router.get("/countries/by-code/{code}/status", response_model=CountryStatusResponse)
async def get_status(code: str, index: CountriesIndex = Depends(get_index)):
    country = _found(index.get_country_by_id(code))
    return CountryStatusResponse(
        country_code=country.country_code,
        restricted=bool(index.is_restricted_by_id(code)),
        new_applications_stopped=index.are_new_applications_stopped_for_id(code),
        active=bool(index.is_active_by_id(code)),
        slug=index.get_slug_by_id(code),
    )


@router.get("/countries/by-slug/{slug}", response_model=Country)
async def get_by_slug(slug: str, index: CountriesIndex = Depends(get_index)):
    return _found(index.get_country_by_slug(slug))


@router.get("/countries/by-name/{name}", response_model=Country)
async def get_by_name(name: str, index: CountriesIndex = Depends(get_index)):
    return _found(index.get_country_by_display_name(name))


@router.get("/dropdowns/{view}", response_model=list[DropdownOption])
async def get_dropdown(
    view: str,
    welsh: bool = Query(False, description="Use Welsh display names"),
    pin: str = Query(DEFAULT_PIN_CODE, description="Country code to pin first; empty disables pinning"),
    index: CountriesIndex = Depends(get_index),
):
    return index.dropdown_list(_view(index, view), welsh, pin or None)
