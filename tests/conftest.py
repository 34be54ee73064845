from collections import defaultdict

import pytest

from countrieslib.engine.countries_index import CountriesIndex

UNITED_KINGDOM = {
    "countryCode": "GB",
    "countryNameSlug": "united-kingdom",
    "addressCountryFlag": True,
    "countryOfBirthFlag": True,
    "displayName": "United Kingdom",
    "displayNameWelsh": "Welsh United Kingdom",
    "channel": "ONLINE",
    "contentType": 1,
    "status": "ACTIVE",
}
FOO = {
    "countryCode": "AA",
    "countryNameSlug": "foo",
    "addressCountryFlag": True,
    "countryOfBirthFlag": False,
    "displayName": "Foo",
    "displayNameWelsh": "Welsh Foo",
    "channel": "ONLINE",
    "contentType": 2,
    "status": "INACTIVE",
    "applicationProcessing": {"stopNewApplications": False},
}
BAR = {
    "countryCode": "BA",
    "countryNameSlug": "bar",
    "addressCountryFlag": False,
    "countryOfBirthFlag": True,
    "displayName": "Bar",
    "displayNameWelsh": "Welsh Bar",
    "channel": "NA",
    "contentType": 7,
    "status": "INACTIVE",
    "applicationProcessing": {"stopNewApplications": True},
}
NARNIA = {
    "countryCode": "NA",
    "countryNameSlug": "narnia",
    "addressCountryFlag": None,
    "countryOfBirthFlag": None,
    "displayName": "Narnia",
    "displayNameWelsh": "Welsh Narnia",
    "channel": "ONLINE",
    "contentType": 7,
    "status": "INACTIVE",
}


class FakeSource:
    """In-memory stand-in for the cached model: records calls, emits on demand."""

    def __init__(self):
        self.handlers = defaultdict(list)
        self.started = 0
        self.stopped = 0

    def on(self, event, handler):
        self.handlers[event].append(handler)

    def emit(self, event, *args):
        for handler in self.handlers[event]:
            handler(*args)

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1


@pytest.fixture
def snapshot():
    return [FOO, UNITED_KINGDOM, BAR, NARNIA]


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def index(source, snapshot):
    idx = CountriesIndex(source=source)
    source.emit("change", snapshot)
    return idx
