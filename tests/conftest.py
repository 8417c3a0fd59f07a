"""Shared fixtures: a mocked Places API and a recording observer."""

from typing import Callable

import httpx
import pytest

from chained_autocomplete.clients.google_places import GooglePlacesClient
from chained_autocomplete.clients.request_executor import RequestExecutor


def predictions_payload(*pairs: tuple[str, str], status: str = "OK") -> dict:
    return {
        "status": status,
        "predictions": [{"place_id": pid, "description": desc} for pid, desc in pairs],
    }


def details_payload(name: str = "Paris", lat: float = 48.8566, lng: float = 2.3522) -> dict:
    return {
        "status": "OK",
        "result": {
            "name": name,
            "geometry": {"location": {"lat": lat, "lng": lng}},
            "formatted_address": f"{name}, France",
        },
    }


class RecordingObserver:
    def __init__(self) -> None:
        self.found: list[list] = []
        self.selected: list = []
        self.closed: list = []
        self.failures: list = []

    def on_places_found(self, places) -> None:
        self.found.append(places)

    def on_place_selected(self, place) -> None:
        self.selected.append(place)

    def on_chain_selection_closed(self, place) -> None:
        self.closed.append(place)

    def on_search_failed(self, error) -> None:
        self.failures.append(error)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def make_client(recorded_requests) -> Callable[..., GooglePlacesClient]:
    """Factory building a GooglePlacesClient whose HTTP calls go to ``handler``."""

    def _make(handler, api_key: str | None = "test-key", language: str = "pt_BR", context=None):
        async def _recording_handler(request: httpx.Request):
            recorded_requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        executor = RequestExecutor(
            context=context,
            transport=httpx.MockTransport(_recording_handler),
        )
        return GooglePlacesClient(api_key=api_key, language=language, executor=executor)

    return _make
