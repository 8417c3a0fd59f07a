"""
Google Places web-service client.

Wraps the two endpoints used by the chained autocomplete:
- GET /maps/api/place/autocomplete/json   (predictions)
- GET /maps/api/place/details/json        (coordinates + name)
"""

import asyncio
from typing import Callable

from loguru import logger

from chained_autocomplete.clients.request_executor import CompletionCallback, RequestExecutor
from chained_autocomplete.exceptions import MissingApiKeyError, RequestError
from chained_autocomplete.schemas.places import Place, PlaceDetails, PlaceType
from chained_autocomplete.utils.mappers import map_details

AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
PLACE_DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"

DetailsCallback = Callable[[PlaceDetails | None, RequestError | None], None]


def prediction_params(
    input_text: str,
    place_type: PlaceType,
    language: str,
    api_key: str | None,
) -> dict[str, str | None]:
    return {
        "input": input_text,
        "types": place_type.value,
        "language": language,
        "key": api_key,
    }


def details_params(place: Place) -> dict[str, str | None]:
    return {
        "placeid": place.id,
        "key": place.api_key,
    }


class GooglePlacesClient:
    """Async client for the Places autocomplete and details endpoints."""

    def __init__(
        self,
        api_key: str | None,
        language: str = "pt_BR",
        executor: RequestExecutor | None = None,
    ) -> None:
        if not api_key:
            logger.warning("GOOGLE_PLACES_API_KEY is not set; requests will be rejected upstream.")
        self.api_key = api_key
        self.language = language
        self.executor = executor or RequestExecutor()

    def submit_predictions(
        self,
        input_text: str,
        place_type: PlaceType,
        callback: CompletionCallback,
    ) -> asyncio.Task:
        """Issue a predictions request in the background."""
        logger.debug(f"Autocomplete: input={input_text!r}, types={place_type.value!r}")
        return self.executor.submit(
            AUTOCOMPLETE_URL,
            prediction_params(input_text, place_type, self.language, self.api_key),
            callback,
        )

    async def get_place_details(self, place: Place) -> PlaceDetails:
        """Place Details: resolve a place into its name and coordinates."""
        if not place.api_key:
            raise MissingApiKeyError(place.id)

        logger.debug(f"Place details: place_id={place.id!r}")
        payload = await self.executor.execute(PLACE_DETAILS_URL, details_params(place))
        return map_details(payload)

    def request_place_details(self, place: Place, callback: DetailsCallback) -> asyncio.Task:
        """Callback flavour of get_place_details, delivered on the executor's context."""

        async def _run() -> None:
            try:
                details = await self.get_place_details(place)
            except RequestError as e:
                logger.error(f"Place details failed for {place.id!r}: {e}")
                await self.executor.deliver(callback, None, e)
            else:
                await self.executor.deliver(callback, details, None)

        return self.executor.spawn(_run())

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.executor.close()
