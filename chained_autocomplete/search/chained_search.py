"""
Chained search controller.

Two-tier autocomplete state machine: the user first picks a city, then
searches addresses scoped to that city. Only the most recently issued
query may reach the observer ("last keystroke wins").
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from chained_autocomplete.clients.google_places import DetailsCallback, GooglePlacesClient
from chained_autocomplete.exceptions import RequestError
from chained_autocomplete.schemas.places import (
    ChainedSearchState,
    Place,
    PlaceDetails,
    PlaceType,
    SearchPhase,
)
from chained_autocomplete.utils.mappers import map_predictions


@dataclass
class AutocompleteObserver:
    """Observer hooks; any of them may be left unset."""

    on_places_found: Callable[[list[Place]], None] | None = None
    on_place_selected: Callable[[Place], None] | None = None
    on_chain_selection_closed: Callable[[Place], None] | None = None
    on_search_failed: Callable[[RequestError], None] | None = None


def compose_search_text(text: str, selected_city_text: str | None = None) -> str:
    """Effective query text: ``"{city}, {text}"`` once a city is chosen."""
    if selected_city_text is None:
        return text
    city = " ".join(selected_city_text.split())
    return f"{city}, {text}"


class ChainedSearchController:
    """City-then-address autocomplete over a GooglePlacesClient.

    All public methods must be called from the event loop thread; results
    are delivered through the client's execution context.
    """

    def __init__(
        self,
        client: GooglePlacesClient,
        observer: Any = None,
        city_place_type: PlaceType = PlaceType.ALL,
    ) -> None:
        self._client = client
        self.observer = observer or AutocompleteObserver()
        self.city_place_type = city_place_type
        self.last_error: RequestError | None = None
        self._state = ChainedSearchState()
        # Bumped on reset so responses issued before it can never match again
        self._epoch = 0

    @property
    def state(self) -> ChainedSearchState:
        return self._state

    @property
    def results(self) -> tuple[Place, ...]:
        return self._state.results

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _update(self, **changes: Any) -> None:
        self._state = self._state.model_copy(update=changes)

    def _notify(self, hook: str, *args: Any) -> bool:
        fn = getattr(self.observer, hook, None)
        if fn is None:
            return False
        fn(*args)
        return True

    def _phase_place_type(self, phase: SearchPhase) -> PlaceType:
        if phase is SearchPhase.ADDRESS:
            return PlaceType.ADDRESS
        return self.city_place_type

    def _is_current(self, epoch: int, generation: int, phase: SearchPhase) -> bool:
        return (
            epoch == self._epoch
            and generation == self._state.generation
            and phase is self._state.phase
        )

    def _handle_predictions(
        self,
        epoch: int,
        generation: int,
        phase: SearchPhase,
        city: str | None,
        payload: dict | None,
        error: RequestError | None,
    ) -> None:
        if not self._is_current(epoch, generation, phase):
            logger.debug(
                f"Discarding stale response: generation={generation}, "
                f"current={self._state.generation}"
            )
            return

        if error is not None:
            self.last_error = error
            self._update(results=())
            logger.warning(f"Search failed ({error.kind}): {error}")
            self._notify("on_places_found", [])
            self._notify("on_search_failed", error)
            return

        places = map_predictions(payload or {}, api_key=self._client.api_key, city_context=city)
        self.last_error = None
        self._update(results=tuple(places))
        logger.debug(f"Generation {generation}: {len(places)} places")
        self._notify("on_places_found", list(places))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_query_text_changed(self, text: str) -> asyncio.Task | None:
        """Start a search for ``text``.

        Returns the background task, or None when ``text`` is empty (the
        results are cleared and no request is made).
        """
        self._update(query_text=text)

        if not text:
            self._update(results=())
            self._notify("on_places_found", [])
            return None

        phase = self._state.phase
        city = self._state.selected_city_text if phase is SearchPhase.ADDRESS else None
        generation = self._state.generation + 1
        epoch = self._epoch
        self._update(generation=generation)

        def _on_complete(payload: dict | None, error: RequestError | None) -> None:
            self._handle_predictions(epoch, generation, phase, city, payload, error)

        return self._client.submit_predictions(
            compose_search_text(text, city),
            self._phase_place_type(phase),
            _on_complete,
        )

    def on_place_selected(self, place: Place) -> None:
        """Select a city (moves to the address phase) or close the chain."""
        if self._state.phase is SearchPhase.CITY:
            self._notify("on_place_selected", place)
            self._update(
                phase=SearchPhase.ADDRESS,
                selected_city_text=place.description,
                results=(),
                query_text="",
            )
            logger.info(f"City selected: {place.description!r}")
            return

        logger.info(f"Chained selection closed: {place.description!r}")
        self._notify("on_chain_selection_closed", place)

    def reset(self) -> None:
        """Back to the city phase with an empty input, whatever the chain depth."""
        self._epoch += 1
        self._state = ChainedSearchState()
        self.last_error = None
        self._notify("on_places_found", [])

    async def fetch_details(self, place: Place) -> PlaceDetails:
        """Resolve ``place`` into coordinates; errors propagate to the caller."""
        return await self._client.get_place_details(place)

    def request_details(self, place: Place, callback: DetailsCallback) -> asyncio.Task:
        """Like fetch_details, reporting ``callback(details, error)`` instead."""
        return self._client.request_place_details(place, callback)
