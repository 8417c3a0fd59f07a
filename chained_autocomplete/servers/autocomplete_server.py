"""
Chained Autocomplete MCP Server.

Self-contained FastMCP instance exposing the city-then-address search.
Mounted into the registry via tool_registry.py.
"""

from fastmcp import FastMCP

from chained_autocomplete.clients.google_places import GooglePlacesClient
from chained_autocomplete.clients.request_executor import RequestExecutor
from chained_autocomplete.config import settings
from chained_autocomplete.infrastructure.trace_decorator import traced
from chained_autocomplete.schemas.places import AutocompleteStateResponse, Place, PlaceDetails
from chained_autocomplete.search.chained_search import AutocompleteObserver, ChainedSearchController

autocomplete_mcp = FastMCP("autocomplete")

# ---------------------------------------------------------------------------
# Lazy controller singleton
# ---------------------------------------------------------------------------

_controller: ChainedSearchController | None = None
_closed_selection: Place | None = None


def _record_closed_selection(place: Place) -> None:
    global _closed_selection
    _closed_selection = place


def _get_controller() -> ChainedSearchController:
    global _controller
    if _controller is None:
        client = GooglePlacesClient(
            api_key=settings.GOOGLE_PLACES_API_KEY,
            language=settings.AUTOCOMPLETE_LANGUAGE,
            executor=RequestExecutor(timeout=settings.REQUEST_TIMEOUT_SECONDS),
        )
        _controller = ChainedSearchController(
            client,
            observer=AutocompleteObserver(on_chain_selection_closed=_record_closed_selection),
            city_place_type=settings.AUTOCOMPLETE_CITY_PLACE_TYPE,
        )
    return _controller


def _find_place(controller: ChainedSearchController, place_id: str) -> Place:
    for place in controller.results:
        if place.id == place_id:
            return place
    raise ValueError(f"Place {place_id!r} is not among the current results.")


def _state_response(controller: ChainedSearchController) -> AutocompleteStateResponse:
    state = controller.state
    error = controller.last_error
    return AutocompleteStateResponse(
        phase=state.phase,
        selected_city=state.selected_city_text,
        count=len(state.results),
        places=list(state.results),
        closed_selection=_closed_selection,
        error=f"{error.kind}: {error}" if error else None,
    )


# ---------------------------------------------------------------------------
# MCP Tools
# ---------------------------------------------------------------------------


@autocomplete_mcp.tool(
    title="Search Places",
    description=(
        "Type text into the chained location search. In the city phase this "
        "suggests cities and regions; after a city is selected it suggests "
        "addresses inside that city. An empty text clears the suggestions."
    ),
    tags={"places", "autocomplete", "google"},
    annotations={
        "title": "Search Places",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
@traced(span_name="mcp.tool.search_places", handler_type="tool")
async def search_places(text: str) -> AutocompleteStateResponse:
    """Run one autocomplete query in the current phase.

    Args:
        text: Text typed by the user (e.g. "Paris" or "12 Rue de Rivoli").
    """
    controller = _get_controller()
    task = controller.on_query_text_changed(text)
    if task is not None:
        await task
    return _state_response(controller)


@autocomplete_mcp.tool(
    title="Select Place",
    description=(
        "Select one of the current suggestions by its place ID. Selecting a "
        "city switches to address search within that city; selecting an "
        "address completes the search and reports it as the closed selection."
    ),
    tags={"places", "autocomplete", "selection"},
    annotations={
        "title": "Select Place",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": False,
        "openWorldHint": False,
    },
)
@traced(span_name="mcp.tool.select_place", handler_type="tool")
async def select_place(place_id: str) -> AutocompleteStateResponse:
    """Select a suggestion from the latest results.

    Args:
        place_id: The place ID of a suggestion returned by search_places.
    """
    controller = _get_controller()
    controller.on_place_selected(_find_place(controller, place_id))
    return _state_response(controller)


@autocomplete_mcp.tool(
    title="Reset Search",
    description="Clear the suggestions and go back to the city search phase.",
    tags={"places", "autocomplete"},
    annotations={
        "title": "Reset Search",
        "readOnlyHint": False,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
@traced(span_name="mcp.tool.reset_search", handler_type="tool")
async def reset_search() -> AutocompleteStateResponse:
    """Reset the chained search to its initial city phase."""
    global _closed_selection
    controller = _get_controller()
    controller.reset()
    _closed_selection = None
    return _state_response(controller)


@autocomplete_mcp.tool(
    title="Get Search State",
    description="Return the current phase, selected city and suggestions.",
    tags={"places", "autocomplete"},
    annotations={
        "title": "Get Search State",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False,
    },
)
async def get_search_state() -> AutocompleteStateResponse:
    return _state_response(_get_controller())


@autocomplete_mcp.tool(
    title="Get Place Details",
    description=(
        "Resolve one of the current suggestions into its name and latitude/"
        "longitude coordinates using the Google Place Details API."
    ),
    tags={"places", "details", "google"},
    annotations={
        "title": "Get Place Details",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
@traced(span_name="mcp.tool.get_place_details", handler_type="tool")
async def get_place_details(place_id: str) -> PlaceDetails:
    """Get the coordinates of a suggestion.

    Args:
        place_id: The place ID of a suggestion returned by search_places.
    """
    controller = _get_controller()
    return await controller.fetch_details(_find_place(controller, place_id))
