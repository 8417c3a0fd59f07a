"""Pydantic models for places, details and the chained search state."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PlaceType(str, Enum):
    """Values accepted by the ``types`` parameter of the predictions endpoint."""

    ALL = ""
    GEOCODE = "geocode"
    ADDRESS = "address"
    ESTABLISHMENT = "establishment"
    REGIONS = "(regions)"
    CITIES = "(cities)"


class SearchPhase(str, Enum):
    CITY = "city"
    ADDRESS = "address"


class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider place identifier (place_id).")
    description: str = Field(description="Human-readable label returned by the provider.")
    api_key: str | None = Field(None, description="API key needed to fetch details for this place.")
    city_context: str | None = Field(
        None,
        description="City text the address search was scoped to when this place was found.",
    )

    def __str__(self) -> str:
        return self.description


class PlaceDetails(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name of the place.")
    latitude: float = Field(description="WGS-84 latitude in decimal degrees.")
    longitude: float = Field(description="WGS-84 longitude in decimal degrees.")
    raw: dict[str, Any] = Field(default_factory=dict, description="Complete details payload.")

    def __str__(self) -> str:
        return f"PlaceDetails: {self.name} ({self.latitude}, {self.longitude})"


class ChainedSearchState(BaseModel):
    """Immutable snapshot of the controller's working state."""

    model_config = ConfigDict(frozen=True)

    phase: SearchPhase = Field(SearchPhase.CITY, description="Active search phase.")
    selected_city_text: str | None = Field(
        None, description="Description of the chosen city (address phase only)."
    )
    results: tuple[Place, ...] = Field(default=(), description="Latest completed result set.")
    generation: int = Field(0, description="Generation of the most recently issued query.")
    query_text: str = Field("", description="Text currently in the input surface.")


class AutocompleteStateResponse(BaseModel):
    phase: SearchPhase = Field(description="Active search phase.")
    selected_city: str | None = Field(None, description="City the address search is scoped to.")
    count: int = Field(description="Number of candidate places.")
    places: list[Place] = Field(description="Candidate places in provider order.")
    closed_selection: Place | None = Field(
        None, description="Final address chosen when the chain was closed."
    )
    error: str | None = Field(None, description="Classified error of the last search, if any.")
