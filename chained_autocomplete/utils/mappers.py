"""Mapping helpers from raw Places API payloads to schema models."""

from typing import Any

from loguru import logger

from chained_autocomplete.exceptions import MalformedDetailsError, MalformedPredictionError
from chained_autocomplete.schemas.places import Place, PlaceDetails


def map_prediction(
    prediction: Any,
    index: int,
    api_key: str | None = None,
    city_context: str | None = None,
) -> Place:
    """Map one prediction record, raising MalformedPredictionError if unusable."""
    if not isinstance(prediction, dict):
        raise MalformedPredictionError(index, "record is not an object")
    place_id = prediction.get("place_id")
    description = prediction.get("description")
    if not isinstance(place_id, str):
        raise MalformedPredictionError(index, "missing 'place_id'")
    if not isinstance(description, str):
        raise MalformedPredictionError(index, "missing 'description'")
    return Place(
        id=place_id,
        description=description,
        api_key=api_key,
        city_context=city_context,
    )


def map_predictions(
    payload: dict,
    api_key: str | None = None,
    city_context: str | None = None,
) -> list[Place]:
    """Map the ``predictions`` array, skipping malformed records."""
    predictions = payload.get("predictions")
    if not isinstance(predictions, list):
        return []

    places: list[Place] = []
    for index, prediction in enumerate(predictions):
        try:
            places.append(map_prediction(prediction, index, api_key, city_context))
        except MalformedPredictionError as e:
            logger.warning(f"Skipping prediction: {e}")
    return places


def _require(container: Any, key: str, path: str) -> Any:
    if not isinstance(container, dict) or key not in container:
        raise MalformedDetailsError(path)
    return container[key]


def _coordinate(location: dict, key: str) -> float:
    value = _require(location, key, f"result.geometry.location.{key}")
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDetailsError(f"result.geometry.location.{key}")
    return float(value)


def map_details(payload: dict) -> PlaceDetails:
    """Map a details payload. Every field is required."""
    result = _require(payload, "result", "result")
    name = _require(result, "name", "result.name")
    if not isinstance(name, str):
        raise MalformedDetailsError("result.name")
    geometry = _require(result, "geometry", "result.geometry")
    location = _require(geometry, "location", "result.geometry.location")

    return PlaceDetails(
        name=name,
        latitude=_coordinate(location, "lat"),
        longitude=_coordinate(location, "lng"),
        raw=payload,
    )
