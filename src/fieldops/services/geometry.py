"""GeoJSON polygon parsing and validation for zone geometry."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidGeometryType, InvalidRing, MalformedJSON

MIN_RING_POSITIONS = 4

Position = tuple[float, float]
Ring = tuple[Position, ...]


@dataclass(frozen=True, slots=True)
class PolygonGeometry:
    """A parsed GeoJSON Polygon. Positions keep GeoJSON (lon, lat) order."""

    rings: tuple[Ring, ...]

    @property
    def exterior(self) -> Ring:
        return self.rings[0]

    @property
    def holes(self) -> tuple[Ring, ...]:
        return self.rings[1:]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints too large for a float
        return False


def _parse_ring(index: int, ring: Any) -> Ring:
    if not isinstance(ring, list):
        raise InvalidRing(index, "ring must be an array of positions")
    if len(ring) < MIN_RING_POSITIONS:
        raise InvalidRing(
            index, f"ring has {len(ring)} positions, at least {MIN_RING_POSITIONS} required"
        )

    positions: list[Position] = []
    for position in ring:
        if not isinstance(position, list) or len(position) != 2:
            raise InvalidRing(index, f"position {position!r} must be a pair of numbers")
        x, y = position
        if not (_is_number(x) and _is_number(y)):
            raise InvalidRing(index, f"position {position!r} must be a pair of numbers")
        positions.append((float(x), float(y)))
    return tuple(positions)


def parse_polygon(geometry: Any) -> PolygonGeometry:
    """Parse GeoJSON text into a :class:`PolygonGeometry`.

    Raises:
        MalformedJSON: the text is not valid JSON.
        InvalidGeometryType: not a ``Polygon`` object with a non-empty ``coordinates`` array.
        InvalidRing: a ring has fewer than four positions or a non-numeric position.
    """
    if not isinstance(geometry, str):
        raise MalformedJSON("geometry must be a JSON string")
    try:
        parsed = json.loads(geometry)
    except json.JSONDecodeError as exc:
        raise MalformedJSON(exc.msg) from exc
    except (ValueError, RecursionError) as exc:
        # over-long integer literals and pathologically deep nesting
        raise MalformedJSON(str(exc) or type(exc).__name__) from exc

    if not isinstance(parsed, dict):
        raise InvalidGeometryType("expected a GeoJSON object")
    if parsed.get("type") != "Polygon":
        raise InvalidGeometryType(f"got type {parsed.get('type')!r}")

    coordinates = parsed.get("coordinates")
    if not isinstance(coordinates, list) or not coordinates:
        raise InvalidGeometryType("coordinates must be a non-empty array of rings")

    return PolygonGeometry(rings=tuple(_parse_ring(idx, ring) for idx, ring in enumerate(coordinates)))


def validate_polygon(geometry: Any) -> None:
    """Raise a ``GeometryError`` if ``geometry`` is not a valid GeoJSON polygon."""
    parse_polygon(geometry)
