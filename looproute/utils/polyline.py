"""
Encoded polyline codec.

OpenRouteService returns route geometry as an encoded polyline: every point is
stored as the delta to the previous point, scaled by 10^precision, zigzag
sign-encoded and split into 5-bit chunks offset by 63 into printable ASCII.
Reference: https://developers.google.com/maps/documentation/utilities/polylinealgorithm
"""
from typing import Iterable, List, Tuple

from pydantic import ValidationError

from looproute.errors import PolylineDecodeError
from looproute.models.geo import GeoPoint

DEFAULT_PRECISION = 5


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Decode one signed delta starting at index, return (delta, next index)"""
    # The accumulator starts at 1 and every chunk is read minus one; the
    # continuation test becomes b >= 0x1f instead of chunk & 0x20.
    result = 1
    shift = 0
    while True:
        if index >= len(encoded):
            raise PolylineDecodeError(
                f"Truncated polyline: value starting before position {index} never terminates"
            )
        chunk = ord(encoded[index]) - 63
        if chunk < 0 or chunk > 0x3F:
            raise PolylineDecodeError(
                f"Invalid polyline character {encoded[index]!r} at position {index}"
            )
        index += 1
        b = chunk - 1
        result += b << shift
        shift += 5
        if b < 0x1F:
            break

    if result & 1:
        return ~(result >> 1), index
    return result >> 1, index


def decode(encoded: str, precision: int = DEFAULT_PRECISION) -> List[GeoPoint]:
    """Decode an encoded polyline into an ordered list of GeoPoints"""
    factor = 10**precision
    path: List[GeoPoint] = []

    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        delta, index = _decode_value(encoded, index)
        lat += delta
        if index >= len(encoded):
            raise PolylineDecodeError(
                f"Truncated polyline: latitude at point {len(path)} has no longitude"
            )
        delta, index = _decode_value(encoded, index)
        lng += delta

        try:
            path.append(GeoPoint(lat=lat / factor, lng=lng / factor))
        except ValidationError as exc:
            raise PolylineDecodeError(
                f"Polyline point {len(path)} out of range: ({lat / factor}, {lng / factor})"
            ) from exc

    return path


def _encode_value(value: int, out: List[str]) -> None:
    value = ~(value << 1) if value < 0 else (value << 1)
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))


def encode(points: Iterable[GeoPoint], precision: int = DEFAULT_PRECISION) -> str:
    """Encode GeoPoints into a polyline string, inverse of decode()"""
    factor = 10**precision
    encoded: List[str] = []
    prev_lat = 0
    prev_lng = 0

    for point in points:
        lat = round(point.lat * factor)
        lng = round(point.lng * factor)
        _encode_value(lat - prev_lat, encoded)
        _encode_value(lng - prev_lng, encoded)
        prev_lat = lat
        prev_lng = lng

    return "".join(encoded)
