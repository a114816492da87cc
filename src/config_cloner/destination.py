import logging
from urllib.parse import urlsplit, unquote

from config_cloner.constants import Constants
from config_cloner.entity_kinds import EntityKind
from config_cloner.exceptions import ValidationError

logger = logging.getLogger(__name__)

valid_schemes = ("http", "https")


class Destination:
    """An entity on one Jenkins instance: the normalized endpoint url and the entity path."""
    __slots__ = ("_endpoint", "_entity")

    def __init__(self, endpoint: str, entity: str):
        object.__setattr__(self, "_endpoint", normalize_endpoint(endpoint))
        object.__setattr__(self, "_entity", entity)

    def __setattr__(self, key, value):
        raise AttributeError(f"{self.__class__.__name__} is immutable")

    @property
    def endpoint(self):
        return self._endpoint

    @property
    def entity(self):
        return self._entity

    def __eq__(self, other):
        if not isinstance(other, Destination):
            return NotImplemented
        return self._endpoint == other._endpoint and self._entity == other._entity

    def __hash__(self):
        return hash((self._endpoint, self._entity))

    def __repr__(self):
        return f"Destination({self._endpoint!r}, {self._entity!r})"

    def __str__(self):
        return f"{self._endpoint}{Constants.DOUBLE_COLON}{self._entity}"


def normalize_endpoint(url: str) -> str:
    return url.rstrip(Constants.SLASH_SIGN) + Constants.SLASH_SIGN


def _split_url(location: str):
    try:
        parts = urlsplit(location)
    except ValueError:
        raise ValidationError(f"{location} is not a valid url")
    if parts.scheme not in valid_schemes or not parts.hostname:
        raise ValidationError(f"{location} is not a valid url")
    return parts


# the entity is the segment following the marker; nested kinds keep consuming /<marker>/<segment> pairs
def _split_marker(segments: list, kind: EntityKind):
    for index, segment in enumerate(segments):
        if segment != kind.marker or index + 1 >= len(segments) or not segments[index + 1]:
            continue
        names = []
        cursor = index
        while cursor + 1 < len(segments) and segments[cursor] == kind.marker and segments[cursor + 1]:
            names.append(unquote(segments[cursor + 1]))
            cursor += 2
            if not kind.nested:
                break
        return segments[:index], Constants.SLASH_SIGN.join(names)
    return segments, None


# ipv6 hosts like [::1] contain the separator too
def _find_separator(location: str) -> int:
    start = location.find("://")
    start = start + 3 if start >= 0 else 0
    if location.startswith("[", start):
        start = max(location.find("]", start), start)
    return location.find(Constants.DOUBLE_COLON, start)


def parse_destination(location: str, kind: EntityKind, default_entity: str = None) -> Destination:
    """Parse one location in either ``<url>/<marker>/<name>`` or ``<url>::<name>`` notation.

    A location naming only a server uses ``default_entity``; without one it is invalid.
    """
    if not location:
        raise ValidationError("location must not be empty")

    separator = _find_separator(location)
    if separator >= 0:
        url, entity = location[:separator], location[separator + len(Constants.DOUBLE_COLON):]
        parts = _split_url(url)
        if not entity:
            raise ValidationError(f"{location} has no {kind.kind_name} name after {Constants.DOUBLE_COLON}")
        return Destination(f"{parts.scheme}://{parts.netloc}{parts.path}", entity)

    parts = _split_url(location)
    base_segments, entity = _split_marker(parts.path.split(Constants.SLASH_SIGN), kind)
    if entity is None:
        entity = default_entity
    if not entity:
        raise ValidationError(f"{location} does not identify a {kind.kind_name}; use "
                              f"<url>/{kind.marker}/<name> or <url>{Constants.DOUBLE_COLON}<name>")
    return Destination(f"{parts.scheme}://{parts.netloc}{Constants.SLASH_SIGN.join(base_segments)}", entity)


def parse_destinations(locations, kind: EntityKind):
    """Parse a source location followed by one or more destination locations."""
    locations = list(locations or [])
    if len(locations) < 2:
        raise ValidationError(f"at least a source and a destination are required; got {locations}")
    duplicates = sorted({location for location in locations if locations.count(location) > 1})
    if duplicates:
        raise ValidationError(f"locations must be unique; duplicated {', '.join(duplicates)}")

    source = parse_destination(locations[0], kind)
    destinations = [parse_destination(location, kind, default_entity=source.entity) for location in locations[1:]]
    logger.info(f"{kind.kind_name} source {source}; destinations {[str(dest) for dest in destinations]}")
    return source, destinations
