"""Enums for station and wind schemas."""

from enum import Enum


class PayloadShape(str, Enum):
    """Where the list of station reports lives inside an upstream payload."""

    NESTED = "nested"  # {"entries": {"entry": [...]}}
    BARE = "bare"  # [...]


class PayloadFormat(str, Enum):
    """Wire format of an upstream payload."""

    JSON = "json"
    XML = "xml"


class CoordinateFormat(str, Enum):
    """How a feed publishes station coordinates."""

    DMS = "dms"  # degrees + minutes + seconds, one field each
    DECIMAL = "decimal"


class WindMode(str, Enum):
    """Strategy used to answer a nearest-station wind request."""

    HOURLY = "hourly"  # nearest-station endpoint + hourly bucket fallback
    DIRECTORY = "directory"  # merged feeds ranked by distance


class NameMatch(str, Enum):
    """Station name comparison used when searching an hourly bucket."""

    EXACT = "exact"
    FIRST_TOKEN = "first_token"


class Outcome(str, Enum):
    """Terminal non-success outcomes returned instead of a wind observation.

    The value is the code emitted in the ``{"error": ...}`` response payload.
    """

    OUT_OF_RANGE = "OOR"
    NO_DATA = "NO_DATA"
    NO_MATCH = "NO_MATCH"
    PARSE_FAILURE = "P1_PARSE"

    @property
    def is_failure(self) -> bool:
        """True when the outcome means upstream data could not be understood."""
        return self is Outcome.PARSE_FAILURE
