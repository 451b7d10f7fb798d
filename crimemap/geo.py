"""
Location identifier cache for Crime Map.
"""

import hashlib
from typing import Callable, Dict, Optional

from crimemap.log import get_logger

logger = get_logger(__name__)


def location_key(raw: str) -> str:
    """
    Derive a deterministic identifier for a raw location string.

    Args:
        raw: Location text as printed in a report

    Returns:
        Identifier usable as a foreign key
    """
    return "geoloc::" + hashlib.sha256(raw.encode("utf-8")).hexdigest()[:16]


class GeoCache:
    """
    Caches location identifiers by raw location text.

    Coordinates are not resolved here, only an identifier is requested once
    per distinct raw string. Resolving the identifier to a position on a map
    happens later, outside of parsing.
    """

    def __init__(self, resolver: Optional[Callable[[str], str]] = None):
        """
        Args:
            resolver: Returns the identifier for a raw location, e.g. a store's
                insert-if-new operation. Defaults to location_key.
        """
        self._resolver = resolver or location_key
        self._locs: Dict[str, str] = {}

    def get(self, raw: str) -> str:
        """
        Get the identifier for a raw location, asking the resolver on a miss.
        """
        if raw not in self._locs:
            self._locs[raw] = self._resolver(raw)
            logger.debug(f"Cached location {raw!r} as {self._locs[raw]}")

        return self._locs[raw]

    def __len__(self) -> int:
        return len(self._locs)
