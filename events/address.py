"""Decomposition of ICS LOCATION text into structured postal fields."""
import logging
from typing import Optional

from events.models import Address

logger = logging.getLogger(__name__)

# Fields are separated by the ICS-escaped comma only; a bare comma is text.
SEGMENT_SEPARATOR = '\\,'

UNKNOWN_STATE = 'UN'

# Reverse position (rightmost segment first) -> Address field
_POSITIONS = ('country', 'zip', 'state', 'city', 'addr3', 'addr2', 'addr1')


def decompose_address(location: str) -> Optional[Address]:
    """
    Decompose a backslash-comma separated location into an Address.

    Segments are read right to left: country, postal code, state, city,
    then up to three address lines. Anything left of the first address
    line is ignored.

    Args:
        location: Raw LOCATION value, e.g.
            ``"123 Main St\\, \\, \\, Anytown\\, CA\\, 12345\\, USA"``

    Returns:
        Address, or None if the postal code or state segment is invalid
    """
    values = {}
    segments = location.split(SEGMENT_SEPARATOR)

    for position, segment in enumerate(reversed(segments)):
        if position >= len(_POSITIONS):
            break
        segment = segment.strip('\\').strip()
        field = _POSITIONS[position]

        if field == 'zip' and not _is_valid_zip(segment, location):
            return None
        if field == 'state' and not _is_valid_state(segment):
            logger.warning(f"Invalid state '{segment}' in location: {location}")
            return None

        values[field] = segment

    return Address(**values)


def fallback_address(location: str) -> Address:
    """
    Unstructured stand-in used when decomposition fails.

    The raw location, unescaped, becomes the only address line and the
    state is reported as unknown.
    """
    raw = location.replace(SEGMENT_SEPARATOR, ',').strip()
    return Address(addr1=raw, state=UNKNOWN_STATE)


def _is_valid_zip(segment: str, location: str) -> bool:
    for char in segment:
        if not ('0' <= char <= '9'):
            logger.warning(
                f"Invalid postal code '{segment}' (non digit '{char}') "
                f"in location: {location}"
            )
            return False
    return True


def _is_valid_state(segment: str) -> bool:
    return len(segment) == 2 and all('A' <= char <= 'Z' for char in segment)
