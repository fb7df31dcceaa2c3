"""Computed, read-only view over a finalized EventRecord."""
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dateutil.parser import isoparse

from events.address import UNKNOWN_STATE, decompose_address, fallback_address
from events.models import Address, EventRecord

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent / 'templates' / 'event.html'
HTML_TEMPLATE = TEMPLATE_PATH.read_text(encoding='utf-8')

PRECISION_SECOND = 'second'
PRECISION_HOUR = 'hour'

_TIMESTAMP_PATTERNS = {
    PRECISION_SECOND: re.compile(r'(\d{4})(\d{2})(\d{2})T(\d{2})(\d{2})(\d{2})Z?'),
    PRECISION_HOUR: re.compile(r'(\d{4})(\d{2})(\d{2})T(\d{2})(?:\d{4})?Z?'),
}

# Template placeholder, e.g. {{city}}
_PLACEHOLDER = re.compile(r'\{\{\w+\}\}')


class InvalidTimestampError(ValueError):
    """Raised when a compact ICS timestamp cannot be parsed."""


def ics_timestamp_to_rfc3339(value: str, precision: str = PRECISION_SECOND) -> str:
    """
    Rewrite a compact ICS timestamp as an RFC 3339 instant.

    Characters are read at fixed offsets: ``YYYYMMDDTHHMMSS``, optionally
    followed by ``Z``. Position 8 must be the ``T`` separator.

    Args:
        value: Compact timestamp, e.g. ``20240615T140000Z``
        precision: ``second`` reads minutes and seconds, ``hour`` fixes
            them at ``:00:00``

    Returns:
        String such as ``2024-06-15T14:00:00.0Z``

    Raises:
        InvalidTimestampError: If the value does not have that shape or a
            time field is out of range
    """
    pattern = _TIMESTAMP_PATTERNS.get(precision)
    if pattern is None:
        raise ValueError(f"Unknown timestamp precision: {precision}")

    match = pattern.fullmatch(value) if value.isascii() else None
    if match is None:
        raise InvalidTimestampError(f"Malformed timestamp: '{value}'")

    year, month, day, hour = match.group(1, 2, 3, 4)
    if precision == PRECISION_SECOND:
        minute, second = match.group(5, 6)
    else:
        minute, second = '00', '00'

    if int(hour) > 23 or int(minute) > 59 or int(second) > 59:
        raise InvalidTimestampError(f"Time out of range: '{value}'")

    return f"{year}-{month}-{day}T{hour}:{minute}:{second}.0Z"


def parse_ics_timestamp(value: str, precision: str = PRECISION_SECOND) -> datetime:
    """
    Parse a compact ICS timestamp into an aware UTC datetime.

    Raises:
        InvalidTimestampError: If the value is malformed
    """
    rfc3339 = ics_timestamp_to_rfc3339(value, precision)
    try:
        parsed = isoparse(rfc3339)
    except ValueError as e:
        raise InvalidTimestampError(f"Invalid timestamp '{value}': {e}") from e
    return parsed.astimezone(timezone.utc)


class EventView:
    """Display values derived from an EventRecord, computed on demand."""

    def __init__(self, record: EventRecord):
        self.record = record

    @property
    def date(self) -> datetime:
        """Primary event timestamp (DTSTAMP)."""
        return parse_ics_timestamp(self.record.dtstamp)

    @property
    def created(self) -> datetime:
        return parse_ics_timestamp(self.record.created)

    @property
    def address(self) -> Optional[Address]:
        return decompose_address(self.record.location)

    @property
    def display_address(self) -> Address:
        """Decomposed address, or the raw location when it does not decompose."""
        address = self.address
        if address is None:
            return fallback_address(self.record.location)
        return address

    @property
    def state(self) -> str:
        address = self.address
        if address is None:
            logger.warning(f"Invalid address: '{self.record.location}'")
            return UNKNOWN_STATE
        return address.state

    @property
    def year_category(self) -> str:
        return f"year-{self.date.year}"

    @property
    def summary(self) -> str:
        local = self.date.astimezone()
        return (
            f"{local.year}-{local.month}-{local.day} "
            f"({self.state}) {self.record.summary}"
        )

    @property
    def content(self) -> str:
        """Event rendered into the HTML template."""
        address = self.display_address
        date = self.date
        replacements = {
            '{{event_name}}': self.record.summary,
            '{{event_date}}': f"{date.year:04d}-{date.month:02d}-{date.day:02d}",
            '{{address1}}': _line(address.addr1),
            '{{address2}}': _line(address.addr2),
            '{{address3}}': _line(address.addr3),
            '{{city}}': address.city,
            '{{state}}': address.state,
            '{{zip}}': address.zip,
        }

        return _PLACEHOLDER.sub(
            lambda match: replacements.get(match.group(0), match.group(0)),
            HTML_TEMPLATE
        )


def _line(value: str) -> str:
    return f"{value}<br />" if value else ''
