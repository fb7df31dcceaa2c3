"""Lenient line-based ICS parser producing an EventMap."""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from events.models import EventMap, EventRecord

logger = logging.getLogger(__name__)

EVENT_BOUNDARY = 'END:VEVENT'
DATE_VALUE_PREFIX = 'VALUE=DATE:'

# UTF-8 non-breaking space decoded as Latin-1 by the source feed
_MISENCODED_NBSP = '\u00c2\u00a0'
_NBSP = '\u00a0'

# ICS key -> EventRecord field
KEY_FIELDS: Dict[str, str] = {
    'UID': 'uid',
    'END': 'end',
    'URL': 'url',
    'PRODID': 'prodid',
    'TZID': 'tzid',
    'LOCATION': 'location',
    'BEGIN': 'begin',
    'DTEND': 'dtend',
    'DTSTAMP': 'dtstamp',
    'SUMMARY': 'summary',
    'X-WR-CALDESC': 'x_wr_caldesc',
    'TZOFFSETTO': 'tzoffsetto',
    'X-ROBOTS-TAG': 'x_robots_tag',
    'X-Robots-Tag': 'x_robots_tag',
    'X-PUBLISHED-TTL': 'x_published_ttl',
    'CATEGORIES': 'categories',
    'TZOFFSETFROM': 'tzoffsetfrom',
    'DTSTART': 'dtstart',
    'LAST-MODIFIED': 'last_modified',
    'ORGANIZER': 'organizer',
    'TZNAME': 'tzname',
    'REFRESH-INTERVAL': 'refresh_interval',
    'CALSCALE': 'calscale',
    'ATTACH': 'attach',
    'METHOD': 'method',
    'X-WR-CALNAME': 'x_wr_calname',
    'CREATED': 'created',
    'X-ORIGINAL-URL': 'x_original_url',
    'VERSION': 'version',
    'DESCRIPTION': 'description',
}


def split_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split an ICS line into key and value.

    ``KEY;PARAM:VALUE`` splits at the first ``;`` (the value keeps
    ``PARAM:VALUE``), otherwise ``KEY:VALUE`` splits at the first ``:``.

    Args:
        line: Single line of ICS text

    Returns:
        Tuple of (key, value), or None if the line has neither delimiter
    """
    for delimiter in (';', ':'):
        if delimiter in line:
            key, value = line.split(delimiter, 1)
            return key, value
    return None


def clean_value(value: str) -> str:
    """Strip the leaked DATE parameter and normalize non-breaking spaces."""
    if value.startswith(DATE_VALUE_PREFIX):
        value = value[len(DATE_VALUE_PREFIX):]
    return value.replace(_MISENCODED_NBSP, ' ').replace(_NBSP, ' ')


class EventBuilder:
    """Accumulates key/value pairs into the in-progress event."""

    def __init__(self):
        self.events: EventMap = {}
        self._current: Dict[str, str] = {}

    def update(self, key: str, value: str) -> None:
        """
        Set the field for a recognized key on the in-progress event.

        A later value for the same key replaces the earlier one. Unknown
        keys are logged and dropped.
        """
        field = KEY_FIELDS.get(key)
        if field is None:
            logger.warning(f"Dropping unknown key: {key}: {value}")
            return
        self._current[field] = clean_value(value)

    def finalize(self) -> EventRecord:
        """
        Close the in-progress event and insert it into the event map.

        Records are keyed by UID; a repeated UID replaces the earlier
        record. A block without UID is stored under the empty string.
        """
        record = EventRecord(**self._current)
        self._current = {}
        self.events[record.uid] = record
        return record


def parse_calendar(text: str) -> EventMap:
    """
    Parse ICS text into a mapping of UID to EventRecord.

    Args:
        text: Raw ICS document

    Returns:
        EventMap of all finalized events
    """
    builder = EventBuilder()
    dropped = _feed_lines(builder, split_lines(text))

    logger.info(
        f"Parsed {len(builder.events)} events "
        f"({dropped} unparseable lines dropped)"
    )
    return builder.events


def split_lines(text: str) -> List[str]:
    """Split on LF or CRLF only; other Unicode line breaks stay in the value."""
    lines = text.split('\n')
    if lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


def _feed_lines(builder: EventBuilder, lines: Iterable[str]) -> int:
    dropped = 0
    for line in lines:
        if line.startswith(EVENT_BOUNDARY):
            builder.finalize()
            continue

        pair = split_line(line)
        if pair is None:
            logger.warning(f"Dropping line: '{line}'")
            dropped += 1
            continue

        builder.update(*pair)
    return dropped
