"""Shared fixtures for calendar feed tests."""
import pytest

from events.models import EventRecord


SAMPLE_ICS = r"""BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Power Lifting America - ECPv6.3.1//NONSGML v1.0//EN
CALSCALE:GREGORIAN
METHOD:PUBLISH
X-WR-CALNAME:Power Lifting America
X-ORIGINAL-URL:https://powerlifting-america.com
X-WR-CALDESC:Events for Power Lifting America
REFRESH-INTERVAL;VALUE=DURATION:PT1H
X-Robots-Tag:noindex
X-PUBLISHED-TTL:PT1H
BEGIN:VTIMEZONE
TZID:America/Chicago
BEGIN:STANDARD
TZOFFSETFROM:-0500
TZOFFSETTO:-0600
TZNAME:CST
DTSTART:20231105T070000
END:STANDARD
END:VTIMEZONE
BEGIN:VEVENT
DTSTART;TZID=America/Chicago:20240615T080000
DTEND;TZID=America/Chicago:20240615T170000
DTSTAMP:20240601T120000Z
CREATED:20240301T150000Z
LAST-MODIFIED:20240510T093000Z
UID:10001-1718438400-1718470800@powerlifting-america.com
SUMMARY:Summer Slam
DESCRIPTION:Annual summer meet.
 Weigh-ins start the day before
URL:https://powerlifting-america.com/event/summer-slam/
LOCATION:Iron Gym\, 123 Main St\, \, \, Anytown\, CA\, 12345\, USA
CATEGORIES:Meets
ORGANIZER;CN="Jane Doe":MAILTO:jane@example.com
END:VEVENT
BEGIN:VEVENT
DTSTART;VALUE=DATE:20240720
DTEND;VALUE=DATE:20240721
DTSTAMP:20240701T090000Z
CREATED:20240405T100000Z
UID:10002-1721433600-1721519999@powerlifting-america.com
SUMMARY:Fall Classic
URL:https://powerlifting-america.com/event/fall-classic/
LOCATION:Community Center\, somewhere\, 98765\, USA
X-ALT-DESC;FMTTYPE=text/html:<p>ignored</p>
END:VEVENT
END:VCALENDAR
"""

FIRST_UID = '10001-1718438400-1718470800@powerlifting-america.com'
SECOND_UID = '10002-1721433600-1721519999@powerlifting-america.com'


@pytest.fixture
def sample_ics():
    """ICS export with two events and calendar header fields."""
    return SAMPLE_ICS


@pytest.fixture
def sample_record():
    """Finalized event with a valid address."""
    return EventRecord(
        uid='evt-1@example.com',
        url='https://example.com/event/evt-1/',
        location=r'123 Main St\, \, \, Anytown\, CA\, 12345\, USA',
        summary='Spring Open',
        dtstart='20240615T080000',
        dtend='20240615T170000',
        dtstamp='20240615T140000Z',
        created='20240301T150000Z'
    )


@pytest.fixture
def invalid_address_record():
    """Finalized event whose location does not decompose."""
    return EventRecord(
        uid='evt-2@example.com',
        url='https://example.com/event/evt-2/',
        location=r'Community Center\, somewhere\, 98765\, USA',
        summary='Fall Classic',
        dtstamp='20250110T090000Z',
        created='20241201T100000Z'
    )
