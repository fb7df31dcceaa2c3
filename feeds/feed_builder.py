"""Atom and RSS feed assembly from an EventMap."""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, Dict, List, Optional

from events.event_view import EventView
from events.models import EventMap

logger = logging.getLogger(__name__)

ATOM_NS = 'http://www.w3.org/2005/Atom'
XML_NS = 'http://www.w3.org/XML/1998/namespace'

FEED_TITLE = 'Power Lifting America Events'
FEED_DESCRIPTION = 'Upcoming Power Lifting America meets'
DEFAULT_SITE_URL = 'http://gh.freemasen.com/plam-event'
CONTENT_LANG = 'en-us'
INDENT = '    '

PUBLISHED_FROM_CREATED = 'created'
PUBLISHED_FROM_DATE = 'date'
PUBLISHED_SOURCES = (PUBLISHED_FROM_CREATED, PUBLISHED_FROM_DATE)


@dataclass
class FeedEntry:
    """One feed entry computed from an EventRecord."""
    id: str
    title: str
    published: datetime
    link: str
    content: str
    categories: List[str]


class FeedBuilder:
    """
    Base class for feed builders.

    Subclasses render the entries computed here into a concrete XML
    vocabulary.
    """

    filename = ''

    def __init__(
        self,
        site_url: str = DEFAULT_SITE_URL,
        published_from: str = PUBLISHED_FROM_CREATED,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            site_url: Public base URL the feed files are served from
            published_from: Timestamp used as both published and updated
                for every entry, ``created`` or ``date``
            now: Clock used for the last-updated fallback of an empty feed
        """
        if published_from not in PUBLISHED_SOURCES:
            raise ValueError(
                f"published_from must be one of {PUBLISHED_SOURCES}, "
                f"got '{published_from}'"
            )
        self.site_url = site_url.rstrip('/')
        self.published_from = published_from
        self.now = now or (lambda: datetime.now(timezone.utc))

    @property
    def self_link(self) -> str:
        return f"{self.site_url}/{self.filename}"

    def build_entries(self, events: EventMap) -> List[FeedEntry]:
        return [self._build_entry(EventView(record)) for record in events.values()]

    def last_updated(self, entries: List[FeedEntry]) -> datetime:
        """Latest published timestamp, or now when there are no entries."""
        if not entries:
            return self.now()
        return max(entry.published for entry in entries)

    def build(self, events: EventMap) -> bytes:
        """
        Assemble the complete feed document.

        Args:
            events: Parsed events keyed by UID

        Returns:
            Indented UTF-8 XML document including the XML declaration
        """
        entries = self.build_entries(events)
        root = self._render(entries, self.last_updated(entries))
        ET.indent(root, space=INDENT)
        document = ET.tostring(root, encoding='utf-8', xml_declaration=True)
        logger.info(f"Built {self.filename} with {len(entries)} entries")
        return document

    def _build_entry(self, view: EventView) -> FeedEntry:
        if self.published_from == PUBLISHED_FROM_CREATED:
            published = view.created
        else:
            published = view.date

        return FeedEntry(
            id=view.record.url,
            title=view.summary,
            published=published,
            link=view.record.url,
            content=view.content,
            categories=[view.state, view.year_category]
        )

    def _render(self, entries: List[FeedEntry], updated: datetime) -> ET.Element:
        raise NotImplementedError


class AtomFeedBuilder(FeedBuilder):
    """Atom 1.0 feed."""

    filename = 'atom.xml'

    def _render(self, entries: List[FeedEntry], updated: datetime) -> ET.Element:
        feed = ET.Element('feed', {'xmlns': ATOM_NS})
        _text(feed, 'title', FEED_TITLE)
        ET.SubElement(feed, 'link', {'href': self.self_link, 'rel': 'self'})
        _text(feed, 'id', self.self_link)
        _text(feed, 'updated', updated.isoformat())

        for entry in entries:
            element = ET.SubElement(feed, 'entry')
            _text(element, 'id', entry.id)
            _text(element, 'title', entry.title)
            _text(element, 'published', entry.published.isoformat())
            _text(element, 'updated', entry.published.isoformat())
            ET.SubElement(
                element, 'link', {'href': entry.link, 'rel': 'alternate'}
            )
            _text(element, 'summary', entry.title, {'type': 'text'})
            _text(element, 'content', entry.content, {
                'type': 'html',
                f'{{{XML_NS}}}lang': CONTENT_LANG,
                f'{{{XML_NS}}}base': entry.link,
            })
            for term in entry.categories:
                ET.SubElement(element, 'category', {'term': term})

        return feed


class RssFeedBuilder(FeedBuilder):
    """RSS 2.0 feed with an Atom self link."""

    filename = 'rss.xml'

    def _render(self, entries: List[FeedEntry], updated: datetime) -> ET.Element:
        rss = ET.Element('rss', {'version': '2.0', 'xmlns:atom': ATOM_NS})
        channel = ET.SubElement(rss, 'channel')
        _text(channel, 'title', FEED_TITLE)
        _text(channel, 'link', self.site_url)
        _text(channel, 'description', FEED_DESCRIPTION)
        _text(channel, 'language', CONTENT_LANG)
        ET.SubElement(channel, 'atom:link', {
            'href': self.self_link,
            'rel': 'self',
            'type': 'application/rss+xml',
        })
        _text(channel, 'lastBuildDate', _rfc822(updated))

        for entry in entries:
            item = ET.SubElement(channel, 'item')
            _text(item, 'title', entry.title)
            _text(item, 'link', entry.link)
            _text(item, 'guid', entry.id, {'isPermaLink': 'true'})
            _text(item, 'pubDate', _rfc822(entry.published))
            _text(item, 'description', entry.content)
            for term in entry.categories:
                _text(item, 'category', term)

        return rss


FEED_BUILDERS: Dict[str, type] = {
    'atom': AtomFeedBuilder,
    'rss': RssFeedBuilder,
}


def _rfc822(value: datetime) -> str:
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _text(parent: ET.Element, tag: str, text: str, attrib: Optional[Dict[str, str]] = None) -> ET.Element:
    element = ET.SubElement(parent, tag, attrib or {})
    element.text = text
    return element
