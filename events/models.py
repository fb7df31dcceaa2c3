"""Data models for calendar events."""
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EventRecord:
    """Finalized VEVENT block, one field per recognized ICS key."""
    uid: str = ''
    url: str = ''
    location: str = ''
    summary: str = ''
    description: str = ''
    dtstart: str = ''
    dtend: str = ''
    dtstamp: str = ''
    created: str = ''
    last_modified: str = ''
    categories: str = ''
    attach: str = ''
    end: Optional[str] = None
    begin: Optional[str] = None
    prodid: Optional[str] = None
    tzid: Optional[str] = None
    tzoffsetto: Optional[str] = None
    tzoffsetfrom: Optional[str] = None
    tzname: Optional[str] = None
    x_wr_caldesc: Optional[str] = None
    x_wr_calname: Optional[str] = None
    x_robots_tag: Optional[str] = None
    x_published_ttl: Optional[str] = None
    x_original_url: Optional[str] = None
    organizer: Optional[str] = None
    refresh_interval: Optional[str] = None
    calscale: Optional[str] = None
    method: Optional[str] = None
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventRecord':
        """
        Build a record from a snapshot entry.

        Keys that are not record fields are ignored so older snapshots
        keep loading.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


EventMap = Dict[str, EventRecord]


@dataclass(frozen=True)
class Address:
    """Structured postal address decomposed from a LOCATION value."""
    addr1: str = ''
    addr2: str = ''
    addr3: str = ''
    city: str = ''
    state: str = ''
    zip: str = ''
    country: str = ''

    def lines(self) -> list[str]:
        """Non-empty free-form address lines, in order."""
        return [line for line in (self.addr1, self.addr2, self.addr3) if line]

    def __str__(self) -> str:
        rendered = ''.join(f"{line}\n" for line in self.lines())
        return rendered + f"{self.city}, {self.state} {self.zip}\n"
