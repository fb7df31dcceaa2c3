"""HTTP fetcher for the remote ICS calendar export."""
import logging

import requests

logger = logging.getLogger(__name__)


class CalendarFetcher:
    """Fetches one calendar export over HTTP."""

    DEFAULT_URL = (
        "https://powerlifting-america.com/"
        "?post_type=tribe_events&ical=1&eventDisplay=list"
    )

    def __init__(self, url: str = DEFAULT_URL, timeout: int = 30):
        """
        Initialize the calendar fetcher.

        Args:
            url: Calendar export URL
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.url = url
        self.timeout = timeout

    def fetch(self) -> str:
        """
        Download the calendar.

        Returns:
            ICS document as text

        Raises:
            requests.RequestException: On network failure or non-2xx status
        """
        logger.info(f"Fetching calendar from {self.url}")
        response = requests.get(self.url, timeout=self.timeout)
        response.raise_for_status()
        logger.info(f"Fetched {len(response.text)} characters of calendar data")
        return response.text
