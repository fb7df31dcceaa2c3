"""Batch job that publishes the calendar export as Atom/RSS feeds."""
import json
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from calendar_source.ics_fetcher import CalendarFetcher
from events.ics_parser import parse_calendar
from feeds.feed_builder import (
    DEFAULT_SITE_URL,
    FEED_BUILDERS,
    PUBLISHED_FROM_CREATED,
    PUBLISHED_SOURCES,
)
from feeds.writer import write_feed, write_snapshot


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


@dataclass
class JobConfig:
    """Job settings, read from environment variables."""
    calendar_url: str = CalendarFetcher.DEFAULT_URL
    output_dir: str = 'public'
    snapshot_path: str = 'events.json'
    feed_formats: Tuple[str, ...] = ('atom',)
    published_from: str = PUBLISHED_FROM_CREATED
    site_url: str = DEFAULT_SITE_URL
    log_level: str = 'INFO'
    timeout_seconds: int = 30

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'JobConfig':
        """
        Build the configuration from environment variables.

        Raises:
            ValueError: If a feed format, published source or timeout is invalid
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        formats = tuple(
            name.strip().lower()
            for name in env.get('FEED_FORMATS', ','.join(defaults.feed_formats)).split(',')
            if name.strip()
        )
        unknown = [name for name in formats if name not in FEED_BUILDERS]
        if unknown or not formats:
            raise ValueError(
                f"FEED_FORMATS must list some of {sorted(FEED_BUILDERS)}, got {unknown or 'nothing'}"
            )

        published_from = env.get('PUBLISHED_FROM', defaults.published_from)
        if published_from not in PUBLISHED_SOURCES:
            raise ValueError(
                f"PUBLISHED_FROM must be one of {PUBLISHED_SOURCES}, got '{published_from}'"
            )

        return cls(
            calendar_url=env.get('CALENDAR_URL', defaults.calendar_url),
            output_dir=env.get('OUTPUT_DIR', defaults.output_dir),
            snapshot_path=env.get('SNAPSHOT_PATH', defaults.snapshot_path),
            feed_formats=formats,
            published_from=published_from,
            site_url=env.get('SITE_URL', defaults.site_url),
            log_level=env.get('LOG_LEVEL', defaults.log_level),
            timeout_seconds=int(env.get('TIMEOUT_SECONDS', str(defaults.timeout_seconds)))
        )


def run_job(config: JobConfig) -> Dict[str, Any]:
    """
    Fetch the calendar, write the snapshot and publish every configured feed.

    Any exception aborts the run. Feeds are only written once all of
    them have been built.

    Args:
        config: Job configuration

    Returns:
        Summary statistics of the run
    """
    logger = logging.getLogger(__name__)
    start_time = time.time()

    fetcher = CalendarFetcher(url=config.calendar_url, timeout=config.timeout_seconds)
    calendar_text = fetcher.fetch()

    events = parse_calendar(calendar_text)
    write_snapshot(events, config.snapshot_path)

    documents = {}
    for name in config.feed_formats:
        builder = FEED_BUILDERS[name](
            site_url=config.site_url,
            published_from=config.published_from
        )
        documents[builder.filename] = builder.build(events)

    written = [
        str(write_feed(document, config.output_dir, filename))
        for filename, document in documents.items()
    ]

    duration = time.time() - start_time
    logger.info(
        f"Published {len(written)} feeds with {len(events)} events "
        f"in {round(duration, 2)} seconds"
    )
    return {
        'events': len(events),
        'feeds': written,
        'snapshot': config.snapshot_path,
        'duration_seconds': round(duration, 2)
    }


def main() -> int:
    """Entry point; returns the process exit code."""
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    try:
        config = JobConfig.from_env()
        summary = run_job(config)
    except Exception as e:
        logger.error(
            f"Feed job failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return 1

    logger.info(f"Feed job completed: {json.dumps(summary)}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
