"""Output writers for the event snapshot and feed documents."""
import json
import logging
from pathlib import Path
from typing import Union

from events.models import EventMap, EventRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def write_snapshot(events: EventMap, path: PathLike) -> Path:
    """
    Write the EventMap as pretty-printed JSON.

    Args:
        events: Parsed events keyed by UID
        path: Destination file

    Returns:
        Path written
    """
    path = Path(path)
    payload = {uid: record.to_dict() for uid, record in events.items()}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding='utf-8')
    logger.info(f"Wrote snapshot of {len(events)} events to {path}")
    return path


def load_snapshot(path: PathLike) -> EventMap:
    """Read an EventMap previously written by write_snapshot."""
    payload = json.loads(Path(path).read_text(encoding='utf-8'))
    return {uid: EventRecord.from_dict(data) for uid, data in payload.items()}


def write_feed(document: bytes, output_dir: PathLike, filename: str) -> Path:
    """
    Write a fully built feed document, creating the output directory.

    Returns:
        Path written
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / filename
    path.write_bytes(document)
    logger.info(f"Wrote {len(document)} bytes to {path}")
    return path
