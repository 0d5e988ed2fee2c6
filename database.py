import logging
import os
from shutil import copymode
from tempfile import NamedTemporaryFile
from models import Event
from utils import parse_date, format_date, parse_category, parse_int

logger = logging.getLogger(__name__)

DELIMITER = "|"
ESCAPE = "\\"
PARTICIPANT_SEPARATOR = ","
FIELD_COUNT = 8


class RecordParseError(ValueError):
    """Raised when a stored line cannot be decoded into an event."""


def escape_field(value: str) -> str:
    """Escape backslashes and pipes in a free-text field."""
    return value.replace(ESCAPE, ESCAPE * 2).replace(DELIMITER, ESCAPE + DELIMITER)


def unescape_field(value: str) -> str:
    """Reverse escape_field: every backslash escapes the character after it."""
    chars = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch == ESCAPE and i + 1 < len(value):
            chars.append(value[i + 1])
            i += 2
            continue
        chars.append(ch)
        i += 1
    return "".join(chars)


def split_fields(line: str) -> list[str]:
    """Split a stored line on unescaped pipes, leaving escapes in place."""
    fields = []
    current = []
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == ESCAPE and i + 1 < len(line):
            current.append(line[i:i + 2])
            i += 2
            continue
        if ch == DELIMITER:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def encode_event(event: Event) -> str:
    """Serialize an event to a single line (without the line terminator)."""
    return DELIMITER.join([
        str(event.id),
        escape_field(event.name),
        escape_field(event.address),
        event.category.name,
        format_date(event.date),
        escape_field(event.description),
        str(event.duration_hours),
        PARTICIPANT_SEPARATOR.join(sorted(event.participants)),
    ])


def decode_event(line: str) -> Event:
    """Parse a stored line back into an event."""
    fields = split_fields(line)
    if len(fields) != FIELD_COUNT:
        raise RecordParseError(f"Expected {FIELD_COUNT} fields, found {len(fields)}")
    raw_id, name, address, category, date, description, duration, participants = fields
    try:
        return Event(
            id=parse_int(raw_id, "id"),
            name=unescape_field(name),
            address=unescape_field(address),
            category=parse_category(category),
            date=parse_date(date),
            description=unescape_field(description),
            duration_hours=parse_int(duration, "duration", minimum=0),
            participants={p for p in participants.split(PARTICIPANT_SEPARATOR) if p},
        )
    except RecordParseError:
        raise
    except ValueError as e:
        raise RecordParseError(str(e)) from e


class Database:
    def __init__(self, path="events.data"):
        """
        Flat-file backing store, one encoded event per line.
        Note: only one process is expected to use a given file at a time.
        """
        self.path = path
        self.load_failed = False

    def load_events(self) -> list[Event]:
        """Read every decodable event from the backing file.

        Undecodable lines and lines repeating an earlier id are logged and skipped.
        If the file exists but cannot be read, later saves are refused so the
        file is not overwritten with a partial collection.
        """
        self.load_failed = False
        if not os.path.exists(self.path):
            logger.info(f"No data file at {self.path}, starting empty")
            return []
        events = []
        seen_ids = set()
        try:
            with open(self.path, "rb") as fh:
                for line_no, raw in enumerate(fh, start=1):
                    try:
                        line = raw.decode("utf-8").rstrip("\r\n")
                        if not line.strip():
                            continue
                        event = decode_event(line)
                    except (UnicodeDecodeError, RecordParseError) as e:
                        logger.warning(f"Skipping line {line_no} of {self.path}: {e}")
                        continue
                    if event.id in seen_ids:
                        logger.warning(f"Skipping line {line_no} of {self.path}: duplicate id {event.id}")
                        continue
                    seen_ids.add(event.id)
                    events.append(event)
        except OSError as e:
            logger.error(f"Failed to read {self.path}: {e}")
            self.load_failed = True
            return []
        logger.info(f"Loaded {len(events)} events from {self.path}")
        return events

    def save_events(self, events: list[Event]) -> bool:
        """Overwrite the backing file with the given events, in order."""
        if self.load_failed:
            logger.error(f"Refusing to overwrite {self.path}: it could not be read at startup")
            return False
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_name = None
        try:
            with NamedTemporaryFile("w", encoding="utf-8", dir=directory, delete=False, suffix=".tmp") as tmp:
                tmp_name = tmp.name
                for event in events:
                    tmp.write(encode_event(event) + "\n")
            if os.path.isfile(self.path):
                copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except (OSError, UnicodeError) as e:
            logger.error(f"Failed to save events to {self.path}: {e}")
            return False
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
        logger.info(f"Saved {len(events)} events to {self.path}")
        return True
