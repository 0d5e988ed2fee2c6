import logging
from datetime import datetime
from typing import Callable
from models import Event, Category
from database import Database

logger = logging.getLogger(__name__)


class AttendanceError(ValueError):
    """Raised when attendance cannot be confirmed for an event."""


class EventManager:
    def __init__(self, db: Database, clock: Callable[[], datetime] = datetime.now):
        """Initialize EventManager with a backing file and load existing events."""
        self.db = db
        self.clock = clock
        self.events: list[Event] = []
        self.next_id = 1
        self.load_or_init()

    def load_or_init(self):
        """Load events from the backing file and recompute the next identifier."""
        self.events = self.db.load_events()
        self.next_id = max((e.id for e in self.events), default=0) + 1

    def create_event(self, name: str, address: str, category: Category, date: datetime,
                     description: str, duration_hours: int) -> Event:
        """Create an event with the next sequential identifier."""
        if duration_hours < 0:
            raise ValueError("Duration must not be negative")
        event = Event(
            id=self.next_id,
            name=name,
            address=address,
            category=category,
            date=date,
            description=description,
            duration_hours=duration_hours,
        )
        self.next_id += 1
        self.events.append(event)
        logger.info(f"Event {event.id} created: {event.name}")
        return event

    def get_event(self, event_id: int) -> Event | None:
        """Retrieve an event by ID."""
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def count(self) -> int:
        return len(self.events)

    def list_events(self) -> list[Event]:
        """All events ordered by start date, ties kept in creation order."""
        return sorted(self.events, key=lambda e: e.date)

    def list_upcoming(self) -> list[Event]:
        now = self.clock()
        return [e for e in self.list_events() if e.is_upcoming(now)]

    def list_happening_now(self) -> list[Event]:
        now = self.clock()
        return [e for e in self.list_events() if e.is_happening_now(now)]

    def list_past(self) -> list[Event]:
        now = self.clock()
        return [e for e in self.list_events() if e.is_past(now)]

    def list_confirmed(self, username: str) -> list[Event]:
        """Events the given user has confirmed attendance for."""
        return [e for e in self.list_events() if e.is_participating(username)]

    def add_participant(self, event: Event, username: str):
        """Confirm attendance. Past events are rejected."""
        if event.is_past(self.clock()):
            raise AttendanceError(f"Event {event.id} has already ended")
        if event.is_participating(username):
            return
        event.participants.add(username)
        logger.info(f"User {username} confirmed attendance for event {event.id}")

    def remove_participant(self, event: Event, username: str):
        """Cancel attendance. Removing a non-participant is a no-op."""
        if not event.is_participating(username):
            return
        event.participants.discard(username)
        logger.info(f"User {username} cancelled attendance for event {event.id}")

    def save(self) -> bool:
        """Persist all events in creation order."""
        return self.db.save_events(self.events)
