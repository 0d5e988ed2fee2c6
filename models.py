from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

DATE_FORMAT = "%Y-%m-%d %H:%M"


class Category(Enum):
    PARTY = "party"
    SPORT = "sport"
    SHOW = "show"
    CONFERENCE = "conference"
    OTHER = "other"


class EventStatus(Enum):
    UPCOMING = "upcoming"
    HAPPENING_NOW = "happening now"
    PAST = "past"


@dataclass
class Event:
    id: int
    name: str
    address: str
    category: Category
    date: datetime
    description: str
    duration_hours: int
    participants: set[str] = field(default_factory=set)

    @property
    def end_date(self) -> datetime:
        """Start date plus the duration in hours."""
        return self.date + timedelta(hours=self.duration_hours)

    def is_past(self, now: datetime) -> bool:
        return self.end_date < now

    def is_happening_now(self, now: datetime) -> bool:
        return self.date <= now < self.end_date

    def is_upcoming(self, now: datetime) -> bool:
        return not self.is_past(now) and not self.is_happening_now(now)

    def status(self, now: datetime) -> EventStatus:
        """Derive the event status at the given instant."""
        if self.is_past(now):
            return EventStatus.PAST
        if self.is_happening_now(now):
            return EventStatus.HAPPENING_NOW
        return EventStatus.UPCOMING

    def is_participating(self, username: str) -> bool:
        return username in self.participants

    def display_details(self, now: datetime) -> str:
        """Return a string representation of the event details."""
        return (
            f"[{self.id}] {self.name} ({self.category.name}) - {self.status(now).value}\n"
            f"    Address: {self.address}\n"
            f"    Date: {self.date.strftime(DATE_FORMAT)}, Duration: {self.duration_hours} hours\n"
            f"    Description: {self.description}\n"
            f"    Participants: {len(self.participants)}"
        )

    def summary(self, now: datetime) -> str:
        return f"[{self.id}] {self.date.strftime(DATE_FORMAT)} {self.name} ({self.status(now).value})"


@dataclass
class User:
    username: str
    name: str
    email: str
    city: str
