import logging
import os
from datetime import datetime
from typing import Callable
from pydantic import BaseModel, Field, ValidationError, field_validator
from models import Category, User
from manager import EventManager, AttendanceError
from database import Database
from auth import Session
from utils import parse_date, parse_category, parse_int

from dotenv import load_dotenv

load_dotenv()  # Load variables from .env file
EVENTS_FILE = os.getenv("EVENTS_FILE", "events.data")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

logger = logging.getLogger(__name__)

# -------------------------------
# Schemas
# -------------------------------
class UserRegister(BaseModel):
    username: str
    name: str
    email: str
    city: str

    @field_validator("username")
    @classmethod
    def check_username(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Username must not be empty")
        if any(ch.isspace() or ch in "|," for ch in value):
            raise ValueError("Username must not contain spaces, '|' or ','")
        return value

    @field_validator("name", "email", "city")
    @classmethod
    def check_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Field must not be empty")
        return value


class EventCreate(BaseModel):
    name: str
    address: str
    category: Category
    date: datetime
    description: str = ""
    duration_hours: int = Field(ge=0)

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name must not be empty")
        return value

    @field_validator("name", "address", "description")
    @classmethod
    def check_single_line(cls, value: str) -> str:
        if "\n" in value or "\r" in value:
            raise ValueError("Line breaks are not allowed")
        return value

    @field_validator("category", mode="before")
    @classmethod
    def check_category(cls, value):
        if isinstance(value, str):
            return parse_category(value, case_sensitive=False)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, value):
        if isinstance(value, str):
            return parse_date(value)
        return value


def describe_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one line."""
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors())

# -------------------------------
# Console
# -------------------------------
MENU = """
===== Events =====
1. Register user
2. Login
3. List all events
4. Create event
5. View event / confirm or cancel attendance
6. List my confirmed events
7. List past events
8. List upcoming events
9. List events happening now
0. Save and exit
"""


class EventConsole:
    def __init__(self, manager: EventManager, session: Session,
                 input_func: Callable[[str], str] = input, output: Callable[[str], None] = print):
        """Menu-driven front end over an injected EventManager."""
        self.manager = manager
        self.session = session
        self.input = input_func
        self.output = output
        self.commands = {
            "1": self.register,
            "2": self.login,
            "3": self.list_all,
            "4": self.create_event,
            "5": self.manage_attendance,
            "6": self.list_my_confirmed,
            "7": self.list_past,
            "8": self.list_upcoming,
            "9": self.list_happening_now,
        }
        self.login_required = {"4", "5", "6"}

    def prompt(self, label: str) -> str:
        return self.input(f"{label}: ")

    def run(self) -> bool:
        """Run the menu loop until the user exits. Returns whether the final save succeeded."""
        while True:
            try:
                self.output(MENU)
                if self.session.is_logged_in:
                    self.output(f"Logged in as {self.session.current_user.username}")
                choice = self.prompt("Choose an option").strip()
                if choice == "0":
                    saved = self.save_and_exit()
                    if saved is not None:
                        return saved
                    continue
                self.dispatch(choice)
            except UnicodeDecodeError:
                self.output("Could not read input, please try again.")
            except (EOFError, KeyboardInterrupt):
                self.output("")
                return self.save()

    def dispatch(self, choice: str):
        """Run one menu command, reporting any input or policy error."""
        command = self.commands.get(choice)
        if command is None:
            self.output(f"Invalid option: {choice!r}")
            return
        if choice in self.login_required and not self.session.is_logged_in:
            self.output("Please log in first.")
            return
        try:
            command()
        except ValidationError as e:
            self.output(f"Invalid input: {describe_error(e)}")
        except AttendanceError as e:
            self.output(f"Cannot confirm attendance: {e}")
        except ValueError as e:
            self.output(f"Invalid input: {e}")

    def read_user(self) -> User:
        data = UserRegister(
            username=self.prompt("Username"),
            name=self.prompt("Full name"),
            email=self.prompt("Email"),
            city=self.prompt("City"),
        )
        return User(**data.model_dump())

    def register(self):
        user = self.read_user()
        if self.session.register(user):
            self.output(f"User {user.username} registered.")
        else:
            self.output(f"Username {user.username} is already registered.")

    def login(self):
        user = self.session.login(self.read_user())
        self.output(f"Welcome, {user.name}!")

    def show_events(self, events, empty_message="No events found."):
        if not events:
            self.output(empty_message)
            return
        now = self.manager.clock()
        for event in events:
            self.output(event.summary(now))

    def list_all(self):
        self.show_events(self.manager.list_events())

    def list_past(self):
        self.show_events(self.manager.list_past(), "No past events.")

    def list_upcoming(self):
        self.show_events(self.manager.list_upcoming(), "No upcoming events.")

    def list_happening_now(self):
        self.show_events(self.manager.list_happening_now(), "No events happening now.")

    def list_my_confirmed(self):
        username = self.session.current_user.username
        self.show_events(self.manager.list_confirmed(username), "You have not confirmed any events.")

    def create_event(self):
        data = EventCreate(
            name=self.prompt("Name"),
            address=self.prompt("Address"),
            category=self.prompt("Category (" + ", ".join(c.name for c in Category) + ")"),
            date=self.prompt("Date (YYYY-MM-DD HH:MM)"),
            description=self.prompt("Description"),
            duration_hours=self.prompt("Duration (hours)"),
        )
        event = self.manager.create_event(**data.model_dump())
        self.output(f"Event created with id {event.id}.")

    def manage_attendance(self):
        event_id = parse_int(self.prompt("Event id"), "event id")
        event = self.manager.get_event(event_id)
        if not event:
            self.output("Event not found.")
            return
        username = self.session.current_user.username
        self.output(event.display_details(self.manager.clock()))
        if event.is_participating(username):
            self.output("You are confirmed for this event.")
        action = self.prompt("c) confirm  x) cancel attendance  b) back").strip().lower()
        if action == "c":
            self.manager.add_participant(event, username)
            self.output("Attendance confirmed.")
        elif action == "x":
            self.manager.remove_participant(event, username)
            self.output("Attendance cancelled.")
        elif action != "b":
            self.output(f"Invalid option: {action!r}")

    def save(self) -> bool:
        if self.manager.save():
            self.output("Events saved.")
            return True
        self.output("Failed to save events.")
        return False

    def save_and_exit(self) -> bool | None:
        """Save and exit. On a failed save the user may stay in the menu and retry."""
        if self.save():
            return True
        answer = self.prompt("Exit without saving? (y/N)").strip().lower()
        return False if answer == "y" else None


def resolve_log_level(name: str) -> int | None:
    """Map a level name such as "debug" to its logging constant, None if unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def main():
    level = resolve_log_level(LOG_LEVEL)
    logging.basicConfig(level=logging.INFO if level is None else level)
    if level is None:
        logger.warning(f"Unknown LOG_LEVEL {LOG_LEVEL!r}, using INFO")
    logger.info(f"Using data file {EVENTS_FILE}")
    manager = EventManager(Database(EVENTS_FILE))
    saved = EventConsole(manager, Session()).run()
    if not saved:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
