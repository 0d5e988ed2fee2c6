import pytest
from datetime import datetime, timedelta
from models import Event, EventStatus, Category

START = datetime(2030, 1, 1, 10, 0)


def make_event(duration_hours):
    return Event(1, "Concert", "Arena", Category.SHOW, START, "Live", duration_hours)


def test_end_date():
    assert make_event(3).end_date == datetime(2030, 1, 1, 13, 0)
    assert make_event(0).end_date == START


@pytest.mark.parametrize("now, expected", [
    (START - timedelta(minutes=1), EventStatus.UPCOMING),
    (START, EventStatus.HAPPENING_NOW),
    (START + timedelta(hours=1, minutes=59), EventStatus.HAPPENING_NOW),
    (START + timedelta(hours=2), EventStatus.UPCOMING),
    (START + timedelta(hours=2, minutes=1), EventStatus.PAST),
])
def test_status(now, expected):
    assert make_event(2).status(now) is expected


@pytest.mark.parametrize("now, expected", [
    (START - timedelta(minutes=1), EventStatus.UPCOMING),
    (START, EventStatus.UPCOMING),
    (START + timedelta(minutes=1), EventStatus.PAST),
])
def test_status_zero_duration(now, expected):
    event = make_event(0)
    assert event.status(now) is expected
    assert not event.is_happening_now(now)


@pytest.mark.parametrize("duration", [0, 1, 5])
def test_status_exclusive(duration):
    event = make_event(duration)
    for minutes in range(-90, 60 * 7, 15):
        now = START + timedelta(minutes=minutes)
        flags = [event.is_past(now), event.is_happening_now(now), event.is_upcoming(now)]
        assert flags.count(True) == 1


def test_is_participating():
    event = make_event(1)
    event.participants.add("alice")
    assert event.is_participating("alice")
    assert not event.is_participating("bob")


def test_display_details():
    event = make_event(2)
    details = event.display_details(START - timedelta(days=1))
    assert "Concert (SHOW) - upcoming" in details
    assert "Date: 2030-01-01 10:00, Duration: 2 hours" in details
    assert "Participants: 0" in details
