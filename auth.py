import logging
from models import User

logger = logging.getLogger(__name__)


class Session:
    """Session-local user registry. Nothing here is persisted."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.current_user: User | None = None

    def register(self, user: User) -> bool:
        """Register a user for this session. Returns False if the username is taken."""
        if user.username in self.users:
            return False
        self.users[user.username] = user
        logger.info(f"User {user.username} registered")
        return True

    def login(self, user: User) -> User:
        """Make the given user current. No check against registered users."""
        self.current_user = user
        logger.info(f"User {user.username} logged in")
        return user

    @property
    def is_logged_in(self) -> bool:
        return self.current_user is not None
