"""Current signed-in identity and its persistence slot."""
from typing import Optional

from pydantic import ValidationError as SchemaError

from zxsgit.constants import SESSION_KEY
from zxsgit.models import Session, User
from zxsgit.services.local_store import LocalStore
from zxsgit.utils.hashing import generate_token
from zxsgit.utils.logger import logger
from zxsgit.utils.validation import now_ms


class SessionManager:
    """
    Owns the Anonymous/Authenticated state.

    A session is opened by login or register, replaced with a new token on
    profile self-update, and closed by logout. There is no expiry.
    """

    def __init__(self, store: LocalStore):
        self.store = store
        self._current: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._current

    @property
    def is_authenticated(self) -> bool:
        return self._current is not None

    def restore(self) -> Optional[Session]:
        """Load the persisted session, if any."""
        raw = self.store.get(SESSION_KEY)
        if not raw:
            self._current = None
            return None
        try:
            self._current = Session(**raw)
        except (SchemaError, TypeError) as e:
            logger.error(f"Discarding unreadable session slot: {e}")
            self._current = None
        return self._current

    def _persist(self, session: Session) -> Session:
        self._current = session
        self.store.set(SESSION_KEY, session.model_dump())
        return session

    def start(self, user: User) -> Session:
        """Open a new session for the user."""
        return self.adopt(Session.for_user(user))

    def adopt(self, session: Session) -> Session:
        """Take over a session issued by the REST service."""
        logger.info(f"Signed in as {session.email}")
        return self._persist(session)

    def rotate(self, name: str, email: str) -> Optional[Session]:
        """Replace the session after a profile self-update."""
        if self._current is None:
            return None
        return self._persist(
            self._current.model_copy(
                update={
                    "name": name,
                    "email": email,
                    "token": generate_token(),
                    "signedInAt": now_ms(),
                }
            )
        )

    def update_identity(self, name: str, email: str, role: str) -> Optional[Session]:
        """Reflect an administrator's edit of the signed-in user, keeping the token."""
        if self._current is None:
            return None
        return self._persist(
            self._current.model_copy(update={"name": name, "email": email, "role": role})
        )

    def end(self) -> None:
        """Sign out."""
        if self._current is not None:
            logger.info(f"Signed out {self._current.email}")
        self._current = None
        self.store.remove(SESSION_KEY)
