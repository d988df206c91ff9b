"""Read-only session lookups for request boundaries and in-process callers."""
from collections.abc import Callable

from eventauth.schemas.auth import VerifySessionResult
from eventauth.schemas.records import PublicUser
from eventauth.stores.base import AuthStore


class SessionQueries:
    """Resolve access tokens without mutating anything.

    Lookups go through the token indexes; a missing or expired session is
    reported as "no user" rather than raised.
    """

    def __init__(self, store: AuthStore, clock: Callable[[], int]) -> None:
        self._store = store
        self._clock = clock

    def get_current_user(self, access_token: str) -> PublicUser | None:
        """Public view of the user behind a live access token, else None."""
        if not access_token:
            return None
        session = self._store.sessions.find_by_access_token(access_token)
        if session is None or session.is_access_expired(self._clock()):
            return None
        user = self._store.users.get(session.user_id)
        return user.to_public() if user else None

    def verify_session(self, access_token: str) -> VerifySessionResult:
        """Yes/no check that also signals when a refresh would succeed."""
        session = self._store.sessions.find_by_access_token(access_token) if access_token else None
        if session is None:
            return VerifySessionResult(valid=False, needs_refresh=False)

        now = self._clock()
        if session.is_access_expired(now):
            if not session.is_refresh_expired(now):
                return VerifySessionResult(valid=False, needs_refresh=True, user_id=session.user_id)
            return VerifySessionResult(valid=False, needs_refresh=False)

        return VerifySessionResult(valid=True, needs_refresh=False, user_id=session.user_id)
