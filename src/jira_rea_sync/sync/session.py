"""Per-user session state shared by synchronization operations."""

import logging

from jira_rea_sync.jira.client import JiraClient
from jira_rea_sync.jira.models import JiraMyself
from jira_rea_sync.rea.client import ReaClient
from jira_rea_sync.rea.models import ReaUserProfile
from jira_rea_sync.sync.cache import EntryCache

logger = logging.getLogger(__name__)


class SyncSession:
    """Both service clients plus the Rea entry cache of one user.

    The caller owns the session and passes it to engine operations. Only one
    reconciliation may run against a session at a time.
    """

    def __init__(
        self,
        jira: JiraClient,
        rea: ReaClient,
        cache: EntryCache | None = None,
    ) -> None:
        """Initialize session.

        Args:
            jira: Jira client.
            rea: Rea portal client.
            cache: Entry cache. A new empty cache is created if None.
        """
        self.jira = jira
        self.rea = rea
        self.cache = cache if cache is not None else EntryCache()
        self.rea_user_id: str | None = None

    def login_jira(self, email: str, api_token: str) -> JiraMyself:
        """Log into Jira."""
        return self.jira.login(email, api_token)

    def logout_jira(self) -> None:
        """Log out of Jira."""
        self.jira.logout()

    def login_rea(self, username: str, password: str) -> ReaUserProfile:
        """Log into the Rea portal and load the user's profile.

        Cached entries belong to the previous identity and are dropped.

        Returns:
            Profile of the logged in user.
        """
        self.rea.login(username, password)
        self.cache.clear()
        profile = self.rea.get_user_profile()
        self.rea_user_id = profile.user_id
        logger.info(f"Rea portal user id: {profile.user_id}")
        return profile

    def logout_rea(self) -> None:
        """Log out of the Rea portal and drop cached entries."""
        self.rea.logout()
        self.cache.clear()
        self.rea_user_id = None

    def close(self) -> None:
        """Close both clients."""
        self.jira.close()
        self.rea.close()

    def __enter__(self) -> "SyncSession":
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
