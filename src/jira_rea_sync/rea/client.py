"""Rea time-sheet portal API client."""

import logging
import threading
from typing import Any

import httpx

from jira_rea_sync.errors import AuthenticationError
from jira_rea_sync.rea.models import ReaProject, ReaTimeEntry, ReaUserProfile
from jira_rea_sync.rea.normalizer import (
    extract_projects,
    extract_time_entries,
    extract_token,
    extract_user_profile,
)
from jira_rea_sync.utils.confirmation import create_confirming_client
from jira_rea_sync.utils.http import send

logger = logging.getLogger(__name__)


class ReaClient:
    """Client for the Rea portal API."""

    BASE_URL = "https://portalapi.reatech.uk/"

    LOGIN_ENDPOINT = "api/Auth/Login"
    USER_PROFILE_ENDPOINT = "api/Auth/GetUserProfileInfo"
    PROJECT_LIST_ENDPOINT = "api/Project/GetAll"
    TIME_ENTRY_ENDPOINT = "api/TimeSheet/Create"
    TIME_ENTRY_LOOKUP_ENDPOINT = "api/TimeSheet/GetByUserId"

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        confirm: bool = False,
    ) -> None:
        """Initialize Rea portal client.

        Args:
            base_url: Portal API URL. Defaults to BASE_URL.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
            confirm: If True, prompt for confirmation before each time entry submission.
        """
        options: dict[str, Any] = {
            "base_url": base_url or self.BASE_URL,
            "headers": {"Accept": "application/json"},
            "timeout": timeout,
        }
        if confirm:
            self.client = create_confirming_client(
                transport=transport,
                skip_paths={self.LOGIN_ENDPOINT},
                **options,
            )
        else:
            self.client = httpx.Client(transport=transport, **options)

        self._access_token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a bearer token is installed."""
        return bool(self._access_token)

    def login(self, username: str, password: str) -> str:
        """Log into the portal and install the bearer token.

        Args:
            username: Portal user name.
            password: Portal password.

        Returns:
            The access token.

        Raises:
            ValueError: If user name or password is blank.
            RemoteError: If the portal rejects the login.
            ParseError: If the response holds no token.
        """
        if not username or not username.strip():
            raise ValueError("Rea portal user name is required")
        if not password:
            raise ValueError("Rea portal password is required")

        body = send(
            self.client,
            "POST",
            self.LOGIN_ENDPOINT,
            "login to the Rea portal",
            json={"userName": username.strip(), "password": password},
        )
        token = extract_token(body)

        self._access_token = token
        self.client.headers["Authorization"] = f"Bearer {token}"
        logger.info(f"Logged into the Rea portal as {username.strip()}")
        return token

    def logout(self) -> None:
        """Drop the bearer token."""
        self._access_token = None
        self.client.headers.pop("Authorization", None)

    def _ensure_authenticated(self) -> None:
        if not self.is_authenticated:
            raise AuthenticationError("Login to the Rea portal before performing this operation")

    def get_user_profile(self, cancel: threading.Event | None = None) -> ReaUserProfile:
        """Get the profile of the logged in user.

        Raises:
            AuthenticationError: If not logged in.
            RemoteError: If the request fails.
            ParseError: If the response holds no user id.
        """
        self._ensure_authenticated()
        body = send(
            self.client,
            "GET",
            self.USER_PROFILE_ENDPOINT,
            "retrieve the Rea user profile",
            cancel=cancel,
        )
        return extract_user_profile(body)

    def get_projects(
        self,
        user_id: str | None = None,
        cancel: threading.Event | None = None,
    ) -> str:
        """Get the raw project list response.

        Args:
            user_id: Restrict to projects assigned to this user.
            cancel: Optional cancellation signal.

        Returns:
            Raw response body.
        """
        self._ensure_authenticated()
        params = {"userId": user_id} if user_id and user_id.strip() else None
        return send(
            self.client,
            "GET",
            self.PROJECT_LIST_ENDPOINT,
            "retrieve the Rea project list",
            cancel=cancel,
            params=params,
        )

    def list_projects(
        self,
        user_id: str | None = None,
        cancel: threading.Event | None = None,
    ) -> list[ReaProject]:
        """List projects, normalized from whatever shape the portal returned."""
        return extract_projects(self.get_projects(user_id, cancel=cancel))

    def get_time_entries(self, user_id: str, cancel: threading.Event | None = None) -> str:
        """Get the raw time entry list response of a user.

        Args:
            user_id: Portal user id.
            cancel: Optional cancellation signal.

        Returns:
            Raw response body.

        Raises:
            ValueError: If user_id is blank.
        """
        self._ensure_authenticated()
        if not user_id or not user_id.strip():
            raise ValueError("User identifier is required to retrieve Rea time entries")

        return send(
            self.client,
            "GET",
            self.TIME_ENTRY_LOOKUP_ENDPOINT,
            "retrieve the Rea time entries",
            cancel=cancel,
            params={"userId": user_id.strip()},
        )

    def list_time_entries(
        self,
        user_id: str,
        cancel: threading.Event | None = None,
    ) -> list[ReaTimeEntry]:
        """List a user's time entries, normalized from whatever shape the portal returned."""
        return extract_time_entries(self.get_time_entries(user_id, cancel=cancel))

    def create_time_entry(
        self,
        entry: ReaTimeEntry,
        cancel: threading.Event | None = None,
    ) -> None:
        """Create a new time entry.

        Args:
            entry: Entry to create, normally with id 0.
            cancel: Optional cancellation signal.

        Raises:
            AuthenticationError: If not logged in.
            RemoteError: If the portal rejects the entry.
        """
        self._ensure_authenticated()
        send(
            self.client,
            "POST",
            self.TIME_ENTRY_ENDPOINT,
            "create the Rea time entry",
            cancel=cancel,
            json=entry.to_api_dict(),
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "ReaClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
