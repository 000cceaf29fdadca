"""HTTP helpers shared by the Jira and Rea clients."""

import logging
import threading
from typing import Any

import httpx

from jira_rea_sync.errors import OperationCancelled, RemoteError

logger = logging.getLogger(__name__)


def check_cancelled(cancel: threading.Event | None) -> None:
    """Raise OperationCancelled if the caller has set the cancellation signal.

    Args:
        cancel: Cancellation signal shared with the caller, or None.

    Raises:
        OperationCancelled: If the signal is set.
    """
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("Operation cancelled by caller")


def raise_for_status(response: httpx.Response, action: str) -> str:
    """Return the response body, or raise RemoteError for non-success statuses.

    Args:
        response: HTTP response.
        action: Human readable description of the request, e.g. "retrieve the project list".

    Returns:
        Response body text.

    Raises:
        RemoteError: If the response status is not 2xx.
    """
    body = response.text
    if response.is_success:
        return body

    raise RemoteError(
        f"Failed to {action}: {response.status_code} {response.reason_phrase}. {body}".rstrip(),
        status_code=response.status_code,
        body=body,
    )


def send(
    client: httpx.Client,
    method: str,
    url: str,
    action: str,
    cancel: threading.Event | None = None,
    **kwargs: Any,
) -> str:
    """Send a request and return the body of a successful response.

    Timeouts, transport failures and other request errors (undecodable bodies, redirect
    loops) are reported as RemoteError without a status code.

    Args:
        client: httpx client to send with.
        method: HTTP method.
        url: URL relative to the client's base URL.
        action: Description of the request used in error messages.
        cancel: Optional cancellation signal checked before sending.
        **kwargs: Passed through to httpx.Client.request.

    Returns:
        Response body text.

    Raises:
        OperationCancelled: If the cancellation signal is set.
        RemoteError: On non-success status, timeout or request failure.
    """
    check_cancelled(cancel)
    logger.debug(f"{method} {url}")

    try:
        response = client.request(method, url, **kwargs)
    except httpx.TimeoutException as e:
        raise RemoteError(f"Failed to {action}: request timed out ({e})") from e
    except httpx.RequestError as e:
        raise RemoteError(f"Failed to {action}: {e}") from e

    return raise_for_status(response, action)
