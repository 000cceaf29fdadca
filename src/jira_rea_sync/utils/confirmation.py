"""Interactive confirmation of outgoing write requests."""

import json
import logging
from collections.abc import Callable, Iterable
from typing import Any

import httpx
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from jira_rea_sync.errors import OperationCancelled

logger = logging.getLogger(__name__)
console = Console()

SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def redact(value: str) -> str:
    """Keep the first and last 4 characters of a secret.

    Args:
        value: Secret value, e.g. 'Bearer eyJhbGciOi...'.

    Returns:
        Redacted value.
    """
    scheme, _, secret = value.partition(" ")
    if secret:
        return f"{scheme} {redact(secret)}"
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}...{value[-4:]}"


def redact_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of headers with credentials redacted."""
    return {
        key: redact(value) if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def _format_payload(content: bytes) -> str:
    try:
        return json.dumps(json.loads(content), indent=2, ensure_ascii=False)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "[binary data]"


def ask_confirmation() -> bool:
    """Ask on the console whether to send the request shown above."""
    while True:
        answer = console.input("[bold cyan]Send this request? [y/n][/bold cyan] ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        console.print("[yellow]Please enter 'y' or 'n'[/yellow]")


def show_request(request: httpx.Request) -> None:
    """Print method, URL, redacted headers and JSON payload of a request."""
    console.print("\n" + "=" * 80)
    console.print(f"[bold cyan]{request.method}[/bold cyan] {request.url}")

    table = Table(title="Headers", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for key, value in redact_headers(dict(request.headers)).items():
        table.add_row(key, value)
    console.print(table)

    if request.content:
        console.print(Syntax(_format_payload(request.content), "json", theme="monokai"))
    console.print("=" * 80)


class ConfirmationTransport(httpx.BaseTransport):
    """httpx transport that asks before sending write requests.

    Reads and requests to `skip_paths` (e.g. the login endpoint) pass through unasked.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport,
        skip_paths: Iterable[str] = (),
        confirm: Callable[[], bool] = ask_confirmation,
    ) -> None:
        """Initialize confirmation transport.

        Args:
            transport: Transport that actually sends the requests.
            skip_paths: URL paths never confirmed, with or without a leading slash.
            confirm: Callback returning True to send the request.
        """
        self.transport = transport
        self.skip_paths = {"/" + path.lstrip("/") for path in skip_paths}
        self.confirm = confirm

    def _needs_confirmation(self, request: httpx.Request) -> bool:
        if request.method not in WRITE_METHODS:
            return False
        return not any(request.url.path.endswith(path) for path in self.skip_paths)

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        """Send the request once confirmed.

        Raises:
            OperationCancelled: If the user declines.
        """
        if self._needs_confirmation(request):
            show_request(request)
            if not self.confirm():
                logger.info(f"Declined {request.method} {request.url}")
                raise OperationCancelled("Request cancelled by user")

        return self.transport.handle_request(request)

    def close(self) -> None:
        """Close the wrapped transport."""
        self.transport.close()


def create_confirming_client(
    transport: httpx.BaseTransport | None = None,
    skip_paths: Iterable[str] = (),
    confirm: Callable[[], bool] = ask_confirmation,
    **kwargs: Any,
) -> httpx.Client:
    """Create an httpx client that confirms write requests interactively.

    Args:
        transport: Transport to wrap. Defaults to httpx.HTTPTransport().
        skip_paths: URL paths never confirmed.
        confirm: Callback returning True to send a request.
        **kwargs: Additional arguments passed to httpx.Client.

    Returns:
        Configured client.
    """
    return httpx.Client(
        transport=ConfirmationTransport(
            transport or httpx.HTTPTransport(),
            skip_paths=skip_paths,
            confirm=confirm,
        ),
        **kwargs,
    )
