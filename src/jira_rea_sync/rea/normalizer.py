"""Normalization of Rea portal responses.

The portal does not return one fixed schema: payloads may be wrapped in a `{data: ...}`
envelope or not, `data` may itself be a JSON-encoded string, and field names vary
between deployments. Each extraction runs an ordered chain of strategies, starting with
a strict typed decode and falling back to a tolerant walk of the document; the first
strategy producing a value wins.
"""

import json
import logging
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from jira_rea_sync.errors import ParseError
from jira_rea_sync.rea.models import (
    ReaApiResponse,
    ReaProject,
    ReaProjectPayload,
    ReaTimeEntry,
    ReaUserProfile,
)

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")

TOKEN_NAMES = ("token", "accessToken")
PROJECT_ID_NAMES = ("projectId", "project_id", "id")
PROJECT_NAME_NAMES = ("projectName", "name", "title")
PROJECT_CODE_NAMES = ("projectCode", "code", "shortName", "key", "projectKey")
PROJECT_SIGNATURE_NAMES = ("projectId", "project_id")
USER_ID_NAMES = ("userId", "id")
USER_NAME_NAMES = ("name", "fullName", "displayName")

_PROJECT_ENVELOPE = ReaApiResponse[list[ReaProjectPayload]]
_ENTRY_ENVELOPE = ReaApiResponse[list[ReaTimeEntry]]
_ENTRY_LIST = TypeAdapter(list[ReaTimeEntry])

_UNPARSED = object()


# -- document helpers -------------------------------------------------------


def _load(body: str | bytes) -> Any:
    if isinstance(body, str):
        body = body.lstrip("\ufeff")
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Rea portal returned a malformed JSON document: {e}") from e


def _parse_embedded(value: str) -> Any:
    """Parse a string that may hold serialized JSON; _UNPARSED if it does not."""
    if not value or not value.strip():
        return _UNPARSED
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return _UNPARSED


def _unwrap(value: Any) -> Any:
    if isinstance(value, str):
        parsed = _parse_embedded(value)
        if parsed is not _UNPARSED:
            return parsed
    return value


def _is_name(actual: Any, *expected: str) -> bool:
    if not isinstance(actual, str):
        return False
    lowered = actual.lower()
    return any(lowered == name.lower() for name in expected)


def _get_property(node: Any, name: str) -> Any:
    if isinstance(node, dict):
        for key, value in node.items():
            if _is_name(key, name):
                return value
    return None


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, bool):
        text = str(value)
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    elif isinstance(value, (str, int, float)):
        text = str(value)
    else:
        return None
    return text.strip() or None


def _find_string(node: Any, names: tuple[str, ...]) -> str | None:
    """Find the first non-empty scalar under any of `names`, preferring earlier names.

    Direct properties are searched before nested objects and arrays.
    """
    if isinstance(node, dict):
        for name in names:
            for key, value in node.items():
                if _is_name(key, name):
                    text = _scalar_text(value)
                    if text:
                        return text
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = _find_string(child, names)
        if found:
            return found
    return None


def _data_element(document: Any) -> Any:
    """Return the payload inside the envelope, re-parsing a JSON-encoded `data` string."""
    if isinstance(document, str):
        return _unwrap(document)

    if isinstance(document, dict):
        data = _get_property(document, "data")
        if data is not None:
            return _unwrap(data)

    return document


def _first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def _first_success(
    document: Any,
    strategies: tuple[Callable[[Any], ResultT], ...],
) -> ResultT | None:
    for strategy in strategies:
        result = strategy(document)
        if result:
            logger.debug(f"Rea response normalized by {strategy.__name__}")
            return result
    return None


# -- token ------------------------------------------------------------------


def _token_in(node: Any) -> str | None:
    if isinstance(node, dict):
        for key, value in node.items():
            if _is_name(key, *TOKEN_NAMES) and isinstance(value, str) and value.strip():
                return value.strip()
    return None


def _token_at_top_level(document: Any) -> str | None:
    return _token_in(document)


def _token_in_data(document: Any) -> str | None:
    data = _get_property(document, "data")
    if not isinstance(data, str):
        return _token_in(data)

    parsed = _parse_embedded(data)
    if isinstance(parsed, dict):
        return _token_in(parsed)
    if isinstance(parsed, str):
        return parsed.strip() or None
    # A bare token, e.g. {"data": "eyJhbGciOi..."} or a numeric session id
    return data.strip() or None


def _token_in_embedded_fields(document: Any) -> str | None:
    if not isinstance(document, dict):
        return None
    for value in document.values():
        if isinstance(value, str):
            token = _token_in(_unwrap(value))
            if token:
                return token
    return None


def _token_as_bare_string(document: Any) -> str | None:
    if isinstance(document, str):
        return document.strip() or None
    return None


def extract_token(body: str | bytes) -> str:
    """Extract the access token from a login response.

    Looks for a `token` or `accessToken` property (any case) at the top level, then inside
    `data` (re-parsing it when it is a JSON-encoded string, or taking it as the token
    itself when it is a plain string), then inside any other JSON-encoded string field.

    Args:
        body: Raw response body.

    Returns:
        The access token.

    Raises:
        ParseError: If the body is malformed or holds no token.
    """
    document = _load(body)
    token = _first_success(
        document,
        (
            _token_at_top_level,
            _token_in_data,
            _token_in_embedded_fields,
            _token_as_bare_string,
        ),
    )
    if not token:
        raise ParseError("Rea portal login response did not include an access token")
    return token


# -- user profile -------------------------------------------------------------


def extract_user_profile(body: str | bytes) -> ReaUserProfile:
    """Extract user id and name from a profile response.

    Args:
        body: Raw response body.

    Returns:
        The user profile.

    Raises:
        ParseError: If the body is malformed or holds no user id.
    """
    element = _data_element(_load(body))
    user_id = _find_string(element, USER_ID_NAMES)
    if not user_id:
        raise ParseError("Rea portal user profile response did not include a user identifier")
    return ReaUserProfile(user_id=user_id, name=_find_string(element, USER_NAME_NAMES))


# -- projects -----------------------------------------------------------------


class _ProjectCollector:
    """Accumulates projects, keeping the first occurrence of each id (any case)."""

    def __init__(self) -> None:
        self.projects: list[ReaProject] = []
        self._seen: set[str] = set()

    def add(self, project_id: str | None, name: str | None, code: str | None) -> None:
        if not project_id:
            return
        folded = project_id.casefold()
        if folded in self._seen:
            return
        self._seen.add(folded)
        self.projects.append(ReaProject(id=project_id, name=name or project_id, code=code))


def _projects_from_envelope(document: Any) -> list[ReaProject]:
    try:
        envelope = _PROJECT_ENVELOPE.model_validate(document)
    except ValidationError:
        return []

    collector = _ProjectCollector()
    for payload in envelope.data or []:
        collector.add(
            _first_non_empty(payload.project_id, payload.id),
            _first_non_empty(payload.project_name, payload.name, payload.title),
            _first_non_empty(
                payload.project_code,
                payload.code,
                payload.short_name,
                payload.key,
                payload.project_key,
            ),
        )
    return collector.projects


def _has_project_signature(node: dict[str, Any]) -> bool:
    has_project_id = False
    has_generic_id = False
    has_name = False

    for key, value in node.items():
        if _is_name(key, *PROJECT_SIGNATURE_NAMES):
            has_project_id = True
        if _is_name(key, "id") and _scalar_text(value) and not isinstance(value, bool):
            has_generic_id = True
        if _is_name(key, *PROJECT_NAME_NAMES):
            has_name = True

    return has_project_id or (has_generic_id and has_name)


def _iter_project_objects(node: Any) -> Iterator[dict[str, Any]]:
    if isinstance(node, dict):
        if _has_project_signature(node):
            yield node
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return

    for child in children:
        yield from _iter_project_objects(_unwrap(child))


def _projects_from_scan(document: Any) -> list[ReaProject]:
    collector = _ProjectCollector()
    for item in _iter_project_objects(document):
        collector.add(
            _find_string(item, PROJECT_ID_NAMES),
            _find_string(item, PROJECT_NAME_NAMES),
            _find_string(item, PROJECT_CODE_NAMES),
        )
    return collector.projects


def extract_projects(body: str | bytes) -> list[ReaProject]:
    """Extract the project list from a project list response.

    The documented `{data: [...]}` envelope is decoded first. When it yields nothing, the
    whole document is scanned (unwrapping JSON-encoded strings) for objects that look like
    projects: a project id field, or an `id` together with a name-like field.

    Args:
        body: Raw response body.

    Returns:
        Projects in document order, deduplicated by id. Empty if none were found.

    Raises:
        ParseError: If the body is not valid JSON.
    """
    document = _load(body)
    projects = _first_success(document, (_projects_from_envelope, _projects_from_scan))
    return projects or []


# -- time entries -------------------------------------------------------------


def _entries_from_envelope(document: Any) -> list[ReaTimeEntry]:
    if not isinstance(document, dict):
        return []
    try:
        envelope = _ENTRY_ENVELOPE.model_validate(document)
    except ValidationError:
        return []
    return envelope.data or []


def _entries_from_array(document: Any) -> list[ReaTimeEntry]:
    if not isinstance(document, list):
        return []
    try:
        return _ENTRY_LIST.validate_python(document)
    except ValidationError:
        return []


def _decode_entries(element: Any) -> list[ReaTimeEntry]:
    if isinstance(element, str):
        parsed = _parse_embedded(element)
        if parsed is _UNPARSED:
            return []
        return _decode_entries(parsed)

    if isinstance(element, dict):
        element = [element]
    if not isinstance(element, list):
        return []

    entries: list[ReaTimeEntry] = []
    for item in element:
        try:
            entries.append(ReaTimeEntry.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Ignoring unrecognized time entry {item!r}: {e.error_count()} errors")
    return entries


def _entries_from_data_element(document: Any) -> list[ReaTimeEntry]:
    return _decode_entries(_data_element(document))


def extract_time_entries(body: str | bytes) -> list[ReaTimeEntry]:
    """Extract time entries from a time entry list response.

    Tries a `{data: [...]}` envelope, then a bare array, then the unwrapped `data`
    element (which may be a JSON-encoded array, object or string). An object where an
    array was expected counts as a one-element list.

    Args:
        body: Raw response body.

    Returns:
        Time entries, empty if none were recognized.

    Raises:
        ParseError: If the body is not valid JSON.
    """
    document = _load(body)
    entries = _first_success(
        document,
        (_entries_from_envelope, _entries_from_array, _entries_from_data_element),
    )
    return entries or []
