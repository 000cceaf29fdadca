"""Tests for Rea portal response normalization."""

import json
from datetime import date

import pytest

from jira_rea_sync.errors import ParseError
from jira_rea_sync.rea import (
    extract_projects,
    extract_time_entries,
    extract_token,
    extract_user_profile,
)


class TestExtractToken:
    """Test extract_token."""

    @pytest.mark.parametrize(
        "body",
        [
            '{"token": "abc123"}',
            '{"AccessToken": "abc123", "message": "ok"}',
            '{"data": {"token": "abc123"}}',
            '{"data": {"accessToken": "abc123"}}',
            json.dumps({"data": json.dumps({"token": "abc123"})}),
            '{"data": "abc123"}',
            json.dumps({"data": json.dumps("abc123")}),
            json.dumps({"result": json.dumps({"token": "abc123"})}),
            '"abc123"',
        ],
    )
    def test_token_shapes(self, body: str) -> None:
        """Test every supported login response shape."""
        assert extract_token(body) == "abc123"

    @pytest.mark.parametrize("data", ["1234567890", "true"])
    def test_scalar_data_is_token(self, data: str) -> None:
        """Test a data string holding a JSON scalar such as a numeric session id."""
        assert extract_token(json.dumps({"data": data})) == data

    def test_byte_order_mark(self) -> None:
        """Test a body starting with a UTF-8 byte order mark."""
        assert extract_token('\ufeff{"token": "abc123"}') == "abc123"

    def test_encoded_object_without_token(self) -> None:
        """Test a JSON-encoded data object lacking a token."""
        with pytest.raises(ParseError):
            extract_token(json.dumps({"data": json.dumps({"user": "bob"})}))

    def test_missing_token(self) -> None:
        """Test a response without a token."""
        with pytest.raises(ParseError):
            extract_token('{"data": {"user": "bob"}, "message": "ok"}')

    def test_malformed_json(self) -> None:
        """Test a body that is not JSON."""
        with pytest.raises(ParseError):
            extract_token("<html>Bad gateway</html>")


class TestExtractUserProfile:
    """Test extract_user_profile."""

    def test_enveloped_profile(self) -> None:
        """Test the documented profile response."""
        profile = extract_user_profile('{"data": {"userId": 42, "fullName": "Ada Lovelace"}}')

        assert profile.user_id == "42"
        assert profile.name == "Ada Lovelace"

    def test_nested_and_encoded_profile(self) -> None:
        """Test a profile inside a JSON-encoded data string."""
        body = json.dumps({"data": json.dumps({"user": {"Id": "u-7", "name": "Bob"}})})

        profile = extract_user_profile(body)

        assert profile.user_id == "u-7"
        assert profile.name == "Bob"

    def test_missing_user_id(self) -> None:
        """Test a profile without an identifier."""
        with pytest.raises(ParseError):
            extract_user_profile('{"data": {"name": "Bob"}}')


class TestExtractProjects:
    """Test extract_projects."""

    def test_documented_envelope(self) -> None:
        """Test the standard envelope with numeric ids."""
        body = json.dumps(
            {
                "data": [
                    {"projectId": 1, "projectName": "Internal", "projectCode": "INT"},
                    {"id": 2, "name": "Customer"},
                ],
                "message": "ok",
            }
        )

        projects = extract_projects(body)

        assert [(p.id, p.name, p.code) for p in projects] == [
            ("1", "Internal", "INT"),
            ("2", "Customer", None),
        ]
        assert projects[0].display_name == "INT - Internal"

    def test_double_wrapped_with_title(self) -> None:
        """Test a JSON-encoded data string holding projects named by title."""
        inner = [{"id": "A1", "title": "Apollo"}, {"id": "B2", "title": "Borealis"}]
        body = json.dumps({"data": json.dumps(inner), "status": 200})

        projects = extract_projects(body)

        assert [p.name for p in projects] == ["Apollo", "Borealis"]
        assert [p.id for p in projects] == ["A1", "B2"]

    def test_bare_array(self) -> None:
        """Test a project list without an envelope."""
        projects = extract_projects('[{"ProjectId": "7", "Name": "Seven"}]')

        assert [(p.id, p.name) for p in projects] == [("7", "Seven")]

    def test_nested_containers(self) -> None:
        """Test projects found deep inside unrelated wrappers."""
        body = json.dumps({"result": {"items": [{"project_id": "x1", "projectName": "Deep"}]}})

        projects = extract_projects(body)

        assert [(p.id, p.name) for p in projects] == [("x1", "Deep")]

    def test_duplicates_keep_first(self) -> None:
        """Test deduplication by id regardless of case."""
        body = json.dumps(
            {"data": [{"id": "abc", "name": "First"}, {"id": "ABC", "name": "Second"}]}
        )

        projects = extract_projects(body)

        assert [p.name for p in projects] == ["First"]

    def test_name_defaults_to_id(self) -> None:
        """Test a project without any name-like field."""
        projects = extract_projects('{"data": [{"projectId": "P9"}]}')

        assert projects[0].name == "P9"

    @pytest.mark.parametrize("body", ['{"data": []}', "{}", "[]", '"nothing here"', "null"])
    def test_no_projects(self, body: str) -> None:
        """Test valid documents without projects."""
        assert extract_projects(body) == []

    def test_malformed_json(self) -> None:
        """Test a body that is not JSON."""
        with pytest.raises(ParseError):
            extract_projects("{not json")


class TestExtractTimeEntries:
    """Test extract_time_entries."""

    def test_documented_envelope(self) -> None:
        """Test the standard envelope."""
        body = json.dumps(
            {
                "data": [
                    {
                        "id": 11,
                        "userId": 42,
                        "projectId": "P1",
                        "task": "ABC-1 - Fix bug",
                        "startDate": "2024-05-01T00:00:00",
                        "endDate": "2024-05-01T00:00:00",
                        "effort": 3,
                        "comment": None,
                    }
                ]
            }
        )

        entries = extract_time_entries(body)

        assert len(entries) == 1
        entry = entries[0]
        assert entry.id == 11
        assert entry.user_id == "42"
        assert entry.start_date == date(2024, 5, 1)
        assert entry.effort == 3.0
        assert entry.comment == ""

    def test_bare_array_with_mixed_case(self) -> None:
        """Test property names in another case."""
        body = '[{"UserID": "42", "ProjectID": "P1", "Task": "t", "StartDate": "2024-05-02", "EndDate": "2024-05-02"}]'

        entries = extract_time_entries(body)

        assert entries[0].project_id == "P1"
        assert entries[0].end_date == date(2024, 5, 2)

    def test_encoded_single_object(self) -> None:
        """Test a JSON-encoded data string holding one object."""
        inner = {"task": "t", "startDate": "2024-05-03", "endDate": "2024-05-03", "effort": "1.5"}
        body = json.dumps({"data": json.dumps(inner)})

        entries = extract_time_entries(body)

        assert len(entries) == 1
        assert entries[0].effort == 1.5
        assert entries[0].id == 0

    def test_unrecognized_items_skipped(self) -> None:
        """Test that items lacking dates are ignored."""
        body = json.dumps(
            {"data": json.dumps([{"task": "no dates"}, {"startDate": "2024-05-04", "endDate": "2024-05-04"}])}
        )

        entries = extract_time_entries(body)

        assert [e.start_date for e in entries] == [date(2024, 5, 4)]

    @pytest.mark.parametrize("body", ['{"data": null}', "[]", '{"message": "none"}', '"text"'])
    def test_no_entries(self, body: str) -> None:
        """Test valid documents without entries."""
        assert extract_time_entries(body) == []

    def test_malformed_json(self) -> None:
        """Test a body that is not JSON."""
        with pytest.raises(ParseError):
            extract_time_entries("")
