"""Unit tests for Jira adapter (mocked API)."""

from unittest.mock import Mock, patch

import pytest
import requests

from sugarflow.adapters.base import IssueTrackerError, NotFoundError
from sugarflow.adapters.jira import JiraAdapter
from sugarflow.models import Ticket


@pytest.fixture
def adapter() -> JiraAdapter:
    return JiraAdapter(domain="https://acme.atlassian.net/", username="dev@acme.io", token="test-token")


def _response(status_code: int, data: object = None, text: str = "") -> Mock:
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    resp.reason = ""
    resp.json.return_value = data
    return resp


def test_session_uses_basic_auth(adapter: JiraAdapter) -> None:
    assert adapter._session.auth == ("dev@acme.io", "test-token")


def test_get_issue_success(adapter: JiraAdapter) -> None:
    """get_issue maps key, summary, description, status and assignee email."""
    data = {
        "key": "ABC-123",
        "fields": {
            "summary": "Fix login",
            "description": "Users cannot log in",
            "status": {"name": "In Progress"},
            "assignee": {"emailAddress": "dev@acme.io"},
        },
    }
    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        ticket = adapter.get_issue("ABC-123", ["summary", "description", "status", "assignee"])

    assert isinstance(ticket, Ticket)
    assert ticket.key == "ABC-123"
    assert ticket.summary == "Fix login"
    assert ticket.description == "Users cannot log in"
    assert ticket.status == "In Progress"
    assert ticket.assignee_email == "dev@acme.io"
    args, kwargs = req.call_args
    assert args[0] == "GET"
    assert args[1] == "https://acme.atlassian.net/rest/api/2/issue/ABC-123"
    assert kwargs["params"] == {"fields": "summary,description,status,assignee"}


def test_get_issue_without_assignee(adapter: JiraAdapter) -> None:
    data = {"key": "ABC-1", "fields": {"summary": "s", "status": {"name": "Open"}, "assignee": None}}
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        ticket = adapter.get_issue("ABC-1", ["status", "assignee"])
    assert ticket.assignee_email is None
    assert ticket.description is None


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 500])
def test_get_issue_non_2xx_raises_not_found(adapter: JiraAdapter, status_code: int) -> None:
    """Any error status from the issue endpoint is reported as NotFoundError."""
    resp = _response(status_code, {"errorMessages": ["Issue does not exist"]}, text="err")
    with patch.object(adapter._session, "request", return_value=resp):
        with pytest.raises(NotFoundError) as exc_info:
            adapter.get_issue("ABC-999", ["summary"])
    assert "ABC-999" in str(exc_info.value)


def test_get_issue_transport_error_raises_not_found(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", side_effect=requests.ConnectionError("boom")):
        with pytest.raises(NotFoundError):
            adapter.get_issue("ABC-1", ["summary"])


def test_get_field_returns_value(adapter: JiraAdapter) -> None:
    data = {"fields": {"customfield_12000": "https://github.com/acme/app/pull/7"}}
    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        value = adapter.get_field("ABC-1", "customfield_12000")
    assert value == "https://github.com/acme/app/pull/7"
    assert req.call_args[1]["params"] == {"fields": "customfield_12000"}


def test_find_user_by_email_returns_first_account(adapter: JiraAdapter) -> None:
    data = [{"accountId": "acc-1"}, {"accountId": "acc-2"}]
    with patch.object(adapter._session, "request", return_value=_response(200, data)) as req:
        assert adapter.find_user_by_email("dev@acme.io") == "acc-1"
    args, kwargs = req.call_args
    assert args[1].endswith("/rest/api/2/user/search")
    assert kwargs["params"] == {"query": "dev@acme.io"}


def test_find_user_by_email_empty_raises_not_found(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(200, [])):
        with pytest.raises(NotFoundError, match="dev@acme.io"):
            adapter.find_user_by_email("dev@acme.io")


def test_assign_issue_puts_account_id(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(204)) as req:
        adapter.assign_issue("ABC-1", "acc-1")
    args, kwargs = req.call_args
    assert args[0] == "PUT"
    assert args[1].endswith("/rest/api/2/issue/ABC-1/assignee")
    assert kwargs["json"] == {"accountId": "acc-1"}


def test_assign_issue_error_raises_with_tracker_message(adapter: JiraAdapter) -> None:
    resp = _response(400, {"errorMessages": [], "errors": {"assignee": "User cannot be assigned"}})
    with patch.object(adapter._session, "request", return_value=resp):
        with pytest.raises(IssueTrackerError, match="User cannot be assigned"):
            adapter.assign_issue("ABC-1", "acc-1")


def test_transition_issue_posts_id(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(204)) as req:
        adapter.transition_issue("ABC-1", "4")
    args, kwargs = req.call_args
    assert args[0] == "POST"
    assert args[1].endswith("/rest/api/2/issue/ABC-1/transitions")
    assert kwargs["json"] == {"transition": {"id": "4"}}


def test_find_transition_id_by_name_or_target_status(adapter: JiraAdapter) -> None:
    data = {
        "transitions": [
            {"id": "11", "name": "Close", "to": {"name": "Closed"}},
            {"id": "21", "name": "Start Progress", "to": {"name": "In Progress"}},
        ]
    }
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        assert adapter.find_transition_id("ABC-1", "start progress") == "21"
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        assert adapter.find_transition_id("ABC-1", "In Progress") == "21"
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        assert adapter.find_transition_id("ABC-1", "Review") is None


def test_set_custom_field_puts_fields(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(204)) as req:
        adapter.set_custom_field("ABC-1", "customfield_12000", "https://pr")
    args, kwargs = req.call_args
    assert args[0] == "PUT"
    assert args[1].endswith("/rest/api/2/issue/ABC-1")
    assert kwargs["json"] == {"fields": {"customfield_12000": "https://pr"}}


def test_browse_url(adapter: JiraAdapter) -> None:
    assert adapter.browse_url("ABC-1") == "https://acme.atlassian.net/browse/ABC-1"


def _html_response() -> Mock:
    """200 with an SSO login page instead of JSON."""
    resp = _response(200, text="<html>login</html>")
    resp.url = "https://acme.atlassian.net/login"
    resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>login</html>", 0)
    return resp


def test_get_issue_html_body_raises_not_found(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_html_response()):
        with pytest.raises(NotFoundError, match="ABC-1"):
            adapter.get_issue("ABC-1", ["summary"])


@pytest.mark.parametrize("data", [["not", "an", "issue"], {"fields": {"status": "Open"}}])
def test_get_issue_unexpected_shape_raises_not_found(adapter: JiraAdapter, data: object) -> None:
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        with pytest.raises(NotFoundError):
            adapter.get_issue("ABC-1", ["status"])


def test_get_field_html_body_raises_tracker_error(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_html_response()):
        with pytest.raises(IssueTrackerError, match="Invalid JSON"):
            adapter.get_field("ABC-1", "customfield_12000")


@pytest.mark.parametrize("data", [[{"name": "me", "key": "me"}], {"accountId": "acc-1"}, ["acc-1"]])
def test_find_user_without_account_id_raises_tracker_error(adapter: JiraAdapter, data: object) -> None:
    """Server/DC user search entries carry name/key only."""
    with patch.object(adapter._session, "request", return_value=_response(200, data)):
        with pytest.raises(IssueTrackerError, match="accountId"):
            adapter.find_user_by_email("dev@acme.io")


def test_list_transitions_unexpected_shape_raises_tracker_error(adapter: JiraAdapter) -> None:
    with patch.object(adapter._session, "request", return_value=_response(200, {"transitions": [{"name": "x"}]})):
        with pytest.raises(IssueTrackerError):
            adapter.list_transitions("ABC-1")
