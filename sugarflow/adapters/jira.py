"""Jira REST v2 adapter (basic auth with account email + API token)."""

from typing import Any, Dict, List

import requests

from sugarflow.adapters.base import IssueTrackerAdapter, IssueTrackerError, NotFoundError
from sugarflow.models import Ticket, Transition

API_PREFIX = "/rest/api/2"


def _ticket_from_api(data: Dict[str, Any], key: str) -> Ticket:
    fields = data.get("fields") or {}
    status = fields.get("status") or {}
    assignee = fields.get("assignee") or {}
    return Ticket(
        key=data.get("key") or key,
        summary=fields.get("summary") or "",
        description=fields.get("description"),
        status=status.get("name", ""),
        assignee_email=assignee.get("emailAddress"),
    )


def _transition_from_api(data: Dict[str, Any]) -> Transition:
    to = data.get("to") or {}
    return Transition(
        id=str(data["id"]),
        name=data.get("name") or "",
        to_status=to.get("name", ""),
    )


def _error_message(resp: requests.Response) -> str:
    """Join Jira's errorMessages and field errors, falling back to the raw body."""
    msg = resp.text or resp.reason or str(resp.status_code)
    try:
        data = resp.json()
    except ValueError:
        return msg
    if not isinstance(data, dict):
        return msg
    parts = list(data.get("errorMessages") or [])
    parts.extend(f"{k}: {v}" for k, v in (data.get("errors") or {}).items())
    return "; ".join(parts) or msg


class JiraAdapter(IssueTrackerAdapter):
    """Jira Cloud / Server implementation."""

    def __init__(self, domain: str, username: str, token: str) -> None:
        self._domain = domain.rstrip("/")
        self._api_url = f"{self._domain}{API_PREFIX}"
        self._session = requests.Session()
        self._session.auth = (username, token)
        self._session.headers["Accept"] = "application/json"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        url = f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"
        try:
            resp = self._session.request(method, url, params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise IssueTrackerError(f"Request to {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise IssueTrackerError(f"{resp.status_code}: {_error_message(resp)}")
        return resp

    def _json(self, resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise IssueTrackerError(f"Invalid JSON from {resp.url}: {e}") from e

    def get_issue(self, key: str, fields: List[str]) -> Ticket:
        try:
            resp = self._request("GET", f"/issue/{key}", params={"fields": ",".join(fields)})
            return _ticket_from_api(self._json(resp), key)
        except IssueTrackerError as e:
            raise NotFoundError(f"Ticket {key} not found: {e}") from e
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise NotFoundError(f"Ticket {key} not found: unexpected response ({e!r})") from e

    def get_field(self, key: str, field_id: str) -> Any:
        resp = self._request("GET", f"/issue/{key}", params={"fields": field_id})
        try:
            fields = self._json(resp).get("fields") or {}
            return fields.get(field_id)
        except AttributeError as e:
            raise IssueTrackerError(f"Unexpected issue payload for {key}: {e}") from e

    def find_user_by_email(self, email: str) -> str:
        resp = self._request("GET", "/user/search", params={"query": email})
        users = self._json(resp) or []
        if not users:
            raise NotFoundError(f"No user found with email {email}")
        try:
            return users[0]["accountId"]
        except (KeyError, TypeError, IndexError) as e:
            raise IssueTrackerError(f"User search for {email} returned no accountId") from e

    def assign_issue(self, key: str, account_id: str) -> None:
        self._request("PUT", f"/issue/{key}/assignee", json={"accountId": account_id})

    def list_transitions(self, key: str) -> List[Transition]:
        resp = self._request("GET", f"/issue/{key}/transitions")
        data = self._json(resp) or {}
        try:
            return [_transition_from_api(t) for t in data.get("transitions") or []]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise IssueTrackerError(f"Unexpected transitions payload for {key}: {e!r}") from e

    def transition_issue(self, key: str, transition_id: str) -> None:
        self._request("POST", f"/issue/{key}/transitions", json={"transition": {"id": transition_id}})

    def set_custom_field(self, key: str, field_id: str, value: Any) -> None:
        self._request("PUT", f"/issue/{key}", json={"fields": {field_id: value}})

    def browse_url(self, key: str) -> str:
        return f"{self._domain}/browse/{key}"
