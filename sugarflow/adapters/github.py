"""GitHub API adapter."""

from typing import Any, Dict

import requests

from sugarflow.adapters.base import CodeHostAdapter, CodeHostError
from sugarflow.models import PR


def _pr_from_api(data: Dict[str, Any]) -> PR:
    head = data.get("head") or {}
    base = data.get("base") or {}
    return PR(
        number=data["number"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        head_branch=head.get("ref", ""),
        base_branch=base.get("ref", ""),
        state=data.get("state", "open"),
        html_url=data.get("html_url"),
    )


def _error_message(resp: requests.Response) -> str:
    """Extract GitHub's message (and first detailed error) from an error response."""
    msg = resp.text or resp.reason or str(resp.status_code)
    try:
        data = resp.json()
    except ValueError:
        return msg
    if not isinstance(data, dict):
        return msg
    msg = data.get("message", msg)
    errors = data.get("errors") or []
    if errors and isinstance(errors[0], dict) and errors[0].get("message"):
        msg = f"{msg} ({errors[0]['message']})"
    return msg


class GitHubAdapter(CodeHostAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

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
            raise CodeHostError(f"Request to {url} failed: {e}") from e
        if resp.status_code >= 400:
            raise CodeHostError(f"{resp.status_code}: {_error_message(resp)}")
        return resp

    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PR:
        resp = self._request(
            "POST",
            f"/repos/{repo}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        try:
            return _pr_from_api(resp.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CodeHostError(f"Unexpected pull request response: {e!r}") from e
