"""
Async GitHub REST client for listing commits in a date window.
"""

import re
from datetime import datetime, time, timezone

import httpx

from core.config import GITHUB_API_URL
from core.errors import SourceFetchError
from models.invoice import CommitRecord, CommitWindow

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')

MAX_PAGES = 20


def repo_label(repo: str) -> str:
    """'owner/name' -> 'name'; identifiers without a slash are used as-is."""
    parts = repo.split("/")
    return parts[1] if len(parts) > 1 and parts[1] else repo


def window_bounds(window: CommitWindow) -> tuple[datetime, datetime]:
    """UTC datetimes covering the first and last day of the window in full."""
    since = datetime.combine(window.start, time.min, tzinfo=timezone.utc)
    until = datetime.combine(window.end, time(23, 59, 59), tzinfo=timezone.utc)
    return since, until


def parse_commit_date(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubClient:
    """Thin async wrapper around the GitHub commits API."""

    def __init__(self, token: str = "", transport: httpx.AsyncBaseTransport | None = None):
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=GITHUB_API_URL,
            headers=headers,
            timeout=30.0,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def list_commits(self, repo: str, window: CommitWindow) -> list[dict]:
        """
        Return commits authored inside the window as {message, date, author} dicts.

        Follows Link pagination.

        Raises:
            httpx.HTTPError: request or status failure
            SourceFetchError: response body is not a list of commit objects
        """
        since, until = window_bounds(window)
        url: str | None = f"/repos/{repo}/commits"
        params: dict | None = {
            "since": since.isoformat(),
            "until": until.isoformat(),
            "per_page": 100,
        }
        commits = []
        page = 0

        while url and page < MAX_PAGES:
            response = await self._client.get(url, params=params)
            response.raise_for_status()

            items = response.json()
            if not isinstance(items, list):
                raise SourceFetchError(repo, f"expected a list of commits, got {type(items).__name__}")

            for item in items:
                if not isinstance(item, dict):
                    raise SourceFetchError(repo, f"unexpected commit entry: {item!r}")
                commit = item.get("commit") or {}
                if not isinstance(commit, dict):
                    raise SourceFetchError(repo, "malformed commit entry")
                author = commit.get("author") or {}
                if not isinstance(author, dict):
                    raise SourceFetchError(repo, "malformed commit author")
                entry = {
                    "message": commit.get("message") or "",
                    "date": author.get("date") or "",
                    "author": author.get("name") or "",
                }
                if not all(isinstance(value, str) for value in entry.values()):
                    raise SourceFetchError(repo, "malformed commit fields")
                commits.append(entry)

            match = _NEXT_LINK_RE.search(response.headers.get("Link", ""))
            url = match.group(1) if match else None
            params = None  # next link already carries the query string
            page += 1

        return commits

    async def fetch_commit_records(self, repo: str, window: CommitWindow) -> list[CommitRecord]:
        """List commits for `repo` as CommitRecords labelled with the repo name."""
        label = repo_label(repo)
        records = []
        for data in await self.list_commits(repo, window):
            if not data["date"]:
                continue
            records.append(
                CommitRecord(message=data["message"], date=parse_commit_date(data["date"]), repo=label)
            )
        return records
