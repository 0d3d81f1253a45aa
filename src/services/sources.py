"""
Commit source resolution: GitHub first, local clones as fallback.

Remote repositories are always queried when configured. Local clones are
read only when the remotes produced zero commits, so one window's commits
come from one side or the other, never both.
"""

from dataclasses import dataclass, field
from pathlib import Path

import httpx

from core.errors import SourceFetchError
from core.runner import CommandRunner
from models.invoice import CommitWindow, FetchResult, ResolveResult
from services import git_log
from services.github import GitHubClient


@dataclass
class CommitSources:
    """Where to look for commits."""

    repos: list[str] = field(default_factory=list)  # GitHub "owner/name"
    repo_dirs: list[str] = field(default_factory=list)  # local glob patterns
    fallback_key: str | None = None  # e.g. customer name, searched under projects_dir

    @property
    def explicit(self) -> bool:
        return bool(self.repos or self.repo_dirs)


class SourceResolver:
    """Fetches CommitRecords for a window. Source failures never raise past here."""

    def __init__(
        self,
        github: GitHubClient,
        runner: CommandRunner,
        projects_dir: Path,
        verbose: bool = False,
    ):
        self.github = github
        self.runner = runner
        self.projects_dir = projects_dir
        self.verbose = verbose

    async def fetch_remote(self, repo: str, window: CommitWindow) -> FetchResult:
        try:
            commits = await self.github.fetch_commit_records(repo, window)
        except SourceFetchError as e:
            print(f"  Could not fetch GitHub commits from {repo}: {e.reason}")
            return FetchResult(source=repo, error=e.reason)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            print(f"  Could not fetch GitHub commits from {repo!r}: {e}")
            return FetchResult(source=repo, error=str(e) or type(e).__name__)

        if self.verbose:
            print(f"  Found {len(commits)} commits in {repo}")
        return FetchResult(source=repo, commits=commits)

    async def fetch_local(self, repo_dir: Path, window: CommitWindow) -> FetchResult:
        try:
            commits = await git_log.read_commits(self.runner, repo_dir, window)
        except SourceFetchError as e:
            print(f"  Could not read git log from {repo_dir}: {e.reason}")
            return FetchResult(source=str(repo_dir), error=e.reason)

        if self.verbose:
            print(f"  Found {len(commits)} commits in {repo_dir.name}")
        return FetchResult(source=str(repo_dir), commits=commits)

    def local_directories(self, sources: CommitSources) -> list[Path]:
        """Explicit glob patterns win; otherwise search projects_dir by fallback key."""
        if sources.repo_dirs:
            return git_log.resolve_repo_paths(sources.repo_dirs, verbose=self.verbose)
        if sources.fallback_key:
            return git_log.find_project_directories(self.projects_dir, sources.fallback_key)
        return []

    async def resolve(self, window: CommitWindow, sources: CommitSources) -> ResolveResult:
        """Return every commit in the window from the first source tier that has any."""
        result = ResolveResult()

        if sources.repos:
            if self.verbose:
                print(f"Fetching commits from GitHub repos: {', '.join(sources.repos)}")
            for repo in sources.repos:
                fetch = await self.fetch_remote(repo, window)
                result.fetches.append(fetch)
                result.commits.extend(fetch.commits)

        if result.commits:
            return result

        if self.verbose:
            print("No GitHub commits found, falling back to local repositories...")
        result.used_fallback = True

        project_dirs = self.local_directories(sources)
        if self.verbose and project_dirs:
            print(f"Found {len(project_dirs)} local directories:")
            for project_dir in project_dirs:
                print(f"  - {project_dir}")

        for project_dir in project_dirs:
            fetch = await self.fetch_local(project_dir, window)
            result.fetches.append(fetch)
            result.commits.extend(fetch.commits)

        return result
