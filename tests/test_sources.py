"""Tests for local git access and commit source resolution."""

import asyncio
from datetime import date, datetime
from pathlib import Path

import httpx

from conftest import FakeRunner, github_commit, github_transport
from core.runner import CommandResult
from models.invoice import CommitWindow
from services.git_log import (
    build_log_command,
    find_project_directories,
    parse_log_output,
    resolve_repo_paths,
)
from services.github import GitHubClient
from services.sources import CommitSources, SourceResolver

WINDOW = CommitWindow(date(2024, 1, 7), date(2024, 1, 13))


def make_repo(path: Path) -> Path:
    (path / ".git").mkdir(parents=True)
    return path


def git_log_output(*entries: tuple[str, str]) -> str:
    return "".join(f"{when}\x1f{message}\x1e\n" for when, message in entries)


def local_runner(outputs: dict[str, str], failures: dict[str, str] | None = None) -> FakeRunner:
    """Answer `git log` per repository directory name."""
    failures = failures or {}

    def handler(cmd, input_text, cwd):
        name = Path(cwd).name
        if name in failures:
            return CommandResult(128, "", failures[name])
        return CommandResult(0, outputs.get(name, ""), "")

    return FakeRunner(handler)


def resolve(runner, sources, repos=None, status_codes=None, projects_dir=Path("/nonexistent")):
    async def run():
        transport = github_transport(repos or {}, status_codes)
        async with GitHubClient(transport=transport) as github:
            resolver = SourceResolver(github, runner, projects_dir)
            return await resolver.resolve(WINDOW, sources)

    return asyncio.run(run())


# =============================================================================
# GIT LOG
# =============================================================================


def test_build_log_command_bounds_whole_days():
    cmd = build_log_command(WINDOW)

    assert cmd[:3] == ["git", "log", "--all"]
    assert "--since=2024-01-07T00:00:00" in cmd
    assert "--until=2024-01-13T23:59:59" in cmd


def test_parse_log_output():
    output = git_log_output(
        ("2024-01-08T10:15:00-05:00", "fix login - again"),
        ("not-a-date", "ignored"),
        ("2024-01-09T09:00:00+00:00", "add signup"),
    )

    records = parse_log_output(output, "portal")

    assert [r.message for r in records] == ["fix login - again", "add signup"]
    assert all(r.repo == "portal" for r in records)
    assert records[0].date.hour == 10


def test_resolve_repo_paths_keeps_only_git_repos(tmp_path):
    make_repo(tmp_path / "acme-web")
    make_repo(tmp_path / "acme-api")
    (tmp_path / "acme-notes").mkdir()

    paths = resolve_repo_paths([str(tmp_path / "acme-*")])

    assert [p.name for p in paths] == ["acme-api", "acme-web"]


def test_overlapping_patterns_are_not_deduplicated(tmp_path):
    make_repo(tmp_path / "acme-web")

    paths = resolve_repo_paths([str(tmp_path / "acme-*"), str(tmp_path / "*-web")])

    assert [p.name for p in paths] == ["acme-web", "acme-web"]


def test_find_project_directories_is_case_insensitive(tmp_path):
    make_repo(tmp_path / "Acme-Portal")
    make_repo(tmp_path / "tools-acme")
    make_repo(tmp_path / "globex")
    (tmp_path / "acme-docs").mkdir()

    dirs = find_project_directories(tmp_path, "ACME")

    assert [d.name for d in dirs] == ["Acme-Portal", "tools-acme"]


def test_find_project_directories_missing_base(tmp_path):
    assert find_project_directories(tmp_path / "missing", "acme") == []


# =============================================================================
# RESOLUTION POLICY
# =============================================================================


def test_remote_commits_win_and_local_is_not_read(tmp_path):
    make_repo(tmp_path / "portal")
    runner = local_runner({"portal": git_log_output(("2024-01-08T10:00:00+00:00", "local fix"))})
    sources = CommitSources(repos=["acme-corp/portal"], repo_dirs=[str(tmp_path / "*")])

    result = resolve(
        runner,
        sources,
        repos={"acme-corp/portal": [github_commit("remote fix", datetime(2024, 1, 8))]},
    )

    assert [c.message for c in result.commits] == ["remote fix"]
    assert result.used_fallback is False
    assert runner.calls == []


def test_remote_zero_falls_back_to_local_only(tmp_path):
    make_repo(tmp_path / "portal")
    runner = local_runner(
        {
            "portal": git_log_output(
                ("2024-01-08T10:00:00+00:00", "local fix"),
                ("2024-01-09T10:00:00+00:00", "local feat"),
            )
        }
    )
    sources = CommitSources(repos=["acme-corp/portal"], repo_dirs=[str(tmp_path / "*")])

    result = resolve(runner, sources, repos={"acme-corp/portal": []})

    assert [c.message for c in result.commits] == ["local fix", "local feat"]
    assert {c.repo for c in result.commits} == {"portal"}
    assert result.used_fallback is True
    assert [f.source for f in result.fetches] == ["acme-corp/portal", str(tmp_path / "portal")]


def test_failing_remote_is_skipped_and_others_still_count():
    sources = CommitSources(repos=["acme-corp/private", "acme-corp/portal"])

    result = resolve(
        FakeRunner(),
        sources,
        repos={"acme-corp/portal": [github_commit("remote fix", datetime(2024, 1, 8))]},
        status_codes={"acme-corp/private": 500},
    )

    assert [c.message for c in result.commits] == ["remote fix"]
    failed, succeeded = result.fetches
    assert not failed.ok and failed.error
    assert succeeded.ok
    assert result.used_fallback is False


def test_all_remotes_failing_falls_back_to_local(tmp_path):
    make_repo(tmp_path / "portal")
    runner = local_runner({"portal": git_log_output(("2024-01-08T10:00:00+00:00", "local fix"))})
    sources = CommitSources(repos=["acme-corp/portal"], repo_dirs=[str(tmp_path / "*")])

    result = resolve(runner, sources, status_codes={"acme-corp/portal": 403})

    assert [c.message for c in result.commits] == ["local fix"]
    assert result.used_fallback is True


def test_local_failure_degrades_to_empty_result(tmp_path):
    make_repo(tmp_path / "broken")
    make_repo(tmp_path / "portal")
    runner = local_runner(
        {"portal": git_log_output(("2024-01-08T10:00:00+00:00", "local fix"))},
        failures={"broken": "fatal: bad object HEAD"},
    )

    result = resolve(runner, CommitSources(repo_dirs=[str(tmp_path / "*")]))

    assert [c.message for c in result.commits] == ["local fix"]
    broken = result.fetches[0]
    assert broken.source.endswith("broken")
    assert broken.error == "fatal: bad object HEAD"


def test_fallback_key_searches_projects_dir(tmp_path):
    make_repo(tmp_path / "acme-portal")
    make_repo(tmp_path / "globex")
    runner = local_runner({"acme-portal": git_log_output(("2024-01-08T10:00:00+00:00", "fix"))})

    result = resolve(runner, CommitSources(fallback_key="acme"), projects_dir=tmp_path)

    assert [c.repo for c in result.commits] == ["acme-portal"]
    assert [Path(call["cwd"]).name for call in runner.calls] == ["acme-portal"]


def test_explicit_patterns_take_priority_over_fallback_key(tmp_path):
    projects = tmp_path / "projects"
    make_repo(projects / "acme-portal")
    make_repo(tmp_path / "elsewhere" / "client-app")
    runner = local_runner({})

    resolve(
        runner,
        CommitSources(repo_dirs=[str(tmp_path / "elsewhere" / "*")], fallback_key="acme"),
        projects_dir=projects,
    )

    assert [Path(call["cwd"]).name for call in runner.calls] == ["client-app"]


def test_no_sources_at_all():
    result = resolve(FakeRunner(), CommitSources())

    assert result.commits == []
    assert result.source_count == 0


# =============================================================================
# MALFORMED INPUT
# =============================================================================


def test_unexpected_remote_payload_becomes_failed_fetch(tmp_path):
    make_repo(tmp_path / "portal")
    runner = local_runner({"portal": git_log_output(("2024-01-08T10:00:00+00:00", "local fix"))})
    sources = CommitSources(repos=["acme-corp/portal"], repo_dirs=[str(tmp_path / "*")])

    async def run():
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"message": "Moved"}))
        async with GitHubClient(transport=transport) as github:
            return await SourceResolver(github, runner, Path("/nonexistent")).resolve(WINDOW, sources)

    result = asyncio.run(run())

    remote = result.fetches[0]
    assert remote.source == "acme-corp/portal"
    assert "expected a list" in remote.error
    assert [c.message for c in result.commits] == ["local fix"]
    assert result.used_fallback is True


def test_invalid_repo_identifier_becomes_failed_fetch():
    result = resolve(FakeRunner(), CommitSources(repos=["acme-corp/portal\n"]))

    assert result.commits == []
    assert result.fetches[0].source == "acme-corp/portal\n"
    assert not result.fetches[0].ok


def test_unreadable_directories_are_skipped(tmp_path, monkeypatch, capsys):
    make_repo(tmp_path / "acme-portal")
    real_exists = Path.exists

    def exists(self, *args, **kwargs):
        if self.name == ".git":
            raise PermissionError(13, "Permission denied", str(self))
        return real_exists(self, *args, **kwargs)

    monkeypatch.setattr(Path, "exists", exists)

    assert find_project_directories(tmp_path, "acme") == []
    assert resolve_repo_paths([str(tmp_path / "*")]) == []
    assert "Permission denied" in capsys.readouterr().out
