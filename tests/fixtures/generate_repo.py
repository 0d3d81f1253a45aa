#!/usr/bin/env python3
"""
Generate a throwaway local git repository with a few weeks of fake commits.

Useful for trying the legacy and repoDirs paths without a real client repo:

    python tests/fixtures/generate_repo.py /tmp/projects/acme-portal --weeks 3
    INVOICE_PROJECTS_DIR=/tmp/projects python src/scripts/create_legacy_invoice.py acme --dry-run
"""

import argparse
import os
import random
import subprocess
from collections import Counter
from datetime import datetime, time, timedelta
from pathlib import Path

from faker import Faker

# Initialize Faker
fake = Faker()

# Commit message prefixes, roughly in the mix a small client project sees
MESSAGE_TEMPLATES = [
    ("fix", "Fix {thing} when {condition}"),
    ("fix", "Bug: {thing} shows wrong {detail}"),
    ("feat", "Add {thing} to {area}"),
    ("feat", "Implement {thing} for {area}"),
    ("refactor", "Refactor {area} {thing}"),
    ("test", "Test coverage for {thing}"),
    ("docs", "Update readme for {area}"),
    ("style", "Style tweaks on {area} page"),
    ("db", "Migration for {thing} table"),
    ("api", "New endpoint for {thing}"),
    ("ci", "Deploy pipeline cleanup"),
    ("misc", "Bump version"),
]

AREAS = ["billing", "settings", "onboarding", "search", "profile", "admin"]

COMMITS_PER_WORKDAY = (1, 5)
WORKDAY_START_HOUR = 9
WORKDAY_HOURS = 8


def git(repo_dir: Path, *args: str, env: dict | None = None) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_dir,
        env={**os.environ, **(env or {})},
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def init_repo(repo_dir: Path) -> None:
    repo_dir.mkdir(parents=True, exist_ok=True)
    git(repo_dir, "init", "--quiet")
    git(repo_dir, "config", "user.name", fake.name())
    git(repo_dir, "config", "user.email", fake.email())


def fake_message() -> tuple[str, str]:
    kind, template = random.choice(MESSAGE_TEMPLATES)
    message = template.format(
        thing=fake.word(),
        condition=fake.word() + " is empty",
        detail=fake.word(),
        area=random.choice(AREAS),
    )
    return kind, message


def workdays(weeks: int) -> list[datetime]:
    """Weekdays (Mon-Fri) from `weeks` Sundays ago up to yesterday."""
    today = datetime.now().date()
    start = today - timedelta(days=(today.weekday() + 1) % 7 + 7 * weeks)
    days = []
    current = start
    while current < today:
        if current.weekday() < 5:
            days.append(datetime.combine(current, time(WORKDAY_START_HOUR)))
        current += timedelta(days=1)
    return days


def generate_commits(repo_dir: Path, weeks: int) -> Counter:
    """Write one empty commit per fake message; returns counts by kind."""
    kinds = Counter()

    for day in workdays(weeks):
        for _ in range(random.randint(*COMMITS_PER_WORKDAY)):
            kind, message = fake_message()
            when = day + timedelta(minutes=random.randint(0, WORKDAY_HOURS * 60))
            stamp = when.astimezone().isoformat()
            git(
                repo_dir,
                "commit",
                "--allow-empty",
                "--quiet",
                "-m",
                message,
                env={"GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp},
            )
            kinds[kind] += 1

    return kinds


def print_summary(repo_dir: Path, kinds: Counter) -> None:
    print(f"\nTotal commits generated: {sum(kinds.values())}")
    print("\nCommits by kind:")
    for kind, count in kinds.most_common():
        print(f"  {kind}: {count}")
    print(f"\nRepository saved to: {repo_dir}")


def main():
    parser = argparse.ArgumentParser(description="Generate a fake git repository for invoice testing")
    parser.add_argument("repo_dir", type=Path, help="Directory to create the repository in")
    parser.add_argument("--weeks", type=int, default=2, help="Weeks of history to generate")
    parser.add_argument("--seed", type=int, help="Seed for repeatable output")
    args = parser.parse_args()

    if args.seed is not None:
        Faker.seed(args.seed)
        random.seed(args.seed)

    print(f"Creating repository at {args.repo_dir}...")
    init_repo(args.repo_dir)
    kinds = generate_commits(args.repo_dir, args.weeks)
    print_summary(args.repo_dir, kinds)


if __name__ == "__main__":
    main()
