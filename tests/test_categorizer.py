"""Tests for keyword categorization of commit messages."""

import pytest

from services.categorizer import (
    CATEGORY_RULES,
    GENERAL_CATEGORY,
    categorize_commits,
    get_commit_category,
)


@pytest.mark.parametrize(
    "message,expected",
    [
        ("Fix login redirect", "Bug fixes and error resolution"),
        ("Handle ERROR from payment gateway", "Bug fixes and error resolution"),
        ("feat: invoice export", "New feature development"),
        ("Implement password reset", "New feature development"),
        ("Optimize image loading", "Code refactoring and optimization"),
        ("Write spec for parser", "Testing and quality assurance"),
        ("Update README", "Documentation updates"),
        ("CSS tweaks on header", "UI/UX improvements"),
        ("Migration for orders table", "Database and data management"),
        ("New endpoint for orders", "API development and updates"),
        ("deploy to staging", "Deployment and DevOps"),
        ("Fax queue retries", "Fax system development"),
        ("Weekly insight emails", "Dashboard and reporting features"),
        ("Patient intake flow", "Patient transfer workflow"),
        ("Bump version", GENERAL_CATEGORY),
    ],
)
def test_get_commit_category(message, expected):
    assert get_commit_category(message) == expected


def test_first_matching_rule_wins():
    # "fix" comes before "feat" in the rule order
    assert get_commit_category("feat: fix the new widget") == "Bug fixes and error resolution"


def test_keywords_match_as_substrings():
    # "build" contains "ui", and UI/UX is checked before Deployment
    assert get_commit_category("build pipeline") == "UI/UX improvements"


def test_rule_order_is_fixed():
    labels = [rule.label for rule in CATEGORY_RULES]
    assert labels[0] == "Bug fixes and error resolution"
    assert labels[1] == "New feature development"
    assert labels[8] == "Deployment and DevOps"
    assert len(labels) == 12


def test_categorize_groups_and_sorts_by_count(make_commit):
    commits = [make_commit("feat: thing")] * 3 + [make_commit("fix bug")] * 7
    tasks = categorize_commits(commits)

    assert [task.description for task in tasks] == [
        "Bug fixes and error resolution",
        "New feature development",
    ]
    assert [task.commit_count for task in tasks] == [7, 3]
    assert all(task.hours == 0 for task in tasks)


def test_ties_keep_first_seen_order(make_commit):
    commits = [
        make_commit("Update docs"),
        make_commit("fix crash"),
        make_commit("Bump version"),
        make_commit("fix typo"),
        make_commit("docs for api"),
    ]
    tasks = categorize_commits(commits)

    assert [task.description for task in tasks] == [
        "Documentation updates",
        "Bug fixes and error resolution",
        GENERAL_CATEGORY,
    ]


def test_categorize_is_deterministic(fake, make_commit):
    messages = [fake.sentence() for _ in range(40)]
    commits = [make_commit(message) for message in messages]

    first = categorize_commits(commits)
    second = categorize_commits(commits)

    assert first == second


def test_categorize_empty():
    assert categorize_commits([]) == []
