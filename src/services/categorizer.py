"""
Keyword categorization of commit messages into billing categories.
"""

from dataclasses import dataclass

from models.invoice import CommitRecord, TaskSummary

GENERAL_CATEGORY = "General development and maintenance"


@dataclass(frozen=True)
class CategoryRule:
    """A label and the keywords that select it."""

    keywords: tuple[str, ...]
    label: str

    def matches(self, message: str) -> bool:
        return any(keyword in message for keyword in self.keywords)


# Evaluated in order; the first matching rule wins. Keywords are plain
# substrings, so "build" also matches "ui" and lands in UI/UX.
CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(("fix", "bug", "error"), "Bug fixes and error resolution"),
    CategoryRule(("feat", "add", "implement"), "New feature development"),
    CategoryRule(("refactor", "clean", "optimize"), "Code refactoring and optimization"),
    CategoryRule(("test", "spec"), "Testing and quality assurance"),
    CategoryRule(("doc", "readme"), "Documentation updates"),
    CategoryRule(("ui", "style", "css"), "UI/UX improvements"),
    CategoryRule(("data", "database", "migration"), "Database and data management"),
    CategoryRule(("api", "endpoint", "route"), "API development and updates"),
    CategoryRule(("deploy", "build", "ci"), "Deployment and DevOps"),
    CategoryRule(("fax",), "Fax system development"),
    CategoryRule(("dashboard", "insight", "report"), "Dashboard and reporting features"),
    CategoryRule(("transfer", "patient"), "Patient transfer workflow"),
)


def get_commit_category(message: str, rules: tuple[CategoryRule, ...] = CATEGORY_RULES) -> str:
    """Return the label of the first rule matching the lower-cased message."""
    text = message.lower()
    for rule in rules:
        if rule.matches(text):
            return rule.label
    return GENERAL_CATEGORY


def categorize_commits(commits: list[CommitRecord]) -> list[TaskSummary]:
    """
    Group commits by category, most commits first.

    Hours are left at 0 for the allocator. Ties keep first-seen order.
    """
    counts: dict[str, int] = {}
    for commit in commits:
        category = get_commit_category(commit.message)
        counts[category] = counts.get(category, 0) + 1

    tasks = [TaskSummary(description=label, commit_count=count) for label, count in counts.items()]
    # sort() is stable, so equal counts stay in insertion order
    tasks.sort(key=lambda task: task.commit_count, reverse=True)
    return tasks
