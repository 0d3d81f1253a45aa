"""
Invoice Generation Service

Builds a client invoice from git history. For each week in the billing
window, commits are fetched (GitHub first, local clones as fallback),
grouped into work categories, and the configured weekly hours are split
across those categories. Optionally an AI pipeline rewrites the categories
into client-friendly line items for the whole window.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date, timedelta

import httpx

from core.config import DEFAULT_HOURS_PER_WEEK, DEFAULT_WEEKS, Settings
from core.runner import CommandRunner
from models.config import AIConfig, InvoiceConfig
from models.invoice import CommitRecord, CommitWindow, InvoiceData, ResolveResult, TaskSummary, WeeklyWork
from services.ai import AIClient, parse_ai_line_items, run_ai_analysis
from services.allocator import distribute_hours, round_to_half
from services.categorizer import categorize_commits
from services.github import GitHubClient
from services.sources import CommitSources, SourceResolver


# =============================================================================
# PIPELINE WIRING
# =============================================================================


@dataclass
class InvoicePipeline:
    """The I/O collaborators one generation run needs."""

    resolver: SourceResolver
    ai_client: AIClient | None = None


@asynccontextmanager
async def open_pipeline(
    settings: Settings,
    verbose: bool = False,
    runner: CommandRunner | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[InvoicePipeline]:
    """Build a pipeline from settings and close its HTTP client afterwards."""
    runner = runner or CommandRunner()
    async with GitHubClient(settings.github_token, transport=transport) as github:
        yield InvoicePipeline(
            resolver=SourceResolver(github, runner, settings.projects_dir, verbose=verbose),
            ai_client=AIClient(settings.ai_command, runner, timeout=settings.ai_timeout),
        )


# =============================================================================
# DATES & FORMATTING
# =============================================================================


def start_of_week(d: date) -> date:
    """Sunday on or before d."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def end_of_week(d: date) -> date:
    """Saturday on or after d."""
    return start_of_week(d) + timedelta(days=6)


def resolve_window(
    weeks: int,
    start_date: date | None = None,
    end_date: date | None = None,
    today: date | None = None,
) -> tuple[date, date]:
    """
    Work out the billing window.

    End defaults to the end of the previous calendar week; start defaults
    to the Sunday `weeks - 1` weeks before the end.
    """
    today = today or date.today()
    end = end_date or end_of_week(today - timedelta(weeks=1))
    start = start_date or start_of_week(end - timedelta(weeks=weeks - 1))
    return start, end


def format_long_date(d: date) -> str:
    """Format date as 'January 7, 2024'."""
    return d.strftime("%B %d, %Y").replace(" 0", " ")


def format_date_range(week_start: date, week_end: date) -> str:
    """Format as 'January 1 - January 7, 2024'."""
    return f"{week_start.strftime('%B')} {week_start.day} - {format_long_date(week_end)}"


def format_hours(hours: float) -> str:
    """Hours as written in the config ('37.25', '2.5', '30'), float noise rounded off at 2 decimals."""
    value = round(float(hours), 2)
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_invoice(weeks: list[WeeklyWork]) -> str:
    """Render the plain-text invoice body."""
    lines = []

    for week in weeks:
        lines.append(f"{week.date_range_label} ----- {format_hours(week.total_hours)}hrs")
        for task in week.tasks:
            if task.hours > 0:
                lines.append(f"{format_hours(task.hours)}hr - {task.description}")
        lines.append("")

    return "\n".join(lines).strip()


# =============================================================================
# WEEKLY ANALYSIS
# =============================================================================


async def analyze_week(
    resolver: SourceResolver,
    week_start: date,
    week_end: date,
    hours_per_week: float,
    sources: CommitSources,
) -> tuple[WeeklyWork, ResolveResult]:
    """Fetch, categorize, and allocate hours for one week."""
    resolved = await resolver.resolve(CommitWindow(week_start, week_end), sources)

    if resolver.verbose:
        print(f"Total commits found: {len(resolved.commits)}")

    tasks = distribute_hours(categorize_commits(resolved.commits), hours_per_week)
    week = WeeklyWork(
        week_start=week_start,
        week_end=week_end,
        date_range_label=format_date_range(week_start, week_end),
        total_hours=hours_per_week,
        tasks=tasks,
    )
    return week, resolved


def redistribute_ai_tasks(weeks: list[WeeklyWork], ai_tasks: list[TaskSummary]) -> list[list[TaskSummary]]:
    """
    Split whole-window AI line items into each week by that week's share of hours.

    Returns the new task list for every week, in order.
    """
    grand_total = sum(week.total_hours for week in weeks)
    per_week = []

    for week in weeks:
        proportion = week.total_hours / grand_total
        tasks = [
            TaskSummary(
                description=task.description,
                hours=round_to_half(task.hours * proportion),
                commit_count=task.commit_count,
            )
            for task in ai_tasks
        ]
        per_week.append([task for task in tasks if task.hours > 0])

    return per_week


async def apply_ai_line_items(
    weeks: list[WeeklyWork],
    commits: list[CommitRecord],
    total_hours: float,
    ai_config: AIConfig,
    ai_client: AIClient,
    verbose: bool = False,
) -> bool:
    """
    Replace every week's tasks with AI line items.

    Returns False, leaving all weeks untouched, when the AI produced nothing usable.
    """
    if total_hours <= 0:
        return False

    ai_result = await run_ai_analysis(commits, total_hours, ai_config, ai_client, verbose)
    if not ai_result.line_items:
        return False

    ai_tasks = parse_ai_line_items(ai_result.line_items)
    if not ai_tasks:
        print("AI output contained no line items, keeping standard categorization")
        return False

    new_tasks = redistribute_ai_tasks(weeks, ai_tasks)
    for week, tasks in zip(weeks, new_tasks):
        week.tasks = tasks
    return True


# =============================================================================
# MAIN ENTRY POINTS
# =============================================================================


async def generate_invoice(
    customer: str,
    pipeline: InvoicePipeline,
    weeks: int = DEFAULT_WEEKS,
    start_date: date | None = None,
    end_date: date | None = None,
    hours_per_week: float = DEFAULT_HOURS_PER_WEEK,
    sources: CommitSources | None = None,
    ai_config: AIConfig | None = None,
    today: date | None = None,
    verbose: bool = False,
) -> InvoiceData | None:
    """
    Generate an invoice for `customer`.

    Without explicit sources the customer name is used to find local clones;
    in that mode None is returned when no source could be found at all.
    With explicit sources an invoice is always returned, even with no commits.
    """
    sources = sources or CommitSources(fallback_key=customer)
    window_start, window_end = resolve_window(weeks, start_date, end_date, today)

    if verbose:
        print(f"Analyzing commits from {window_start.isoformat()} to {window_end.isoformat()}")

    weekly_work: list[WeeklyWork] = []
    all_commits: list[CommitRecord] = []
    source_count = 0
    current_week_start = window_start

    while current_week_start <= window_end:
        current_week_end = end_of_week(current_week_start)
        week, resolved = await analyze_week(
            pipeline.resolver,
            current_week_start,
            current_week_end,
            hours_per_week,
            sources,
        )
        weekly_work.append(week)
        all_commits.extend(resolved.commits)
        source_count += resolved.source_count
        current_week_start += timedelta(weeks=1)

    if not sources.explicit and source_count == 0:
        print(f"No repositories found for customer '{customer}'")
        return None

    total_hours = sum(week.total_hours for week in weekly_work)

    if ai_config and ai_config.enabled and all_commits and pipeline.ai_client:
        try:
            await apply_ai_line_items(
                weekly_work, all_commits, total_hours, ai_config, pipeline.ai_client, verbose
            )
        except Exception as e:
            print(f"AI analysis failed, using standard categorization: {e}")

    return InvoiceData(
        customer=customer,
        start_date_label=format_long_date(window_start),
        end_date_label=format_long_date(window_end),
        formatted_text=format_invoice(weekly_work),
        total_hours=total_hours,
        weeks=tuple(weekly_work),
    )


async def generate_invoice_from_config(
    config: InvoiceConfig,
    pipeline: InvoicePipeline,
    today: date | None = None,
    verbose: bool = False,
) -> InvoiceData | None:
    """Generate an invoice from a configuration entry."""
    sources = CommitSources(
        repos=list(config.git.repos),
        repo_dirs=list(config.git.repo_dirs),
        fallback_key=config.customer,
    )
    return await generate_invoice(
        config.customer,
        pipeline,
        weeks=config.git.weeks,
        hours_per_week=config.git.hours_per_week,
        sources=sources,
        ai_config=config.ai,
        today=today,
        verbose=verbose,
    )
