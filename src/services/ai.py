"""
AI line-item pipeline.

Stage 1 turns the raw commit list into a narrative of the work done.
Stage 2 turns that narrative into "<hours>hr - <description>" invoice lines.
Both stages call an external text-generation command and are best-effort:
any failure yields an empty result and the caller keeps its heuristic tasks.
"""

import re
from dataclasses import dataclass

from core.errors import AIStageError
from core.runner import CommandRunner
from models.config import AIConfig
from models.invoice import CommitRecord, TaskSummary

DEFAULT_CODE_ANALYSIS_PROMPT = """You are analyzing git commits and code changes for an invoice.

Your task: Review the provided commit messages and identify what was actually built, fixed, or improved.

Focus on:
- Specific features added (not generic "new features")
- Specific bugs fixed (not generic "bug fixes")
- Infrastructure/DevOps changes
- Performance improvements
- Refactoring with clear business value

Be concise but specific. Write in past tense. Group related work together.

Output format: A detailed analysis of work completed, organized by theme or feature area.

Commit data will be provided below. Analyze and summarize the actual work done:"""

DEFAULT_LINE_ITEM_PROMPT = """You are generating professional invoice line items from a code analysis.

Your task: Convert the technical analysis into clear, client-friendly invoice line items with hour estimates.

Guidelines:
- Use professional, non-technical language
- Be specific about what was delivered
- Each line item should describe tangible value
- Assign realistic hours based on complexity
- Group related work into logical line items
- Total hours must match the specified amount

Format each line item as:
[hours]hr - [Description of work]

Example:
12hr - Enhanced queue processing with real-time status tracking and error recovery
8hr - Resolved authentication and access control issues across API endpoints
6hr - Improved document storage infrastructure and performance
4hr - Code refactoring and technical debt reduction

The code analysis and total hours will be provided below. Generate professional line items:"""

# "12hr - Foo", "2.5hr - Foo", "**12hr** - Foo"
LINE_ITEM_RE = re.compile(r"\*{0,2}(\d+(?:\.\d+)?)hr\*{0,2}\s*-\s*(.+)$", re.IGNORECASE)

PREVIEW_CHARS = 200


@dataclass
class AIAnalysisResult:
    code_analysis: str = ""
    line_items: str = ""


class AIClient:
    """Runs prompts through an external text-generation command (prompt on stdin)."""

    def __init__(self, command: list[str], runner: CommandRunner, timeout: float | None = None):
        self.command = command
        self.runner = runner
        self.timeout = timeout

    async def run(self, prompt: str) -> str:
        """
        Return the command's stdout for `prompt`.

        Raises:
            AIStageError: command missing, timed out, or exited non-zero
        """
        try:
            result = await self.runner.run(self.command, input_text=prompt, timeout=self.timeout)
        except OSError as e:
            raise AIStageError(f"{' '.join(self.command)} failed: {e}") from e

        if not result.ok:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise AIStageError(f"{' '.join(self.command)} failed: {detail}")
        return result.stdout.strip()


def build_code_analysis_prompt(commits: list[CommitRecord], prompt: str | None = None) -> str:
    commit_summary = "\n".join(
        f"{index}. [{commit.repo}] {commit.message}" for index, commit in enumerate(commits, start=1)
    )
    return (
        f"{prompt or DEFAULT_CODE_ANALYSIS_PROMPT}\n\n"
        f"=== COMMIT DATA ===\n{commit_summary}\n\n=== END COMMIT DATA ===\n\n"
        "Provide your analysis:"
    )


def build_line_item_prompt(code_analysis: str, total_hours: float, prompt: str | None = None) -> str:
    return (
        f"{prompt or DEFAULT_LINE_ITEM_PROMPT}\n\n"
        f"=== CODE ANALYSIS ===\n{code_analysis}\n\n=== END CODE ANALYSIS ===\n\n"
        f"Total hours to allocate: {format_number(total_hours)}\n\n"
        "Generate invoice line items:"
    )


def format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


async def analyze_code_changes(
    commits: list[CommitRecord],
    config: AIConfig,
    client: AIClient,
    verbose: bool = False,
) -> str:
    """Stage 1: narrative of the work behind the commits ('' when disabled or failed)."""
    if not config.enabled or not config.code_analysis.enabled or not commits:
        return ""

    if verbose:
        print(f"\nAI Stage 1: Analyzing {len(commits)} commits...")

    full_prompt = build_code_analysis_prompt(commits, config.code_analysis.prompt)
    try:
        analysis = await client.run(full_prompt)
    except AIStageError as e:
        print(f"Code analysis failed: {e}")
        return ""

    if verbose:
        print("Code analysis complete")
        print(f"Analysis preview: {analysis[:PREVIEW_CHARS]}...")
    return analysis


async def generate_line_items(
    code_analysis: str,
    total_hours: float,
    config: AIConfig,
    client: AIClient,
    verbose: bool = False,
) -> str:
    """Stage 2: invoice line items from the Stage 1 analysis ('' when disabled or failed)."""
    if not config.enabled or not config.line_item_generation.enabled or not code_analysis:
        return ""

    if verbose:
        print(f"\nAI Stage 2: Generating line items for {format_number(total_hours)} hours...")

    full_prompt = build_line_item_prompt(code_analysis, total_hours, config.line_item_generation.prompt)
    try:
        line_items = await client.run(full_prompt)
    except AIStageError as e:
        print(f"Line item generation failed: {e}")
        return ""

    if verbose:
        print("Line items generated")
        print(f"Line items preview: {line_items[:PREVIEW_CHARS]}...")
    return line_items


async def run_ai_analysis(
    commits: list[CommitRecord],
    total_hours: float,
    config: AIConfig,
    client: AIClient,
    verbose: bool = False,
) -> AIAnalysisResult:
    """Run both stages; Stage 2 only runs on non-empty Stage 1 output."""
    result = AIAnalysisResult()
    if not config.enabled:
        return result

    result.code_analysis = await analyze_code_changes(commits, config, client, verbose)
    if result.code_analysis:
        result.line_items = await generate_line_items(result.code_analysis, total_hours, config, client, verbose)
    return result


def parse_ai_line_items(text: str) -> list[TaskSummary]:
    """Pick '<n>hr - <description>' lines out of free text; other lines are ignored."""
    tasks = []
    for line in text.splitlines():
        match = LINE_ITEM_RE.search(line)
        if match:
            tasks.append(
                TaskSummary(
                    description=match.group(2).strip(),
                    hours=float(match.group(1)),
                    commit_count=0,
                )
            )
    return tasks
