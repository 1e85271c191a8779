"""Batch lookup of page modification and creation dates from git history.

One ``git log`` call covers the whole graph. Every git failure (no git
binary, not a repository, non-zero exit) yields an empty mapping, so pages
simply publish without dates.
"""

import subprocess
from pathlib import Path

import structlog

logger = structlog.get_logger()

# Without quotepath=off git prints non-ASCII paths quoted and octal-escaped.
GIT_LOG_ARGS = (
    "-c", "core.quotepath=off",
    "log", "--format=%aI", "--name-only", "--diff-filter=AM", "--relative",
)


def collect_git_dates(repo_root: Path) -> dict[str, tuple[str, str]]:
    """Map graph-relative markdown paths to (modified, created) dates.

    Args:
        repo_root: Graph root; paths in the result are relative to it

    Returns:
        Dict of ``"pages/foo.md" -> ("2024-03-01", "2023-11-20")``
    """
    try:
        result = subprocess.run(
            ["git", *GIT_LOG_ARGS],
            cwd=repo_root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.warning("git_dates_unavailable", repo_root=str(repo_root), error=str(exc))
        return {}

    dates = parse_git_log(result.stdout)
    logger.info("git_dates_collected", files=len(dates))
    return dates


def parse_git_log(output: str) -> dict[str, tuple[str, str]]:
    """Parse ``git log --format=%aI --name-only`` output.

    Commits are listed newest first, so the first sighting of a path is its
    last modification and the last sighting its creation.

    Example:
        >>> parse_git_log("2024-03-01T10:00:00+01:00\\n\\npages/a.md\\n"
        ...               "2023-11-20T09:00:00+01:00\\n\\npages/a.md\\n")
        {'pages/a.md': ('2024-03-01', '2023-11-20')}
    """
    dates: dict[str, tuple[str, str]] = {}
    current_date = ""

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        if _is_commit_date(line):
            current_date = line.split("T", 1)[0]
        elif line.endswith(".md") and current_date:
            modified = dates[line][0] if line in dates else current_date
            dates[line] = (modified, current_date)

    return dates


def _is_commit_date(line: str) -> bool:
    return len(line) > 10 and line[:4].isdigit() and line[4] == "-" and line[10] == "T"
