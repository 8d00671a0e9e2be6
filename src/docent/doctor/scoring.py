"""Health score calculation.

The score depends only on the number of issues of each severity, so it is
independent of the order in which checks finish.
"""

from collections.abc import Iterable
from typing import Any

ERROR_PENALTY = 10
WARNING_PENALTY = 3
INFO_PENALTY = 1

MAX_SCORE = 100
MIN_SCORE = 0

# Lower bound -> band name, highest first
SCORE_BANDS = (
    (90, "excellent"),
    (70, "good"),
    (50, "fair"),
    (30, "poor"),
)


def calculate_score(errors: int, warnings: int, infos: int) -> int:
    """Convert severity counts to a 0-100 health score."""
    penalty = errors * ERROR_PENALTY + warnings * WARNING_PENALTY + infos * INFO_PENALTY
    return max(MIN_SCORE, MAX_SCORE - penalty)


def score_band(score: int) -> str:
    """Convert a score to its reporting band."""
    for lower_bound, band in SCORE_BANDS:
        if score >= lower_bound:
            return band
    return "critical"


def score_issues(issues: Iterable[Any]) -> tuple[int, bool]:
    """Score any collection of objects carrying a ``severity``.

    Returns:
        Tuple of (score, healthy)
    """
    counts = {"error": 0, "warning": 0, "info": 0}
    for issue in issues:
        severity = getattr(issue.severity, "value", issue.severity)
        if severity in counts:
            counts[severity] += 1

    score = calculate_score(
        errors=counts["error"],
        warnings=counts["warning"],
        infos=counts["info"],
    )
    return score, counts["error"] == 0
