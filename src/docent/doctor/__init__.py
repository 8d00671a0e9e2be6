"""Project health checks and documentation reconciliation.

Runs independent checks comparing documentation against the file tree and
source code, and reduces their findings to a 0-100 health score.
"""

from .models import (
    Category,
    CheckName,
    DoctorRequest,
    DoctorResult,
    Issue,
    Severity,
    ToolFailure,
)
from .report import build_summary, format_report
from .runner import CheckRunner, run_doctor
from .scoring import calculate_score, score_band

__all__ = [
    "Category",
    "CheckName",
    "CheckRunner",
    "DoctorRequest",
    "DoctorResult",
    "Issue",
    "Severity",
    "ToolFailure",
    "build_summary",
    "calculate_score",
    "format_report",
    "run_doctor",
    "score_band",
]
