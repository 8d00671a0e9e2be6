"""Markdown rendering of doctor results."""

from .models import DoctorResult, Issue, Severity

SEVERITY_ICONS = {
    Severity.ERROR.value: "❌",
    Severity.WARNING.value: "⚠️",
    Severity.INFO.value: "ℹ️",
}

NEXT_STEPS = (
    "Fix all **errors** before proceeding with release",
    "Address **warnings** if possible",
    "Consider **info** suggestions for future improvements",
    "Run `docent doctor` again to verify fixes",
)


def build_summary(result: DoctorResult) -> str:
    """One-line verdict for a result."""
    errors = result.count(Severity.ERROR)
    warnings = result.count(Severity.WARNING)
    infos = result.count(Severity.INFO)

    if result.healthy:
        return f"✓ Project is healthy! Found {warnings} warning(s) and {infos} suggestion(s)."
    return (
        f"✗ Project has {errors} error(s), {warnings} warning(s), and {infos} suggestion(s). "
        "Address errors before release."
    )


def group_by_category(issues: list[Issue]) -> dict[str, list[Issue]]:
    """Group issues by category, keeping first-appearance order."""
    groups: dict[str, list[Issue]] = {}
    for issue in issues:
        groups.setdefault(str(issue.category), []).append(issue)
    return groups


def _format_issue(issue: Issue) -> list[str]:
    severity = str(issue.severity)
    lines = [
        f"{SEVERITY_ICONS.get(severity, '•')} **{severity.upper()}**",
        f"   {issue.message}",
    ]
    if issue.location:
        lines.append(f"   📍 Location: `{issue.location}`")
    if issue.fix:
        lines.append(f"   💡 Fix: {issue.fix}")
    lines.append("")
    return lines


def format_report(result: DoctorResult) -> str:
    """Render a result as a markdown report."""
    lines = [
        "# Project Health Check",
        "",
        f"**Status:** {'✓ Healthy' if result.healthy else '✗ Issues Found'}",
        "",
        f"**Health Score:** {result.score}/100 ({result.band})",
        "",
        f"- **Errors:** {result.count(Severity.ERROR)} (must fix)",
        f"- **Warnings:** {result.count(Severity.WARNING)} (should fix)",
        f"- **Info:** {result.count(Severity.INFO)} (suggestions)",
        "",
        build_summary(result),
        "",
    ]

    if not result.issues and not result.tool_failures:
        lines.append("🎉 No issues found! Project is ready for release.")
        return "\n".join(lines) + "\n"

    for category, issues in group_by_category(result.issues).items():
        lines += [f"## {category}", ""]
        for issue in issues:
            lines += _format_issue(issue)

    if result.tool_failures:
        lines += ["## Tool Failures", ""]
        lines += [
            f"- `{failure.check}` did not run ({failure.tool}): {failure.reason}"
            for failure in result.tool_failures
        ]
        lines.append("")

    if not result.healthy:
        lines += ["## Next Steps", ""]
        lines += [f"{number}. {step}" for number, step in enumerate(NEXT_STEPS, 1)]
        lines.append("")

    return "\n".join(lines) + "\n"
