from __future__ import annotations

import math

from signalsalvage.report import SimulationReport

SUFFIXES = ("K", "M", "B", "T", "Qa", "Qi", "Sx", "Sp")


def format_number(value: float) -> str:
    """Short display form: ``999``, ``12.5``, ``1.50K``, ``2.00Qa``, ``1.23e+30``."""
    if not math.isfinite(value):
        return "∞"
    magnitude = abs(value)
    if magnitude < 1000:
        places = 0 if magnitude >= 100 else 1 if magnitude >= 10 else 2
        return f"{value:.{places}f}"

    index = -1
    scaled = magnitude
    while scaled >= 1000 and index < len(SUFFIXES) - 1:
        scaled /= 1000
        index += 1
    if scaled >= 1000:
        return f"{value:.2e}"
    sign = "-" if value < 0 else ""
    return f"{sign}{scaled:.2f}{SUFFIXES[index]}"


def format_text_report(report: SimulationReport) -> str:
    """Format a simulation report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + " Signal & Salvage Balance Report " + "=" * 30)
    lines.append(f"Strategy: {report.strategy_description}")
    lines.append(f"Terminal: {report.terminal_description}")
    lines.append(f"Result: {report.outcome} at {report.total_time:.1f}s")
    lines.append("")

    if report.milestones:
        lines.append("FINDINGS:")
        for m in report.milestones:
            lines.append(f"  * {m.milestone_id:.<30s} {m.time:.1f}s")
        lines.append("")

    lines.append("PURCHASES:")
    lines.append(f"  Total: {len(report.purchases)}")
    lines.append(f"  Rate: {report.purchases_per_minute:.1f}/min")
    lines.append(f"  Max gap: {report.max_purchase_gap:.1f}s")
    lines.append(f"  Mean gap: {report.mean_purchase_gap:.1f}s")
    lines.append("")

    if report.resets:
        lines.append("RESETS:")
        for run in report.runs:
            if run.ended_by is None:
                continue
            lines.append(
                f"  {run.ended_by:<7s} at {run.end:.1f}s  +{format_number(run.reward_amount)}"
                f"  (run {run.duration:.1f}s, {run.purchases} purchases)"
            )
        lines.append("")

    if report.sanity_issues:
        lines.append("SANITY:")
        for issue in report.sanity_issues:
            lines.append(f"  [WARN] {issue}")
    else:
        lines.append("SANITY: no issues")

    return "\n".join(lines)
