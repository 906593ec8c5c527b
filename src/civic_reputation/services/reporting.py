"""Markdown reputation reports."""

from __future__ import annotations

from collections.abc import Sequence

from tabulate import tabulate

from civic_reputation.models import Complaint, ContractorProgress, ContractorRating
from civic_reputation.scoring import ComplaintStats

MAX_COMPLAINT_TEXT = 60


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def _truncate(text: str, limit: int = MAX_COMPLAINT_TEXT) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def rating_table(rating: ContractorRating) -> str:
    rows = [
        ("Overall", f"{rating.overall_rating:.2f}"),
        ("Quality of work", f"{rating.quality_of_work:.2f}"),
        ("Durability", f"{rating.durability_score:.2f}"),
        ("Plan", f"{rating.plan_rating:.2f}"),
        ("Report quality", f"{rating.report_quality:.2f}"),
        ("Payment history", f"{rating.payment_history:.2f}"),
        ("Worker management", f"{rating.worker_management:.2f}"),
        ("Points gained", f"{rating.points_gained:.2f}"),
        ("Points lost", f"{rating.points_lost:.2f}"),
        ("Rejected forgiveness requests", rating.forgiveness_count),
    ]
    return tabulate(rows, headers=("Score", "Value"), tablefmt="github", disable_numparse=True)


def eligibility_table(progress: ContractorProgress) -> str:
    rows = [
        ("Small contracts", _yes_no(progress.can_bid_small)),
        ("Medium contracts", _yes_no(progress.can_bid_medium)),
        ("Large contracts", _yes_no(progress.can_bid_large)),
        ("Suspended", _yes_no(progress.is_suspended)),
    ]
    headers = ("Eligibility", "Allowed")
    return tabulate(rows, headers=headers, tablefmt="github", disable_numparse=True)


def stats_table(stats: ComplaintStats) -> str:
    rows = [
        ("Total", stats.total),
        ("Verified", stats.verified),
        ("Pending review", stats.pending),
        ("Rejected", stats.rejected),
        ("Average sentiment", f"{stats.average_sentiment:.2f}"),
        ("Most common type", stats.most_common_type),
        ("Verification rate", f"{stats.verification_rate:.0%}"),
    ]
    return tabulate(rows, headers=("Complaints", "Value"), tablefmt="github", disable_numparse=True)


def complaints_table(complaints: Sequence[Complaint]) -> str:
    rows = [
        (
            c.created_at.strftime("%Y-%m-%d"),
            c.status,
            c.complaint_type,
            f"{c.sentiment_score:.2f}",
            _truncate(c.text),
        )
        for c in complaints
    ]
    headers = ("Date", "Status", "Type", "Sentiment", "Text")
    return tabulate(rows, headers=headers, tablefmt="github", disable_numparse=True)


def generate_reputation_report(
    contractor_name: str,
    rating: ContractorRating,
    progress: ContractorProgress,
    stats: ComplaintStats,
    recent_complaints: Sequence[Complaint],
) -> str:
    """Render a contractor's reputation as a markdown document.

    Args:
        contractor_name: Display name for the heading.
        rating: Current rating row.
        progress: Current eligibility row.
        stats: Complaint statistics.
        recent_complaints: Complaints to list, newest first.

    Returns:
        Markdown report content.
    """
    lines = [f"# Reputation: {contractor_name}", ""]
    if progress.is_suspended:
        lines.extend([f"**Suspended:** {progress.suspended_reason}", ""])

    lines.extend(["## Rating", "", rating_table(rating), ""])
    lines.extend(["## Bid eligibility", "", eligibility_table(progress), ""])
    lines.extend(["## Complaints", "", stats_table(stats), ""])

    if recent_complaints:
        lines.extend(["## Recent complaints", "", complaints_table(recent_complaints)])
    else:
        lines.append("_No complaints recorded._")

    return "\n".join(lines)
