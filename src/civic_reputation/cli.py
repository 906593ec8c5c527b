"""CLI for Civic Reputation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, TypeVar

import pydantic
import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from civic_reputation import __version__
from civic_reputation.core.config import DB_PATH_ENV, ReputationConfig, load_config
from civic_reputation.core.errors import ReputationError
from civic_reputation.models import (
    CitizenRatingSubmission,
    ComplaintSubmission,
    ForgivenessDecision,
    IssueReportSubmission,
    QualificationSubmission,
    UserRole,
)
from civic_reputation.scoring import (
    IssueCategory,
    analyze_sentiment,
    calculate_new_rating,
    classify_complaint,
    determine_flag,
    verify_location,
)
from civic_reputation.services import ReputationService, ReputationStore

T = TypeVar("T")
M = TypeVar("M", bound=pydantic.BaseModel)

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="civic-reputation",
    help="Civic Reputation - Contractor reputation scoring from citizen feedback",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"civic-reputation v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Civic Reputation CLI."""
    load_dotenv()


def _configure_logging(config: ReputationConfig, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _execute(
    config_path: Path | None,
    verbose: bool,
    action: Callable[[ReputationService], Awaitable[T]],
) -> T:
    """Load config, open the store, run one action and map errors to exit codes."""
    try:
        config = load_config(config_path)
        _configure_logging(config, verbose)

        async def _run() -> T:
            service = ReputationService(config)
            try:
                return await action(service)
            finally:
                await service.close()

        return asyncio.run(_run())

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ReputationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


def _build(model: type[M], **data: object) -> M:
    """Construct a submission payload, exiting with a readable message when it's invalid."""
    try:
        return model(**data)
    except pydantic.ValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1) from e


def _print_pairs(title: str, rows: list[tuple[str, object]]) -> None:
    table = Table(title=title, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def init(config_path: ConfigOption = None) -> None:
    """Create the database and its tables."""
    try:
        config = load_config(config_path)
        store = ReputationStore(config)
        console.print(f"[green]Database ready:[/green] {store.db_path}")
        store.close_sync()
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def register(
    name: Annotated[str, typer.Argument(help="Display name")],
    email: Annotated[str, typer.Argument(help="Email address")],
    role: Annotated[
        UserRole, typer.Option("--role", "-r", case_sensitive=False, help="User role")
    ] = UserRole.CITIZEN,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Register a citizen, contractor or government user."""
    user = _execute(
        config_path, verbose, lambda s: s.accounts.register_user(name, email, role)
    )
    console.print(f"[green]Registered {user.role}:[/green] {user.id}")


@app.command()
def contract(
    title: Annotated[str, typer.Argument(help="Contract title")],
    contractor_id: Annotated[str, typer.Argument(help="Awarded contractor")],
    lifespan: Annotated[
        float | None, typer.Option("--lifespan", help="Expected lifespan in years")
    ] = None,
    latitude: Annotated[float | None, typer.Option("--lat", help="Project latitude")] = None,
    longitude: Annotated[float | None, typer.Option("--lon", help="Project longitude")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Create an active contract for a contractor."""
    created = _execute(
        config_path,
        verbose,
        lambda s: s.accounts.create_contract(title, contractor_id, lifespan, latitude, longitude),
    )
    console.print(f"[green]Contract created:[/green] {created.id}")


@app.command("complete-contract")
def complete_contract(
    contract_id: Annotated[str, typer.Argument(help="Contract to complete")],
    completed_at: Annotated[
        datetime | None, typer.Option("--completed-at", help="Completion date (default: now)")
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Mark a contract as completed so citizens can rate it."""
    completed = _execute(
        config_path, verbose, lambda s: s.accounts.complete_contract(contract_id, completed_at)
    )
    console.print(f"[green]Contract completed:[/green] {completed.id} at {completed.completed_at}")


@app.command()
def qualify(
    contractor_id: Annotated[str, typer.Argument(help="Contractor submitting")],
    certificate_url: Annotated[str | None, typer.Option("--certificate-url")] = None,
    certificate_number: Annotated[str | None, typer.Option("--certificate-number")] = None,
    issuing_authority: Annotated[str | None, typer.Option("--issuing-authority")] = None,
    skills: Annotated[
        list[str] | None, typer.Option("--skill", help="Declared skill (repeatable)")
    ] = None,
    experience_years: Annotated[float, typer.Option("--experience-years")] = 0.0,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Submit a contractor's qualification and compute the initial rating."""
    submission = _build(
        QualificationSubmission,
        contractor_id=contractor_id,
        certificate_url=certificate_url,
        certificate_number=certificate_number,
        issuing_authority=issuing_authority,
        skills=skills or [],
        experience_years=experience_years,
    )
    result = _execute(config_path, verbose, lambda s: s.qualifications.submit(submission))
    console.print(
        f"[green]Qualification submitted:[/green] initial rating {result.initial_rating:.2f}"
        f" ({result.status})"
    )


@app.command()
def analyze(
    text: Annotated[str, typer.Argument(help="Complaint text")],
    latitude: Annotated[float | None, typer.Option("--lat", help="Photo latitude")] = None,
    longitude: Annotated[float | None, typer.Option("--lon", help="Photo longitude")] = None,
    rating: Annotated[float, typer.Option("--rating", help="Current rating")] = 5.0,
    config_path: ConfigOption = None,
) -> None:
    """Score a complaint without storing anything."""
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    sentiment = analyze_sentiment(text)
    classification = classify_complaint(text)
    has_gps = latitude is not None and longitude is not None
    location_ok = False
    distance = None
    if has_gps:
        project = config.scoring.default_project_location
        verification = verify_location(
            latitude,
            longitude,
            project.latitude,
            project.longitude,
            config.scoring.max_distance_meters,
        )
        location_ok = verification.is_valid
        distance = verification.distance
    determination = determine_flag(
        has_gps, location_ok, distance, config.scoring.max_distance_meters
    )

    _print_pairs(
        "Complaint analysis",
        [
            ("Sentiment", f"{sentiment:.2f}"),
            ("Type", classification.type.value),
            ("Confidence", f"{classification.confidence:.2f}"),
            ("Distance (m)", f"{distance:.2f}" if distance is not None else "-"),
            ("Flag", determination.flag.value),
            ("Reason", determination.reason_text),
            ("Rating if verified", f"{calculate_new_rating(rating, sentiment):.2f}"),
        ],
    )


@app.command()
def complaint(
    contractor_id: Annotated[str, typer.Argument(help="Contractor complained about")],
    text: Annotated[str, typer.Argument(help="Complaint text")],
    email: Annotated[str, typer.Option("--email", "-e", help="Reporter email")],
    contract_id: Annotated[str | None, typer.Option("--contract", help="Related contract")] = None,
    latitude: Annotated[float | None, typer.Option("--lat", help="Photo latitude")] = None,
    longitude: Annotated[float | None, typer.Option("--lon", help="Photo longitude")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Submit a complaint and update the contractor's rating when verified."""
    submission = _build(
        ComplaintSubmission,
        text=text,
        email=email,
        contractor_id=contractor_id,
        contract_id=contract_id,
        latitude=latitude,
        longitude=longitude,
    )
    result = _execute(config_path, verbose, lambda s: s.complaints.submit(submission))
    _print_pairs(
        "Complaint submitted",
        [
            ("Complaint", result.complaint_id),
            ("Sentiment", result.sentiment),
            ("Type", result.type.value),
            ("Confidence", f"{result.confidence:.2f}"),
            ("Distance (m)", result.distance if result.distance is not None else "-"),
            ("Flag", result.flag.value),
            ("Reason", result.flag_reason),
            ("Rating", f"{result.old_rating:.2f} -> {result.rating:.2f}"),
            ("Applied", result.rating_applied),
        ],
    )


@app.command()
def rate(
    contract_id: Annotated[str, typer.Argument(help="Completed contract")],
    contractor_id: Annotated[str, typer.Argument(help="Contractor rated")],
    citizen_id: Annotated[str, typer.Argument(help="Citizen rating")],
    rating: Annotated[float, typer.Argument(help="Rating from 0 to 5")],
    proof_url: Annotated[
        str | None, typer.Option("--proof-url", help="Required below 3.0")
    ] = None,
    quality: Annotated[float | None, typer.Option("--quality")] = None,
    durability: Annotated[float | None, typer.Option("--durability")] = None,
    timeliness: Annotated[float | None, typer.Option("--timeliness")] = None,
    comment: Annotated[str | None, typer.Option("--comment")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Rate a completed contract as a citizen."""
    submission = _build(
        CitizenRatingSubmission,
        contract_id=contract_id,
        contractor_id=contractor_id,
        citizen_id=citizen_id,
        rating=rating,
        quality_rating=quality,
        durability_rating=durability,
        timeliness_rating=timeliness,
        proof_url=proof_url,
        comment=comment,
    )
    result = _execute(config_path, verbose, lambda s: s.citizen_ratings.submit(submission))
    _print_pairs(
        "Citizen rating submitted",
        [
            ("Rating", f"{result.previous_rating:.2f} -> {result.new_rating:.2f}"),
            ("Points gained", result.points_gained),
            ("Points lost", result.points_lost),
            ("Suspended", result.is_suspended),
        ],
    )


@app.command()
def issue(
    contract_id: Annotated[str, typer.Argument(help="Affected contract")],
    contractor_id: Annotated[str, typer.Argument(help="Responsible contractor")],
    citizen_id: Annotated[str, typer.Argument(help="Reporting citizen")],
    title: Annotated[str, typer.Argument(help="Short description")],
    category: Annotated[
        IssueCategory, typer.Option("--category", case_sensitive=False)
    ] = IssueCategory.CONTRACTOR_FAULT,
    severity: Annotated[
        str | None, typer.Option("--severity", help="LOW, MEDIUM, HIGH or CRITICAL")
    ] = None,
    photos: Annotated[
        list[str] | None, typer.Option("--photo", help="Photo URL (repeatable)")
    ] = None,
    issue_date: Annotated[
        datetime | None, typer.Option("--issue-date", help="When the issue appeared")
    ] = None,
    description: Annotated[str | None, typer.Option("--description")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Report a defect or a natural-disaster damage on a contract."""
    submission = _build(
        IssueReportSubmission,
        contract_id=contract_id,
        contractor_id=contractor_id,
        citizen_id=citizen_id,
        title=title,
        category=category,
        severity=severity,
        photos=photos or [],
        issue_date=issue_date or datetime.now(UTC),
        description=description,
    )
    result = _execute(config_path, verbose, lambda s: s.issues.submit(submission))
    console.print(f"[green]{result.message}[/green]")
    _print_pairs(
        "Issue report",
        [
            ("Issue", result.issue_id),
            ("Status", result.status),
            ("Penalty", f"{result.penalty:.2f}"),
            ("Rating", f"{result.new_rating:.2f}" if result.new_rating is not None else "-"),
        ],
    )


@app.command("review-issue")
def review_issue(
    issue_id: Annotated[str, typer.Argument(help="Natural-disaster issue to review")],
    forgive: Annotated[
        bool, typer.Option("--forgive/--reject", help="Approve or reject forgiveness")
    ] = True,
    reviewer: Annotated[str | None, typer.Option("--reviewer", help="Reviewing official")] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Approve or reject a forgiveness request."""
    decision = _build(
        ForgivenessDecision, issue_id=issue_id, forgive=forgive, reviewed_by=reviewer
    )
    result = _execute(config_path, verbose, lambda s: s.issues.review_forgiveness(decision))
    console.print(f"[green]{result.message}[/green]")
    if result.penalty:
        console.print(f"  Penalty: {result.penalty:.2f}, rating now {result.new_rating:.2f}")


@app.command("ai-rating")
def ai_rating(
    contractor_id: Annotated[str, typer.Argument(help="Contractor to rate")],
    sentiment: Annotated[
        float | None, typer.Option("--sentiment", help="Sentiment in [-1, 1]")
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Apply a sentiment score to a rating, or show the rating without one."""
    result = _execute(
        config_path, verbose, lambda s: s.ratings.refresh_ai_rating(contractor_id, sentiment)
    )
    console.print(f"Rating: {result.current_rating:.2f} -> {result.new_rating:.2f}")


@app.command()
def show(
    contractor_id: Annotated[str, typer.Argument(help="Contractor to report on")],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Write the markdown report to a file")
    ] = None,
    config_path: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show a contractor's reputation report."""
    report = _execute(config_path, verbose, lambda s: s.report(contractor_id))
    if output is not None:
        output.write_text(report, encoding="utf-8")
        console.print(f"Report saved to: {output}")
    else:
        console.print(Markdown(report))


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.get_database_path()}")
        console.print(f"  Max distance: {config.scoring.max_distance_meters:g} m")
        location = config.scoring.default_project_location
        console.print(f"  Default project site: {location.latitude}, {location.longitude}")
        console.print(f"  Default rating: {config.scoring.default_rating}")
        console.print(f"  Log level: {config.log_level}")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ReputationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Civic Reputation[/bold]")
    console.print(f"Version: {__version__}\n")
    console.print(f"Database path can be overridden with ${DB_PATH_ENV} (or a .env file).\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Score a complaint without storing it")
    console.print(
        '  civic-reputation analyze "The road is broken and unsafe" --lat 27.72 --lon 85.33\n'
    )

    console.print("  # Register a contractor and a citizen")
    console.print("  civic-reputation register 'Road Co' roads@example.com --role contractor")
    console.print("  civic-reputation register 'Asha' asha@example.com\n")

    console.print("  # Submit a complaint with photo coordinates")
    console.print(
        '  civic-reputation complaint <contractor-id> "Broken drain" -e asha@example.com'
        " --lat 27.7175 --lon 85.3245\n"
    )

    console.print("  # Show the reputation report")
    console.print("  civic-reputation show <contractor-id>")


if __name__ == "__main__":
    app()
