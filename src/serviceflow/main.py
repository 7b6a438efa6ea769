"""
ServiceFlow - CLI Entry Point.

Usage:
    serviceflow serve              Start the API server
    serviceflow health             Check configuration
    serviceflow db                 Check database tables
    serviceflow audit <user_id>    Show a creator's onboarding progress
    serviceflow version            Show version
"""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="serviceflow",
    help="ServiceFlow - booking platform for influencers and creators.",
    add_completion=False,
)
console = Console()

TABLES = [
    "profiles",
    "user_roles",
    "services",
    "bookings",
    "notifications",
    "creator_profiles",
    "creator_specializations",
    "creator_portfolio",
    "creator_pricing",
    "creator_availability",
    "creator_banking",
]


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the API server."""
    import os

    import uvicorn

    from serviceflow.config import configure_logging, get_settings

    settings = get_settings()
    configure_logging(settings.log_level)

    if reload and settings.is_production:
        console.print("[yellow]Auto-reload is disabled in production[/yellow]")
        reload = False

    # Hosting platforms set PORT
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]ServiceFlow API[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "serviceflow.web.app:app",
        host=host,
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from serviceflow.config import get_settings

    console.print("\n[bold]ServiceFlow Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.serviceflow_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.supabase_url.startswith("https://"):
            console.print("[green]OK[/green] Supabase URL configured")
        else:
            console.print("[red]FAIL[/red] Supabase URL missing or invalid")
            raise typer.Exit(1)

        console.print(f"[green]OK[/green] Portfolio bucket: {settings.portfolio_bucket}")
        console.print("\n[green]All checks passed![/green]")

    except typer.Exit:
        raise
    except Exception as e:
        console.print(f"\n[red]FAIL Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def db() -> None:
    """Check database connection and schema."""
    from serviceflow.db.client import get_service_client

    console.print("\n[bold]Database Connection Check[/bold]\n")

    try:
        client = get_service_client()
        console.print("[green]OK[/green] Connected to Supabase")
    except Exception as e:
        console.print(f"\n[red]FAIL Database connection failed: {e}[/red]")
        raise typer.Exit(1)

    failures = 0
    console.print("\n[bold]Table Status:[/bold]")
    for table in TABLES:
        try:
            result = client.table(table).select("*", count="exact").limit(0).execute()
            count = result.count if result.count is not None else "?"
            console.print(f"  [green]OK[/green] {table}: {count} rows")
        except Exception as e:
            failures += 1
            console.print(f"  [red]FAIL[/red] {table}: {e}")

    if failures:
        console.print(f"\n[red]{failures} table(s) unreachable[/red]")
        raise typer.Exit(1)
    console.print("\n[green]Database check complete![/green]")


@app.command()
def audit(user_id: str = typer.Argument(..., help="Auth user id of the creator")) -> None:
    """Show a creator's onboarding progress and saved step data."""
    from onboarding import portfolio, store
    from onboarding.state import STEP_DETAILS, OnboardingStep
    from serviceflow.db.client import get_service_client

    client = get_service_client()

    async def collect():
        profile = await store.get_profile(client, user_id)
        if profile is None:
            return None, {}
        counts = {
            OnboardingStep.SPECIALIZATION: len(await store.list_specializations(client, profile.id)),
            OnboardingStep.PORTFOLIO: len(await portfolio.list_portfolio(client, profile.id)),
            OnboardingStep.PRICING: len(await store.list_pricing(client, profile.id)),
            OnboardingStep.AVAILABILITY: sum(
                1 for d in await store.list_availability(client, profile.id) if d["is_available"]
            ),
            OnboardingStep.BANKING: 1 if await store.get_banking(client, profile.id) else 0,
        }
        return profile, counts

    try:
        profile, counts = asyncio.run(collect())
    except store.PersistenceError as e:
        console.print(f"[red]FAIL {e.message}[/red]")
        raise typer.Exit(1)

    if profile is None:
        console.print(f"[yellow]No creator profile for {user_id}[/yellow]")
        raise typer.Exit(1)

    status = "completed" if profile.onboarding_completed else f"step {profile.resume_step.value} of 6"
    console.print(Panel.fit(f"[bold]{profile.id}[/bold]\nOnboarding: {status}", title="Creator"))

    table = Table("Step", "Reached", "Saved data")
    for step in OnboardingStep:
        reached = "yes" if profile.onboarding_completed or step <= profile.resume_step else "no"
        if step == OnboardingStep.PROFILE:
            filled = [f for f in ("bio", "state", "city", "location") if getattr(profile, f)]
            saved = f"{len(filled)}/4 fields, {len(profile.languages)} languages"
        else:
            saved = str(counts[step])
        table.add_row(f"{step.value}. {STEP_DETAILS[step]['title']}", reached, saved)
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from serviceflow import __version__

    console.print(f"ServiceFlow version {__version__}")


if __name__ == "__main__":
    app()
