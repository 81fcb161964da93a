"""GlowUp CLI: inspect and exercise the triage engine from a terminal."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from glowup import __version__
from glowup.config import configure_logging, load_settings
from glowup.models import Message, Role
from glowup.triage.classifier import classify
from glowup.triage.orchestrator import Blocked, Duplicate, Locked, Proceed, TriageSession

console = Console()

_SEVERITY_STYLE = {"high": "red", "medium": "yellow", "low": "cyan"}


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, help="Path to a YAML settings file")
@click.option("--verbose", "-v", is_flag=True, help="Log triage decisions")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """GlowUp: message triage and response routing for operator-reviewed coaching chat."""
    settings = load_settings(config_path)
    configure_logging(
        "DEBUG" if verbose else settings.log_level,
        handler=RichHandler(console=Console(stderr=True), show_path=False),
    )
    ctx.obj = settings


# ── Catalog ──────────────────────────────────────────────────────────


@main.command()
@click.pass_obj
def catalog(settings):
    """List the session tags and their detection patterns."""
    rules = settings.load_catalog()

    table = Table(title=f"Session Tags ({len(rules)})")
    table.add_column("ID", style="cyan")
    table.add_column("Label")
    table.add_column("Severity")
    table.add_column("Patterns", style="dim")

    for tag in rules:
        style = _SEVERITY_STYLE.get(tag.severity.value, "")
        patterns = ", ".join(getattr(p, "pattern", getattr(p, "needle", "?")) for p in tag.patterns)
        table.add_row(
            tag.id,
            tag.label,
            f"[{style}]{tag.severity.value}[/]",
            patterns or "(manual only)",
        )

    console.print(table)


# ── Classify / Route ─────────────────────────────────────────────────


@main.command(name="classify")
@click.argument("text")
@click.pass_obj
def classify_cmd(settings, text: str):
    """Show which tags TEXT would trip."""
    rules = settings.load_catalog()
    matches = rules.ordered(classify(text, rules))
    if not matches:
        console.print("[green]No tags matched.[/]")
        return
    for tag_id in matches:
        severity = rules.severity_of(tag_id).value
        console.print(f"  [{_SEVERITY_STYLE[severity]}]{severity:>6}[/]  {tag_id}")


@main.command()
@click.argument("text")
@click.option("--tag", "tags", multiple=True, help="Treat a tag as already active (repeatable)")
@click.pass_obj
def route(settings, text: str, tags: tuple[str, ...]):
    """Show which generation tier would draft a reply to TEXT."""
    rules = settings.load_catalog()
    for tag_id in tags:
        rules.get(tag_id)
    decision = settings.routing_policy(rules).select_tier(text, tags)
    console.print(f"[bold]{decision.tier.value}[/]: {decision.reason} [dim]({decision.rule})[/]")


# ── Simulate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("transcript", type=click.File("r"))
@click.pass_obj
def simulate(settings, transcript):
    """Replay user messages (one per line) through a fresh session.

    Lines starting with ``!unlock`` or ``!toggle <tag>`` act as operator actions.
    """
    rules = settings.load_catalog()
    session = TriageSession(
        "simulation",
        catalog=rules,
        policy=settings.routing_policy(rules),
        pause_delay_seconds=settings.pause_delay_seconds,
    )

    table = Table(title="Triage Replay")
    table.add_column("#", style="dim", width=4)
    table.add_column("Message")
    table.add_column("Matches", style="cyan")
    table.add_column("Outcome")

    for i, line in enumerate(transcript, start=1):
        text = line.rstrip("\n")
        if not text.strip():
            continue
        if text.startswith("!unlock"):
            session.unlock()
            table.add_row(str(i), "[dim]operator unlock[/]", "", "[green]READY[/]")
            continue
        if text.startswith("!toggle"):
            parts = text.split(maxsplit=1)
            tag_id = parts[1].strip() if len(parts) > 1 else ""
            if tag_id not in rules:
                raise click.BadParameter(
                    f"line {i}: unknown tag {tag_id!r} in {text!r}", param_hint="TRANSCRIPT"
                )
            session.toggle_tag(tag_id)
            state = "active" if session.is_active(tag_id) else "cleared"
            table.add_row(str(i), f"[dim]operator toggle {tag_id}[/]", "", state)
            continue

        result = session.on_user_message(Message.create(Role.user, text))
        matches = ", ".join(rules.ordered(getattr(result, "matches", ())))
        if isinstance(result, Locked):
            outcome = "[bold red]LOCKED[/] (pause sent, escalation drafted)"
        elif isinstance(result, Blocked):
            outcome = "[red]locked, no draft[/]"
        elif isinstance(result, Proceed):
            outcome = f"{result.tier.value}: {result.reason}"
        else:
            outcome = "[dim]duplicate[/]"
        table.add_row(str(i), text[:60], matches, outcome)

    console.print(table)
    snap = session.snapshot()
    console.print(
        f"\nActive: {', '.join(snap.active) or '-'}   "
        f"Suggested: {', '.join(snap.suggested) or '-'}   "
        f"Lock: {'[red]ON[/]' if snap.locked else '[green]off[/]'}"
    )


# ── Escalations ──────────────────────────────────────────────────────


@main.command()
@click.option("--session", "session_id", default=None, help="Only this session")
@click.option("--format", "fmt", default="table", type=click.Choice(["table", "json", "csv"]))
@click.option("--limit", default=50, show_default=True)
@click.pass_obj
def escalations(settings, session_id: str | None, fmt: str, limit: int):
    """Show the team escalation log."""
    from glowup.escalation import EscalationLog

    log = EscalationLog(settings.data_path / "escalations")
    if fmt != "table":
        click.echo(log.export(fmt, session_id=session_id, limit=limit))
        return

    records = log.get_escalations(session_id=session_id, limit=limit)
    if not records:
        console.print("[yellow]No escalations recorded.[/]")
        return

    table = Table(title=f"Escalations ({len(records)})")
    table.add_column("When", style="dim")
    table.add_column("Session")
    table.add_column("Category", style="red")
    table.add_column("Source")
    table.add_column("Tags", style="cyan")
    table.add_column("Summary")
    for r in records:
        table.add_row(r.timestamp[:19], r.session_id, r.category.value, r.source.value, ", ".join(r.tags), r.summary[:60])
    console.print(table)


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True)
def serve(host: str, port: int):
    """Run the operator API server."""
    import uvicorn

    logging.getLogger(__name__).info("Starting API on %s:%d", host, port)
    uvicorn.run("web.backend.app.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
