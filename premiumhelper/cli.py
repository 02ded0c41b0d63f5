"""Command-line interface for the Premium Submission Helper."""

import asyncio
import os
import sys
from pathlib import Path

import click

from .core.config import AppConfig
from .core.directory import Directory, DirectoryError
from .core.hooks import HookManager
from .core.logging import get_logger, setup_logging
from .core.plugins import PluginAPI
from .santaane.client import AbstractAnalyzer, ChatCompletionClient
from .santaane.editors import EditorRegistry, FileEditor
from .santaane.gate import EligibilityGate
from .santaane.notifications import Notification, NotificationCenter, NotificationType
from .santaane.widget import AnalysisWidget, ConfirmOutcome, ResultPanel


NOTIFICATION_COLORS = {
    NotificationType.INFO: "blue",
    NotificationType.WARNING: "yellow",
    NotificationType.ERROR: "red",
    NotificationType.SUCCESS: "green",
}


class TerminalConfirm:
    """Asks the replace question on the terminal; Ctrl-C counts as Escape."""

    async def ask(self, title: str, message: str) -> ConfirmOutcome:
        click.echo(click.style(title, bold=True))
        try:
            if click.confirm(message, default=False):
                return ConfirmOutcome.CONFIRMED
            return ConfirmOutcome.CANCELLED
        except click.Abort:
            click.echo()
            return ConfirmOutcome.ESCAPE


def echo_notification(notification: Notification) -> None:
    color = NOTIFICATION_COLORS[notification.type]
    label = notification.type.value.upper()
    click.echo(click.style(f"[{label}] ", fg=color, bold=True) + notification.message, err=True)


def echo_panel(panel: ResultPanel) -> None:
    click.echo()
    click.echo(click.style("Santaane AI Analysis", fg="cyan", bold=True))
    click.echo(f"  Words:     {panel.word_count}")
    click.echo(f"  Sentences: {panel.sentence_count}")
    click.echo(f"  Clarity:   {panel.clarity_score}")
    if panel.keywords:
        click.echo()
        click.echo("Keywords:")
        for keyword, present in panel.keywords:
            mark = click.style("+", fg="green") if present else click.style("-", fg="red")
            click.echo(f"  {mark} {keyword}")
    click.echo()
    click.echo("Suggestions:")
    for suggestion in panel.suggestions or ["No specific suggestions available."]:
        click.echo(f"  * {suggestion}")
    click.echo()
    click.echo("Enhanced version:")
    click.echo(click.wrap_text(panel.enhanced_text, initial_indent="  ", subsequent_indent="  "))
    click.echo()
    click.echo(click.style(panel.timestamp, dim=True))


@click.group()
@click.version_option(prog_name="premiumhelper")
def main():
    """Premium Submission Helper - AI abstract analysis for submission wizards."""
    pass


@main.command()
@click.option(
    "--dir",
    "-d",
    "base_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Base directory for the site (default: current directory)",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing directory file")
def init(base_dir: Path | None, force: bool):
    """Create a sample directory with one venue and two authors."""
    config = AppConfig(base_dir=base_dir or Path.cwd())
    directory = Directory(config.data_file)

    if directory.exists and not force:
        click.echo(
            click.style("Error: ", fg="red")
            + f"Directory already exists at {config.data_file}"
        )
        click.echo("Use --force to overwrite.")
        sys.exit(1)

    directory.initialize()
    click.echo(click.style("Directory initialized!", fg="green", bold=True))
    click.echo(f"  File:  {config.data_file}")
    click.echo("  Venue: /journal/submission")
    click.echo("  Users: 1 (author), 2 (premium subscriber)")


@main.command()
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option(
    "--dir",
    "-d",
    "base_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Base directory for the site",
)
def run(host: str, port: int, reload: bool, base_dir: Path | None):
    """Start the submission wizard server."""
    import uvicorn

    base_dir = base_dir or Path.cwd()
    config = AppConfig(base_dir=base_dir)
    if not config.data_file.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Directory not initialized. Run 'premiumhelper init' first."
        )
        sys.exit(1)

    # The app reads its configuration from the environment
    os.environ["PREMIUMHELPER_BASE_DIR"] = str(base_dir)
    os.environ["PREMIUMHELPER_HOST"] = host
    os.environ["PREMIUMHELPER_PORT"] = str(port)

    click.echo(f"Starting Premium Submission Helper on http://{host}:{port}")
    uvicorn.run("premiumhelper.main:app", host=host, port=port, reload=reload)


@main.command("check-eligibility")
@click.argument("venue_path")
@click.argument("user_id", type=int)
@click.option(
    "--dir",
    "-d",
    "base_dir",
    type=click.Path(path_type=Path),
    default=None,
    help="Base directory for the site",
)
def check_eligibility(venue_path: str, user_id: int, base_dir: Path | None):
    """Report whether a user sees the premium analysis in a venue."""
    config = AppConfig(base_dir=base_dir or Path.cwd())
    directory = Directory(config.data_file)
    try:
        directory.load()
        venue = directory.get_venue(venue_path)
        visitor = directory.get_visitor(user_id)
    except DirectoryError as e:
        click.echo(click.style("Error: ", fg="red") + str(e))
        sys.exit(1)

    if venue is None or visitor is None:
        click.echo(click.style("Unknown venue or user", fg="yellow"))
        sys.exit(1)

    api = PluginAPI(
        plugin_name="premium_submission_helper",
        permissions={"api:read_roles", "api:read_subscriptions"},
        hooks=HookManager(),
        directory=directory,
    )
    gate = EligibilityGate(api, logger=get_logger("cli"))

    click.echo(f"Roles:         {', '.join(gate.role_names(venue, visitor)) or '-'}")
    click.echo(f"Premium role:  {gate.has_premium_role(venue, visitor)}")
    click.echo(f"Individual:    {gate.has_individual_subscription(venue, visitor)}")
    click.echo(f"Institutional: {gate.has_institutional_subscription(venue, visitor)}")

    if gate.is_eligible(venue, visitor):
        click.echo(click.style("ELIGIBLE", fg="green", bold=True))
    else:
        click.echo(click.style("NOT ELIGIBLE", fg="red", bold=True))
        sys.exit(2)


@main.command()
@click.argument("abstract_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--apply", "apply_", is_flag=True, help="Offer to replace the file with the enhanced version")
def analyze(abstract_file: Path, apply_: bool):
    """Analyze an abstract stored in a text file.

    The AI endpoint and credential come from PREMIUMHELPER_AI_* variables.
    """
    config = AppConfig.from_env()
    setup_logging(config.log_level, config.log_file)

    if not config.ai.is_configured:
        click.echo(
            click.style("Error: ", fg="red")
            + "Set PREMIUMHELPER_AI_API_KEY to use the AI service."
        )
        sys.exit(1)

    editors = EditorRegistry()
    editors.add_editor(FileEditor(abstract_file))

    notifications = NotificationCenter()
    notifications.subscribe(echo_notification)

    widget = AnalysisWidget(
        editors=editors,
        analyzer=AbstractAnalyzer(ChatCompletionClient(config.ai)),
        notifications=notifications,
        confirm=TerminalConfirm(),
    )

    async def session() -> bool:
        if await widget.run_analysis() is None:
            return False
        echo_panel(widget.panel)
        if apply_:
            await widget.apply_enhanced_version()
        return True

    if not asyncio.run(session()):
        sys.exit(1)


if __name__ == "__main__":
    main()
