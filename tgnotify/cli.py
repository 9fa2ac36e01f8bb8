"""Click CLI for telegram-notify."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import click

from tgnotify.config import NotifyConfig
from tgnotify.errors import NotifyError
from tgnotify.notifier import TelegramNotifier
from tgnotify.reporting import GitHubOutputs
from tgnotify.templates.catalog import TEMPLATES, available_languages


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Send Telegram notifications from CI workflows."""
    logging.basicConfig(level=log_level.upper(), format="%(message)s", stream=sys.stderr)


@cli.command()
def send() -> None:
    """Send one notification configured through environment variables."""
    config = NotifyConfig.from_env()
    notifier = TelegramNotifier(config, outputs=GitHubOutputs.from_env(os.environ))
    try:
        asyncio.run(notifier.run())
    except Exception:
        # run() has already logged the failure and written the outputs
        sys.exit(1)


@cli.command()
def render() -> None:
    """Print the rendered, sanitized message without sending it."""
    config = NotifyConfig.from_env()
    notifier = TelegramNotifier(config, outputs=GitHubOutputs.from_env(os.environ))
    try:
        click.echo(notifier.render_text())
    except NotifyError as exc:
        click.echo(f"❌ {exc}", err=True)
        sys.exit(1)


@cli.command("templates")
def list_templates() -> None:
    """List built-in templates and their languages."""
    output = [
        {"name": name.value, "languages": available_languages(name)}
        for name in TEMPLATES
    ]
    click.echo(json.dumps(output, indent=2, ensure_ascii=False))
