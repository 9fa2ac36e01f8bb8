from tgnotify.cli import cli

cli()
